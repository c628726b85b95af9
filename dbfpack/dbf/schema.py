'''
# Schema model

A schema is the ordered list of the columns of the table: the order is used
both for the field descriptors in the header and for the bytes of each record.

Schemas can be built directly from FieldDefinition instances or from
dictionaries resembling the following

    {
        'name': 'PRICE',
        'type': 'N',
        'size': 8,
        'declength': 2,
        'NOCPTRANS': True,
    }

'''
import logging
from typing import Iterable, List, Mapping, Optional, Union

from .enum import FieldType, FieldFlag
from ..exceptions import InvalidSchema, UnsupportedFieldType


logger = logging.getLogger(__name__)

# fixed header, terminator and the area where some writers save the filename
FILE_HEADER_SIZE = 32
FIELD_DESCRIPTOR_SIZE = 32
TERMINATOR_SIZE = 1
RESERVED_SIZE = 263
# the deletion marker at the start of each record
RECORD_MARKER_SIZE = 1

MAX_FIELD_SIZE = 0xff
MAX_LAYOUT_SIZE = 0xffff


class FieldDefinition(object):
    '''A column of the table.

    The size of the types with a fixed width (D, L and T) is not taken from the
    declaration; declength is meaningful only for N.'''

    def __init__(self, name: Union[str, bytes], type: Union[str, FieldType], size: Optional[int] = None,
                 declength: int = 0, nocptrans: bool = False):
        self._type = self._validate_type(type, name)

        if not name:
            raise InvalidSchema('the name of a field cannot be empty')

        self._name = name
        self._size = self._validate_size(size)
        self._declength = self._validate_declength(declength)
        self._nocptrans = nocptrans is True

    @classmethod
    def from_dict(cls, definition: Mapping) -> 'FieldDefinition':
        try:
            name, type = definition['name'], definition['type']
        except KeyError as e:
            raise InvalidSchema(f'field definition {definition!r} has not the key {e.args[0]!r}') from e

        return cls(
            name,
            type,
            size=definition.get('size'),
            declength=definition.get('declength') or 0,
            nocptrans=definition.get('NOCPTRANS', definition.get('nocptrans', False)),
        )

    @staticmethod
    def _validate_type(type, name):
        if isinstance(type, FieldType):
            return type

        try:
            return FieldType(type)
        except ValueError as e:
            raise UnsupportedFieldType(f'type {type!r} is not supported', chain=[name]) from e

    def _validate_size(self, size):
        fixed_size = self._type.fixed_size

        if fixed_size is not None:
            if size is not None and size != fixed_size:
                logger.warning(f'field \'{self._name}\' of type {self._type.value} has size {fixed_size}, ignoring {size}')
            return fixed_size

        if not isinstance(size, int) or isinstance(size, bool) or not 0 < size <= MAX_FIELD_SIZE:
            raise InvalidSchema(f'size must be an integer between 1 and {MAX_FIELD_SIZE}, not {size!r}', chain=[self._name])

        return size

    def _validate_declength(self, declength):
        if self._type != FieldType.NUMERIC:
            return 0

        if not isinstance(declength, int) or isinstance(declength, bool) or not 0 <= declength <= MAX_FIELD_SIZE:
            raise InvalidSchema(f'declength must be an integer between 0 and {MAX_FIELD_SIZE}, not {declength!r}', chain=[self._name])

        return declength

    name = property(lambda self: self._name)
    type = property(lambda self: self._type)
    size = property(lambda self: self._size)
    declength = property(lambda self: self._declength)
    nocptrans = property(lambda self: self._nocptrans)

    @property
    def flags(self) -> FieldFlag:
        return FieldFlag.NOCPTRANS if self._nocptrans else FieldFlag.NONE

    def __eq__(self, other):
        if not isinstance(other, FieldDefinition):
            return NotImplemented

        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def _key(self):
        return (self._name, self._type, self._size, self._declength, self._nocptrans)

    def __repr__(self):
        return '<%s(%r, %s, size=%d, declength=%d%s)>' % (
            self.__class__.__name__,
            self._name,
            self._type.value,
            self._size,
            self._declength,
            ', NOCPTRANS' if self._nocptrans else '',
        )


class Schema(object):
    '''Ordered collection of FieldDefinition.'''

    def __init__(self, fields: Iterable[Union[FieldDefinition, Mapping]] = ()):
        self.fields: List[FieldDefinition] = [
            _ if isinstance(_, FieldDefinition) else FieldDefinition.from_dict(_) for _ in fields
        ]

        if self.header_size > MAX_LAYOUT_SIZE:
            raise InvalidSchema(f'{len(self)} fields need a header of {self.header_size} bytes, the maximum is {MAX_LAYOUT_SIZE}')

        if self.record_size > MAX_LAYOUT_SIZE:
            raise InvalidSchema(f'records of {self.record_size} bytes exceed the maximum of {MAX_LAYOUT_SIZE}')

    @classmethod
    def build(cls, schema) -> 'Schema':
        return schema if isinstance(schema, Schema) else cls(schema)

    def __len__(self):
        return len(self.fields)

    def __iter__(self):
        return iter(self.fields)

    def __getitem__(self, item):
        return self.fields[item]

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, ', '.join([repr(_) for _ in self.fields]))

    @property
    def record_size(self) -> int:
        return record_size(self.fields)

    @property
    def header_size(self) -> int:
        return header_size(len(self.fields))


def record_size(fields: Iterable[FieldDefinition]) -> int:
    '''Bytes for a single record: the marker followed by the fields.'''
    return RECORD_MARKER_SIZE + sum([_.size for _ in fields])


def header_size(n_fields: int) -> int:
    '''Bytes from the start of the file to the first record.'''
    return FILE_HEADER_SIZE + FIELD_DESCRIPTOR_SIZE * n_fields + TERMINATOR_SIZE + RESERVED_SIZE
