"""
A Field is "fundamental" datatype from the format point of view, something directly
packable without need for relayouting.
"""
import logging
import struct
from enum import Enum

from .meta import FieldBase, Endianess
from .properties import ChunkPhase
from .streams import Stream
from .exceptions import PackException


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, *args, name=None, father=None, default=None, offset=None,
                 endianess=Endianess.LITTLE_ENDIAN):
        super().__init__()
        self._phase = ChunkPhase.INIT
        self.logger = logging.getLogger(__name__)
        self.name = name
        self.father = father
        self.default = default
        self.offset = offset
        self.endianess = endianess

        self.init()

    def init(self):
        self._value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_value(self):
        return self._value

    def _set_value(self, value) -> None:
        self._value = value

    def _get_size(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _get_raw(self) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_raw() not implemented")

    raw = property(
        fget=lambda self: self._get_raw(),
    )

    def relayout(self, offset=0):
        old_phase = self._phase
        self._phase = ChunkPhase.RELAYOUTING
        self.offset = offset

        self._phase = old_phase

        return self.size

    def pack(self, stream=None, relayout=True):
        '''Write the raw representation of the field at its offset.

        It returns the stream used so that the caller can retrieve the data
        when the stream is in memory.'''
        if relayout:
            self.relayout()

        stream = Stream(b'', flags='w') if stream is None else stream

        self._phase = ChunkPhase.PACKING
        stream.seek(self.offset)
        stream.write(self.raw)
        self._phase = ChunkPhase.DONE

        return stream


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing
    integers to bytes.

    The main advantage is the possibility to indicate via the "enum" argument some subclass
    of enum.Enum so to have directly a representation of the integer value of the field itself.
    """

    def __init__(self, format, default=0, enum=None, **kw):
        self.format = format
        self.enum = enum
        super().__init__(default=default, **kw)

    def __repr__(self):
        if self.enum:
            return f'<{self.__class__.__name__}({self.value!r})>'

        encoder = str if isinstance(self.value, bytes) else hex

        return '<%s(%s)>' % (self.__class__.__name__, encoder(self.value))

    def value_from_default(self):
        if not self.enum or isinstance(self.default, self.enum):
            return self.default

        return self.enum(self.default)

    def get_format(self):
        prefix = {
            Endianess.LITTLE_ENDIAN: '<',
            Endianess.BIG_ENDIAN: '>',
            Endianess.NETWORK: '!',
            Endianess.NATIVE: '=',
        }[self.endianess]

        return '%s%s' % (prefix, self.format)

    def _set_value(self, value) -> None:
        if self.enum and not isinstance(value, self.enum):
            value = self.enum(value)

        # fail now instead of at packing time
        self._pack(value)

        self._value = value

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _pack(self, value) -> bytes:
        try:
            return struct.pack(self.get_format(), value.value if isinstance(value, Enum) else value)
        except struct.error as e:
            self.logger.error(e)
            raise PackException(f'{value!r} is not packable with format \'{self.format}\'') from e

    def _get_raw(self) -> bytes:
        return self._pack(self.value)


class StringField(Field):
    """Represent a contiguous chunk of bytes with a fixed length."""

    def __init__(self, n=None, **kw):
        if n is None and 'default' not in kw:
            raise ValueError("StringField must have 'n' or 'default' indicated!")

        self.length = n if n is not None else len(kw['default'])

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return self.length

    def value_from_default(self):
        return b'\x00' * self.length if not self.default else self.default

    def _get_size(self):
        return self.length

    def _set_value(self, value) -> None:
        if not isinstance(value, bytes):
            raise PackException(f'{self.__class__.__name__} accepts only bytes, not {value.__class__.__name__}')

        if len(value) != self.length:
            raise PackException(f'you are trying to set a value with the wrong size (that is {self.length} bytes)')

        self._value = value

    def _get_raw(self):
        return self.value


class ArrayField(Field):
    '''Pack an array of Chunks.

    You can indicate an explicit number of elements via the parameter named "n",
    in that case the array is populated with copies of the "field" template.

    This class must behave like a list in python, obviously cannot implement all the methods
    since, for example, slicing what should mean?
    '''

    def __init__(self, field, n=0, **kw):
        self.field = field
        self._n = n

        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def value_from_default(self):
        return [self.instance_element() for _ in range(self._n)]

    def _set_value(self, value):
        for element in value:
            element.father = self
        self._value = list(value)

    def instance_element(self):
        return self.field.create(father=self)  # pass the father so that we don't lose the hierarchy

    def append(self, element):
        element.father = self
        self.value.append(element)

    def clear(self):
        self.value.clear()

    def _get_raw(self):
        return b''.join([element.raw for element in self.value])

    def _get_size(self):
        size = 0
        for element in self.value:
            size += element.size

        return size

    def relayout(self, offset=0):
        super().relayout(offset=offset)
        size = 0
        for element in self.value:
            size += element.relayout(offset=offset + size)

        return size

    def pack(self, stream=None, relayout=True):
        if relayout:
            self.relayout()

        stream = Stream(b'', flags='w') if stream is None else stream

        for idx, element in enumerate(self.value):
            self.logger.debug('packing %s[%d] at offset %08x' % (self.name, idx, element.offset))
            try:
                element.pack(stream=stream, relayout=False)
            except PackException as e:
                e.chain.append(idx)
                raise

        return stream
