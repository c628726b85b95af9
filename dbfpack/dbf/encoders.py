'''
Encoders for the values of the records: each one takes the value and the
definition of the field and returns exactly as many bytes as the field is wide.

 - 'C': text, padded with spaces on the right, truncated at the field size
 - 'N': number as ascii digits, padded with spaces on the left, truncated at the field size;
        when declength is present the number has exactly declength decimal digits
 - 'D': see dates.to_date()
 - 'L': 'T', 'F' or ' ' for uninitialized
 - 'T': see dates.to_timestamp()
'''
import decimal
import logging
import math
import re

from .dates import to_date, to_timestamp
from .enum import FieldType
from .schema import FieldDefinition
from ..exceptions import InvalidInput, UnsupportedFieldType


logger = logging.getLogger(__name__)

DEFAULT_ENCODING = 'latin-1'

# enough digits for the biggest float with the biggest declength
_NUMERIC_CONTEXT = decimal.Context(prec=1000, rounding=decimal.ROUND_HALF_UP)


def pad_right(data: bytes, size: int, filler: bytes = b' ') -> bytes:
    return data.ljust(size, filler)[:size]


def pad_left(data: bytes, size: int, filler: bytes = b' ') -> bytes:
    return data.rjust(size, filler)[:size]


def encode_character(value, definition: FieldDefinition, encoding=DEFAULT_ENCODING, tz=None) -> bytes:
    if isinstance(value, str):
        try:
            value = value.encode(encoding)
        except UnicodeEncodeError as e:
            raise InvalidInput(f'{value!r} cannot be encoded with {encoding}') from e
    elif not isinstance(value, bytes):
        raise InvalidInput(f'character fields accept str or bytes, not {value.__class__.__name__}')

    return pad_right(value, definition.size)


def _check_number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float, decimal.Decimal)):
        raise InvalidInput(f'numeric fields accept int, float or Decimal, not {value.__class__.__name__}')

    finite = value.is_finite() if isinstance(value, decimal.Decimal) else math.isfinite(value)
    if not finite:
        raise InvalidInput(f'{value!r} is not a finite number')


def format_number(value, declength: int = 0) -> str:
    '''Fixed point representation with declength decimal digits, rounding half away
    from zero; without declength the number is truncated to an integer.'''
    _check_number(value)

    if not declength:
        return str(int(value))

    if isinstance(value, float):
        # use the shortest representation, not the binary expansion
        value = decimal.Decimal(repr(value))

    exponent = decimal.Decimal(1).scaleb(-declength)

    return format(decimal.Decimal(value).quantize(exponent, context=_NUMERIC_CONTEXT), 'f')


def encode_numeric(value, definition: FieldDefinition, encoding=DEFAULT_ENCODING, tz=None) -> bytes:
    return pad_left(format_number(value, definition.declength).encode('ascii'), definition.size)


def encode_date(value, definition: FieldDefinition, encoding=DEFAULT_ENCODING, tz=None) -> bytes:
    return to_date(value, tz=tz).encode('ascii')


def to_logical(value) -> str:
    '''Convert a boolean value into DBF equivalent, preserving the meaning of 'T' or 'F':
    everything else is ' ' (uninitialized).'''
    if value is False or (isinstance(value, str) and value == 'F'):
        return 'F'

    if isinstance(value, str) and re.fullmatch(r' +', value):
        return ' '

    if value is True or (isinstance(value, str) and value == 'T'):
        return 'T'

    return ' '


def encode_logical(value, definition: FieldDefinition, encoding=DEFAULT_ENCODING, tz=None) -> bytes:
    return to_logical(value).encode('ascii')


def encode_timestamp(value, definition: FieldDefinition, encoding=DEFAULT_ENCODING, tz=None) -> bytes:
    return to_timestamp(value, tz=tz)


ENCODERS = {
    FieldType.CHARACTER: encode_character,
    FieldType.NUMERIC: encode_numeric,
    FieldType.DATE: encode_date,
    FieldType.LOGICAL: encode_logical,
    FieldType.TIMESTAMP: encode_timestamp,
}


def encode_field(value, definition: FieldDefinition, encoding=DEFAULT_ENCODING, tz=None) -> bytes:
    try:
        encoder = ENCODERS[definition.type]
    except KeyError as e:
        raise UnsupportedFieldType(f'type {definition.type!r} is not supported', chain=[definition.name]) from e

    return encoder(value, definition, encoding=encoding, tz=tz)
