import datetime
import decimal
from types import SimpleNamespace

import pytest

from dbfpack.dbf.dates import CalendarDate, JulianTimestamp, PreformattedDate
from dbfpack.dbf.encoders import (
    encode_character,
    encode_date,
    encode_field,
    encode_logical,
    encode_numeric,
    encode_timestamp,
    format_number,
    to_logical,
)
from dbfpack.dbf.schema import FieldDefinition
from dbfpack.exceptions import InvalidInput, UnsupportedFieldType


@pytest.mark.parametrize('value,expected', [
    ('T', 'T'),
    (True, 'T'),
    ('F', 'F'),
    (False, 'F'),
    (' ', ' '),
    ('   ', ' '),
    ([], ' '),
    ({}, ' '),
    ('TT', ' '),
    ('t', ' '),
    (0, ' '),
    (1, ' '),
    ('FF', ' '),
    ('f', ' '),
    ('false', ' '),
    ('true', ' '),
    (None, ' '),
    (object(), ' '),
])
def test_to_logical(value, expected):
    assert to_logical(value) == expected


def test_encode_character():
    field = FieldDefinition('NAME', 'C', size=5)

    assert encode_character('hello world', field) == b'hello'
    assert encode_character('hi', field) == b'hi   '
    assert encode_character('', field) == b'     '
    assert encode_character(b'\x00\x01', field) == b'\x00\x01   '


def test_encode_character_encoding():
    field = FieldDefinition('NAME', 'C', size=3)

    assert encode_character('è', field) == b'\xe8  '
    assert encode_character('ñ', field, encoding='utf-8') == b'\xc3\xb1 '

    with pytest.raises(InvalidInput):
        encode_character('è', field, encoding='ascii')


@pytest.mark.parametrize('value', [42, 4.2, None, True, ['a']])
def test_encode_character_invalid(value):
    with pytest.raises(InvalidInput):
        encode_character(value, FieldDefinition('NAME', 'C', size=5))


def test_encode_numeric_declength():
    assert encode_numeric(3.14159, FieldDefinition('PI', 'N', size=6, declength=2)) == b'  3.14'
    assert encode_numeric(1234.5, FieldDefinition('PRICE', 'N', size=8, declength=2)) == b' 1234.50'
    assert encode_numeric(-0.5, FieldDefinition('DELTA', 'N', size=6, declength=1)) == b'  -0.5'
    # the formatted number is wider than the field
    assert encode_numeric(42, FieldDefinition('PRICE', 'N', size=4, declength=2)) == b'42.0'


def test_encode_numeric_integer():
    assert encode_numeric(42, FieldDefinition('QTY', 'N', size=4)) == b'  42'
    assert encode_numeric(3.9, FieldDefinition('QTY', 'N', size=4)) == b'   3'
    assert encode_numeric(-3.9, FieldDefinition('QTY', 'N', size=4)) == b'  -3'
    assert encode_numeric(decimal.Decimal('7.7'), FieldDefinition('QTY', 'N', size=2)) == b' 7'
    assert encode_numeric(123456, FieldDefinition('QTY', 'N', size=4)) == b'1234'


def test_format_number_rounding():
    """Halves are rounded away from zero, without declength the number is truncated."""
    assert format_number(decimal.Decimal('2.345'), 2) == '2.35'
    assert format_number(2.675, 2) == '2.68'
    assert format_number(-2.5, 0) == '-2'
    assert format_number(-2.45, 1) == '-2.5'
    assert format_number(7, 3) == '7.000'


@pytest.mark.parametrize('value', [
    '42',
    True,
    None,
    float('nan'),
    float('inf'),
    decimal.Decimal('Infinity'),
    decimal.Decimal('NaN'),
])
def test_encode_numeric_invalid(value):
    with pytest.raises(InvalidInput):
        encode_numeric(value, FieldDefinition('QTY', 'N', size=4, declength=1))


def test_encode_date():
    field = FieldDefinition('SOLD', 'D')

    assert encode_date(CalendarDate(2011, 10, 24), field) == b'20111024'
    assert encode_date('20111024', field) == b'20111024'
    assert encode_date(PreformattedDate('20111024'), field) == b'20111024'
    assert encode_date(datetime.date(2011, 10, 24), field) == b'20111024'


def test_encode_logical():
    field = FieldDefinition('ACTIVE', 'L')

    assert encode_logical(True, field) == b'T'
    assert encode_logical('F', field) == b'F'
    assert encode_logical('maybe', field) == b' '


def test_encode_timestamp():
    field = FieldDefinition('UPDATED', 'T')

    assert encode_timestamp(JulianTimestamp(2455832, 0), field) == b'\x18\x79\x25\x00\x00\x00\x00\x00'


@pytest.mark.parametrize('definition,values', [
    (FieldDefinition('C1', 'C', size=1), ['', 'a', 'abc', b'xyz']),
    (FieldDefinition('C2', 'C', size=254), ['', 'a' * 300]),
    (FieldDefinition('N1', 'N', size=3), [0, -1, 999999, 3.5, decimal.Decimal('-12.9')]),
    (FieldDefinition('N2', 'N', size=10, declength=4), [0, -1.23456, 10 ** 20, decimal.Decimal('0.00005')]),
    (FieldDefinition('D1', 'D'), [None, 0, 1317146040, '20111024', CalendarDate(12345, 1, 1), datetime.date.today()]),
    (FieldDefinition('L1', 'L'), [True, False, 'T', 'F', '  ', 'x', None, 0]),
    (FieldDefinition('T1', 'T'), [None, 1317146040, '20111024', JulianTimestamp(0, 0), datetime.datetime.now()]),
])
def test_encoded_size_is_field_size(definition, values):
    for value in values:
        assert len(encode_field(value, definition)) == definition.size


def test_encode_field_unsupported_type():
    definition = SimpleNamespace(name='MEMO', type='M', size=10)

    with pytest.raises(UnsupportedFieldType):
        encode_field('text', definition)
