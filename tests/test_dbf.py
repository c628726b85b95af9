import datetime
import io
import struct

import pytest

from dbfpack.dbf import (
    DBFFile,
    encode,
    make_field_descriptor,
    make_file,
    make_header,
    make_record,
    make_schema,
    write,
    write_to_path,
)
from dbfpack.dbf.dates import CalendarDate, JulianTimestamp
from dbfpack.dbf.enum import DBFVersion, LanguageDriver
from dbfpack.dbf.schema import FieldDefinition, Schema
from dbfpack.exceptions import InvalidInput, MissingField, UnsupportedFieldType


SCHEMA = [
    {'name': 'col1', 'type': 'C', 'size': 5},
    {'name': 'col2', 'type': 'N', 'size': 4, 'declength': 0},
]

ALL_TYPES = Schema([
    FieldDefinition('NAME', 'C', size=10),
    FieldDefinition('PRICE', 'N', size=7, declength=2),
    FieldDefinition('SOLD', 'D'),
    FieldDefinition('ACTIVE', 'L'),
    FieldDefinition('UPDATED', 'T'),
])

ALL_TYPES_RECORD = {
    'NAME': 'kebab',
    'PRICE': 4.5,
    'SOLD': '20111024',
    'ACTIVE': True,
    'UPDATED': JulianTimestamp(2455832, 68040000),
}


def test_full_file():
    data = encode(SCHEMA, [{'col1': 'ab', 'col2': 7}], date=CalendarDate(2011, 10, 24))

    # header + 2 descriptors + terminator + reserved, a record and the EOF
    assert len(data) == 32 + 2 * 32 + 1 + 263 + 10 + 1

    # header
    assert data[0] == 0x30
    assert data[1:4] == bytes([111, 10, 24])
    assert struct.unpack('<I', data[4:8])[0] == 1
    assert struct.unpack('<H', data[8:10])[0] == 360
    assert struct.unpack('<H', data[10:12])[0] == 10
    assert data[12:29] == b'\x00' * 17
    assert data[29] == 0x03
    assert data[30:32] == b'\x00\x00'

    # first descriptor
    assert data[32:43] == b'col1' + b'\x00' * 7
    assert data[43:44] == b'C'
    assert struct.unpack('<I', data[44:48])[0] == 1
    assert data[48] == 5
    assert data[49] == 0
    assert data[50] == 0
    assert data[51:64] == b'\x00' * 13

    # second descriptor
    assert data[64:75] == b'col2' + b'\x00' * 7
    assert data[75:76] == b'N'
    assert struct.unpack('<I', data[76:80])[0] == 6
    assert data[80] == 4
    assert data[81] == 0

    assert data[96] == 0x0d
    assert data[97:360] == b'\x00' * 263

    assert data[360:370] == b' ab      7'
    assert data[370:] == b'\x1a'


def test_single_field_file():
    data = encode([SCHEMA[0]], [{'col1': 'hello world'}], date='20111024')

    assert len(data) == 328 + 6 + 1
    assert struct.unpack('<H', data[8:10])[0] == 328
    assert data[328:] == b' hello\x1a'


@pytest.mark.parametrize('schema', [
    [],
    [FieldDefinition('NAME', 'C', size=10)],
    ALL_TYPES,
    [FieldDefinition(f'F{_}', 'N', size=3) for _ in range(100)],
])
def test_header_size_matches_emitted_bytes(schema):
    schema = Schema.build(schema)
    dbf = make_file(schema, [], date='20111024')

    assert len(dbf.header.raw) + len(dbf.schema.raw) == schema.header_size
    assert dbf.layout['records'] == (schema.header_size, 0)

    data = encode(schema, [], date='20111024')

    assert len(data) == schema.header_size + 1
    assert struct.unpack('<H', data[8:10])[0] == schema.header_size


def test_record_size_matches_emitted_bytes():
    record = make_record(ALL_TYPES, ALL_TYPES_RECORD)

    assert len(record.raw) == ALL_TYPES.record_size == 1 + 10 + 7 + 8 + 1 + 8
    assert record.raw == (
        b' ' +
        b'kebab     ' +
        b'   4.50' +
        b'20111024' +
        b'T' +
        b'\x18\x79\x25\x00\x40\x35\x0e\x04'
    )


def test_descriptor_offsets_follow_schema_order():
    dbf_schema = make_schema(ALL_TYPES)

    assert [_.address.value for _ in dbf_schema.descriptors] == [1, 11, 18, 26, 27]
    assert [_.field_type.value for _ in dbf_schema.descriptors] == [b'C', b'N', b'D', b'L', b'T']
    assert [_.length.value for _ in dbf_schema.descriptors] == [10, 7, 8, 1, 8]
    assert dbf_schema.descriptors[1].decimals.value == 2


def test_field_descriptor():
    descriptor = make_field_descriptor(
        FieldDefinition('A_VERY_LONG_NAME', 'C', size=4, nocptrans=True),
        address=42,
    )

    assert descriptor.size == 32
    assert descriptor.raw == (
        b'A_VERY_LONG' +
        b'C' +
        b'\x2a\x00\x00\x00' +
        b'\x04' +
        b'\x00' +
        b'\x04' +
        b'\x00' * 13
    )


def test_header():
    header = make_header(ALL_TYPES, 3, date=datetime.date(2024, 2, 29))

    assert header.size == 32
    assert header.version.value == DBFVersion.DBASE5
    assert header.language.value == LanguageDriver.WINDOWS_ANSI
    assert header.raw[:12] == b'\x30\x7c\x02\x1d\x03\x00\x00\x00' + struct.pack('<HH', 456, 35)


def test_header_default_date_is_today():
    today = datetime.date.today()

    data = encode(SCHEMA, [])

    assert data[1:4] == bytes([today.year - 1900, today.month, today.day])


def test_header_date_from_epoch():
    epoch = int(datetime.datetime(2011, 10, 24, 12).timestamp())

    data = encode(SCHEMA, [], date=epoch)

    assert data[1:4] == bytes([111, 10, 24])


def test_header_date_out_of_range():
    with pytest.raises(InvalidInput):
        encode(SCHEMA, [], date=CalendarDate(1899, 12, 31))


def test_records():
    records = [
        {'col1': 'first', 'col2': 1},
        {'col1': 'second', 'col2': -22, 'ignored': 'yes'},
        {'col1': '', 'col2': 3.99},
    ]

    data = encode(SCHEMA, (_ for _ in records), date='20111024')

    assert struct.unpack('<I', data[4:8])[0] == 3
    assert data[360:] == (
        b' first   1' +
        b' secon -22' +
        b'         3' +
        b'\x1a'
    )


def test_missing_field():
    with pytest.raises(MissingField) as excinfo:
        encode(SCHEMA, [{'col1': 'ab', 'col2': 1}, {'col1': 'ab'}])

    assert isinstance(excinfo.value, KeyError)
    assert excinfo.value.chain == ['col2', 1, 'records']
    assert 'records.1.col2' in str(excinfo.value)


def test_invalid_value():
    with pytest.raises(InvalidInput) as excinfo:
        encode(SCHEMA, [{'col1': 42, 'col2': 1}])

    assert excinfo.value.chain == ['col1', 0, 'records']


def test_record_must_be_mapping():
    with pytest.raises(InvalidInput):
        encode(SCHEMA, [['ab', 7]])


def test_unsupported_field_type():
    with pytest.raises(UnsupportedFieldType):
        encode([{'name': 'MEMO', 'type': 'M', 'size': 10}], [])


def test_make_file():
    dbf = make_file(ALL_TYPES, [ALL_TYPES_RECORD] * 2, date='20111024')

    assert isinstance(dbf, DBFFile)
    assert dbf.header.n_records.value == 2
    assert len(dbf.records) == 2
    assert dbf.records[1].offset == ALL_TYPES.header_size + ALL_TYPES.record_size
    assert dbf.size == ALL_TYPES.header_size + 2 * ALL_TYPES.record_size + 1
    assert dbf.pack().getvalue() == dbf.raw


def test_write_to_path(tmp_path):
    path = tmp_path / 'table.dbf'

    size = write_to_path(path, ALL_TYPES, [ALL_TYPES_RECORD], date='20111024')

    assert path.read_bytes() == encode(ALL_TYPES, [ALL_TYPES_RECORD], date='20111024')
    assert size == path.stat().st_size


def test_write_to_file_object():
    obj = io.BytesIO()

    write(obj, SCHEMA, [{'col1': 'ab', 'col2': 7}], date='20111024')

    assert not obj.closed
    assert obj.getvalue() == encode(SCHEMA, [{'col1': 'ab', 'col2': 7}], date='20111024')


def test_write_invalid_data_leaves_path_untouched(tmp_path):
    path = tmp_path / 'table.dbf'
    path.write_bytes(b'old')

    with pytest.raises(MissingField):
        write_to_path(path, SCHEMA, [{}])

    assert path.read_bytes() == b'old'
