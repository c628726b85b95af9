'''
# dBASE table file

Format of the .dbf files, introduced by dBASE and used for example by the
shapefiles and FoxPro. The file is composed of

 1. a header of 32 bytes with the counters of the file
 2. a descriptor of 32 bytes for each column, followed by a terminator and
    by 263 bytes reserved for the name of the database container
 3. the records, all of the same size, each starting with a byte that marks
    it as deleted ('*') or not (' ')
 4. the end of file marker 0x1a

All the integers are little endian. Only writing is supported: the file is
built all at once from a schema and the list of records, see encode().
'''
import datetime
import logging
from typing import Iterable, Mapping

from .. import fields
from ..core import Chunk
from ..streams import Stream
from ..exceptions import DBFPackException, InvalidInput, MissingField, PackException
from .dates import to_date
from .encoders import DEFAULT_ENCODING, encode_field, pad_right
from .enum import DBFVersion, LanguageDriver, FieldFlag, Marker
from .schema import FieldDefinition, Schema, RECORD_MARKER_SIZE


logger = logging.getLogger(__name__)

FIELD_NAME_SIZE = 11
BASE_YEAR = 1900


class LastUpdate(Chunk):
    year  = fields.StructField('B')  # years since 1900
    month = fields.StructField('B')
    day   = fields.StructField('B')


class DBFHeader(Chunk):
    version     = fields.StructField('B', enum=DBFVersion, default=DBFVersion.DBASE5)
    last_update = LastUpdate()
    n_records   = fields.StructField('I')
    header_size = fields.StructField('H')  # offset of the first record
    record_size = fields.StructField('H')
    reserved    = fields.StringField(17)
    language    = fields.StructField('B', enum=LanguageDriver, default=LanguageDriver.WINDOWS_ANSI)
    reserved2   = fields.StringField(2)


class DBFFieldDescriptor(Chunk):
    field_name = fields.StringField(FIELD_NAME_SIZE)
    field_type = fields.StringField(1)
    address    = fields.StructField('I')  # offset of the field inside the record
    length     = fields.StructField('B')
    decimals   = fields.StructField('B')
    flags      = fields.StructField('B', enum=FieldFlag, default=FieldFlag.NONE)
    reserved   = fields.StringField(13)


class DBFSchema(Chunk):
    descriptors = fields.ArrayField(DBFFieldDescriptor())
    terminator  = fields.StringField(default=Marker.TERMINATOR.value)
    reserved    = fields.StringField(263)


class DBFRecord(Chunk):
    '''The columns are added by make_record() since their number and size
    depend on the schema.'''
    marker = fields.StringField(default=Marker.ACTIVE.value)
    data   = fields.ArrayField(fields.StringField(0))


class DBFFile(Chunk):
    header  = DBFHeader()
    schema  = DBFSchema()
    records = fields.ArrayField(DBFRecord())
    eof     = fields.StringField(default=Marker.EOF.value)


def make_header(schema: Schema, n_records: int, date=None, tz=None) -> DBFHeader:
    '''The last update date is today if not indicated.'''
    schema = Schema.build(schema)

    if date is None:
        date = datetime.datetime.now(tz)

    last_update = to_date(date, tz=tz)

    header = DBFHeader()

    try:
        header.last_update.year.value = int(last_update[:4]) - BASE_YEAR
    except PackException as e:
        raise InvalidInput(f'the last update year must be between {BASE_YEAR} and {BASE_YEAR + 0xff}, not {last_update[:4]}') from e

    header.last_update.month.value = int(last_update[4:6])
    header.last_update.day.value = int(last_update[6:])
    header.n_records.value = n_records
    header.header_size.value = schema.header_size
    header.record_size.value = schema.record_size

    logger.debug('header: %d records, header size %d, record size %d' % (
        n_records, schema.header_size, schema.record_size))

    return header


def make_field_descriptor(definition: FieldDefinition, address: int, encoding=DEFAULT_ENCODING) -> DBFFieldDescriptor:
    name = definition.name
    if isinstance(name, str):
        try:
            name = name.encode(encoding)
        except UnicodeEncodeError as e:
            raise InvalidInput(f'field name {name!r} cannot be encoded with {encoding}', chain=[name]) from e

    descriptor = DBFFieldDescriptor()
    descriptor.field_name.value = pad_right(name, FIELD_NAME_SIZE, filler=b'\x00')
    descriptor.field_type.value = definition.type.value.encode('ascii')
    descriptor.address.value = address
    descriptor.length.value = definition.size
    descriptor.decimals.value = definition.declength
    descriptor.flags.value = definition.flags

    return descriptor


def make_schema(schema: Schema, encoding=DEFAULT_ENCODING) -> DBFSchema:
    '''Descriptors in the same order of the columns of the records.'''
    schema = Schema.build(schema)
    dbf_schema = DBFSchema()

    # the first byte of the record is the marker
    address = RECORD_MARKER_SIZE
    for definition in schema:
        dbf_schema.descriptors.append(make_field_descriptor(definition, address, encoding=encoding))
        address += definition.size

    dbf_schema.relayout()

    return dbf_schema


def make_record(schema: Schema, record: Mapping, encoding=DEFAULT_ENCODING, tz=None) -> DBFRecord:
    if not isinstance(record, Mapping):
        raise InvalidInput(f'a record must be a mapping from field name to value, not {record.__class__.__name__}')

    schema = Schema.build(schema)
    dbf_record = DBFRecord()

    for definition in schema:
        try:
            value = record[definition.name]
        except KeyError:
            raise MissingField(f'record has no value for the field \'{definition.name}\'', chain=[definition.name]) from None

        try:
            raw = encode_field(value, definition, encoding=encoding, tz=tz)
        except DBFPackException as e:
            e.chain.append(definition.name)
            raise

        column = fields.StringField(definition.size, name=definition.name)
        column.value = raw
        dbf_record.data.append(column)

    dbf_record.relayout()

    return dbf_record


def make_records(schema: Schema, records: Iterable[Mapping], encoding=DEFAULT_ENCODING, tz=None):
    schema = Schema.build(schema)
    result = []
    for idx, record in enumerate(records):
        try:
            result.append(make_record(schema, record, encoding=encoding, tz=tz))
        except DBFPackException as e:
            e.chain.append(idx)
            raise

    return result


def make_file(schema, records: Iterable[Mapping], date=None, encoding=DEFAULT_ENCODING, tz=None) -> DBFFile:
    '''Build the whole file; the schema can be a Schema or a list of
    FieldDefinition and/or dictionaries.'''
    schema = Schema.build(schema)

    try:
        dbf_records = make_records(schema, records, encoding=encoding, tz=tz)
    except DBFPackException as e:
        e.chain.append('records')
        raise

    dbf = DBFFile()
    dbf.header = make_header(schema, len(dbf_records), date=date, tz=tz)
    dbf.schema = make_schema(schema, encoding=encoding)
    dbf.records.value = dbf_records

    dbf.relayout()

    # the readers locate the records using these values
    if dbf.records.offset != schema.header_size:
        raise PackException(f'records start at {dbf.records.offset} instead of {schema.header_size}')

    for idx, dbf_record in enumerate(dbf.records):
        if dbf_record.size != schema.record_size:
            raise PackException(f'record {idx} is {dbf_record.size} bytes instead of {schema.record_size}')

    return dbf


def encode(schema, records: Iterable[Mapping], date=None, encoding=DEFAULT_ENCODING, tz=None) -> bytes:
    '''Return the binary content of the DBF file.

    The "date" is the last update mark, it accepts the same values of
    dates.to_date() and defaults to today.'''
    dbf = make_file(schema, records, date=date, encoding=encoding, tz=tz)

    stream = dbf.pack(relayout=False)

    return stream.getvalue()


def write(destination, schema, records: Iterable[Mapping], date=None, encoding=DEFAULT_ENCODING, tz=None) -> int:
    '''Write the DBF file to a path or to a writable binary file object, returning
    the number of bytes written.

    The encoding is completed before opening the destination, so that a path
    is not truncated when the data is invalid.'''
    data = encode(schema, records, date=date, encoding=encoding, tz=tz)

    with Stream(destination, flags='w') as stream:
        logger.debug('writing %d bytes to %r' % (len(data), stream))
        stream.write(data)

    return len(data)


def write_to_path(path, schema, records: Iterable[Mapping], date=None, encoding=DEFAULT_ENCODING, tz=None) -> int:
    return write(path, schema, records, date=date, encoding=encoding, tz=tz)
