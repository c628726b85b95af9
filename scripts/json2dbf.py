#!/usr/bin/env python3
'''
Convert a JSON document into a DBF file.

The document must be an object with two keys: "schema", the list of the field
definitions, and "records", the list of objects mapping field names to values.
Dates can be given as YYYYMMDD strings or unix timestamps.
'''
import json
import os
import sys
import logging

from dbfpack.dbf import write_to_path
from dbfpack.exceptions import DBFPackException


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def usage(progname):
    print(f'''usage: {progname} <json file> <dbf file>

The JSON file must contain something like

  {{
    "schema": [{{"name": "NAME", "type": "C", "size": 10}}],
    "records": [{{"NAME": "kebab"}}]
  }}''')
    sys.exit(1)


def load(path):
    with open(path, 'r') as f:
        document = json.load(f)

    if not isinstance(document, dict) or 'schema' not in document or 'records' not in document:
        raise ValueError(f'\'{path}\' must contain an object with the keys "schema" and "records"')

    return document['schema'], document['records']


if __name__ == '__main__':
    if len(sys.argv) < 3:
        usage(sys.argv[0])

    path_json, path_dbf = sys.argv[1], sys.argv[2]

    try:
        schema, records = load(path_json)
        size = write_to_path(path_dbf, schema, records)
    except (OSError, ValueError, DBFPackException) as e:
        logger.error(f'cannot convert \'{path_json}\': {e}')
        sys.exit(1)

    logger.info(f'written {len(records)} records ({size} bytes) to \'{path_dbf}\'')
