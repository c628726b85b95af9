'''
# Dates and timestamps

The format stores dates in two ways:

 1. type 'D': 8 ascii digits in the form YYYYMMDD
 2. type 'T': 8 bytes, the first four are the julian day number (days since
    Jan 1 4713 BC, julian calendar) and the other four are the milliseconds
    elapsed since the prior midnight, both little endian unsigned integers.

The functions here accept the following representations of a moment in time

 - EpochSeconds or a plain int: a unix timestamp, converted to the calendar
   using the timezone passed as "tz" (local time if None)
 - CalendarDate, datetime.date, datetime.datetime and time.struct_time
 - a mapping resembling the return value of PHP's getdate(), i.e. with the
   keys 'year', 'mon', 'mday' and optionally 'hours', 'minutes', 'seconds'
 - PreformattedDate or a str, that must be already a valid YYYYMMDD date

An integer is always a unix timestamp, also when its digits look like a date:
wrap it in PreformattedDate to have it interpreted as YYYYMMDD.

Any falsy value is the epoch.
'''
import datetime
import logging
import time
from typing import Mapping, NamedTuple, Optional

from .. import fields
from ..core import Chunk
from ..exceptions import InvalidInput, PackException


logger = logging.getLogger(__name__)

MILLIS_PER_SECOND = 1000
MILLIS_PER_MINUTE = 60 * MILLIS_PER_SECOND
MILLIS_PER_HOUR   = 60 * MILLIS_PER_MINUTE


class EpochSeconds(NamedTuple):
    seconds: int


class CalendarDate(NamedTuple):
    year: int
    month: int
    day: int


class PreformattedDate(NamedTuple):
    value: str


class JulianTimestamp(NamedTuple):
    '''Already encoded timestamp, it's used as it is.'''
    julian_day: int
    millis_of_day: int


class DateTimeParts(NamedTuple):
    year: int
    month: int
    day: int
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    millis: int = 0


class Timestamp(Chunk):
    julian_day    = fields.StructField('I')
    millis_of_day = fields.StructField('I')


def is_date_string(value) -> bool:
    '''Check the string is in the form YYYYMMDD and represents an existing day.'''
    if not isinstance(value, str) or len(value) != 8 or not value.isascii() or not value.isdigit():
        return False

    try:
        datetime.date(int(value[:4]), int(value[4:6]), int(value[6:]))
    except ValueError:
        return False

    return True


def _from_datetime(moment: datetime.datetime, tz) -> DateTimeParts:
    if tz is not None and moment.tzinfo is not None:
        moment = moment.astimezone(tz)

    return DateTimeParts(
        moment.year, moment.month, moment.day,
        moment.hour, moment.minute, moment.second, moment.microsecond // 1000,
    )


def _from_epoch(seconds, tz) -> DateTimeParts:
    if not isinstance(seconds, int) or isinstance(seconds, bool):
        raise InvalidInput(f'epoch seconds must be an integer, not {seconds!r}')

    try:
        moment = datetime.datetime.fromtimestamp(seconds, tz)
    except (OverflowError, OSError, ValueError) as e:
        raise InvalidInput(f'timestamp {seconds} is out of range') from e

    return _from_datetime(moment, None)


def _from_mapping(value: Mapping) -> DateTimeParts:
    missing = [_ for _ in ('year', 'mon', 'mday') if value.get(_) is None]
    if missing:
        raise InvalidInput(f'date structure did not contain the expected key(s) {", ".join(missing)}')

    return DateTimeParts(
        value['year'], value['mon'], value['mday'],
        value.get('hours') or 0, value.get('minutes') or 0, value.get('seconds') or 0,
    )


def _from_string(value: str) -> DateTimeParts:
    if not is_date_string(value):
        raise InvalidInput(f'{value!r} is not a date in the form YYYYMMDD')

    return DateTimeParts(int(value[:4]), int(value[4:6]), int(value[6:]))


def to_parts(value, tz: Optional[datetime.tzinfo] = None) -> DateTimeParts:
    '''Normalize the accepted representations into the calendar components.'''
    if not value:
        value = EpochSeconds(0)

    if isinstance(value, EpochSeconds):
        parts = _from_epoch(value.seconds, tz)
    elif isinstance(value, bool):
        raise InvalidInput(f'{value!r} is not a date')
    elif isinstance(value, int):
        parts = _from_epoch(value, tz)
    elif isinstance(value, datetime.datetime):
        parts = _from_datetime(value, tz)
    elif isinstance(value, datetime.date):
        parts = DateTimeParts(value.year, value.month, value.day)
    elif isinstance(value, time.struct_time):
        parts = DateTimeParts(
            value.tm_year, value.tm_mon, value.tm_mday,
            value.tm_hour, value.tm_min, min(value.tm_sec, 59),
        )
    elif isinstance(value, CalendarDate):
        parts = DateTimeParts(value.year, value.month, value.day)
    elif isinstance(value, PreformattedDate):
        parts = _from_string(value.value)
    elif isinstance(value, str):
        parts = _from_string(value)
    elif isinstance(value, Mapping):
        parts = _from_mapping(value)
    else:
        raise InvalidInput(f'{value.__class__.__name__} was not in the expected format(s)')

    for name, component in parts._asdict().items():
        if not isinstance(component, int) or isinstance(component, bool):
            raise InvalidInput(f'the component \'{name}\' must be an integer, not {component!r}')

    return parts


def _pad(component: int, width: int) -> str:
    return str(component).rjust(width, '0')[:width]


def to_date(value, tz: Optional[datetime.tzinfo] = None) -> str:
    '''Convert a moment in time to the 8 characters YYYYMMDD used by the fields of type 'D'.

    A valid date string is returned unchanged; the components are zero padded
    and truncated to their width.'''
    if isinstance(value, PreformattedDate):
        value = value.value

    if isinstance(value, str) and is_date_string(value):
        return value

    parts = to_parts(value, tz=tz)

    return _pad(parts.year, 4) + _pad(parts.month, 2) + _pad(parts.day, 2)


def julian_day(year: int, month: int, day: int) -> int:
    '''Julian day number of a date of the proleptic gregorian calendar.'''
    try:
        datetime.date(year, month, day)
    except ValueError as e:
        raise InvalidInput(f'{year:04d}-{month:02d}-{day:02d} is not a valid date') from e

    a = (14 - month) // 12
    y = year + 4800 - a
    m = month + 12 * a - 3

    return day + (153 * m + 2) // 5 + 365 * y + y // 4 - y // 100 + y // 400 - 32045


def millis_of_day(value, tz: Optional[datetime.tzinfo] = None) -> int:
    '''Milliseconds elapsed since the prior midnight, from the wall clock of the moment.

    Dates without a time of day resolve to midnight.'''
    if isinstance(value, (str, PreformattedDate)) and value:
        return 0

    if isinstance(value, Mapping) and value and not {'year', 'mon', 'mday'} <= value.keys():
        # a structure carrying only part of an encoded timestamp
        parts = DateTimeParts(0, 0, 0, value.get('hours') or 0, value.get('minutes') or 0, value.get('seconds') or 0)
    else:
        parts = to_parts(value, tz=tz)

    return (
        parts.hours * MILLIS_PER_HOUR +
        parts.minutes * MILLIS_PER_MINUTE +
        parts.seconds * MILLIS_PER_SECOND +
        parts.millis
    )


def to_timestamp(value, millis: Optional[int] = None, tz: Optional[datetime.tzinfo] = None) -> bytes:
    '''Convert a moment in time to the 8 bytes used by the fields of type 'T'.

    A JulianTimestamp, or a mapping with the keys 'jd' and/or 'js', provides
    directly the julian day and/or the milliseconds; the missing parts are
    derived from the value, with "millis" overriding the time of day.'''
    day, ms = None, None

    if isinstance(value, JulianTimestamp):
        day, ms = value
    elif isinstance(value, Mapping):
        day, ms = value.get('jd'), value.get('js')

    if day is None:
        date = to_date(value, tz=tz)
        day = julian_day(int(date[:4]), int(date[4:6]), int(date[6:]))

    if ms is None:
        ms = millis if millis is not None else millis_of_day(value, tz=tz)

    logger.debug('timestamp for %r: julian day %s, %s ms' % (value, day, ms))

    timestamp = Timestamp()
    try:
        timestamp.julian_day.value = day
        timestamp.millis_of_day.value = ms
    except PackException as e:
        raise InvalidInput(f'julian day {day!r} and milliseconds {ms!r} must be unsigned 32 bit integers') from e

    return timestamp.raw
