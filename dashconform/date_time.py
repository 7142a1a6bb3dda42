#############################################################################
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.
#
#############################################################################
#
#  Project Name        :    MPEG DASH conformance checker
#
#  Author              :    Alex Ashley
#
#############################################################################
import datetime
import re

UTC = datetime.timezone.utc

date_time_re = re.compile(r''.join([
    r'^(?P<year>\d+)-(?P<month>\d+)-(?P<day>\d+)',
    r'T(?P<hour>\d+):(?P<minute>\d+):(?P<second>[\d.]+)',
    r'(?P<tzinfo>(Z|([+-]\d+:\d+)))?$'
]))

duration_re = re.compile(r''.join([
    r'^(?P<sign>-)?P((?P<years>\d+)Y)?((?P<months>\d+)M)?((?P<days>\d+)D)?',
    r'(T((?P<hours>\d+)H)?((?P<minutes>\d+)M)?((?P<seconds>[\d.]+)S)?)?$'
]))

tz_offset_re = re.compile(r'^(?P<sign>[+-])(?P<hours>\d+):(?P<minutes>\d+)$')


def parse_timezone(value: str | None) -> datetime.tzinfo | None:
    if value is None:
        return None
    if value.upper() == 'Z':
        return UTC
    match = tz_offset_re.match(value)
    if not match:
        raise ValueError(f'Invalid timezone "{value}"')
    delta = datetime.timedelta(
        hours=int(match.group('hours'), 10),
        minutes=int(match.group('minutes'), 10))
    if match.group('sign') == '-':
        delta = -delta
    return datetime.timezone(delta)


def from_iso_duration(value: str) -> datetime.timedelta:
    """
    Convert an ISO8601 duration (e.g. PT1M30.5S) into a timedelta
    """
    match = duration_re.match(value)
    if not match or value.endswith('T') or value.lstrip('-') == 'P':
        raise ValueError(f'Invalid ISO duration "{value}"')
    secs = 0.0
    if match.group('years') is not None:
        secs += int(match.group('years')) * 3600 * 24 * 365
    if match.group('months') is not None:
        secs += int(match.group('months')) * 3600 * 24 * 30
    if match.group('days') is not None:
        secs += int(match.group('days')) * 3600 * 24
    if match.group('hours') is not None:
        secs += int(match.group('hours')) * 3600
    if match.group('minutes') is not None:
        secs += int(match.group('minutes')) * 60
    if match.group('seconds') is not None:
        secs += float(match.group('seconds'))
    if match.group('sign'):
        secs = -secs
    return datetime.timedelta(seconds=secs)


def from_iso_datetime(value: str) -> datetime.datetime:
    """
    Convert an ISO8601 dateTime string into a datetime. Values without a
    timezone are assumed to be UTC, as required for MPD attributes.
    """
    match = date_time_re.match(value)
    if not match:
        raise ValueError(f'Invalid ISO dateTime "{value}"')
    kwargs = {}
    for key, val in match.groupdict().items():
        if key == 'tzinfo':
            kwargs[key] = parse_timezone(val) or UTC
        elif key == 'second':
            secs = float(val)
            kwargs[key] = int(secs)
            kwargs["microsecond"] = min(999999, int(round(1000000.0 * (secs - int(secs)))))
        else:
            kwargs[key] = int(val, 10)
    return datetime.datetime(**kwargs)


def to_iso_datetime(value: datetime.datetime) -> str:
    """
    Convert a datetime to an ISO8601 formatted dateTime string.
    """
    rv = value.isoformat()
    if value.tzinfo is None:
        rv += 'Z'
    else:
        rv = re.sub('[+-]00:00$', 'Z', rv)
    return rv


def to_epoch_ms(value: datetime.datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return int(round(value.timestamp() * 1000))


def now_ms() -> int:
    return to_epoch_ms(datetime.datetime.now(tz=UTC))
