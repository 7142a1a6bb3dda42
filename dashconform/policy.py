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
from dataclasses import dataclass
from enum import StrEnum
import re
from typing import Callable, TypeAlias

from .date_time import now_ms
from .manifest import HeaderSet, JsonObject, Manifest, ManifestType
from .options import DEFAULT_ALLOWED_DRIFT_MS

SegmentPredicate: TypeAlias = Callable[[HeaderSet], bool]
ManifestPredicate: TypeAlias = Callable[[HeaderSet, ManifestType], bool]

MAX_DYNAMIC_MANIFEST_AGE: int = 10

MAX_AGE_RE = re.compile(r'max-age=(\d+)')

class ClockStatus(StrEnum):
    OK = 'OK'
    BAD = 'BAD'


@dataclass(slots=True, frozen=True)
class TimestampResult:
    clock: ClockStatus
    clock_offset: int | None = None

    def to_dict(self) -> JsonObject:
        rv: JsonObject = {'clock': self.clock.value}
        if self.clock_offset is not None:
            rv['clockOffset'] = self.clock_offset
        return rv


@dataclass(slots=True, frozen=True)
class ManifestVerifyResult:
    ok: bool
    headers: HeaderSet

    def to_dict(self) -> JsonObject:
        return {
            'ok': self.ok,
            'headers': dict(self.headers),
        }


def header_tokens(headers: HeaderSet, name: str) -> set[str]:
    """
    Splits a comma separated header into its tokens. A missing
    header gives an empty set.
    """
    value = headers.get(name)
    if not value:
        return set()
    return {tok.strip() for tok in value.split(',')}


def default_segment_predicate(headers: HeaderSet) -> bool:
    """
    A media segment needs a Cache-Control header and CORS headers
    that allow a browser based player to read its Date header.
    """
    if 'cache-control' not in headers:
        return False
    if 'Date' not in header_tokens(headers, 'access-control-expose-headers'):
        return False
    return 'origin' in header_tokens(headers, 'access-control-allow-headers')


def default_manifest_predicate(headers: HeaderSet, mpd_type: ManifestType) -> bool:
    """
    A live manifest must not be cached for longer than
    MAX_DYNAMIC_MANIFEST_AGE seconds.
    """
    if mpd_type != ManifestType.DYNAMIC:
        return True
    cache_control = headers.get('cache-control')
    if not cache_control:
        return False
    match = MAX_AGE_RE.search(cache_control)
    if match is None:
        return False
    return int(match.group(1), 10) <= MAX_DYNAMIC_MANIFEST_AGE


def check_timestamps(manifest: Manifest,
                     allowed_diff_ms: int = DEFAULT_ALLOWED_DRIFT_MS,
                     now: int | None = None) -> TimestampResult:
    """
    Compares the live edge of a dynamic manifest against the wall
    clock. Static manifests always pass.
    """
    if manifest.mpd_type == ManifestType.STATIC:
        return TimestampResult(clock=ClockStatus.OK)
    if now is None:
        now = now_ms()
    offset = abs(manifest.time_at_head - now)
    if offset > allowed_diff_ms:
        return TimestampResult(clock=ClockStatus.BAD, clock_offset=offset)
    return TimestampResult(clock=ClockStatus.OK, clock_offset=offset)


def check_manifest(headers: HeaderSet, mpd_type: ManifestType,
                   predicate: ManifestPredicate | None = None) -> ManifestVerifyResult:
    if predicate is None:
        predicate = default_manifest_predicate
    return ManifestVerifyResult(ok=bool(predicate(headers, mpd_type)), headers=headers)
