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
from typing import Any, ClassVar, TypeAlias

JsonObject: TypeAlias = dict[str, Any]


class ManifestType(StrEnum):
    STATIC = 'static'
    DYNAMIC = 'dynamic'


@dataclass(frozen=True, slots=True, kw_only=True)
class StaticManifest:
    """
    An on-demand (VOD) presentation
    """
    mpd_type: ClassVar[ManifestType] = ManifestType.STATIC

    total_duration: float
    segments: tuple[str, ...] = ()

    def is_live(self) -> bool:
        return False

    def to_dict(self) -> JsonObject:
        return {
            'type': self.mpd_type.value,
            'totalDuration': self.total_duration,
            'segments': list(self.segments),
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class DynamicManifest:
    """
    A live presentation. time_at_head is the live edge, in milliseconds
    since the Unix epoch.
    """
    mpd_type: ClassVar[ManifestType] = ManifestType.DYNAMIC

    total_duration: float
    time_at_head: int
    segments: tuple[str, ...] = ()
    minimum_update_period: float | None = None

    def is_live(self) -> bool:
        return True

    def to_dict(self) -> JsonObject:
        return {
            'type': self.mpd_type.value,
            'totalDuration': self.total_duration,
            'timeAtHead': self.time_at_head,
            'minimumUpdatePeriod': self.minimum_update_period,
            'segments': list(self.segments),
        }


Manifest: TypeAlias = StaticManifest | DynamicManifest

HeaderSet: TypeAlias = dict[str, str]
