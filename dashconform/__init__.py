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
from .exceptions import (
    DashConformError, ParseError, PolicyViolation, RunnerRefreshError,
    RunnerStateError, TransportError, ValidatorNotLoaded
)
from .http_client import HttpClient
from .manifest import DynamicManifest, Manifest, ManifestType, StaticManifest
from .options import ValidatorOptions
from .parser import ManifestParser
from .policy import (
    ClockStatus, TimestampResult, default_manifest_predicate,
    default_segment_predicate
)
from .runner import DynamicManifestRunner, RunnerEvent, RunStatus, RunSummary
from .segments import SegmentFailed, SegmentOk, SegmentVerifier, VerificationReport
from .transport import Transport
from .validator import DashValidator

__all__ = [
    "ClockStatus",
    "DashConformError",
    "DashValidator",
    "DynamicManifest",
    "DynamicManifestRunner",
    "HttpClient",
    "Manifest",
    "ManifestParser",
    "ManifestType",
    "ParseError",
    "PolicyViolation",
    "RunnerEvent",
    "RunnerRefreshError",
    "RunnerStateError",
    "RunStatus",
    "RunSummary",
    "SegmentFailed",
    "SegmentOk",
    "SegmentVerifier",
    "StaticManifest",
    "TimestampResult",
    "Transport",
    "TransportError",
    "ValidatorNotLoaded",
    "ValidatorOptions",
    "VerificationReport",
    "default_manifest_predicate",
    "default_segment_predicate",
]
