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
from concurrent.futures import Executor
from dataclasses import dataclass, field
import logging
from logging import Logger

from .progress import NullProgress, Progress

DEFAULT_SEGMENT_DELAY: float = 0.05
DEFAULT_ALLOWED_DRIFT_MS: int = 10000
DEFAULT_REFRESH_INTERVAL: float = 2.0

@dataclass(slots=True, kw_only=True)
class ValidatorOptions:
    """
    Options that can be passed to the DASH validator.

    segment_delay is the minimum gap (in seconds) between two segment
    requests. It can be made smaller but never zero.
    """
    segment_delay: float = DEFAULT_SEGMENT_DELAY
    allowed_drift_ms: int = DEFAULT_ALLOWED_DRIFT_MS
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    timeout: float | None = 10.0
    seed: int | None = None
    verbose: int = 0
    progress: Progress = field(default_factory=NullProgress)
    log: Logger = field(default_factory=lambda: logging.getLogger('DashValidator'))
    executor: Executor | None = None

    def __post_init__(self) -> None:
        if self.segment_delay <= 0:
            raise ValueError(
                f'segment_delay must be greater than zero, got {self.segment_delay}')
        if self.allowed_drift_ms < 0:
            raise ValueError(
                f'allowed_drift_ms must not be negative, got {self.allowed_drift_ms}')
        if self.refresh_interval < 0:
            raise ValueError(
                f'refresh_interval must not be negative, got {self.refresh_interval}')
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f'timeout must be greater than zero, got {self.timeout}')
