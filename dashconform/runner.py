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
from enum import Enum, StrEnum, auto
import logging
from typing import Any, Awaitable, Callable

from .event_bus import EventBus, EventCallback
from .exceptions import RunnerRefreshError, RunnerStateError
from .manifest import HeaderSet, JsonObject, Manifest
from .options import ValidatorOptions
from .policy import (
    ClockStatus, ManifestPredicate, check_manifest, check_timestamps
)

RefreshFunction = Callable[[], Awaitable[Any]]

class RunnerEvent(StrEnum):
    CHECKING = 'checking'
    INVALID_PLAYHEAD = 'invalidplayhead'
    INVALID_HEADERS = 'invalidheaders'


class RunStatus(Enum):
    IDLE = auto()
    RUNNING = auto()
    STOPPED = auto()


@dataclass(slots=True, frozen=True)
class RunSummary:
    iterations: int
    invalid_playhead: int
    invalid_headers: int
    refresh_errors: int
    manifest: Manifest

    def passed(self) -> bool:
        return (self.invalid_playhead == 0 and self.invalid_headers == 0 and
                self.refresh_errors == 0)

    def to_dict(self) -> JsonObject:
        return {
            'iterations': self.iterations,
            'invalidPlayhead': self.invalid_playhead,
            'invalidHeaders': self.invalid_headers,
            'refreshErrors': self.refresh_errors,
            'manifest': self.manifest.to_dict(),
        }


class DynamicManifestRunner:
    """
    Repeatedly refreshes a live manifest and checks the live edge and
    the manifest response headers after every refresh.

    The caller supplies the refresh function, which must fetch and parse
    the manifest and pass the result to update_mpd().
    """

    events: EventBus[JsonObject]
    headers: HeaderSet
    iteration: int
    log: logging.Logger
    manifest: Manifest
    started: bool
    status: RunStatus

    def __init__(self,
                 manifest: Manifest,
                 headers: HeaderSet,
                 options: ValidatorOptions,
                 predicate: ManifestPredicate | None = None) -> None:
        self.manifest = manifest
        self.headers = headers
        self.options = options
        self.log = options.log
        self.predicate = predicate
        self.events = EventBus(RunnerEvent, self.log)
        self.status = RunStatus.IDLE
        self.iteration = 0
        self.invalid_playhead = 0
        self.invalid_headers = 0
        self.refresh_errors = 0
        self._stop_requested = False
        self.started = False

    def on(self, name: str, callback: EventCallback) -> None:
        self.events.on(name, callback)

    def stop(self) -> None:
        """
        Requests that the run stops. The iteration in progress is allowed
        to complete.
        """
        if self.status == RunStatus.IDLE:
            self.status = RunStatus.STOPPED
            return
        self._stop_requested = True

    async def start(self, iterations: int, refresh_fn: RefreshFunction) -> RunSummary:
        if self.status != RunStatus.IDLE:
            raise RunnerStateError(
                f'Runner can only be started once, status is {self.status.name}')
        self.started = True
        self.status = RunStatus.RUNNING
        self.log.info('Starting live manifest validation, %d iterations', iterations)
        try:
            while self.iteration < iterations and not self._stop_requested:
                await self.run_iteration(refresh_fn)
        finally:
            self.status = RunStatus.STOPPED
        self.log.info(
            'Live manifest validation finished after %d iterations: '
            'invalid playhead=%d invalid headers=%d refresh errors=%d',
            self.iteration, self.invalid_playhead, self.invalid_headers,
            self.refresh_errors)
        return self.summary()

    async def run_iteration(self, refresh_fn: RefreshFunction) -> None:
        self.events.trigger(RunnerEvent.CHECKING, {
            'iteration': self.iteration,
            'manifest': self.manifest,
        })
        try:
            await refresh_fn()
        except Exception as err:
            self.refresh_errors += 1
            error = RunnerRefreshError(self.iteration, err)
            self.log.warning('%s', error)
        self.iteration += 1

    def update_mpd(self, manifest: Manifest, headers: HeaderSet) -> None:
        """
        Replaces the current manifest and then checks it
        """
        self.manifest = manifest
        self.headers = headers
        self.check_playhead(manifest)
        self.check_headers(manifest, headers)

    def check_playhead(self, manifest: Manifest) -> None:
        threshold = self.options.allowed_drift_ms
        result = check_timestamps(manifest, threshold)
        if result.clock == ClockStatus.OK:
            return
        self.invalid_playhead += 1
        self.log.warning(
            'Live edge is %d ms away from wall clock (allowed %d ms)',
            result.clock_offset, threshold)
        self.events.trigger(RunnerEvent.INVALID_PLAYHEAD, {
            'offset': result.clock_offset,
            'threshold': threshold,
            'timestamp': manifest.time_at_head,
            'manifest': manifest,
        })

    def check_headers(self, manifest: Manifest, headers: HeaderSet) -> None:
        result = check_manifest(headers, manifest.mpd_type, self.predicate)
        if result.ok:
            return
        self.invalid_headers += 1
        self.log.warning('Manifest response headers failed policy: %s', headers)
        self.events.trigger(RunnerEvent.INVALID_HEADERS, {
            'headers': headers,
            'type': manifest.mpd_type,
        })

    def summary(self) -> RunSummary:
        return RunSummary(
            iterations=self.iteration,
            invalid_playhead=self.invalid_playhead,
            invalid_headers=self.invalid_headers,
            refresh_errors=self.refresh_errors,
            manifest=self.manifest)
