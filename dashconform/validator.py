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
import asyncio
from collections.abc import Sequence
import logging
import random

from .event_bus import EventCallback
from .exceptions import ValidatorNotLoaded
from .http_client import HttpClient
from .manifest import HeaderSet, Manifest
from .options import ValidatorOptions
from .parser import ManifestParser
from .policy import (
    ManifestPredicate, ManifestVerifyResult, SegmentPredicate, TimestampResult,
    check_manifest, check_timestamps
)
from .runner import DynamicManifestRunner, RunnerEvent, RunStatus, RunSummary
from .segments import SegmentVerifier, VerificationReport
from .transport import Transport

class DashValidator:
    """
    Checks the HTTP delivery of a DASH stream: the caching and CORS
    headers of its manifest and segments, and the live edge of a
    dynamic manifest.
    """

    base_url: str
    headers: HeaderSet | None
    log: logging.Logger
    manifest: Manifest | None
    options: ValidatorOptions
    parser: ManifestParser
    runner: DynamicManifestRunner | None
    transport: Transport
    url: str

    def __init__(self,
                 url: str,
                 http_client: HttpClient,
                 options: ValidatorOptions | None = None) -> None:
        self.url = url
        self.options = options if options is not None else ValidatorOptions()
        self.log = self.options.log
        self.transport = Transport(http_client, self.log)
        self.parser = ManifestParser(self.log)
        self.base_url = self.transport.resolve_base_url(url)
        self.manifest = None
        self.headers = None
        self.runner = None
        self.rng = random.Random(self.options.seed)
        self.listeners: list[tuple[str, EventCallback]] = []

    async def load(self) -> None:
        """
        Downloads and parses the manifest. TransportError and ParseError
        are passed to the caller.
        """
        self.log.info('Loading manifest: %s', self.url)
        self.manifest, self.headers = await self.fetch_manifest()
        self.runner = self.create_runner()

    def create_runner(self) -> DynamicManifestRunner:
        runner = DynamicManifestRunner(self.manifest, self.headers, self.options)
        for name, callback in self.listeners:
            runner.on(name, callback)
        return runner

    async def fetch_manifest(self) -> tuple[Manifest, HeaderSet]:
        resp = await self.transport.fetch_manifest(self.url)
        manifest = self.parser.parse(resp.body, url=self.url)
        return (manifest, resp.headers)

    def close(self) -> None:
        self.transport.close()

    async def verify_timestamps(self, allowed_diff_ms: int | None = None) -> TimestampResult:
        """
        Checks that the live edge of a dynamic manifest is within
        allowed_diff_ms of the current time. Always OK for static manifests.
        """
        manifest = self.current_manifest()
        if allowed_diff_ms is None:
            allowed_diff_ms = self.options.allowed_drift_ms
        return check_timestamps(manifest, allowed_diff_ms)

    async def verify_manifest(self,
                              predicate: ManifestPredicate | None = None) -> ManifestVerifyResult:
        manifest = self.current_manifest()
        return check_manifest(self.headers, manifest.mpd_type, predicate)

    async def verify_segments(self,
                              predicate: SegmentPredicate | None,
                              segments: Sequence[str],
                              use_full_download: bool = False) -> VerificationReport:
        verifier = SegmentVerifier(self.transport, self.base_url, self.options)
        return await verifier.verify(predicate, segments, use_full_download)

    async def verify_all_segments(self,
                                  predicate: SegmentPredicate | None = None,
                                  use_full_download: bool = False) -> VerificationReport:
        manifest = self.current_manifest()
        return await self.verify_segments(predicate, manifest.segments, use_full_download)

    async def spotcheck_segments(self,
                                 predicate: SegmentPredicate | None,
                                 sample_count: int,
                                 use_full_download: bool = False) -> VerificationReport:
        """
        Checks a random sample of segments. Segments are picked with
        replacement, so the same segment might be checked more than once.
        """
        if sample_count < 0:
            raise ValueError(f'sample_count must not be negative, got {sample_count}')
        if sample_count == 0:
            return VerificationReport()
        manifest = self.current_manifest()
        if not manifest.segments:
            self.log.warning('Manifest has no segments to spotcheck')
            return VerificationReport()
        sample = self.rng.choices(manifest.segments, k=sample_count)
        return await self.verify_segments(predicate, sample, use_full_download)

    async def validate_dynamic_manifest(self, iterations: int) -> RunSummary:
        """
        Re-fetches the manifest "iterations" times, checking the live edge and
        the response headers after each fetch. Listeners added using on() are
        told about every problem that is found.
        """
        self.current_manifest()
        if self.runner.started:
            self.runner = self.create_runner()
        elif self.runner.status == RunStatus.STOPPED:
            # stop() was called before this run started
            summary = self.runner.summary()
            self.runner = self.create_runner()
            return summary
        first = True

        async def refresh() -> None:
            nonlocal first
            if not first:
                await self.sleep()
            first = False
            manifest, headers = await self.fetch_manifest()
            self.manifest = manifest
            self.headers = headers
            self.runner.update_mpd(manifest, headers)

        return await self.runner.start(iterations, refresh)

    async def sleep(self) -> None:
        interval = self.options.refresh_interval
        if getattr(self.manifest, 'minimum_update_period', None):
            interval = self.manifest.minimum_update_period
        self.log.debug('Waiting %.3f seconds before refreshing manifest', interval)
        await asyncio.sleep(interval)

    def on(self, event_name: str | RunnerEvent, callback: EventCallback) -> None:
        """
        Adds a listener for "checking", "invalidplayhead" or "invalidheaders".
        Any other event name is ignored.
        """
        self.listeners.append((event_name, callback))
        if self.runner is not None:
            self.runner.on(event_name, callback)

    def stop(self) -> None:
        if self.runner is not None:
            self.runner.stop()

    def duration(self) -> float:
        return self.current_manifest().total_duration

    def segment_urls(self) -> list[str]:
        return list(self.current_manifest().segments)

    def is_live(self) -> bool:
        return self.current_manifest().is_live()

    def current_manifest(self) -> Manifest:
        if self.manifest is None:
            raise ValidatorNotLoaded()
        return self.manifest
