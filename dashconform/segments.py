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
from dataclasses import dataclass, field
import logging
from typing import TypeAlias
import urllib.parse

from .exceptions import TransportError
from .manifest import HeaderSet, JsonObject
from .options import ValidatorOptions
from .policy import SegmentPredicate, default_segment_predicate
from .progress import Progress
from .transport import Transport

class FailureReason:
    POLICY = 'policy'


@dataclass(slots=True, frozen=True)
class SegmentOk:
    uri: str

    def to_dict(self) -> JsonObject:
        return {'uri': self.uri}


@dataclass(slots=True, frozen=True)
class SegmentFailed:
    """
    A segment that was rejected by the predicate (reason == "policy")
    or that could not be fetched (reason is the transport error text)
    """
    uri: str
    reason: str
    headers: HeaderSet | None = None
    error: TransportError | None = None

    def is_policy_failure(self) -> bool:
        return self.error is None and self.reason == FailureReason.POLICY

    def to_dict(self) -> JsonObject:
        rv: JsonObject = {
            'uri': self.uri,
            'reason': self.reason,
        }
        if self.headers is not None:
            rv['headers'] = dict(self.headers)
        return rv


SegmentOutcome: TypeAlias = SegmentOk | SegmentFailed


@dataclass(slots=True)
class VerificationReport:
    ok: list[SegmentOk] = field(default_factory=list)
    failed: list[SegmentFailed] = field(default_factory=list)

    def add(self, outcome: SegmentOutcome) -> None:
        if isinstance(outcome, SegmentOk):
            self.ok.append(outcome)
        else:
            self.failed.append(outcome)

    def __len__(self) -> int:
        return len(self.ok) + len(self.failed)

    def passed(self) -> bool:
        return not self.failed

    def to_dict(self) -> JsonObject:
        return {
            'ok': [s.to_dict() for s in self.ok],
            'failed': [s.to_dict() for s in self.failed],
        }


class SegmentVerifier:
    """
    Probes a list of segments, one at a time, with a pause of at
    least options.segment_delay seconds between consecutive requests.
    """

    base_url: str
    delay: float
    log: logging.Logger
    progress: Progress
    transport: Transport

    def __init__(self, transport: Transport, base_url: str,
                 options: ValidatorOptions) -> None:
        self.transport = transport
        self.base_url = base_url
        self.delay = options.segment_delay
        self.log = options.log
        self.progress = options.progress

    async def verify(self,
                     predicate: SegmentPredicate | None,
                     segments: Sequence[str],
                     use_full_download: bool = False) -> VerificationReport:
        if predicate is None:
            predicate = default_segment_predicate
        report = VerificationReport()
        if not segments:
            return report
        self.progress.reset(len(segments))
        self.log.debug('Checking %d segments (%s)', len(segments),
                       'GET' if use_full_download else 'HEAD')
        for idx, uri in enumerate(segments):
            if idx > 0:
                await asyncio.sleep(self.delay)
            outcome = await self.verify_segment(predicate, uri, use_full_download)
            report.add(outcome)
            self.progress.step(uri)
        self.log.info('%d of %d segments passed', len(report.ok), len(segments))
        return report

    async def verify_segment(self, predicate: SegmentPredicate, uri: str,
                             use_full_download: bool) -> SegmentOutcome:
        url = self.resolve(uri)
        try:
            if use_full_download:
                headers = await self.transport.fetch_segment_full(url)
            else:
                headers = await self.transport.fetch_segment_headers(url)
        except TransportError as err:
            self.log.warning('Failed to fetch segment %s: %s', url, err)
            return SegmentFailed(uri=uri, reason=str(err), error=err)
        try:
            accepted = predicate(headers)
        except Exception as err:
            self.log.warning('Header check of segment %s failed: %r', url, err)
            return SegmentFailed(uri=uri, reason=str(err), headers=headers)
        if accepted:
            return SegmentOk(uri=uri)
        self.log.debug('Segment %s failed header policy: %s', url, headers)
        return SegmentFailed(uri=uri, reason=FailureReason.POLICY, headers=headers)

    def resolve(self, uri: str) -> str:
        return urllib.parse.urljoin(self.base_url, uri)
