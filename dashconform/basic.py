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
import argparse
import asyncio
import json
import logging
import sys
import time
from typing import TextIO

from .exceptions import DashConformError, PolicyViolation
from .http_client import HttpClient
from .manifest import JsonObject
from .options import DEFAULT_ALLOWED_DRIFT_MS, DEFAULT_SEGMENT_DELAY, ValidatorOptions
from .policy import ClockStatus
from .progress import ConsoleProgress
from .requests_http_client import RequestsHttpClient
from .runner import RunnerEvent
from .validator import DashValidator

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_LOAD_ERROR = 2

def create_http_client(name: str, options: ValidatorOptions) -> HttpClient:
    if name == 'gevent':
        from .gevent_http_client import GeventHttpClient
        return GeventHttpClient(options)
    return RequestsHttpClient(options)


class BasicDashValidator(DashValidator):
    """
    Command line front end for DashValidator
    """

    def __init__(self, url: str, options: ValidatorOptions,
                 client: str = 'requests') -> None:
        super().__init__(
            url,
            create_http_client(client, options),
            options=options)

    @staticmethod
    def create_parser() -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description='Check caching, CORS and live edge timing of a DASH stream')
        parser.add_argument(
            '--segments',
            help='check "all" segments, or a random sample of N segments',
            default=None)
        parser.add_argument(
            '--download', action='store_true',
            help='use GET (downloading each segment) instead of HEAD')
        parser.add_argument(
            '--allowed-drift', dest='allowed_drift', type=int,
            default=DEFAULT_ALLOWED_DRIFT_MS,
            help='maximum difference (ms) between live edge and wall clock')
        parser.add_argument(
            '--live', dest='iterations', type=int, default=0,
            help='number of times to refresh and check a live manifest')
        parser.add_argument(
            '--refresh-interval', dest='refresh_interval', type=float, default=None,
            help='seconds between live manifest refreshes if MPD@minimumUpdatePeriod is absent')
        parser.add_argument(
            '--delay', type=float, default=DEFAULT_SEGMENT_DELAY * 1000.0,
            help='minimum gap (ms) between two segment requests')
        parser.add_argument(
            '--timeout', type=float, default=10.0,
            help='HTTP request timeout (seconds)')
        parser.add_argument(
            '--seed', type=int, default=None,
            help='random seed used to choose spotcheck segments')
        parser.add_argument(
            '--client', choices=['requests', 'gevent'], default='requests',
            help='HTTP client library')
        parser.add_argument(
            '--json', action='store_true',
            help='write results as JSON')
        parser.add_argument(
            '--progress', action='store_true',
            help='show progress while checking segments')
        parser.add_argument(
            '-v', '--verbose', '--debug',
            dest='verbose',
            action='count',
            help='increase verbosity',
            default=0)
        parser.add_argument(
            'manifest',
            help='URL of manifest to validate')
        return parser

    @classmethod
    async def main(cls, argv: list[str] | None = None, out: TextIO | None = None) -> int:
        parser = cls.create_parser()
        args = parser.parse_args(argv)
        if out is None:
            out = sys.stdout
        logging.basicConfig(
            datefmt=r'%H:%M:%S',
            format='%(asctime)-8s:%(levelname)s:%(filename)s@%(lineno)d: %(message)s')
        log = logging.getLogger('DashValidator')
        if args.verbose > 0:
            log.setLevel(logging.DEBUG)
        else:
            log.setLevel(logging.INFO)
        sample_count: int | None = None
        if args.segments is not None and args.segments != 'all':
            try:
                sample_count = int(args.segments, 10)
            except ValueError:
                parser.error(f'--segments must be "all" or a number: {args.segments}')
            if sample_count < 0:
                parser.error(f'--segments must not be negative: {args.segments}')
        kwargs = {
            'allowed_drift_ms': args.allowed_drift,
            'segment_delay': args.delay / 1000.0,
            'timeout': args.timeout,
            'seed': args.seed,
            'verbose': args.verbose,
            'log': log,
        }
        if args.refresh_interval is not None:
            kwargs['refresh_interval'] = args.refresh_interval
        if args.progress:
            kwargs['progress'] = ConsoleProgress()
        try:
            options = ValidatorOptions(**kwargs)
        except ValueError as err:
            parser.error(str(err))

        start_time = time.time()
        bdv = cls(args.manifest, options=options, client=args.client)
        try:
            return await bdv.run(args, sample_count, out, start_time)
        finally:
            bdv.close()

    async def run(self, args: argparse.Namespace, sample_count: int | None,
                  out: TextIO, start_time: float) -> int:
        results: JsonObject = {'url': self.url}
        try:
            await self.load()
        except DashConformError as err:
            self.log.error('Failed to load manifest: %s', err)
            results['error'] = str(err)
            self.write_results(args.json, results, out)
            return EXIT_LOAD_ERROR
        violations: list[PolicyViolation] = []
        results['manifest'] = self.manifest.to_dict()
        del results['manifest']['segments']
        results['manifest']['segmentCount'] = len(self.manifest.segments)

        manifest_result = await self.verify_manifest()
        results['manifestHeaders'] = manifest_result.to_dict()
        if not manifest_result.ok:
            violations.append(PolicyViolation(
                'manifest', f'response headers failed policy: {manifest_result.headers}'))

        timestamps = await self.verify_timestamps()
        results['timestamps'] = timestamps.to_dict()
        if timestamps.clock != ClockStatus.OK:
            violations.append(PolicyViolation(
                'timestamps',
                f'live edge is {timestamps.clock_offset} ms from the current time'))

        report = None
        if args.segments == 'all':
            report = await self.verify_all_segments(use_full_download=args.download)
        elif sample_count is not None:
            report = await self.spotcheck_segments(
                None, sample_count, use_full_download=args.download)
        if report is not None:
            self.options.progress.finished(self.url)
            results['segments'] = report.to_dict()
            for item in report.failed:
                violations.append(PolicyViolation('segment', f'{item.uri}: {item.reason}'))

        if args.iterations > 0:
            self.on(RunnerEvent.INVALID_PLAYHEAD, self.log_event)
            self.on(RunnerEvent.INVALID_HEADERS, self.log_event)
            summary = await self.validate_dynamic_manifest(args.iterations)
            results['live'] = summary.to_dict()
            del results['live']['manifest']['segments']
            if not summary.passed():
                violations.append(PolicyViolation(
                    'live', f'{summary.invalid_playhead} invalid playhead, '
                    f'{summary.invalid_headers} invalid headers, '
                    f'{summary.refresh_errors} refresh errors'))

        for err in violations:
            self.log.error('%s', err)
        passed = not violations
        results['errors'] = [str(err) for err in violations]
        results['passed'] = passed
        results['duration'] = round(time.time() - start_time, 3)
        self.write_results(args.json, results, out)
        return EXIT_OK if passed else EXIT_FAILED

    def log_event(self, name: str, payload: JsonObject) -> None:
        if name == RunnerEvent.INVALID_PLAYHEAD:
            self.log.error(
                'Live edge is %d ms from current time (allowed %d ms)',
                payload['offset'], payload['threshold'])
        else:
            self.log.error('Invalid manifest headers: %s', payload['headers'])

    @staticmethod
    def write_results(as_json: bool, results: JsonObject, out: TextIO) -> None:
        if as_json:
            json.dump(results, out, indent=2, default=str)
            out.write('\n')
            return
        out.write(f'=== {results["url"]} ===\n')
        if 'error' in results:
            out.write(f'Load failed: {results["error"]}\n')
            return
        mpd = results['manifest']
        out.write(f'Type: {mpd["type"]}  duration: {mpd["totalDuration"]:.3f}s  '
                  f'segments: {mpd["segmentCount"]}\n')
        hdrs = results['manifestHeaders']
        out.write(f'Manifest headers: {"OK" if hdrs["ok"] else "FAILED"}\n')
        ts = results['timestamps']
        if 'clockOffset' in ts:
            out.write(f'Live edge: {ts["clock"]} (offset {ts["clockOffset"]} ms)\n')
        else:
            out.write(f'Live edge: {ts["clock"]}\n')
        if 'segments' in results:
            segs = results['segments']
            out.write(f'Segments: {len(segs["ok"])} ok, {len(segs["failed"])} failed\n')
            for item in segs['failed']:
                out.write(f'  {item["uri"]}: {item["reason"]}\n')
        if 'live' in results:
            live = results['live']
            out.write(
                f'Live: {live["iterations"]} refreshes, {live["invalidPlayhead"]} '
                f'invalid playhead, {live["invalidHeaders"]} invalid headers, '
                f'{live["refreshErrors"]} refresh errors\n')
        if results['passed']:
            out.write(f'No errors found. Validation took {results["duration"]:#5.1f} seconds\n')
        else:
            out.write(f'Finished with errors after {results["duration"]:#5.1f} seconds\n')


def run() -> None:
    sys.exit(asyncio.run(BasicDashValidator.main()))
