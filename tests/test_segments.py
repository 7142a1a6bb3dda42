import logging
import unittest

from dashconform.options import ValidatorOptions
from dashconform.progress import Progress
from dashconform.segments import (
    FailureReason, SegmentFailed, SegmentOk, SegmentVerifier, VerificationReport
)
from dashconform.transport import Transport

from .mixins.fake_http import GOOD_SEGMENT_HEADERS, FakeHttpClient
from .mixins.mock_time import MockTime

BASE_URL = 'http://example.test/dash/'

class RecordingProgress(Progress):
    def __init__(self) -> None:
        super().__init__()
        self.history: list[tuple[float, str]] = []

    def send_progress(self, pct: float, text: str) -> None:
        self.history.append((pct, text))


class TestSegmentVerifier(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.http = FakeHttpClient()
        self.log = logging.getLogger('DashValidator')
        self.progress = RecordingProgress()
        self.options = ValidatorOptions(segment_delay=0.25, progress=self.progress)
        self.verifier = SegmentVerifier(
            Transport(self.http, self.log), BASE_URL, self.options)

    async def test_all_segments_pass(self) -> None:
        uris = ['seg1.m4s', 'seg2.m4s', 'seg3.m4s']
        for uri in uris:
            self.http.add(BASE_URL + uri, headers=GOOD_SEGMENT_HEADERS)
        async with MockTime('2024-01-01T00:00:00Z') as mt:
            report = await self.verifier.verify(None, uris)
        self.assertEqual(report.ok, [SegmentOk(uri=u) for u in uris])
        self.assertEqual(report.failed, [])
        self.assertTrue(report.passed())
        self.assertEqual(len(report), 3)
        self.assertEqual(self.http.urls('HEAD'), [BASE_URL + u for u in uris])
        self.assertEqual(self.http.urls('GET'), [])
        # delay between probes, but not after the last one
        self.assertEqual(mt.sleeps, [0.25, 0.25])

    async def test_policy_failure(self) -> None:
        headers = dict(GOOD_SEGMENT_HEADERS)
        del headers['cache-control']
        self.http.add(BASE_URL + 'a.m4s', headers=GOOD_SEGMENT_HEADERS)
        self.http.add(BASE_URL + 'b.m4s', headers=headers)
        async with MockTime('2024-01-01T00:00:00Z'):
            report = await self.verifier.verify(None, ['a.m4s', 'b.m4s'])
        self.assertEqual(report.ok, [SegmentOk(uri='a.m4s')])
        self.assertEqual(len(report.failed), 1)
        failed = report.failed[0]
        self.assertEqual(failed.uri, 'b.m4s')
        self.assertEqual(failed.reason, FailureReason.POLICY)
        self.assertTrue(failed.is_policy_failure())
        self.assertEqual(failed.headers, headers)
        self.assertIsNone(failed.error)
        self.assertFalse(report.passed())

    async def test_transport_failures_do_not_stop_the_run(self) -> None:
        self.http.add(BASE_URL + 'a.m4s', headers=GOOD_SEGMENT_HEADERS)
        self.http.add_error(BASE_URL + 'b.m4s', 'connection reset')
        self.http.add(BASE_URL + 'd.m4s', headers=GOOD_SEGMENT_HEADERS)
        async with MockTime('2024-01-01T00:00:00Z'):
            report = await self.verifier.verify(
                None, ['a.m4s', 'b.m4s', 'c.m4s', 'd.m4s'])
        self.assertEqual(len(report), 4)
        self.assertEqual([s.uri for s in report.ok], ['a.m4s', 'd.m4s'])
        self.assertEqual([s.uri for s in report.failed], ['b.m4s', 'c.m4s'])
        conn_err, not_found = report.failed
        self.assertFalse(conn_err.is_policy_failure())
        self.assertIn('connection reset', conn_err.reason)
        self.assertIsNotNone(not_found.error)
        self.assertEqual(not_found.error.status, 404)
        self.assertIn('404', not_found.reason)

    async def test_full_download_uses_get(self) -> None:
        self.http.add(BASE_URL + 'a.m4s', headers=GOOD_SEGMENT_HEADERS, body=b'\0' * 128)
        async with MockTime('2024-01-01T00:00:00Z'):
            report = await self.verifier.verify(None, ['a.m4s'], use_full_download=True)
        self.assertTrue(report.passed())
        self.assertEqual(self.http.requests, [('GET', BASE_URL + 'a.m4s')])

    async def test_custom_predicate(self) -> None:
        self.http.add(BASE_URL + 'a.m4s', headers={'x-custom': 'yes'})
        self.http.add(BASE_URL + 'b.m4s', headers={'x-custom': 'no'})
        async with MockTime('2024-01-01T00:00:00Z'):
            report = await self.verifier.verify(
                lambda hdrs: hdrs.get('x-custom') == 'yes', ['a.m4s', 'b.m4s'])
        self.assertEqual([s.uri for s in report.ok], ['a.m4s'])
        self.assertEqual([s.uri for s in report.failed], ['b.m4s'])

    async def test_predicate_error_is_a_failure(self) -> None:
        self.http.add(BASE_URL + 'a.m4s', headers=GOOD_SEGMENT_HEADERS)
        self.http.add(BASE_URL + 'b.m4s', headers={'content-type': 'video/mp4'})
        self.http.add(BASE_URL + 'c.m4s', headers=GOOD_SEGMENT_HEADERS)
        async with MockTime('2024-01-01T00:00:00Z'):
            with self.assertLogs('DashValidator', level=logging.WARNING):
                report = await self.verifier.verify(
                    lambda hdrs: hdrs['cache-control'] != '',
                    ['a.m4s', 'b.m4s', 'c.m4s'])
        self.assertEqual(len(report), 3)
        self.assertEqual([s.uri for s in report.ok], ['a.m4s', 'c.m4s'])
        self.assertEqual([s.uri for s in report.failed], ['b.m4s'])
        failed = report.failed[0]
        self.assertIn('cache-control', failed.reason)
        self.assertFalse(failed.is_policy_failure())
        self.assertEqual(failed.headers, {'content-type': 'video/mp4'})
        self.assertEqual(self.http.urls('HEAD'), [
            BASE_URL + 'a.m4s', BASE_URL + 'b.m4s', BASE_URL + 'c.m4s'])

    async def test_empty_list(self) -> None:
        report = await self.verifier.verify(None, [])
        self.assertEqual(len(report), 0)
        self.assertTrue(report.passed())
        self.assertEqual(self.http.requests, [])

    async def test_absolute_segment_url(self) -> None:
        url = 'http://cdn.example.test/media/a.m4s'
        self.http.add(url, headers=GOOD_SEGMENT_HEADERS)
        async with MockTime('2024-01-01T00:00:00Z'):
            report = await self.verifier.verify(None, [url])
        self.assertTrue(report.passed())
        self.assertEqual(self.http.urls(), [url])

    async def test_progress(self) -> None:
        for uri in ['a.m4s', 'b.m4s']:
            self.http.add(BASE_URL + uri, headers=GOOD_SEGMENT_HEADERS)
        async with MockTime('2024-01-01T00:00:00Z'):
            await self.verifier.verify(None, ['a.m4s', 'b.m4s'])
        self.assertEqual(self.progress.history, [
            (0.0, ''), (50.0, 'a.m4s'), (100.0, 'b.m4s')])


class TestVerificationReport(unittest.TestCase):
    def test_to_dict(self) -> None:
        report = VerificationReport()
        report.add(SegmentOk(uri='a.m4s'))
        report.add(SegmentFailed(uri='b.m4s', reason='policy', headers={'x': 'y'}))
        self.assertEqual(report.to_dict(), {
            'ok': [{'uri': 'a.m4s'}],
            'failed': [{'uri': 'b.m4s', 'reason': 'policy', 'headers': {'x': 'y'}}],
        })


if __name__ == "__main__":
    logging.basicConfig()
    unittest.main()
