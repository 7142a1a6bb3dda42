import io
import unittest

from dashconform.options import DEFAULT_ALLOWED_DRIFT_MS, DEFAULT_SEGMENT_DELAY, ValidatorOptions
from dashconform.progress import ConsoleProgress, NullProgress

class TestValidatorOptions(unittest.TestCase):
    def test_defaults(self) -> None:
        opts = ValidatorOptions()
        self.assertEqual(opts.segment_delay, DEFAULT_SEGMENT_DELAY)
        self.assertEqual(opts.allowed_drift_ms, DEFAULT_ALLOWED_DRIFT_MS)
        self.assertIsInstance(opts.progress, NullProgress)
        self.assertEqual(opts.log.name, 'DashValidator')

    def test_invalid_values(self) -> None:
        for kwargs in [
                {'segment_delay': 0},
                {'segment_delay': -1},
                {'allowed_drift_ms': -1},
                {'refresh_interval': -0.5},
                {'timeout': 0}]:
            with self.subTest(**kwargs):
                with self.assertRaises(ValueError):
                    ValidatorOptions(**kwargs)

    def test_keyword_only(self) -> None:
        with self.assertRaises(TypeError):
            ValidatorOptions(0.1)


class TestProgress(unittest.TestCase):
    def test_console_progress(self) -> None:
        out = io.StringIO()
        progress = ConsoleProgress(out)
        progress.reset(4)
        progress.step('a.m4s')
        self.assertEqual(progress.percentage(), 25.0)
        progress.finished('done')
        self.assertEqual(progress.percentage(), 100.0)
        text = out.getvalue()
        self.assertIn('a.m4s', text)
        self.assertTrue(text.endswith('\n'))

    def test_empty_progress(self) -> None:
        progress = NullProgress()
        progress.reset(0)
        self.assertEqual(progress.percentage(), 100.0)


if __name__ == "__main__":
    unittest.main()
