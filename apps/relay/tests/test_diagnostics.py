"""Error message shaping tests."""

from __future__ import annotations

import unittest

from mediarelay.domain.diagnostics import UNKNOWN_ERROR, truncate_error_message


class TruncateErrorMessageTests(unittest.TestCase):
    def test_missing_message_becomes_unknown_error(self) -> None:
        self.assertEqual(truncate_error_message(None), UNKNOWN_ERROR)

    def test_short_message_only_collapses_whitespace(self) -> None:
        self.assertEqual(truncate_error_message("tool\n  failed\twith  code 1"), "tool failed with code 1")

    def test_long_multiline_message_is_bounded_and_single_line(self) -> None:
        message = ("line of diagnostic output\n" * 400)[:10_000]
        self.assertEqual(len(message), 10_000)

        result = truncate_error_message(message)

        self.assertLessEqual(len(result), 503)
        self.assertNotIn("\n", result)
        self.assertTrue(result.endswith("..."))

    def test_message_at_limit_is_not_marked(self) -> None:
        message = "x" * 500
        self.assertEqual(truncate_error_message(message), message)
        self.assertEqual(truncate_error_message(message + "y"), "x" * 500 + "...")

    def test_custom_limit(self) -> None:
        self.assertEqual(truncate_error_message("abcdefgh", limit=3), "abc...")


if __name__ == "__main__":
    unittest.main()
