"""Tests for reply trimming and post truncation."""

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from topic_bridge.utils.body_sanitizer import (
    MAX_POST_LENGTH,
    format_inbound_post,
    trim_quoted_reply,
    truncate_post,
)


class TestTrimQuotedReply(unittest.TestCase):
    def test_cuts_at_first_marker(self):
        body = "Thanks, see below.\n\nOn Mon someone wrote:\n> old text\n> more"
        self.assertEqual(trim_quoted_reply(body), "Thanks, see below.\n\nOn Mon someone wrote:")

    def test_no_marker_only_strips(self):
        self.assertEqual(trim_quoted_reply("  plain body \n"), "plain body")

    def test_marker_inside_a_line_also_cuts(self):
        """Plain split: "a > b" is treated as the start of a quote."""
        self.assertEqual(trim_quoted_reply("a > b"), "a")

    def test_marker_needs_trailing_space(self):
        self.assertEqual(trim_quoted_reply("x>y"), "x>y")


class TestTruncatePost(unittest.TestCase):
    def test_short_text_unchanged(self):
        self.assertEqual(truncate_post("hi"), "hi")

    def test_long_text_cut_with_ellipsis(self):
        out = truncate_post("a" * (MAX_POST_LENGTH + 50))
        self.assertEqual(len(out), MAX_POST_LENGTH)
        self.assertTrue(out.endswith("..."))

    def test_custom_limit(self):
        self.assertEqual(truncate_post("abcdefghij", max_chars=6), "abc...")


class TestFormatInboundPost(unittest.TestCase):
    def test_subject_blank_line_trimmed_body(self):
        out = format_inbound_post("Invoice", "Please pay.\n> earlier mail")
        self.assertEqual(out, "Invoice\n\nPlease pay.")


if __name__ == "__main__":
    unittest.main()
