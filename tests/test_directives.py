"""Tests for '#' directive parsing."""
import unittest

from rawdev.directives import (
    Directive,
    is_directive,
    parse_directive,
    parse_pause_ms,
)


class TestParseDirective(unittest.TestCase):

    def test_name_only(self):
        self.assertEqual(parse_directive("#connect"), Directive("connect"))

    def test_name_is_lowercased(self):
        self.assertEqual(parse_directive("#CLOSE").name, "close")

    def test_single_argument(self):
        directive = parse_directive("#pause 500")
        self.assertEqual(directive.name, "pause")
        self.assertEqual(directive.arg, "500")

    def test_two_arguments(self):
        self.assertEqual(parse_directive("#set a,b").args, ("a", "b"))

    def test_trailing_comma(self):
        self.assertEqual(parse_directive("#set a,").args, ("a",))

    def test_malformed(self):
        self.assertIsNone(parse_directive("#"))
        self.assertIsNone(parse_directive("pause 5"))

    def test_is_directive(self):
        self.assertTrue(is_directive("#pause 1"))
        self.assertFalse(is_directive("PWR #1"))


class TestParsePause(unittest.TestCase):

    def test_values(self):
        self.assertEqual(parse_pause_ms("500"), 500)
        self.assertEqual(parse_pause_ms("250ms"), 250)
        self.assertEqual(parse_pause_ms("soon"), 0)
        self.assertEqual(parse_pause_ms(None), 0)


if __name__ == '__main__':
    unittest.main()
