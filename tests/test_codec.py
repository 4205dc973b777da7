"""Tests for the command encoder and response decoder."""
import unittest
from unittest.mock import Mock

from rawdev.codec import (
    Codec,
    decode_bytes,
    encode_text,
    is_hex_string,
    normalize_encoding,
    strip_hex_separators,
)
from rawdev.errors import ConfigurationError
from rawdev.models import CommandObject, ResponseObject


class TestHexDetection(unittest.TestCase):
    """Tests for hex string detection."""

    def test_plain_hex(self):
        self.assertTrue(is_hex_string("ff0102"))
        self.assertTrue(is_hex_string("FF0102"))

    def test_separators(self):
        self.assertTrue(is_hex_string("FF:01:02"))
        self.assertTrue(is_hex_string("FF-01-02"))
        self.assertTrue(is_hex_string("FFx01x02"))

    def test_surrounding_whitespace_is_ignored(self):
        self.assertTrue(is_hex_string("  FF:01  "))
        self.assertEqual(strip_hex_separators("  FF:01  "), "FF01")

    def test_text_is_not_hex(self):
        self.assertFalse(is_hex_string("hello"))
        self.assertFalse(is_hex_string("PWR ON"))
        self.assertFalse(is_hex_string("FF 01"))

    def test_empty_is_not_hex(self):
        self.assertFalse(is_hex_string(""))
        self.assertFalse(is_hex_string("x:-"))


class TestEncodingHelpers(unittest.TestCase):
    """Tests for encoding name resolution and text codecs."""

    def test_normalize_common_names(self):
        self.assertEqual(normalize_encoding("ASCII"), "ascii")
        self.assertEqual(normalize_encoding("utf8"), "utf-8")
        self.assertEqual(normalize_encoding("HEX"), "hex")
        self.assertEqual(normalize_encoding("binary"), normalize_encoding("latin-1"))
        self.assertEqual(normalize_encoding("ucs2"), "utf-16-le")
        self.assertIsNone(normalize_encoding(None))

    def test_normalize_unknown(self):
        with self.assertRaises(ConfigurationError):
            normalize_encoding("no-such-codec")

    def test_odd_hex_drops_trailing_nibble(self):
        self.assertEqual(encode_text("abc", "hex"), b"\xab")

    def test_base64(self):
        self.assertEqual(encode_text("aGk=", "base64"), b"hi")
        self.assertEqual(decode_bytes(b"hi", "base64"), "aGk=")

    def test_decode_hex(self):
        self.assertEqual(decode_bytes(b"\xff\x01", "hex"), "ff01")

    def test_decode_replaces_bad_bytes(self):
        self.assertEqual(decode_bytes(b"ok\xff", "ascii"), "ok�")


class TestCodecEncode(unittest.TestCase):
    """Tests for Codec.encode."""

    def setUp(self):
        self.codec = Codec(name="proj", encoding="ascii", duration=1500)

    def test_text_command(self):
        cmdo = self.codec.encode("PWR ON\r")

        self.assertIsInstance(cmdo, CommandObject)
        self.assertEqual(cmdo.name, "proj")
        self.assertEqual(cmdo.command, "PWR ON\r")
        self.assertEqual(cmdo.encodedstr, "PWR ON\r")
        self.assertEqual(cmdo.encoded, b"PWR ON\r")
        self.assertEqual(cmdo.duration, 1500)

    def test_hex_command(self):
        cmdo = self.codec.encode("FF:01:02")

        self.assertEqual(cmdo.encodedstr, "FF0102")
        self.assertEqual(cmdo.encoded, bytes([0xFF, 0x01, 0x02]))

    def test_hex_with_mixed_separators(self):
        cmdo = self.codec.encode("0a-0b:0c")
        self.assertEqual(cmdo.encodedstr, "0a0b0c")
        self.assertEqual(cmdo.encoded, b"\x0a\x0b\x0c")

    def test_hex_overrides_encoding_for_one_command(self):
        self.assertEqual(self.codec.encode("0102").encoded, b"\x01\x02")
        self.assertEqual(self.codec.encode("hello").encoded, b"hello")

    def test_dictionary_substitution(self):
        codec = Codec(name="proj", dictionary={"power on": "PWR ON\r"})
        cmdo = codec.encode("power on")

        self.assertEqual(cmdo.command, "power on")
        self.assertEqual(cmdo.encodedstr, "PWR ON\r")
        self.assertEqual(cmdo.encoded, b"PWR ON\r")

    def test_dictionary_value_can_be_hex(self):
        codec = Codec(name="proj", dictionary={"mute": "02:4D:55:03"})
        cmdo = codec.encode("mute")

        self.assertEqual(cmdo.encodedstr, "024D5503")
        self.assertEqual(cmdo.encoded, b"\x02MU\x03")

    def test_dictionary_is_referenced_not_copied(self):
        dictionary = {}
        codec = Codec(name="proj", dictionary=dictionary)
        dictionary["ping"] = "PONG?"

        self.assertEqual(codec.encode("ping").encoded, b"PONG?")

    def test_unencodable_degrades_to_empty(self):
        cmdo = self.codec.encode("héllo")

        self.assertIsNotNone(cmdo)
        self.assertEqual(cmdo.encoded, b"")
        self.assertEqual(cmdo.duration, 1500)

    def test_empty_command(self):
        cmdo = self.codec.encode("")
        self.assertEqual(cmdo.encoded, b"")

    def test_no_encoding_uses_utf8(self):
        codec = Codec(name="proj", encoding=None)
        self.assertEqual(codec.encode("hé").encoded, "hé".encode("utf-8"))


class TestCodecDirectives(unittest.TestCase):
    """Tests for '#' directives."""

    def setUp(self):
        self.on_connect = Mock()
        self.on_close = Mock()
        self.codec = Codec(name="proj", on_connect=self.on_connect, on_close=self.on_close)

    def test_pause(self):
        cmdo = self.codec.encode("#pause 500")

        self.assertEqual(cmdo.encoded, b"")
        self.assertEqual(cmdo.duration, 500)
        self.assertEqual(cmdo.command, "#pause 500")

    def test_pause_is_case_insensitive(self):
        self.assertEqual(self.codec.encode("#PAUSE 20").duration, 20)

    def test_pause_without_number(self):
        self.assertEqual(self.codec.encode("#pause").duration, 0)
        self.assertEqual(self.codec.encode("#pause abc").duration, 0)

    def test_connect(self):
        self.assertIsNone(self.codec.encode("#connect"))
        self.on_connect.assert_called_once()
        self.on_close.assert_not_called()

    def test_close(self):
        self.assertIsNone(self.codec.encode("#Close"))
        self.on_close.assert_called_once()

    def test_unknown_directive(self):
        self.assertIsNone(self.codec.encode("#reboot now"))
        self.on_connect.assert_not_called()
        self.on_close.assert_not_called()

    def test_malformed_directive(self):
        self.assertIsNone(self.codec.encode("#"))
        self.assertIsNone(self.codec.encode("# pause 5"))


class TestCodecDecode(unittest.TestCase):
    """Tests for Codec.decode."""

    def test_decode_with_encoding(self):
        response = Codec(name="proj").decode(b"OK")

        self.assertIsInstance(response, ResponseObject)
        self.assertEqual(response.name, "proj")
        self.assertEqual(response.raw, b"OK")
        self.assertEqual(response.value, "OK")

    def test_decode_without_encoding(self):
        response = Codec(name="proj", encoding=None).decode(b"\x01\x02")

        self.assertEqual(response.raw, b"\x01\x02")
        self.assertIsNone(response.value)

    def test_round_trip_plain_text(self):
        codec = Codec(name="proj", encoding="utf-8")
        for text in ("hello", "PWR ON\r\n", "zoom=3"):
            self.assertEqual(codec.decode(codec.encode(text).encoded).value, text)


if __name__ == '__main__':
    unittest.main()
