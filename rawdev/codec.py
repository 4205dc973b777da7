"""Command encoder and response decoder.

Outbound commands go through three steps:

1. '#' directives are interpreted locally (see directives.py)
2. dictionary lookup replaces a command with its literal form
3. hex detection: 'FF:01:02', 'FF-01' or 'ff0102' are sent as raw bytes

Everything else is encoded with the session encoding. Encoding never
raises: a string that cannot be encoded becomes an empty buffer, which the
drainer treats as "pace only, send nothing".
"""
from __future__ import annotations

import base64
import codecs
import logging
import re
from typing import Callable, Mapping, Optional

from .directives import CLOSE, CONNECT, PAUSE, is_directive, parse_directive, parse_pause_ms
from .errors import ConfigurationError
from .models import CommandObject, ResponseObject

logger = logging.getLogger(__name__)

HEX = "hex"
BASE64 = "base64"
FALLBACK_ENCODING = "utf-8"

_HEX_SEPARATORS_RE = re.compile(r"[x:-]")
_HEX_RE = re.compile(r"[0-9a-fA-F]+")

_ENCODING_ALIASES = {
    "binary": "latin-1",
    "latin1": "latin-1",
    "ucs2": "utf-16-le",
    "ucs-2": "utf-16-le",
    "utf16le": "utf-16-le",
    "utf-16le": "utf-16-le",
}


def normalize_encoding(encoding: Optional[str]) -> Optional[str]:
    """Resolve an encoding name to a canonical codec name.

    Accepts Python codec names plus 'hex', 'base64', 'binary', 'latin1'
    and 'ucs2'.

    Raises:
        ConfigurationError: if the name is not a known codec
    """
    if encoding is None:
        return None
    name = str(encoding).strip().lower()
    if name in (HEX, BASE64):
        return name
    name = _ENCODING_ALIASES.get(name, name)
    try:
        return codecs.lookup(name).name
    except LookupError as e:
        raise ConfigurationError(f"Unknown encoding: {encoding}") from e


def strip_hex_separators(text: str) -> str:
    return _HEX_SEPARATORS_RE.sub("", text.strip())


def is_hex_string(text: str) -> bool:
    """True if ``text`` is hex digits, optionally separated by x, : or -.

    >>> is_hex_string("FF:01:02")
    True
    >>> is_hex_string("0a-0b")
    True
    >>> is_hex_string("hello")
    False
    """
    return _HEX_RE.fullmatch(strip_hex_separators(text)) is not None


def encode_text(text: str, encoding: Optional[str]) -> bytes:
    """Encode ``text`` under a normalized encoding name.

    Hex strings keep their complete byte pairs only; a trailing odd
    nibble is dropped.
    """
    if encoding == HEX:
        if len(text) % 2:
            text = text[:-1]
        return bytes.fromhex(text)
    if encoding == BASE64:
        return base64.b64decode(text)
    return text.encode(encoding or FALLBACK_ENCODING)


def decode_bytes(data: bytes, encoding: str) -> str:
    """Decode ``data`` under a normalized encoding name, replacing bad bytes."""
    if encoding == HEX:
        return data.hex()
    if encoding == BASE64:
        return base64.b64encode(data).decode("ascii")
    return data.decode(encoding, errors="replace")


class Codec:
    """Encodes commands for one device and decodes its responses.

    Args:
        name: Device name stamped on every CommandObject/ResponseObject
        encoding: Session encoding, or None to leave response values unset
        duration: Default pacing in milliseconds
        dictionary: Command -> literal replacement (referenced, not copied)
        on_connect: Called for the '#connect' directive
        on_close: Called for the '#close' directive
    """

    def __init__(self,
                 name: str,
                 encoding: Optional[str] = "ascii",
                 duration: int = 1500,
                 dictionary: Optional[Mapping[str, str]] = None,
                 on_connect: Optional[Callable[[], None]] = None,
                 on_close: Optional[Callable[[], None]] = None):
        self._name = name
        self._encoding = normalize_encoding(encoding)
        self._duration = duration
        self._dictionary = dictionary if dictionary is not None else {}
        self._on_connect = on_connect
        self._on_close = on_close

    @property
    def encoding(self) -> Optional[str]:
        return self._encoding

    def encode(self, command: str) -> Optional[CommandObject]:
        """Turn a command string into bytes plus a pacing duration.

        Returns:
            CommandObject, or None for directives that queue nothing
        """
        if is_directive(command):
            return self.special(command)

        encoding = self._encoding
        encodedstr = self._dictionary.get(command, command)

        if is_hex_string(encodedstr):
            encoding = HEX
            encodedstr = strip_hex_separators(encodedstr)

        try:
            encoded = encode_text(encodedstr, encoding)
        except (UnicodeError, ValueError) as e:
            logger.warning(f"[{self._name}] Cannot encode {command!r} as {encoding}: {e}")
            encoded = b""

        return CommandObject(
            name=self._name,
            command=command,
            encodedstr=encodedstr,
            encoded=encoded,
            duration=self._duration,
        )

    def special(self, command: str) -> Optional[CommandObject]:
        """Interpret a '#' directive.

        '#pause <ms>' returns an empty CommandObject that only delays the
        queue. '#connect' and '#close' act immediately and return None, as
        does anything unrecognized.
        """
        directive = parse_directive(command)
        if directive is None:
            logger.debug(f"[{self._name}] Ignoring malformed directive {command!r}")
            return None

        if directive.name == PAUSE:
            return CommandObject(
                name=self._name,
                command=command,
                duration=parse_pause_ms(directive.arg),
            )
        if directive.name == CONNECT:
            if self._on_connect:
                self._on_connect()
        elif directive.name == CLOSE:
            if self._on_close:
                self._on_close()
        else:
            logger.debug(f"[{self._name}] Ignoring unknown directive {command!r}")
        return None

    def decode(self, data: bytes) -> ResponseObject:
        """Wrap a framed chunk, decoding it if an encoding is configured."""
        value = None
        if self._encoding:
            try:
                value = decode_bytes(data, self._encoding)
            except (UnicodeError, ValueError) as e:
                logger.warning(f"[{self._name}] Cannot decode response as {self._encoding}: {e}")
        return ResponseObject(name=self._name, raw=bytes(data), value=value)
