"""Pattern-based framing.

The buffer is split on every match of the pattern; the trailing piece is
kept until more data arrives. Patterns are applied to bytes, so a str
pattern is encoded as UTF-8 first.
"""
from __future__ import annotations

import re
from typing import List, Union

from .base import DEFAULT_MAX_BUFFER_SIZE, Framer


def compile_bytes_pattern(pattern: Union[re.Pattern, bytes, str]) -> re.Pattern:
    """Compile ``pattern`` as a bytes regex, keeping flags that apply to bytes."""
    flags = 0
    if isinstance(pattern, re.Pattern):
        flags = pattern.flags & ~re.UNICODE
        pattern = pattern.pattern
    if isinstance(pattern, str):
        pattern = pattern.encode("utf-8")
    return re.compile(pattern, flags)


class RegexFramer(Framer):
    """Emits the pieces between pattern matches.

    Example:
        >>> framer = RegexFramer(r"[\\r\\n]+")
        >>> framer.subscribe(print)
        >>> framer.feed(b"ONE\\r\\nTWO\\nTH")
        b'ONE'
        b'TWO'
    """

    def __init__(self,
                 regex: Union[re.Pattern, bytes, str],
                 max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE):
        super().__init__(max_buffer_size=max_buffer_size)
        self._regex = compile_bytes_pattern(regex)

    @property
    def pattern(self) -> re.Pattern:
        return self._regex

    def _extract(self) -> List[bytes]:
        parts = self._regex.split(bytes(self._buffer))
        tail = parts.pop()
        self._buffer[:] = tail
        return [part for part in parts if part]
