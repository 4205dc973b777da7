"""Delimiter-based framing."""
from __future__ import annotations

from typing import List, Union

from .base import DEFAULT_MAX_BUFFER_SIZE, Framer


class DelimiterFramer(Framer):
    """Emits everything between delimiter occurrences.

    Empty messages (two delimiters in a row) are skipped.

    Example:
        >>> framer = DelimiterFramer(b"\\r\\n")
        >>> framer.subscribe(print)
        >>> framer.feed(b"OK\\r\\nREADY\\r")
        b'OK'
        >>> framer.feed(b"\\n")
        b'READY'
    """

    def __init__(self,
                 delimiter: Union[bytes, str],
                 include_delimiter: bool = False,
                 max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE):
        super().__init__(max_buffer_size=max_buffer_size)
        if isinstance(delimiter, str):
            delimiter = delimiter.encode("utf-8")
        if not delimiter:
            raise ValueError("Delimiter must not be empty")
        self._delimiter = bytes(delimiter)
        self._include_delimiter = include_delimiter

    @property
    def delimiter(self) -> bytes:
        return self._delimiter

    def _extract(self) -> List[bytes]:
        messages = []
        while True:
            idx = self._buffer.find(self._delimiter)
            if idx == -1:
                break
            end = idx + len(self._delimiter)
            message = bytes(self._buffer[:end if self._include_delimiter else idx])
            del self._buffer[:end]
            if message:
                messages.append(message)
        return messages
