"""Transport over an already-open binary stream.

Any object with ``read(n)`` and ``write(data)`` works: a pipe from
``subprocess``, ``socket.makefile('rwb', buffering=0)``, a pty, or a test
double. The stream is assumed live; the session starts reading right away
and never opens or closes it on its own.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from ..models import ConnectionState
from .base import READ_CHUNK_SIZE, Transport

logger = logging.getLogger(__name__)


class StreamTransport(Transport):
    """Wraps a caller-owned binary stream.

    ``connect()`` starts the reader thread; there is no handle to open.
    ``close()`` stops reading and closes the stream. End of input ends the
    reader thread but leaves the transport open for writing.
    """

    OPEN_STATUS = ConnectionState.OPENED

    def __init__(self, stream: Any, chunk_size: int = READ_CHUNK_SIZE):
        super().__init__(chunk_size=chunk_size)
        self._stream = stream

    @property
    def stream(self) -> Any:
        return self._stream

    def describe(self) -> str:
        return "stream"

    def _open(self) -> None:
        pass

    def _close_handle(self) -> None:
        close = getattr(self._stream, "close", None)
        if close is not None:
            close()

    def _read(self) -> Optional[bytes]:
        # read1 returns as soon as any data is available on buffered streams
        reader = getattr(self._stream, "read1", None) or self._stream.read
        chunk = reader(self._chunk_size)
        if not chunk:
            return None
        return bytes(chunk)

    def _handle_remote_close(self) -> None:
        # end of input only stops the reader; a half-closed pipe or socket
        # still accepts writes until close()
        logger.info(f"{self.describe()} reached end of input, reading stopped")

    def _write(self, data: bytes) -> None:
        self._stream.write(data)
        flush = getattr(self._stream, "flush", None)
        if flush is not None:
            flush()
