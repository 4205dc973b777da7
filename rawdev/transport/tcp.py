"""TCP client transport."""
from __future__ import annotations

import logging
import socket
import time
from typing import Optional

from ..errors import TransportError
from ..models import ConnectionState
from .base import READ_CHUNK_SIZE, READ_TIMEOUT, Transport

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 5.0  # seconds


class TcpTransport(Transport):
    """Raw TCP socket to a device.

    Args:
        host: Host name or IP address
        port: TCP port
        connect_timeout: Seconds to wait for the connection
        idle_timeout: Close after this many seconds without traffic, or None
        chunk_size: Maximum bytes per recv
    """

    OPEN_STATUS = ConnectionState.CONNECTED

    def __init__(self,
                 host: str,
                 port: int,
                 connect_timeout: float = CONNECT_TIMEOUT,
                 idle_timeout: Optional[float] = None,
                 chunk_size: int = READ_CHUNK_SIZE):
        super().__init__(chunk_size=chunk_size)
        self._host = host
        self._port = port
        self._connect_timeout = connect_timeout
        self._idle_timeout = idle_timeout
        self._socket: Optional[socket.socket] = None
        self._last_activity = 0.0

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    def describe(self) -> str:
        return f"tcp://{self._host}:{self._port}"

    def _open(self) -> None:
        self._socket = socket.create_connection(
            (self._host, self._port), timeout=self._connect_timeout)
        self._socket.settimeout(READ_TIMEOUT)
        self._last_activity = time.monotonic()

    def _close_handle(self) -> None:
        sock, self._socket = self._socket, None
        if sock is None:
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # already disconnected
            pass
        sock.close()

    def _read(self) -> Optional[bytes]:
        sock = self._socket
        if sock is None:
            return None
        try:
            chunk = sock.recv(self._chunk_size)
        except socket.timeout:
            if self._is_idle():
                logger.info(f"{self.describe()} idle for {self._idle_timeout}s, closing")
                return None
            return b""
        if not chunk:
            return None
        self._last_activity = time.monotonic()
        return chunk

    def _write(self, data: bytes) -> None:
        if self._socket is None:
            raise TransportError(f"{self.describe()} has no socket")
        self._socket.sendall(data)
        self._last_activity = time.monotonic()

    def _is_idle(self) -> bool:
        if not self._idle_timeout:
            return False
        return time.monotonic() - self._last_activity >= self._idle_timeout
