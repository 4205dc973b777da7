"""Abstract base class for transports.

A transport is a RAW BYTE STREAM: it opens and closes a connection, writes
bytes, and forwards whatever it reads to data subscribers. It does not
interpret messages; the session pipes the stream into a framer.

Failures never raise out of ``connect``/``write``. They are logged and
reported to status subscribers as ConnectionState.ERROR so a caller can
retry with a later ``connect()``.
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, List, Optional

from ..models import ConnectionState

logger = logging.getLogger(__name__)

READ_TIMEOUT = 0.1  # seconds
READ_CHUNK_SIZE = 4096  # bytes

StatusCallback = Callable[[ConnectionState, Optional[str]], None]


class TransportState(str, Enum):
    CLOSED = "closed"
    OPENING = "opening"
    OPEN = "open"


class Transport(ABC):
    """Raw byte stream to a device.

    Responsibilities:
    - Open/close the underlying handle (idempotently)
    - Forward raw byte chunks to data subscribers from a reader thread
    - Send raw bytes
    - Report connected/opened, error and closed to status subscribers

    Subclasses implement ``_open``, ``_close_handle``, ``_read`` and
    ``_write``.
    """

    #: Status reported once the handle is open
    OPEN_STATUS = ConnectionState.CONNECTED

    def __init__(self, chunk_size: int = READ_CHUNK_SIZE):
        self._chunk_size = chunk_size
        self._state = TransportState.CLOSED
        self._state_lock = threading.RLock()

        # Threading
        self._active = False
        self._reader_thread: Optional[threading.Thread] = None

        # Callbacks
        self._data_callbacks: List[Callable[[bytes], None]] = []
        self._status_callbacks: List[StatusCallback] = []
        self._callback_lock = threading.Lock()

    @property
    def state(self) -> TransportState:
        return self._state

    def is_connected(self) -> bool:
        return self._state is TransportState.OPEN

    def connect(self) -> bool:
        """Open the connection if it is closed.

        Returns:
            True if the transport is open afterwards, False otherwise
        """
        with self._state_lock:
            if self._state is not TransportState.CLOSED:
                return self._state is TransportState.OPEN
            self._state = TransportState.OPENING

            error = None
            try:
                self._open()
            except Exception as e:
                self._state = TransportState.CLOSED
                error = e
            else:
                self._state = TransportState.OPEN
                self._active = True
                self._start_reader_thread()

        # status subscribers are notified outside the state lock
        if error is not None:
            logger.error(f"Failed to open {self.describe()}: {error}")
            self._notify_status(ConnectionState.ERROR, str(error))
            return False

        logger.info(f"Opened {self.describe()}")
        self._notify_status(self.OPEN_STATUS)
        return True

    def close(self) -> None:
        """Close the connection. Safe to call when already closed."""
        with self._state_lock:
            if self._state is not TransportState.OPEN:
                return
            self._shutdown()

        if (self._reader_thread and self._reader_thread.is_alive()
                and self._reader_thread is not threading.current_thread()):
            self._reader_thread.join(timeout=1.0)

        logger.info(f"Closed {self.describe()}")
        self._notify_status(ConnectionState.CLOSED)

    def write(self, data: bytes) -> bool:
        """Send raw bytes.

        Returns:
            True once the bytes are handed to the OS, False otherwise
        """
        with self._state_lock:
            if self._state is not TransportState.OPEN:
                logger.warning(f"Cannot send, {self.describe()} is not open")
                return False
            try:
                self._write(data)
                return True
            except Exception as e:
                error = e

        logger.error(f"Send error on {self.describe()}: {error}")
        self._handle_error(error)
        return False

    def subscribe_data(self, callback: Callable[[bytes], None]) -> Callable[[], None]:
        """Subscribe to the raw byte stream.

        Returns:
            Unsubscribe function
        """
        return self._subscribe(self._data_callbacks, callback)

    def subscribe_status(self, callback: StatusCallback) -> Callable[[], None]:
        """Subscribe to (status, message) notifications.

        Returns:
            Unsubscribe function
        """
        return self._subscribe(self._status_callbacks, callback)

    def describe(self) -> str:
        return type(self).__name__

    # Subclass hooks

    @abstractmethod
    def _open(self) -> None:
        """Open the underlying handle. Raise on failure."""
        pass

    @abstractmethod
    def _close_handle(self) -> None:
        """Release the underlying handle. Must unblock a pending ``_read``."""
        pass

    @abstractmethod
    def _read(self) -> Optional[bytes]:
        """Read the next chunk.

        Returns:
            Bytes read (possibly empty on timeout), or None if the remote
            end closed the connection
        """
        pass

    @abstractmethod
    def _write(self, data: bytes) -> None:
        pass

    # Internal methods

    def _subscribe(self, callbacks: list, callback) -> Callable[[], None]:
        with self._callback_lock:
            callbacks.append(callback)

        def unsubscribe():
            with self._callback_lock:
                if callback in callbacks:
                    callbacks.remove(callback)

        return unsubscribe

    def _shutdown(self) -> None:
        self._active = False
        self._state = TransportState.CLOSED
        try:
            self._close_handle()
        except Exception as e:
            logger.error(f"Error closing {self.describe()}: {e}")

    def _start_reader_thread(self) -> None:
        self._reader_thread = threading.Thread(
            target=self._reader_loop,
            daemon=True,
            name=f"{type(self).__name__}Reader"
        )
        self._reader_thread.start()

    def _reader_loop(self) -> None:
        """Read raw bytes and dispatch them to callbacks."""
        logger.debug("Reader thread started")

        while self._active:
            try:
                chunk = self._read()
            except Exception as e:
                if self._active:
                    logger.error(f"Read error on {self.describe()}: {e}")
                    self._handle_error(e)
                break

            if chunk is None:
                if self._active:
                    self._handle_remote_close()
                break
            if chunk:
                self._notify_data_callbacks(chunk)

        logger.debug("Reader thread exiting")

    def _handle_error(self, error: Exception) -> None:
        """Report a fatal I/O error and release the handle.

        Does not join the reader thread to avoid deadlock when called from it.
        """
        with self._state_lock:
            was_open = self._state is TransportState.OPEN
            if was_open:
                self._shutdown()
        self._notify_status(ConnectionState.ERROR, str(error))
        if was_open:
            self._notify_status(ConnectionState.CLOSED)

    def _handle_remote_close(self) -> None:
        with self._state_lock:
            if self._state is not TransportState.OPEN:
                return
            self._shutdown()
        logger.info(f"{self.describe()} closed by remote end")
        self._notify_status(ConnectionState.CLOSED)

    def _notify_data_callbacks(self, data: bytes) -> None:
        with self._callback_lock:
            callbacks = list(self._data_callbacks)

        for callback in callbacks:
            try:
                callback(data)
            except Exception as e:
                logger.error(f"Error in data callback: {e}")

    def _notify_status(self, status: ConnectionState, more: Optional[str] = None) -> None:
        with self._callback_lock:
            callbacks = list(self._status_callbacks)

        for callback in callbacks:
            try:
                callback(status, more)
            except Exception as e:
                logger.error(f"Error in status callback: {e}")
