"""Abstract base class for framers.

A framer observes the raw byte stream of a transport and cuts it into
discrete messages. It keeps an internal buffer for incomplete messages and
publishes every complete one to its subscribers.
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, List

logger = logging.getLogger(__name__)

DEFAULT_MAX_BUFFER_SIZE = 64 * 1024  # 64KB


class Framer(ABC):
    """Turns a raw byte stream into framed chunks.

    Subclasses implement ``_extract`` which consumes complete messages from
    ``self._buffer`` and returns them. Feeding and extraction run under one
    lock so chunks are published in stream order.
    """

    def __init__(self, max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE):
        self._max_buffer_size = max_buffer_size
        self._buffer = bytearray()
        self._buffer_lock = threading.RLock()
        self._callbacks: List[Callable[[bytes], None]] = []
        self._callback_lock = threading.Lock()

    def feed(self, data: bytes) -> None:
        """Receive a raw chunk from the transport."""
        if not data:
            return
        with self._buffer_lock:
            self._buffer.extend(data)
            for message in self._extract():
                self._notify_callbacks(message)
            self._trim_buffer()

    @abstractmethod
    def _extract(self) -> List[bytes]:
        """Remove and return every complete message in the buffer."""
        pass

    def reset(self) -> None:
        """Drop any partial message."""
        with self._buffer_lock:
            self._buffer.clear()

    def close(self) -> None:
        """Release resources (timers). Subclasses override when needed."""
        self.reset()

    @property
    def buffer_size(self) -> int:
        with self._buffer_lock:
            return len(self._buffer)

    def subscribe(self, callback: Callable[[bytes], None]) -> Callable[[], None]:
        """Subscribe to framed chunks.

        Returns:
            Unsubscribe function
        """
        with self._callback_lock:
            self._callbacks.append(callback)

        def unsubscribe():
            with self._callback_lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def _trim_buffer(self) -> None:
        """Keep only the most recent data when no frame boundary shows up."""
        if len(self._buffer) <= self._max_buffer_size:
            return
        del self._buffer[:-self._max_buffer_size]
        logger.warning(f"Framer buffer trimmed to {self._max_buffer_size} bytes")

    def _notify_callbacks(self, message: bytes) -> None:
        with self._callback_lock:
            callbacks = list(self._callbacks)

        for callback in callbacks:
            try:
                callback(message)
            except Exception as e:
                logger.error(f"Error in framer callback: {e}")
