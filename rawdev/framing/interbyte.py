"""Inter-byte timeout framing.

A message ends when the line has been silent for ``interval`` milliseconds,
or when the buffer reaches ``max_buffer_size`` bytes.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from ..scheduling import Scheduler, TimerHandle, start_timer
from .base import DEFAULT_MAX_BUFFER_SIZE, Framer

logger = logging.getLogger(__name__)


class InterByteTimeoutFramer(Framer):
    """Emits the buffered bytes after a period of silence.

    Args:
        interval: Silence in milliseconds that ends a message
        max_buffer_size: Emit immediately once this many bytes are buffered
        scheduler: Timer primitive, replaceable in tests
    """

    def __init__(self,
                 interval: int,
                 max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE,
                 scheduler: Scheduler = start_timer):
        super().__init__(max_buffer_size=max_buffer_size)
        if interval <= 0:
            raise ValueError("Interval must be a positive number of milliseconds")
        self._interval = interval
        self._scheduler = scheduler
        self._timer: Optional[TimerHandle] = None
        self._generation = 0

    @property
    def interval(self) -> int:
        return self._interval

    def feed(self, data: bytes) -> None:
        if not data:
            return
        with self._buffer_lock:
            self._cancel_timer()
            self._buffer.extend(data)
            if len(self._buffer) >= self._max_buffer_size:
                self._flush()
            else:
                generation = self._generation
                self._timer = self._scheduler(
                    self._interval / 1000.0, lambda: self._on_timeout(generation))

    def _extract(self) -> List[bytes]:
        message = bytes(self._buffer)
        self._buffer.clear()
        return [message] if message else []

    def _on_timeout(self, generation: int) -> None:
        with self._buffer_lock:
            # a feed may have restarted the timer while this one waited for the lock
            if generation != self._generation:
                return
            self._timer = None
            self._flush()

    def _flush(self) -> None:
        for message in self._extract():
            self._notify_callbacks(message)

    def _cancel_timer(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def reset(self) -> None:
        with self._buffer_lock:
            self._cancel_timer()
            self._buffer.clear()
