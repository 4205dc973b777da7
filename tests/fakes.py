"""Test doubles shared by the rawdev tests."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from rawdev.models import ConnectionState
from rawdev.transport.base import Transport


@dataclass
class ScheduledCall:
    delay: float
    fn: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler that only runs callbacks when the test says so."""

    def __init__(self):
        self.calls: List[ScheduledCall] = []

    def __call__(self, delay: float, fn: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(delay, fn)
        self.calls.append(call)
        return call

    @property
    def pending(self) -> List[ScheduledCall]:
        return [c for c in self.calls if not c.cancelled and not c.fired]

    def run_next(self) -> ScheduledCall:
        call = self.pending[0]
        call.fired = True
        call.fn()
        return call

    def run_all(self, limit: int = 100) -> int:
        count = 0
        while self.pending and count < limit:
            self.run_next()
            count += 1
        return count


class FakeTransport(Transport):
    """In-memory transport without a reader thread."""

    OPEN_STATUS = ConnectionState.CONNECTED

    def __init__(self, fail_open: Optional[Exception] = None,
                 fail_write: Optional[Exception] = None):
        super().__init__()
        self.fail_open = fail_open
        self.fail_write = fail_write
        self.writes: List[bytes] = []
        self.open_calls = 0
        self.close_calls = 0

    def _open(self) -> None:
        self.open_calls += 1
        if self.fail_open is not None:
            raise self.fail_open

    def _close_handle(self) -> None:
        self.close_calls += 1

    def _read(self) -> Optional[bytes]:
        return b""

    def _write(self, data: bytes) -> None:
        if self.fail_write is not None:
            raise self.fail_write
        self.writes.append(data)

    def _start_reader_thread(self) -> None:
        pass

    def receive(self, data: bytes) -> None:
        """Simulate bytes arriving from the device."""
        self._notify_data_callbacks(data)
