"""Delayed-call primitive used by the drainer and the timeout framer.

A scheduler is any callable ``scheduler(delay_seconds, fn)`` returning a
handle with ``cancel()``. The default runs ``fn`` once on a daemon
``threading.Timer``; tests substitute a manual scheduler to step time
deterministically.
"""
from __future__ import annotations

import threading
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


def start_timer(delay: float, fn: Callable[[], None]) -> threading.Timer:
    """Run ``fn`` after ``delay`` seconds on a daemon timer thread."""
    timer = threading.Timer(max(0.0, delay), fn)
    timer.daemon = True
    timer.name = "RawDeviceTimer"
    timer.start()
    return timer
