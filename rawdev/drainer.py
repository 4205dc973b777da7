"""Sequential, paced command queue.

The drainer sends one command at a time. After each command it waits the
command's duration before looking at the next one, so a device is never
sent a new command before the previous pacing window has elapsed.

    IDLE --process()--> DRAINING --queue empty--> IDLE (on_empty)
                          ^   |
                          +---+ next command after `duration` ms

Every step, the first one included, runs in a timer continuation, so
process() returns without waiting for the transport and long queues never
grow the call stack. Encoding and sending happen outside the queue lock.
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from enum import Enum
from typing import Callable, Deque, List, Optional

from .models import CommandObject
from .scheduling import Scheduler, TimerHandle, start_timer

logger = logging.getLogger(__name__)


class DrainState(str, Enum):
    IDLE = "idle"
    DRAINING = "draining"


class CommandQueue:
    """FIFO of command strings drained one at a time.

    Args:
        encode: Turns a command string into a CommandObject (or None to
            skip it without pacing)
        send: Transmits a CommandObject with a non-empty buffer
        on_empty: Called once each time the queue drains to empty
        scheduler: Delayed-call primitive (seconds, fn)
        name: Used in log messages
    """

    def __init__(self,
                 encode: Callable[[str], Optional[CommandObject]],
                 send: Callable[[CommandObject], None],
                 on_empty: Optional[Callable[[], None]] = None,
                 scheduler: Scheduler = start_timer,
                 name: str = ""):
        self._encode = encode
        self._send = send
        self._on_empty = on_empty
        self._scheduler = scheduler
        self._name = name

        self._queue: Deque[str] = deque()
        self._state = DrainState.IDLE
        self._timer: Optional[TimerHandle] = None
        # bumped by cancel(); steps scheduled before it are ignored
        self._generation = 0
        # guards the queue, the state and the timer; never held across encode/send
        self._lock = threading.RLock()

    @property
    def state(self) -> DrainState:
        return self._state

    @property
    def pending(self) -> List[str]:
        """Snapshot of the queue, front first (includes the command in flight)."""
        with self._lock:
            return list(self._queue)

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)

    def process(self, *commands: str) -> None:
        """Append commands in order; start draining if the queue was idle.

        The first command is handled on the next timer tick, not in the
        caller's thread.
        """
        if not commands:
            return
        with self._lock:
            self._queue.extend(commands)
            if self._state is DrainState.DRAINING:
                return
            self._state = DrainState.DRAINING
            generation = self._generation
            self._timer = self._scheduler(0, lambda: self._step(generation))

    def cancel(self) -> None:
        """Drop every queued command and the pending step.

        ``on_empty`` is not called. A later ``process()`` starts a new drain.
        """
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            dropped = len(self._queue)
            self._queue.clear()
            self._state = DrainState.IDLE
        if dropped:
            logger.info(f"[{self._name}] Dropped {dropped} queued command(s)")

    def _step(self, generation: int) -> None:
        """Handle the front command and schedule the next step."""
        with self._lock:
            if generation != self._generation:
                return
            if not self._queue:
                self._state = DrainState.IDLE
                self._timer = None
                command = None
            else:
                command = self._queue[0]

        if command is None:
            logger.debug(f"[{self._name}] Queue drained")
            if self._on_empty:
                try:
                    self._on_empty()
                except Exception as e:
                    logger.error(f"[{self._name}] Error in queue-empty handler: {e}")
            return

        duration = 0
        try:
            cmdo = self._encode(command)
            if cmdo is not None:
                duration = cmdo.duration or 0
                if cmdo.encoded:
                    self._send(cmdo)
        except Exception as e:
            logger.error(f"[{self._name}] Error processing {command!r}: {e}")

        with self._lock:
            if generation != self._generation:
                return
            self._timer = self._scheduler(duration / 1000.0,
                                          lambda: self._advance(generation))

    def _advance(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            if self._queue:
                self._queue.popleft()
        self._step(generation)
