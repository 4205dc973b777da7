"""Publish/subscribe channel for session notifications."""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List

from .models import EventType

logger = logging.getLogger(__name__)


class EventChannel:
    """Fan-out of session events to any number of subscribers.

    Every subscriber of an event type receives every event of that type, in
    subscription order. A subscriber that raises is logged and skipped; it
    does not prevent delivery to the others.
    """

    def __init__(self):
        self._callbacks: Dict[EventType, List[Callable[[Any], None]]] = {
            event: [] for event in EventType
        }
        self._callback_lock = threading.Lock()

    def subscribe(self,
                  event: EventType,
                  callback: Callable[[Any], None]
                  ) -> Callable[[], None]:
        """Subscribe to one event type.

        Args:
            event: EventType or its string value (e.g. 'responseFromDevice')
            callback: Function called with the event payload

        Returns:
            Unsubscribe function
        """
        event = EventType(event)
        with self._callback_lock:
            self._callbacks[event].append(callback)

        def unsubscribe():
            with self._callback_lock:
                if callback in self._callbacks[event]:
                    self._callbacks[event].remove(callback)

        return unsubscribe

    def emit(self, event: EventType, payload: Any) -> None:
        """Deliver ``payload`` to all subscribers of ``event``."""
        with self._callback_lock:
            callbacks = list(self._callbacks[EventType(event)])

        for callback in callbacks:
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Error in {EventType(event).value} callback: {e}")

    def subscriber_count(self, event: EventType) -> int:
        with self._callback_lock:
            return len(self._callbacks[EventType(event)])
