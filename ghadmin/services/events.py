"""Event channel from the sync engine to the host."""

from __future__ import annotations

import itertools
import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

STATUS_UPDATED = "status-updated"
REPOS_UPDATED = "repos-updated"
TEAMS_UPDATED = "teams-updated"
FETCH_ERROR = "fetch-error"

Subscriber = Callable[[str, dict[str, Any]], None]


@dataclass
class Event:
    seq: int
    name: str
    payload: dict[str, Any]
    emitted_at: float


class EventBus:
    """Synchronous fan-out to subscribers plus a bounded backlog for polling hosts."""

    def __init__(self, backlog_size: int = 500):
        self._subscribers: list[Subscriber] = []
        self._backlog: deque[Event] = deque(maxlen=backlog_size)
        self._seq = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback. Returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def emit(self, name: str, payload: BaseModel) -> Event:
        data = payload.model_dump(mode="json")
        with self._lock:
            event = Event(seq=next(self._seq), name=name, payload=data, emitted_at=time.time())
            self._backlog.append(event)
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(name, data)
            except Exception:
                logger.exception("Event subscriber failed for %s", name)
        return event

    def since(self, after: int = 0) -> list[Event]:
        """Backlog events with a sequence number greater than ``after``."""
        with self._lock:
            return [e for e in self._backlog if e.seq > after]
