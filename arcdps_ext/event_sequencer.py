"""Reorders combat events by id and delivers them on a worker thread."""

from __future__ import annotations

import copy
import heapq
import itertools
import threading
from dataclasses import dataclass
from typing import Any, Callable

Callback = Callable[[Any, Any, Any, "str | None", int, int], object]

_FIRST_ID = 2  # event ids always start at 2
_IDLE_WAIT = 0.1


@dataclass
class _Pending:
    event: Any
    src: Any
    dst: Any
    skillname: str | None
    id: int
    revision: int


def _snapshot(value: Any) -> Any:
    return None if value is None else copy.copy(value)


class EventSequencer:
    """Delivers events to ``callback`` strictly in ascending id order.

    Events with id 0 are delivered at once when nothing is queued; otherwise
    they are queued behind the last seen id and reported with that id.
    """

    def __init__(self, callback: Callback) -> None:
        self._callback = callback
        self._heap: list[tuple[int, int, _Pending]] = []
        self._counter = itertools.count()
        self._lock = threading.RLock()
        self._next_id = _FIRST_ID
        self._last_id = _FIRST_ID
        self._running = False
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._loop, name="EventSequencer", daemon=True)
        self._thread.start()

    def __enter__(self) -> EventSequencer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def process_event(self, event, src, dst, skillname, id, revision) -> None:
        """Queue an event, or deliver it directly if it has id 0 and nothing waits."""
        with self._lock:
            if id == 0:
                if not self._heap:
                    self._callback(event, src, dst, skillname, id, revision)
                    return
                queued_id = self._last_id
            else:
                self._last_id = queued_id = id
            item = _Pending(_snapshot(event), _snapshot(src), _snapshot(dst), skillname, queued_id, revision)
            heapq.heappush(self._heap, (queued_id, next(self._counter), item))

    def events_pending(self) -> bool:
        """True while events are queued or one is being delivered."""
        with self._lock:
            return bool(self._heap) or self._running

    def reset(self) -> None:
        """Drop all queued events and restart the id counters."""
        with self._lock:
            self._heap.clear()
            self._next_id = _FIRST_ID
            self._last_id = _FIRST_ID

    def shutdown(self) -> None:
        """Stop the worker thread and wait for it to end."""
        self._stop.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join()

    def _loop(self) -> None:
        while not self._stop.is_set():
            while not self._stop.is_set() and self._deliver_next_id():
                pass
            if self._stop.is_set():
                return
            self._stop.wait(_IDLE_WAIT)

    def _deliver_next_id(self) -> bool:
        delivered = False
        while True:
            with self._lock:
                if not self._heap or self._heap[0][0] != self._next_id:
                    break
                self._running = True
                _, _, item = heapq.heappop(self._heap)
            try:
                self._callback(item.event, item.src, item.dst, item.skillname, item.id, item.revision)
            finally:
                self._running = False
            delivered = True
        if delivered:
            with self._lock:
                self._next_id += 1
        return delivered