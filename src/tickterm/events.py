"""Events delivered to the application loop, and the queue carrying them."""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Union

from tickterm.errors import EventQueueClosed

__all__ = [
    "Tick",
    "Input",
    "Resize",
    "Fault",
    "Event",
    "EventQueue",
]


@dataclass(frozen=True)
class Tick:
    """The periodic timer fired."""


@dataclass(frozen=True)
class Input:
    """A key read from the terminal. The payload is passed through untouched."""
    payload: Any


@dataclass(frozen=True)
class Resize:
    """The terminal changed size (only sent when resize forwarding is on)."""
    payload: Any


@dataclass(frozen=True)
class Fault:
    """The event source failed. Nothing follows a fault on its queue."""
    error: BaseException


Event = Union[Tick, Input, Resize, Fault]

_CLOSED = object()


class EventQueue:
    """
    Unbounded FIFO of events from one producer to one consumer.

    The producer closes the queue when it stops; the consumer may close it to
    tell the producer it is no longer listening. Events sent before the close
    are still delivered, after which receiving raises `EventQueueClosed`.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[Any] = queue.Queue()
        self._closed = threading.Event()
        # Orders every put against close, so nothing lands after the marker
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def put(self, event: Event) -> bool:
        """Send an event. Returns False (dropping it) if the queue is closed."""
        with self._lock:
            if self._closed.is_set():
                return False
            self._queue.put(event)
        return True

    def close(self) -> None:
        """Stop accepting events. Safe to call more than once."""
        with self._lock:
            if not self._closed.is_set():
                self._closed.set()
                self._queue.put(_CLOSED)

    def get(self, timeout: Optional[float] = None) -> Optional[Event]:
        """
        Receive the next event, blocking until one arrives.

        Returns None if `timeout` seconds pass without an event.

        Raises:
            EventQueueClosed: The queue is closed and every event was received.
        """
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        return self._unwrap(item)

    def get_nowait(self) -> Optional[Event]:
        """Receive an event if one is waiting, else None."""
        try:
            item = self._queue.get_nowait()
        except queue.Empty:
            return None
        return self._unwrap(item)

    def _unwrap(self, item: Any) -> Event:
        if item is _CLOSED:
            # Leave the marker for any later receive
            self._queue.put(_CLOSED)
            raise EventQueueClosed("Event queue is closed")
        return item

    def __iter__(self) -> Iterator[Event]:
        """Yield events until the queue is closed and drained."""
        while True:
            try:
                event = self.get()
            except EventQueueClosed:
                return
            if event is not None:
                yield event
