"""Background loop merging timer ticks and terminal input into one queue."""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Any, Callable, Optional

from tickterm.core.input import KeyEvent, ResizeEvent
from tickterm.core.terminal import TerminalDriver
from tickterm.events import EventQueue, Fault, Input, Resize, Tick

__all__ = [
    "TickClock",
    "EventMultiplexer",
    "start",
]

logger = logging.getLogger(__name__)

THREAD_NAME = "tickterm-events"


class TickClock:
    """Tracks when the last tick fired against a fixed interval."""

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.interval = interval
        self._clock = clock
        self.last_tick = clock()

    def elapsed(self) -> float:
        return self._clock() - self.last_tick

    def timeout(self) -> float:
        """Time left until the next tick is due, never negative."""
        return max(0.0, self.interval - self.elapsed())

    def due(self) -> bool:
        return self.elapsed() >= self.interval

    def reset(self) -> None:
        self.last_tick = self._clock()


class EventMultiplexer:
    """
    Produces `Tick` and `Input` events on a background thread.

    Each cycle polls the driver for input no longer than the time left until
    the next tick, so ticks keep their cadence while keys are delivered as
    soon as they arrive. Non-key driver events are dropped unless resize
    forwarding is on, in which case resizes arrive as `Resize`.

    A driver failure is delivered as a final `Fault` event. The queue is
    closed whenever the loop exits.
    """

    def __init__(
        self,
        driver: TerminalDriver,
        tick_interval: float,
        *,
        forward_resize: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not math.isfinite(tick_interval) or tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {tick_interval}")

        self.driver = driver
        self.tick_interval = tick_interval
        self.forward_resize = forward_resize
        self._clock = clock
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._events: Optional[EventQueue] = None

    @property
    def events(self) -> Optional[EventQueue]:
        return self._events

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> EventQueue:
        """Launch the background loop and return the queue it feeds.

        Raises:
            RuntimeError: The multiplexer was already started.
        """
        if self._thread is not None:
            raise RuntimeError("Event multiplexer already started")

        self._events = EventQueue()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._events,),
            daemon=True,
            name=THREAD_NAME,
        )
        self._thread.start()
        logger.debug("Event loop started (tick every %.3fs)", self.tick_interval)
        return self._events

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the loop to exit and wait for it (at most one poll cycle)."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Event loop did not stop within %ss", timeout)

    def _run(self, events: EventQueue) -> None:
        tick = TickClock(self.tick_interval, self._clock)
        try:
            while not self._stop_event.is_set() and not events.closed:
                if self.driver.poll(tick.timeout()):
                    self._dispatch(events, self.driver.read_event())

                if tick.due():
                    if events.put(Tick()):
                        tick.reset()
        except Exception as exc:
            logger.error("Event loop stopped by driver fault: %s", exc)
            events.put(Fault(exc))
        finally:
            events.close()
            logger.debug("Event loop finished")

    def _dispatch(self, events: EventQueue, event: Any) -> None:
        if isinstance(event, KeyEvent):
            events.put(Input(event))
        elif isinstance(event, ResizeEvent) and self.forward_resize:
            events.put(Resize(event))
        else:
            logger.debug("Dropped non-key event %r", event)


def start(
    driver: TerminalDriver,
    tick_interval: float,
    *,
    forward_resize: bool = False,
    clock: Callable[[], float] = time.monotonic,
) -> tuple[EventQueue, EventMultiplexer]:
    """Start an `EventMultiplexer` and return its queue along with it."""
    multiplexer = EventMultiplexer(
        driver, tick_interval, forward_resize=forward_resize, clock=clock
    )
    return multiplexer.start(), multiplexer
