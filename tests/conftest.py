"""Shared fixtures: a fake terminal driver that records terminal state."""

import queue
import threading
from typing import Any, Optional

import pytest

from tickterm.errors import TerminalError
from tickterm.logging import reset_logging

COOKED_MODE = "cooked"


class FakeDriver:
    """
    In-memory terminal driver.

    Tracks the flags a session changes, records every call, and serves input
    events pushed with `send` / `send_after` through `poll` and `read_event`.
    Any method named in `fail_on` raises `TerminalError`.
    """

    def __init__(self, fail_on: Optional[set[str]] = None) -> None:
        self.raw = False
        self.alt_screen = False
        self.mouse = False
        self.cursor_visible = True
        self.cleared = 0
        self.restored_mode: Any = None
        self.fail_on: set[str] = set(fail_on or ())
        self.calls: list[str] = []
        self.poll_timeouts: list[float] = []
        self._inbox: queue.Queue[Any] = queue.Queue()
        self._ready: list[Any] = []
        self._lock = threading.Lock()
        self._timers: list[threading.Timer] = []

    def _call(self, name: str) -> None:
        with self._lock:
            self.calls.append(name)
        if name in self.fail_on:
            raise TerminalError(f"{name} failed")

    @property
    def flags(self) -> dict[str, bool]:
        return {
            "raw": self.raw,
            "alt_screen": self.alt_screen,
            "mouse": self.mouse,
            "cursor_visible": self.cursor_visible,
        }

    def enable_raw_mode(self) -> str:
        self._call("enable_raw_mode")
        self.raw = True
        return COOKED_MODE

    def disable_raw_mode(self, prior: Any) -> None:
        self._call("disable_raw_mode")
        self.raw = False
        self.restored_mode = prior

    def enter_alt_screen(self) -> None:
        self._call("enter_alt_screen")
        self.alt_screen = True

    def leave_alt_screen(self) -> None:
        self._call("leave_alt_screen")
        self.alt_screen = False

    def enable_mouse_capture(self) -> None:
        self._call("enable_mouse_capture")
        self.mouse = True

    def disable_mouse_capture(self) -> None:
        self._call("disable_mouse_capture")
        self.mouse = False

    def clear_screen(self) -> None:
        self._call("clear_screen")
        self.cleared += 1

    def hide_cursor(self) -> None:
        self.cursor_visible = False

    def show_cursor(self) -> None:
        self._call("show_cursor")
        self.cursor_visible = True

    def poll(self, timeout: float) -> bool:
        self._call("poll")
        self.poll_timeouts.append(timeout)
        if self._ready:
            return True
        try:
            self._ready.append(self._inbox.get(timeout=timeout))
        except queue.Empty:
            return False
        return True

    def read_event(self) -> Any:
        self._call("read_event")
        if not self._ready:
            self._ready.append(self._inbox.get())
        return self._ready.pop(0)

    def send(self, event: Any) -> None:
        """Make an input event available to the next poll."""
        self._inbox.put(event)

    def send_after(self, delay: float, event: Any) -> None:
        timer = threading.Timer(delay, self.send, args=(event,))
        timer.daemon = True
        self._timers.append(timer)
        timer.start()

    def cancel_timers(self) -> None:
        for timer in self._timers:
            timer.cancel()


@pytest.fixture
def driver():
    fake = FakeDriver()
    yield fake
    fake.cancel_timers()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TICKTERM_TICK_INTERVAL", "TICKTERM_LOG_LEVEL", "TICKTERM_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
