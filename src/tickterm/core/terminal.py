"""Low-level terminal operations behind the terminal driver protocol."""

from __future__ import annotations

import codecs
import logging
import os
import select
import sys
import time
from dataclasses import dataclass
from typing import Any, Optional, Protocol, TextIO, runtime_checkable

from tickterm.core.input import DriverEvent, InputDecoder, ResizeEvent
from tickterm.errors import TerminalError

logger = logging.getLogger(__name__)

START_ALT_SCREEN = '\x1b[?1049h'
END_ALT_SCREEN = '\x1b[?1049l'
SHOW_CURSOR = '\x1b[?25h'
HIDE_CURSOR = '\x1b[?25l'
CLEAR_SCREEN = '\x1b[2J\x1b[H'
RESET_ATTRIBUTES = '\x1b[0m'
# Button, drag and any-motion tracking, reported in SGR (1006) encoding
ENABLE_MOUSE = '\x1b[?1000h\x1b[?1002h\x1b[?1003h\x1b[?1006h'
DISABLE_MOUSE = '\x1b[?1006l\x1b[?1003l\x1b[?1002l\x1b[?1000l'


@dataclass(frozen=True)
class TerminalSize:
    """Terminal dimensions."""
    rows: int
    cols: int


@runtime_checkable
class TerminalDriver(Protocol):
    """Capabilities a session and event multiplexer need from a terminal.

    Every method may raise `TerminalError`.
    """

    def enable_raw_mode(self) -> Any:
        """Switch input to raw mode. Returns the prior mode for restoring."""
        ...

    def disable_raw_mode(self, prior: Any) -> None:
        """Restore the input mode returned by `enable_raw_mode`."""
        ...

    def enter_alt_screen(self) -> None: ...

    def leave_alt_screen(self) -> None: ...

    def enable_mouse_capture(self) -> None: ...

    def disable_mouse_capture(self) -> None: ...

    def clear_screen(self) -> None: ...

    def show_cursor(self) -> None: ...

    def poll(self, timeout: float) -> bool:
        """Wait at most `timeout` seconds for an input event to be ready."""
        ...

    def read_event(self) -> DriverEvent:
        """Read the next input event, blocking until one is available."""
        ...


class Terminal:
    """POSIX terminal driver writing ANSI sequences to a stream.

    Input is read with `os.read` from the input file descriptor to bypass
    Python's I/O buffering, and decoded with `InputDecoder`.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        input_fd: Optional[int] = None,
        escape_timeout: float = 0.1,
    ) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.escape_timeout = escape_timeout
        self._input_fd = input_fd
        self._decoder = InputDecoder()
        # Keeps a multi-byte character split across reads intact
        self._utf8 = codecs.getincrementaldecoder('utf-8')(errors='replace')
        self._last_size: Optional[TerminalSize] = None
        self._pending_resize: Optional[ResizeEvent] = None
        self._ready: Optional[DriverEvent] = None

    @property
    def input_fd(self) -> int:
        if self._input_fd is None:
            self._input_fd = sys.stdin.fileno()
        return self._input_fd

    # Output

    def size(self) -> TerminalSize:
        """Get current terminal dimensions."""
        try:
            size = os.get_terminal_size(self.stream.fileno())
            return TerminalSize(size.lines, size.columns)
        except (OSError, ValueError, AttributeError):
            return TerminalSize(24, 80)

    def write(self, text: str) -> None:
        """Write text to terminal."""
        try:
            self.stream.write(text)
            self.stream.flush()
        except (OSError, ValueError) as exc:
            raise TerminalError(f"Cannot write to terminal: {exc}") from exc

    def move_to(self, row: int, col: int) -> None:
        """Move cursor to position (1-indexed)."""
        self.write(f'\x1b[{row};{col}H')

    def reset(self) -> None:
        """Reset all terminal attributes."""
        self.write(RESET_ATTRIBUTES)

    def hide_cursor(self) -> None:
        self.write(HIDE_CURSOR)

    def show_cursor(self) -> None:
        self.write(SHOW_CURSOR)

    def clear_screen(self) -> None:
        """Clear screen and move cursor to home."""
        self.write(CLEAR_SCREEN)

    def enter_alt_screen(self) -> None:
        self.write(START_ALT_SCREEN)

    def leave_alt_screen(self) -> None:
        self.write(END_ALT_SCREEN)

    def enable_mouse_capture(self) -> None:
        self.write(ENABLE_MOUSE)

    def disable_mouse_capture(self) -> None:
        self.write(DISABLE_MOUSE)

    # Input mode

    def enable_raw_mode(self) -> list[Any]:
        """Put the input descriptor in raw mode, returning its prior attributes."""
        import termios
        import tty

        try:
            prior = termios.tcgetattr(self.input_fd)
            tty.setraw(self.input_fd)
        except (termios.error, OSError, ValueError) as exc:
            raise TerminalError(f"Cannot enable raw mode: {exc}") from exc
        return prior

    def disable_raw_mode(self, prior: list[Any]) -> None:
        import termios

        try:
            termios.tcsetattr(self.input_fd, termios.TCSADRAIN, prior)
        except (termios.error, OSError, ValueError) as exc:
            raise TerminalError(f"Cannot restore terminal mode: {exc}") from exc

    # Input

    def poll(self, timeout: float) -> bool:
        """Check whether an input event is ready within `timeout` seconds.

        Input that decodes to nothing (stray control bytes) does not count as
        ready, so a following `read_event` never blocks on it.
        """
        self._check_resize()
        if self._pending_resize is not None or self._ready is not None:
            return True

        deadline = time.monotonic() + max(0.0, timeout)
        while True:
            event = self._decoder.next_event()
            if event is not None:
                self._ready = event
                return True
            if self._decoder.incomplete:
                # read_event waits for the rest of the sequence
                return True
            if not self._has_input(max(0.0, deadline - time.monotonic())):
                return False
            self._read_available()

    def read_event(self) -> DriverEvent:
        """Read a single event, blocking until input is available."""
        if self._pending_resize is not None:
            event, self._pending_resize = self._pending_resize, None
            return event
        if self._ready is not None:
            event, self._ready = self._ready, None
            return event

        while True:
            event = self._decoder.next_event()
            if event is not None:
                return event

            if self._decoder.incomplete:
                self._wait_for_escape_sequence()
                event = self._decoder.next_event(flush=True)
                if event is not None:
                    return event
                continue

            self._has_input(None)
            self._read_available()

    def _check_resize(self) -> None:
        """Queue a resize event when the terminal size changed since last poll."""
        size = self.size()
        if self._last_size is not None and size != self._last_size:
            logger.debug("Terminal resized to %sx%s", size.cols, size.rows)
            self._pending_resize = ResizeEvent(cols=size.cols, rows=size.rows)
        self._last_size = size

    def _read_available(self) -> None:
        """Read all currently available input into the decoder."""
        try:
            data = os.read(self.input_fd, 1024)
        except BlockingIOError:
            return
        except OSError as exc:
            raise TerminalError(f"Cannot read terminal input: {exc}") from exc
        if not data:
            raise TerminalError("Terminal input closed")
        self._decoder.feed(self._utf8.decode(data))

    def _wait_for_escape_sequence(self) -> None:
        """Give a split escape sequence `escape_timeout` seconds to complete."""
        deadline = time.monotonic() + self.escape_timeout

        while self._decoder.incomplete:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            if self._has_input(min(remaining, 0.025)):
                self._read_available()

    def _has_input(self, timeout: Optional[float]) -> bool:
        """Check if input is available within timeout (None waits forever)."""
        try:
            ready, _, _ = select.select([self.input_fd], [], [], timeout)
        except (ValueError, OSError) as exc:
            raise TerminalError(f"Cannot poll terminal input: {exc}") from exc
        return bool(ready)
