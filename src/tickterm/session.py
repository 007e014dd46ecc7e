"""Terminal session lifecycle: take over the terminal and always give it back.

`begin` switches the terminal to raw input on the alternate screen with mouse
reporting; `end` undoes all of it. The `session` context manager pairs the
two so `end` runs exactly once on every exit path:

    with session(Terminal()) as sess:
        draw(sess.driver)
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

from tickterm.core.terminal import TerminalDriver
from tickterm.errors import SessionError, TerminalError

__all__ = [
    "Session",
    "begin",
    "end",
    "session",
]

logger = logging.getLogger(__name__)

# id() of every driver with an active session in this process
_active_drivers: set[int] = set()
_active_lock = threading.Lock()


@dataclass
class Session:
    """One active takeover of a terminal.

    Attributes:
        driver: The terminal, also the display surface handed to the renderer.
        prior_mode: Opaque input mode captured before raw mode was enabled.
        mouse_capture: Whether mouse reporting was switched on.
        active: True from a successful `begin` until `end`.
    """
    driver: TerminalDriver
    prior_mode: Any = field(default=None, repr=False)
    mouse_capture: bool = True
    active: bool = False


def _claim(driver: TerminalDriver) -> None:
    with _active_lock:
        if id(driver) in _active_drivers:
            raise SessionError("A session is already active on this terminal")
        _active_drivers.add(id(driver))


def _release(driver: TerminalDriver) -> None:
    with _active_lock:
        _active_drivers.discard(id(driver))


def _rollback(undo: list[tuple[str, Callable[[], None]]]) -> None:
    """Reverse applied setup steps, newest first, continuing past failures."""
    for name, step in reversed(undo):
        try:
            step()
        except TerminalError as exc:
            logger.warning("Rollback step %s failed: %s", name, exc)


def begin(driver: TerminalDriver, *, mouse_capture: bool = True) -> Session:
    """Take over the terminal.

    Enables raw mode, enters the alternate screen, enables mouse capture and
    clears the screen. If any step fails, the steps already applied are
    reversed before the error propagates, so a failed `begin` needs no `end`.

    Args:
        driver: The terminal to take over.
        mouse_capture: Whether to switch on mouse reporting.

    Returns:
        The active session.

    Raises:
        SessionError: A session is already active on this terminal.
        TerminalError: A driver call failed.
    """
    _claim(driver)

    undo: list[tuple[str, Callable[[], None]]] = []
    try:
        prior = driver.enable_raw_mode()
        undo.append(("disable_raw_mode", lambda: driver.disable_raw_mode(prior)))

        driver.enter_alt_screen()
        undo.append(("leave_alt_screen", driver.leave_alt_screen))

        if mouse_capture:
            driver.enable_mouse_capture()
            undo.append(("disable_mouse_capture", driver.disable_mouse_capture))

        driver.clear_screen()
    except BaseException as exc:
        logger.error("Terminal setup failed after %d step(s): %s", len(undo), exc)
        _rollback(undo)
        _release(driver)
        raise

    logger.info("Terminal session started (mouse capture %s)", "on" if mouse_capture else "off")
    return Session(driver=driver, prior_mode=prior, mouse_capture=mouse_capture, active=True)


def end(sess: Session) -> None:
    """Restore the terminal taken over by `begin`.

    Disables raw mode, leaves the alternate screen, disables mouse capture
    and shows the cursor. Every step is attempted; the first failure is
    raised once all of them ran.

    Raises:
        SessionError: The session was already ended.
        TerminalError: A restore step failed.
    """
    if not sess.active:
        raise SessionError("Session already ended")

    sess.active = False
    _release(sess.driver)

    driver = sess.driver
    steps: list[tuple[str, Callable[[], None]]] = [
        ("disable_raw_mode", lambda: driver.disable_raw_mode(sess.prior_mode)),
        ("leave_alt_screen", driver.leave_alt_screen),
    ]
    if sess.mouse_capture:
        steps.append(("disable_mouse_capture", driver.disable_mouse_capture))
    steps.append(("show_cursor", driver.show_cursor))

    first_error: Optional[TerminalError] = None
    for name, step in steps:
        try:
            step()
        except TerminalError as exc:
            logger.error("Terminal restore step %s failed: %s", name, exc)
            if first_error is None:
                first_error = exc

    if first_error is not None:
        raise first_error

    logger.info("Terminal session ended")


@contextmanager
def session(driver: TerminalDriver, *, mouse_capture: bool = True) -> Iterator[Session]:
    """Run a block inside a terminal session, restoring the terminal on exit."""
    sess = begin(driver, mouse_capture=mouse_capture)
    try:
        yield sess
    finally:
        if sess.active:
            end(sess)
