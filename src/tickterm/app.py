"""Putting it together: a terminal session with a running event loop."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from tickterm.config import Config, load_config
from tickterm.core.terminal import Terminal, TerminalDriver
from tickterm.errors import TerminalError
from tickterm.events import Event, EventQueue, Fault
from tickterm.logging import setup_logging
from tickterm.multiplexer import EventMultiplexer, start
from tickterm.session import Session, session

# Extra time allowed for a blocking read to finish when stopping the loop
STOP_GRACE = 1.0


@dataclass
class AppContext:
    """What an application loop gets: the session, its events, the settings."""
    session: Session
    events: EventQueue
    multiplexer: EventMultiplexer
    config: Config

    @property
    def driver(self) -> TerminalDriver:
        return self.session.driver


@contextmanager
def terminal_app(
    config: Optional[Config] = None,
    driver: Optional[TerminalDriver] = None,
) -> Iterator[AppContext]:
    """Take over the terminal and start the event loop for the block.

    On exit the event loop is stopped first, then the terminal is restored,
    so the two never touch the terminal at the same time.
    """
    config = config or load_config()
    setup_logging(config)
    driver = driver or Terminal()

    with session(driver, mouse_capture=config.mouse_capture) as sess:
        events, multiplexer = start(
            driver, config.tick_interval, forward_resize=config.forward_resize
        )
        try:
            yield AppContext(sess, events, multiplexer, config)
        finally:
            multiplexer.stop(timeout=config.tick_interval + STOP_GRACE)
            events.close()


def run_loop(
    handler: Callable[[AppContext, Event], Optional[bool]],
    config: Optional[Config] = None,
    driver: Optional[TerminalDriver] = None,
) -> None:
    """Feed every event to `handler` until it returns False.

    The loop also ends when the event queue closes. A `Fault` from the event
    loop is raised as `TerminalError` once the terminal is restored.
    """
    with terminal_app(config, driver) as ctx:
        for event in ctx.events:
            if isinstance(event, Fault):
                raise TerminalError(f"Terminal input failed: {event.error}") from event.error
            if handler(ctx, event) is False:
                break
