"""
tickterm: terminal session bootstrap and tick/input event loop

Takes over the terminal for an interactive application and feeds its render
loop a single stream of timer ticks and key presses.

Quick Start:
    >>> from tickterm import Tick, Input, run_loop
    >>> def handle(ctx, event):
    ...     if isinstance(event, Input) and event.payload.char == 'q':
    ...         return False
    >>> run_loop(handle)

Features:
    - Raw mode, alternate screen and mouse capture, restored on every exit path
    - Setup that rolls itself back when a step fails
    - Ticks at a fixed cadence merged with keyboard input on one queue
    - Driver faults delivered as events instead of dying in a background thread
    - Explicit stop for the event loop before the terminal is restored
"""

__version__ = "0.1.0"

import logging as _logging

# Silent until setup_logging runs: the last-resort handler writes to stderr,
# which is the alternate screen while a session is active.
_logging.getLogger("tickterm").addHandler(_logging.NullHandler())

# Errors
from tickterm.errors import EventQueueClosed, SessionError, TerminalError, TickTermError

# Configuration
from tickterm.config import Config, load_config

# Terminal driver
from tickterm.core.terminal import Terminal, TerminalDriver
from tickterm.core.input import Key, KeyEvent

# Events
from tickterm.events import Event, EventQueue, Fault, Input, Resize, Tick

# Session and event loop
from tickterm.session import Session, begin, end, session
from tickterm.multiplexer import EventMultiplexer, start
from tickterm.app import AppContext, run_loop, terminal_app

__all__ = [
    # Version
    "__version__",
    # Errors
    "TickTermError",
    "TerminalError",
    "SessionError",
    "EventQueueClosed",
    # Configuration
    "Config",
    "load_config",
    # Terminal driver
    "Terminal",
    "TerminalDriver",
    "Key",
    "KeyEvent",
    # Events
    "Event",
    "EventQueue",
    "Tick",
    "Input",
    "Resize",
    "Fault",
    # Session and event loop
    "Session",
    "begin",
    "end",
    "session",
    "EventMultiplexer",
    "start",
    "AppContext",
    "terminal_app",
    "run_loop",
]
