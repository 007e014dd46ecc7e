"""Terminal driver and input decoding."""

from tickterm.core.terminal import Terminal, TerminalDriver, TerminalSize
from tickterm.core.input import (
    DriverEvent,
    InputDecoder,
    Key,
    KeyEvent,
    MouseEvent,
    ResizeEvent,
)

__all__ = [
    "Terminal",
    "TerminalDriver",
    "TerminalSize",
    "DriverEvent",
    "InputDecoder",
    "Key",
    "KeyEvent",
    "MouseEvent",
    "ResizeEvent",
]
