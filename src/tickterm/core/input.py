"""Decoding raw terminal input into key, mouse and resize events."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union


class Key(Enum):
    """Named key constants."""
    UP = auto()
    DOWN = auto()
    LEFT = auto()
    RIGHT = auto()
    ENTER = auto()
    ESCAPE = auto()
    TAB = auto()
    BACKTAB = auto()
    BACKSPACE = auto()
    HOME = auto()
    END = auto()
    PAGE_UP = auto()
    PAGE_DOWN = auto()
    DELETE = auto()
    INSERT = auto()
    F1 = auto()
    F2 = auto()
    F3 = auto()
    F4 = auto()
    F5 = auto()
    F6 = auto()
    F7 = auto()
    F8 = auto()
    F9 = auto()
    F10 = auto()
    F11 = auto()
    F12 = auto()


@dataclass(frozen=True)
class KeyEvent:
    """A keyboard input event."""
    key: Optional[Key] = None  # Named key if recognized
    char: Optional[str] = None  # Character if printable
    raw: str = ""  # Raw bytes as decoded text

    @property
    def is_char(self) -> bool:
        """Check if this is a printable character."""
        return self.char is not None and self.key is None

    @property
    def ctrl(self) -> Optional[str]:
        """Letter for a Ctrl+letter chord (``'c'`` for Ctrl-C), else None."""
        if self.key is None and len(self.raw) == 1 and 1 <= ord(self.raw) <= 26:
            return chr(ord(self.raw) + 96)
        return None


@dataclass(frozen=True)
class MouseEvent:
    """An SGR (1006) mouse report. Coordinates are 1-indexed."""
    button: int
    x: int
    y: int
    pressed: bool
    raw: str = ""


@dataclass(frozen=True)
class ResizeEvent:
    """The terminal changed size."""
    cols: int
    rows: int


DriverEvent = Union[KeyEvent, MouseEvent, ResizeEvent]

RE_SGR_MOUSE = re.compile(r"\[<(\d+);(\d+);(\d+)([Mm])")


class InputDecoder:
    """
    Incremental decoder for terminal input.

    Text read from the terminal is fed in as it arrives; complete events are
    taken out one at a time. Escape sequences split across reads stay
    buffered until the rest arrives or the caller flushes a lone escape.
    """

    # Escape sequence mappings (without the \x1b prefix)
    SEQUENCES: dict[str, Key] = {
        # Arrow keys (CSI)
        '[A': Key.UP,
        '[B': Key.DOWN,
        '[C': Key.RIGHT,
        '[D': Key.LEFT,
        # Arrow keys (SS3 - application mode)
        'OA': Key.UP,
        'OB': Key.DOWN,
        'OC': Key.RIGHT,
        'OD': Key.LEFT,
        # Navigation
        '[H': Key.HOME,
        '[F': Key.END,
        'OH': Key.HOME,
        'OF': Key.END,
        '[1~': Key.HOME,
        '[4~': Key.END,
        '[5~': Key.PAGE_UP,
        '[6~': Key.PAGE_DOWN,
        '[2~': Key.INSERT,
        '[3~': Key.DELETE,
        '[Z': Key.BACKTAB,
        # Function keys
        'OP': Key.F1,
        'OQ': Key.F2,
        'OR': Key.F3,
        'OS': Key.F4,
        '[15~': Key.F5,
        '[17~': Key.F6,
        '[18~': Key.F7,
        '[19~': Key.F8,
        '[20~': Key.F9,
        '[21~': Key.F10,
        '[23~': Key.F11,
        '[24~': Key.F12,
    }

    SIMPLE_KEYS: dict[str, Key] = {
        '\r': Key.ENTER,
        '\n': Key.ENTER,
        '\t': Key.TAB,
        '\x7f': Key.BACKSPACE,
        '\x08': Key.BACKSPACE,
    }

    def __init__(self) -> None:
        self._buffer = ""

    @property
    def pending(self) -> bool:
        """Whether any undecoded input is buffered."""
        return bool(self._buffer)

    @property
    def incomplete(self) -> bool:
        """Whether the buffer holds only the start of an escape sequence."""
        return self._buffer == '\x1b' or (
            self._buffer.startswith('\x1b') and self._sequence_end(self._buffer[1:]) is None
        )

    def feed(self, text: str) -> None:
        """Append freshly read input."""
        self._buffer += text

    def next_event(self, flush: bool = False) -> Optional[Union[KeyEvent, MouseEvent]]:
        """
        Take the next complete event out of the buffer.

        Returns None when the buffer is empty or holds an unfinished escape
        sequence. With ``flush`` set, an unfinished sequence is given up on
        and a lone escape is reported as ``Key.ESCAPE``.
        """
        while self._buffer:
            head = self._buffer[0]

            if head == '\x1b':
                if self.incomplete and not flush:
                    return None
                return self._parse_escape_sequence()

            self._buffer = self._buffer[1:]

            if head in self.SIMPLE_KEYS:
                return KeyEvent(key=self.SIMPLE_KEYS[head], raw=head)
            if head.isprintable():
                return KeyEvent(char=head, raw=head)
            if 1 <= ord(head) <= 26:
                # Ctrl+letter chords
                return KeyEvent(raw=head)
            # Other control characters are skipped

        return None

    @staticmethod
    def _sequence_end(rest: str) -> Optional[int]:
        """Index just past the escape sequence at the start of ``rest``."""
        if not rest:
            return None
        if rest[0] not in '[O':
            # Alt+key: escape followed by a plain character
            return 1
        for i, ch in enumerate(rest[1:], start=1):
            if ch == '\x1b':
                return i
            if ch.isalpha() or ch == '~':
                return i + 1
        return None

    def _parse_escape_sequence(self) -> Union[KeyEvent, MouseEvent]:
        """Parse an escape sequence from the front of the buffer."""
        rest = self._buffer[1:]
        end_idx = self._sequence_end(rest)

        if not rest or rest[0] == '\x1b':
            self._buffer = rest
            return KeyEvent(key=Key.ESCAPE, raw='\x1b')

        if end_idx is None:
            # Flushing an unterminated sequence
            end_idx = len(rest)

        seq = rest[:end_idx]
        raw = '\x1b' + seq
        self._buffer = rest[end_idx:]

        mouse = RE_SGR_MOUSE.fullmatch(seq)
        if mouse is not None:
            button, x, y, state = mouse.groups()
            return MouseEvent(
                button=int(button), x=int(x), y=int(y), pressed=state == 'M', raw=raw
            )

        if seq in self.SEQUENCES:
            return KeyEvent(key=self.SEQUENCES[seq], raw=raw)

        # Unknown sequence, delivered opaquely
        return KeyEvent(raw=raw)
