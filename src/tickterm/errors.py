"""Base exceptions for tickterm."""


class TickTermError(Exception):
    """Base exception for all tickterm errors."""

    pass


class TerminalError(TickTermError):
    """A terminal driver call (mode switch, poll, read) failed."""

    pass


class SessionError(TerminalError):
    """Terminal session used out of order (double begin, double end)."""

    pass


class EventQueueClosed(TickTermError):
    """Receive on an event queue that is closed and fully drained."""

    pass
