"""Tests for running an application loop inside a terminal session."""

import pytest

from conftest import FakeDriver
from tickterm.app import run_loop, terminal_app
from tickterm.config import Config
from tickterm.core.input import KeyEvent
from tickterm.errors import TerminalError
from tickterm.events import Input, Tick

FAST = Config(tick_interval=0.02)


class TestTerminalApp:
    """Tests for the terminal_app context manager."""

    def test_session_and_events_inside_block(self, driver: FakeDriver) -> None:
        with terminal_app(FAST, driver) as ctx:
            assert ctx.driver is driver
            assert ctx.session.active is True
            assert driver.raw is True
            assert ctx.events.get(timeout=1) == Tick()

        assert ctx.session.active is False
        assert ctx.multiplexer.running is False
        assert ctx.events.closed is True

    def test_event_loop_stops_before_restore(self, driver: FakeDriver) -> None:
        with terminal_app(FAST, driver) as ctx:
            ctx.events.get(timeout=1)

        restore_at = driver.calls.index("disable_raw_mode")
        assert "poll" not in driver.calls[restore_at:]

    def test_restores_on_error(self, driver: FakeDriver) -> None:
        before = dict(driver.flags)

        with pytest.raises(ZeroDivisionError):
            with terminal_app(FAST, driver):
                1 / 0

        assert driver.flags == before

    def test_respects_mouse_capture_setting(self, driver: FakeDriver) -> None:
        with terminal_app(Config(tick_interval=0.02, mouse_capture=False), driver):
            assert driver.mouse is False


class TestRunLoop:
    """Tests for run_loop."""

    def test_handler_sees_ticks_and_keys_until_false(self, driver: FakeDriver) -> None:
        seen = []

        def handle(ctx, event):
            seen.append(event)
            if isinstance(event, Input) and event.payload.char == 'q':
                return False
            if len([e for e in seen if isinstance(e, Tick)]) == 2:
                ctx.driver.send(KeyEvent(char='q', raw='q'))

        run_loop(handle, FAST, driver)

        assert seen[-1] == Input(KeyEvent(char='q', raw='q'))
        assert sum(isinstance(e, Tick) for e in seen) >= 2
        assert driver.raw is False
        assert driver.cursor_visible is True

    def test_fault_raised_after_restore(self) -> None:
        driver = FakeDriver(fail_on={"poll"})

        with pytest.raises(TerminalError, match="Terminal input failed") as info:
            run_loop(lambda ctx, event: True, FAST, driver)

        assert isinstance(info.value.__cause__, TerminalError)
        assert driver.raw is False
        assert driver.alt_screen is False

    def test_setup_failure_never_calls_handler(self) -> None:
        driver = FakeDriver(fail_on={"enter_alt_screen"})
        calls = []

        with pytest.raises(TerminalError):
            run_loop(lambda ctx, event: calls.append(event), FAST, driver)

        assert calls == []
        assert "poll" not in driver.calls
