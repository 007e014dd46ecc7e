"""Tests for the command line interface."""

import json
from pathlib import Path

from typer.testing import CliRunner

from tickterm.cli.app import _describe, _is_quit, create_app
from tickterm.core.input import Key, KeyEvent
from tickterm.events import Input, Tick

runner = CliRunner()


class TestConfigCommand:
    """Tests for `tickterm config`."""

    def test_json_output(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"tick_interval": 0.5}))

        result = runner.invoke(create_app(), ["config", "--config", str(path), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["tick_interval"] == 0.5
        assert data["mouse_capture"] is True

    def test_table_output(self, tmp_path: Path) -> None:
        result = runner.invoke(create_app(), ["config", "--config", str(tmp_path / "none.json")])

        assert result.exit_code == 0
        assert "tick_interval" in result.output
        assert "0.2" in result.output

    def test_invalid_config(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"tick_interval": 0}))

        result = runner.invoke(create_app(), ["config", "--config", str(path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestKeyHelpers:
    """Tests for quit detection and key descriptions."""

    def test_quit_keys(self) -> None:
        assert _is_quit(Input(KeyEvent(char='q', raw='q')))
        assert _is_quit(Input(KeyEvent(key=Key.ESCAPE, raw='\x1b')))
        assert _is_quit(Input(KeyEvent(raw='\x03')))
        assert not _is_quit(Input(KeyEvent(char='x', raw='x')))
        assert not _is_quit(Tick())

    def test_describe(self) -> None:
        assert _describe(KeyEvent(key=Key.UP, raw='\x1b[A')) == "UP"
        assert _describe(KeyEvent(raw='\x01')) == "Ctrl-A"
        assert _describe(KeyEvent(char='z', raw='z')) == "'z'"
        assert _describe(KeyEvent(raw='\x1b[99~')) == repr('\x1b[99~')


class TestInvalidConfigValues:
    """Config files with values of the wrong type."""

    def test_null_tick_interval(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"tick_interval": None}))

        result = runner.invoke(create_app(), ["config", "--config", str(path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert not isinstance(result.exception, TypeError)

    def test_numeric_log_level(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"log_level": 10}))

        result = runner.invoke(create_app(), ["config", "--config", str(path)])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert not isinstance(result.exception, AttributeError)
