"""Typer CLI application."""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from tickterm.config import Config, get_config_path, load_config
from tickterm.core.input import Key, KeyEvent
from tickterm.errors import TerminalError
from tickterm.events import Event, Input, Resize, Tick


def _is_quit(event: Event) -> bool:
    """q, Escape and Ctrl-C end the interactive commands."""
    if not isinstance(event, Input) or not isinstance(event.payload, KeyEvent):
        return False
    key = event.payload
    return key.char == 'q' or key.key == Key.ESCAPE or key.ctrl == 'c'


def _describe(key: KeyEvent) -> str:
    if key.key is not None:
        return key.key.name
    if key.ctrl is not None:
        return f"Ctrl-{key.ctrl.upper()}"
    if key.char is not None:
        return repr(key.char)
    return repr(key.raw)


def create_app() -> typer.Typer:
    """Create and configure the CLI application."""
    app = typer.Typer(
        name="tickterm",
        help="Terminal session bootstrap with a tick/input event loop.",
        no_args_is_help=True,
        rich_markup_mode="rich",
    )
    console = Console()

    def _load(config_path: Optional[Path], **overrides: object) -> Config:
        try:
            config = load_config(config_path)
            values = config.to_dict()
            values.update({k: v for k, v in overrides.items() if v is not None})
            return Config(**values)
        except ValueError as e:
            console.print(f"[red]Invalid configuration: {e}[/]")
            raise typer.Exit(1)

    @app.command()
    def demo(
        tick_ms: Annotated[Optional[int], typer.Option("--tick-ms", "-t", help="Tick interval in milliseconds")] = None,
        config_path: Annotated[Optional[Path], typer.Option("--config", "-c", help="Config file")] = None,
    ) -> None:
        """Show a live tick counter and the last key pressed. [bold]q[/] quits."""
        from tickterm.app import AppContext, run_loop

        config = _load(config_path, tick_interval=tick_ms / 1000 if tick_ms is not None else None)
        state = {"ticks": 0, "keys": 0, "last": "-"}

        def handle(ctx: AppContext, event: Event) -> bool:
            if _is_quit(event):
                return False
            if isinstance(event, Tick):
                state["ticks"] += 1
            elif isinstance(event, Input):
                state["keys"] += 1
                state["last"] = _describe(event.payload)

            term = ctx.driver
            term.move_to(1, 1)
            term.write(
                f"\x1b[1mtickterm demo\x1b[0m  tick every {config.tick_interval * 1000:.0f}ms\x1b[K\r\n"
                f"ticks: {state['ticks']}\x1b[K\r\n"
                f"keys:  {state['keys']}  last: {state['last']}\x1b[K\r\n"
                f"\x1b[90mpress q to quit\x1b[0m\x1b[K"
            )
            return True

        try:
            run_loop(handle, config)
        except TerminalError as e:
            console.print(f"[red]Terminal error: {e}[/]")
            raise typer.Exit(1)

        console.print(f"[green]{state['ticks']} ticks, {state['keys']} keys[/]")

    @app.command()
    def keys(
        config_path: Annotated[Optional[Path], typer.Option("--config", "-c", help="Config file")] = None,
        show_ticks: Annotated[bool, typer.Option("--ticks", help="Also print tick events")] = False,
    ) -> None:
        """Print every decoded event, one per line. [bold]q[/] quits."""
        from tickterm.app import AppContext, run_loop

        config = _load(config_path, forward_resize=True)

        def handle(ctx: AppContext, event: Event) -> bool:
            if _is_quit(event):
                return False
            if isinstance(event, Input):
                line = f"key     {_describe(event.payload):<12} raw={event.payload.raw!r}"
            elif isinstance(event, Resize):
                line = f"resize  {event.payload.cols}x{event.payload.rows}"
            elif show_ticks:
                line = "tick"
            else:
                return True
            ctx.driver.write(line + "\r\n")
            return True

        try:
            run_loop(handle, config)
        except TerminalError as e:
            console.print(f"[red]Terminal error: {e}[/]")
            raise typer.Exit(1)

    @app.command("config")
    def show_config(
        config_path: Annotated[Optional[Path], typer.Option("--config", "-c", help="Config file")] = None,
        json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
    ) -> None:
        """Show the effective configuration."""
        config = _load(config_path)

        if json_output:
            print(json.dumps(config.to_dict(), indent=2))
            return

        table = Table(title=f"tickterm config ({get_config_path(config_path)})")
        table.add_column("Setting", style="bold")
        table.add_column("Value")
        for name, value in config.to_dict().items():
            table.add_row(name, str(value))
        console.print(table)

    return app
