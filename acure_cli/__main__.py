"""Entry point for acure."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from acure_cli import __version__
from acure_cli.commands.auth import login_command, logout_command, register_command, whoami_command
from acure_cli.commands.navigate import open_command
from acure_cli.commands.proxy import serve_command
from acure_cli.commands.scans import (
    delete_command,
    history_command,
    result_command,
    save_command,
    scan_command,
)
from acure_cli.core.config import ConfigError, default_config_path, load_config
from acure_cli.core.state import CLIState

app = typer.Typer(
    add_completion=False,
    help="Acure Scan acne analysis command-line interface",
    invoke_without_command=True,
)


def _configure_logging(console: Console, level_name: str, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.WARNING)
    package_logger = logging.getLogger("acure_cli")
    package_logger.handlers = [RichHandler(console=console, show_time=False, show_path=False)]
    package_logger.setLevel(level)


@app.callback()
def main_callback(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON where available"),
    plain_output: bool = typer.Option(
        False,
        "--plain",
        help="Output plain text (no rich formatting/tables)",
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Quiet output"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """Initialize global CLI state."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if json_output and plain_output:
        typer.echo("Options --json and --plain are mutually exclusive.")
        raise typer.Exit(code=2)

    cfg_path = (config or default_config_path()).expanduser().resolve()
    try:
        cfg = load_config(cfg_path)
    except ConfigError as exc:
        typer.echo(f"Config error: {exc}")
        raise typer.Exit(code=2)

    console = Console(
        quiet=quiet,
        no_color=plain_output,
        log_time=False,
        log_path=False,
    )
    _configure_logging(Console(stderr=True, no_color=plain_output), str(cfg["logging"]["level"]), verbose)
    ctx.obj = CLIState(
        json_output=(json_output and not plain_output),
        plain_output=plain_output,
        verbose=verbose,
        quiet=quiet,
        config_path=cfg_path,
        config=cfg,
        console=console,
    )

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


# Top-level commands
app.command("login")(login_command)
app.command("register")(register_command)
app.command("logout")(logout_command)
app.command("whoami")(whoami_command)
app.command("open")(open_command)
app.command("scan")(scan_command)
app.command("result")(result_command)
app.command("save")(save_command)
app.command("history")(history_command)
app.command("delete")(delete_command)
app.command("serve")(serve_command)


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
