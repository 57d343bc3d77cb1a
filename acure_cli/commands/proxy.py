"""Run the edge proxy locally."""

from __future__ import annotations

from typing import Optional

import typer

from acure_cli.commands.common import get_state
from acure_cli.proxy.app import serve


def serve_command(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, help="Bind address (defaults to config proxy.host)"),
    port: Optional[int] = typer.Option(None, help="Port (defaults to config proxy.port)"),
) -> None:
    """Serve the auth and scan API proxy in front of Firebase."""
    state = get_state(ctx)
    serve(state.config, host=host, port=port)
