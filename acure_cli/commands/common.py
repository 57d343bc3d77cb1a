"""Shared command helpers."""

from __future__ import annotations

import json
from typing import Any, Dict, NoReturn

import typer

from acure_cli.core.models import Session
from acure_cli.core.state import CLIState


def get_state(ctx: typer.Context) -> CLIState:
    """Extract validated CLI state from Typer context."""
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=2)
    return state


def print_json_payload(state: CLIState, payload: Any) -> None:
    """Print JSON payload with plain-mode fallback for piping."""
    if state.plain_output:
        typer.echo(json.dumps(payload, separators=(",", ":")))
        return
    state.console.print_json(data=payload)


def print_fields(state: CLIState, fields: Dict[str, Any]) -> None:
    """Emit ``key<TAB>value`` lines for plain output."""
    for key, value in fields.items():
        typer.echo(f"{key}\t{value}")


def fail(state: CLIState, label: str, exc: Exception, code: int = 1) -> NoReturn:
    """Report ``exc`` in the active output mode and exit."""
    if state.json_output:
        print_json_payload(state, {"status": "error", "message": str(exc)})
    elif state.plain_output:
        typer.echo("status\terror")
        typer.echo(f"message\t{exc}")
    else:
        state.console.print(f"{label}: {exc}")
    raise typer.Exit(code=code)


def require_session(state: CLIState) -> Session:
    """Return the stored session or exit asking the user to log in."""
    session = state.session_store.get()
    if session is None or not session.token:
        fail(state, "Not logged in", RuntimeError("Run `acure login` first"))
    return session
