"""Render an app page the way the browser router would."""

from __future__ import annotations

import typer

from acure_cli.commands.common import fail, get_state, print_fields, print_json_payload
from acure_cli.core.pages import App, AppContext
from acure_cli.core.routes import Navigator


def open_command(
    ctx: typer.Context,
    location: str = typer.Argument("#/", help="Hash location, e.g. '#/history?sort=oldest'"),
) -> None:
    """Resolve a hash location through the auth gate and print the rendered page."""
    state = get_state(ctx)
    context = AppContext(
        session_store=state.session_store,
        cache=state.cache,
        navigator=Navigator(),
        api=state.api(),
        config=state.config,
    )
    app = App(context)
    payload = app.open(location)
    if payload is None:
        fail(state, "Nothing rendered", RuntimeError(f"No page for {location}"))

    if state.plain_output:
        print_fields(state, {k: v for k, v in payload.items() if not isinstance(v, (dict, list))})
    elif state.json_output or payload.get("status") == "ok":
        print_json_payload(state, payload)
    else:
        state.console.print(f"{payload['path']}: {payload.get('message')}")

    if payload.get("status") == "error":
        raise typer.Exit(code=1)
