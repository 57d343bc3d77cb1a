"""Authentication commands."""

from __future__ import annotations

from contextlib import nullcontext
from typing import Optional

import typer

from acure_cli.commands.common import fail, get_state, print_fields, print_json_payload
from acure_cli.core.api import APIError
from acure_cli.core.auth import AcureAuth, ValidationError
from acure_cli.core.storage import StorageQuotaExceeded, StorageUnavailable

app = typer.Typer(help="Authenticate with Acure Scan")


@app.command("login")
def login_command(
    ctx: typer.Context,
    email: str = typer.Option(..., prompt=True, help="Account email", envvar="ACURE_EMAIL"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, help="Account password", envvar="ACURE_PASSWORD"
    ),
) -> None:
    """Sign in and store the session token locally."""
    state = get_state(ctx)
    auth = AcureAuth(api=state.api(token=""), store=state.session_store)

    try:
        status_ctx = state.console.status("Authenticating...") if not state.plain_output else nullcontext()
        with status_ctx:
            session = auth.login(email, password)
    except ValidationError as exc:
        fail(state, "Invalid input", exc, code=2)
    except (APIError, StorageQuotaExceeded, StorageUnavailable) as exc:
        fail(state, "Login failed", exc)

    payload = {
        "status": "success",
        "authenticated": True,
        "user": {"uid": session.user_id, "email": session.email, "name": session.name},
    }

    if state.json_output:
        print_json_payload(state, payload)
        return

    if state.plain_output:
        print_fields(state, {"status": "success", "user_id": session.user_id, "email": session.email})
        return

    state.console.print("Login successful")
    state.console.print(f"User: {session.email} ({session.user_id})")


@app.command("register")
def register_command(
    ctx: typer.Context,
    email: str = typer.Option(..., prompt=True, help="Account email"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True, help="Account password"
    ),
    name: Optional[str] = typer.Option(None, help="Display name (defaults to the email's local part)"),
) -> None:
    """Create an account. Log in afterwards with `acure login`."""
    state = get_state(ctx)
    auth = AcureAuth(api=state.api(token=""), store=state.session_store)

    try:
        account = auth.register(name, email, password)
    except ValidationError as exc:
        fail(state, "Invalid input", exc, code=2)
    except APIError as exc:
        fail(state, "Registration failed", exc)

    payload = {
        "status": "success",
        "user": {"uid": account.get("uid"), "email": account.get("email"), "name": account.get("name")},
    }

    if state.json_output:
        print_json_payload(state, payload)
        return

    if state.plain_output:
        print_fields(state, {"status": "success", "user_id": account.get("uid"), "email": account.get("email")})
        return

    state.console.print("Registration successful. Please login with your new account.")


@app.command("logout")
def logout_command(ctx: typer.Context) -> None:
    """Delete the locally stored session."""
    state = get_state(ctx)
    auth = AcureAuth(api=state.api(), store=state.session_store)
    try:
        removed = auth.logout()
    except StorageUnavailable as exc:
        fail(state, "Logout failed", exc)

    if state.json_output:
        print_json_payload(
            state,
            {
                "status": "success",
                "logged_out": removed,
                "message": "Session removed" if removed else "No stored session",
            },
        )
        return

    if state.plain_output:
        print_fields(state, {"status": "success", "logged_out": str(removed).lower()})
        return

    state.console.print("Session removed" if removed else "No stored session found")


@app.command("whoami")
def whoami_command(ctx: typer.Context) -> None:
    """Verify the stored session with the backend."""
    state = get_state(ctx)
    auth = AcureAuth(api=state.api(), store=state.session_store)

    try:
        session = auth.initialize()
    except StorageUnavailable as exc:
        fail(state, "Session check failed", exc)

    if session is None:
        fail(state, "Not logged in", RuntimeError("No valid session; run `acure login`"))

    payload = {
        "status": "success",
        "user": {"uid": session.user_id, "email": session.email, "name": session.name},
    }
    if state.json_output:
        print_json_payload(state, payload)
        return
    if state.plain_output:
        print_fields(state, {"user_id": session.user_id, "email": session.email, "name": session.name})
        return
    state.console.print(f"Logged in as {session.email} ({session.user_id})")
