"""Scan, result, history and delete commands."""

from __future__ import annotations

from contextlib import nullcontext
from pathlib import Path
from typing import List, Optional

import typer

from acure_cli.commands.common import fail, get_state, print_fields, print_json_payload, require_session
from acure_cli.core.api import APIError, AuthExpired, NotFound
from acure_cli.core.classify import ClassifierError, detect_acne, load_classifier, scan_summary
from acure_cli.core.constants import HISTORY_SORTS
from acure_cli.core.history import filter_and_sort, merge_history, paginate
from acure_cli.core.images import ImageError, image_to_data_uri
from acure_cli.core.models import ScanRecord
from acure_cli.core.state import CLIState
from acure_cli.core.storage import StorageQuotaExceeded, StorageUnavailable
from acure_cli.core.upload import upload_scan
from acure_cli.utils.formatting import history_table, recommendation_lines, scan_table


def _print_record(state: CLIState, record: ScanRecord, include_image: bool = False) -> None:
    if state.json_output:
        payload = record.to_dict()
        if not include_image:
            payload.pop("image", None)
        print_json_payload(state, payload)
        return

    if state.plain_output:
        print_fields(state, scan_summary(record))
        for prediction in record.predictions:
            typer.echo(f"prediction\t{prediction.label}\t{prediction.confidence}")
        return

    state.console.print(scan_table(record))
    for line in recommendation_lines(record):
        state.console.print(line)


def scan_command(
    ctx: typer.Context,
    image: Path = typer.Argument(..., exists=True, dir_okay=False, help="Face photo to analyse"),
    classifier: Optional[str] = typer.Option(
        None, help="Classifier as module:function (overrides config scan.classifier)"
    ),
    save: bool = typer.Option(False, "--save", help="Also save the result to your history"),
) -> None:
    """Classify an image and cache the result locally."""
    state = get_state(ctx)
    scan_cfg = state.config.get("scan", {})

    try:
        model = load_classifier(classifier or scan_cfg.get("classifier"))
        uri = image_to_data_uri(image)
        status_ctx = state.console.status("Analysing image...") if not state.plain_output else nullcontext()
        with status_ctx:
            record = detect_acne(uri, model, timeout=float(scan_cfg.get("timeout_seconds", 30)))
        record = state.cache.put(record)
    except (ClassifierError, ImageError) as exc:
        fail(state, "Scan failed", exc)
    except (StorageQuotaExceeded, StorageUnavailable) as exc:
        fail(state, "Could not cache scan result", exc)

    if save:
        session = require_session(state)
        try:
            record = upload_scan(state.api(), state.cache, session, record, scan_cfg)
        except AuthExpired as exc:
            fail(state, "Session expired", exc)
        except (APIError, StorageQuotaExceeded, StorageUnavailable) as exc:
            fail(state, "Save failed", exc)

    _print_record(state, record)


def result_command(
    ctx: typer.Context,
    scan_id: str = typer.Argument(..., help="Scan ID"),
    remote: bool = typer.Option(False, "--remote", help="Skip the local cache"),
    include_image: bool = typer.Option(False, "--image", help="Include the image data URI in JSON output"),
) -> None:
    """Show a scan result from the local cache, falling back to the backend."""
    state = get_state(ctx)
    record = None if remote else state.cache.get(scan_id)

    if record is None:
        session = require_session(state)
        try:
            record = state.api().get_scan(session.user_id, scan_id)
        except NotFound as exc:
            fail(state, "Scan not found", exc)
        except APIError as exc:
            fail(state, "Failed to fetch scan", exc)

    _print_record(state, record, include_image=include_image)


def save_command(
    ctx: typer.Context,
    scan_id: str = typer.Argument(..., help="Cached scan ID"),
) -> None:
    """Save a cached scan result to your remote history."""
    state = get_state(ctx)
    session = require_session(state)
    record = state.cache.get(scan_id)
    if record is None:
        fail(state, "Save failed", RuntimeError(f"No cached scan {scan_id}"))

    try:
        saved = upload_scan(state.api(), state.cache, session, record, state.config.get("scan", {}))
    except (APIError, StorageQuotaExceeded, StorageUnavailable) as exc:
        fail(state, "Save failed", exc)

    if state.json_output:
        print_json_payload(state, {"status": "saved", "id": saved.id, "localId": scan_id})
        return
    if state.plain_output:
        typer.echo("status\tsaved")
        typer.echo(f"id\t{saved.id}")
        return
    state.console.print(f"Saved scan {scan_id} as {saved.id}")


def history_command(
    ctx: typer.Context,
    label_filter: str = typer.Option("all", "--filter", help="Only scans whose label contains this text"),
    sort: str = typer.Option("newest", help="Sort: newest|oldest|confidence"),
    page: int = typer.Option(1, min=1, help="Page number"),
    local_only: bool = typer.Option(False, "--local-only", help="Only use the local cache"),
) -> None:
    """List your scan history."""
    state = get_state(ctx)
    if sort not in HISTORY_SORTS:
        raise typer.BadParameter(f"--sort must be one of: {', '.join(HISTORY_SORTS)}")

    remote: List[ScanRecord] = []
    if not local_only:
        session = require_session(state)
        try:
            remote = state.api().list_scans(session.user_id)
        except APIError as exc:
            fail(state, "Failed to fetch scans", exc)

    scans = filter_and_sort(merge_history(state.cache.records(), remote), label_filter=label_filter, sort=sort)
    per_page = int(state.config.get("history", {}).get("per_page", 9))
    items, total_pages = paginate(scans, page=page, per_page=per_page)

    if state.json_output:
        print_json_payload(
            state,
            {
                "total": len(scans),
                "page": min(page, total_pages),
                "totalPages": total_pages,
                "scans": [scan_summary(record) for record in items],
            },
        )
        return

    if state.plain_output:
        typer.echo("id\ttimestamp\tdominantAcne\tconfidence\tseverity")
        for record in items:
            typer.echo(
                "\t".join(
                    [
                        str(record.id or ""),
                        record.timestamp,
                        record.dominant_label,
                        f"{record.confidence:.2f}",
                        record.recommendations.severity,
                    ]
                )
            )
        typer.echo(f"total\t{len(scans)}")
        return

    if not scans:
        state.console.print("No scan history yet. Start your first scan!")
        return
    state.console.print(history_table(items, title=f"Scan history (page {min(page, total_pages)}/{total_pages})"))


def delete_command(
    ctx: typer.Context,
    scan_id: str = typer.Argument(..., help="Scan ID"),
    local_only: bool = typer.Option(False, "--local-only", help="Only remove the cached copy"),
) -> None:
    """Delete a scan from your history and the local cache."""
    state = get_state(ctx)
    deleted_remote = False

    if not local_only:
        session = require_session(state)
        try:
            deleted_remote = state.api().delete_scan(session.user_id, scan_id)
        except NotFound:
            deleted_remote = False
        except APIError as exc:
            fail(state, "Delete failed", exc)

    cached = state.cache.get(scan_id) is not None
    try:
        state.cache.remove(scan_id)
    except StorageUnavailable as exc:
        fail(state, "Delete failed", exc)

    payload = {"status": "deleted", "id": scan_id, "remote": deleted_remote, "local": cached}
    if state.json_output:
        print_json_payload(state, payload)
        return
    if state.plain_output:
        print_fields(state, payload)
        return
    state.console.print(f"Deleted scan {scan_id} (remote: {deleted_remote}, local: {cached})")
