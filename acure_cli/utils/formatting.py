"""Formatting helpers used for console output."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from rich.table import Table

from acure_cli.core.models import ScanRecord


def format_confidence(value: Optional[float]) -> str:
    """Format a 0-1 confidence as a percentage."""
    if value is None:
        return "N/A"
    return f"{float(value) * 100:.0f}%"


def format_timestamp(raw: Optional[str]) -> str:
    """Render an ISO timestamp as ``YYYY-MM-DD HH:MM``; unparseable input is echoed."""
    if not raw:
        return "N/A"
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return raw
    return parsed.strftime("%Y-%m-%d %H:%M")


def scan_table(record: ScanRecord) -> Table:
    """Prediction breakdown for one scan."""
    title = f"Scan {record.id}" if record.id else "Scan"
    if record.is_mock_result:
        title += " (mock result)"
    table = Table(title=title)
    table.add_column("Acne type")
    table.add_column("Confidence", justify="right")
    for prediction in record.predictions:
        table.add_row(prediction.label, format_confidence(prediction.confidence))
    return table


def recommendation_lines(record: ScanRecord) -> List[str]:
    recs = record.recommendations
    lines = [f"Severity: {recs.severity}"]
    if recs.ingredients:
        lines.append("Ingredients: " + ", ".join(recs.ingredients))
    for step in recs.treatment:
        lines.append(f"- {step}")
    return lines


def history_table(records: Sequence[ScanRecord], title: str) -> Table:
    table = Table(title=title)
    table.add_column("ID")
    table.add_column("Date")
    table.add_column("Dominant acne")
    table.add_column("Confidence", justify="right")
    table.add_column("Severity")
    for record in records:
        table.add_row(
            str(record.id or "-"),
            format_timestamp(record.timestamp),
            record.dominant_label,
            format_confidence(record.confidence),
            record.recommendations.severity,
        )
    return table
