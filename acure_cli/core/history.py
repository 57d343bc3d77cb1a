"""Scan history: merging cached and remote scans, filtering, sorting, paging."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Tuple

from acure_cli.core.constants import HISTORY_SORTS
from acure_cli.core.models import ScanRecord


def merge_history(local: Iterable[ScanRecord], remote: Iterable[ScanRecord]) -> List[ScanRecord]:
    """Union of both sources keyed by id; the remote copy wins on conflict."""
    merged: Dict[str, ScanRecord] = {}
    anonymous: List[ScanRecord] = []
    for record in list(local) + list(remote):
        if record.id:
            merged[record.id] = record
        else:
            anonymous.append(record)
    return list(merged.values()) + anonymous


def _timestamp_key(record: ScanRecord) -> float:
    raw = (record.timestamp or "").replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return 0.0
    return parsed.timestamp()


def filter_and_sort(
    scans: Iterable[ScanRecord],
    label_filter: str = "all",
    sort: str = "newest",
) -> List[ScanRecord]:
    """Filter by case-insensitive label substring and order the result."""
    if sort not in HISTORY_SORTS:
        raise ValueError(f"sort must be one of: {', '.join(HISTORY_SORTS)}")

    needle = (label_filter or "all").lower()
    selected = [
        scan for scan in scans if needle == "all" or needle in (scan.dominant_label or "").lower()
    ]

    if sort == "newest":
        selected.sort(key=_timestamp_key, reverse=True)
    elif sort == "oldest":
        selected.sort(key=_timestamp_key)
    else:
        selected.sort(key=lambda scan: scan.confidence or 0, reverse=True)
    return selected


def paginate(scans: List[ScanRecord], page: int = 1, per_page: int = 9) -> Tuple[List[ScanRecord], int]:
    """Return ``(page_items, total_pages)``; pages are 1-based and clamped."""
    per_page = max(1, per_page)
    total_pages = max(1, (len(scans) + per_page - 1) // per_page)
    page = min(max(1, page), total_pages)
    start = (page - 1) * per_page
    return scans[start : start + per_page], total_pages
