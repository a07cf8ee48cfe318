"""
Pure helpers behind the list pages (search boxes, status tabs, counters).

No Streamlit here, so they can be tested directly.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence, Tuple

from housing_console.domain.models import (
    ApplicationRecord,
    ApplicationStatus,
    ComplaintRecord,
    ComplaintStatus,
)

ALL_STATUSES = "all"


def _matches(value: Any, needle: str) -> bool:
    return needle in str(value if value is not None else "").lower()


def filter_applications(
    records: Iterable[ApplicationRecord],
    query: str = "",
    status: str = ALL_STATUSES,
) -> List[ApplicationRecord]:
    """Match the query against student name or national id, then narrow by status."""
    needle = (query or "").strip().lower()
    wanted = (status or ALL_STATUSES).strip().lower()
    out = []
    for rec in records:
        if needle and not (_matches(rec.student_name, needle) or _matches(rec.national_id, needle)):
            continue
        if wanted != ALL_STATUSES and rec.status != wanted:
            continue
        out.append(rec)
    return out


def count_by_status(records: Iterable[Any]) -> Dict[str, int]:
    counts: Dict[str, int] = {"total": 0}
    for s in ApplicationStatus.ALL:
        counts[s] = 0
    for rec in records:
        counts["total"] += 1
        counts[rec.status] = counts.get(rec.status, 0) + 1
    return counts


def search_records(records: Iterable[Any], query: str, fields: Sequence[str]) -> List[Any]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(records)
    return [r for r in records if any(_matches(getattr(r, f, ""), needle) for f in fields)]


def split_complaints(records: Iterable[ComplaintRecord]) -> Tuple[List[ComplaintRecord], List[ComplaintRecord]]:
    """(unresolved, resolved). Anything not explicitly resolved stays open."""
    unresolved, resolved = [], []
    for rec in records:
        (resolved if rec.status == ComplaintStatus.RESOLVED else unresolved).append(rec)
    return unresolved, resolved


def newest_first(records: Iterable[Any], field: str) -> List[Any]:
    # ISO-8601 strings sort chronologically; records without a date go last
    return sorted(records, key=lambda r: str(getattr(r, field, "") or ""), reverse=True)


def initials(name: str) -> str:
    parts = [p for p in (name or "").split() if p]
    if not parts:
        return "?"
    return "".join(p[0] for p in parts[:2]).upper()
