"""Normalization and ranking of breakdown rows."""

from typing import Callable, Iterable, Optional, Sequence, TypeVar
from urllib.parse import urlsplit

from dashstats.schemas.analytics import BreakdownEntry, BreakdownRow, EventEntry, EventRow

TOP_N = 10
UNKNOWN_LABEL = "Unknown"
DIRECT_LABEL = "Direct"

_Row = TypeVar("_Row")


def page_label(raw: Optional[str]) -> str:
    """Path of an absolute page URL; non-URLs come back unchanged."""
    if not raw:
        return UNKNOWN_LABEL
    try:
        parts = urlsplit(raw)
    except ValueError:
        return raw
    if not parts.scheme or not parts.netloc:
        return raw
    return parts.path or "/"


def source_label(raw: Optional[str]) -> str:
    # An empty referrer is direct traffic
    return raw or DIRECT_LABEL


def event_label(raw: Optional[str]) -> str:
    return raw or UNKNOWN_LABEL


def rank(rows: Iterable[_Row], key: Callable[[_Row], float], limit: int = TOP_N) -> list[_Row]:
    """Stable descending sort by ``key``, truncated to ``limit`` rows."""
    return sorted(rows, key=key, reverse=True)[:limit]


def _extract(rows: Optional[Sequence[BreakdownRow]], labeler: Callable[[Optional[str]], str]) -> list[BreakdownEntry]:
    if not rows:
        return []
    return [
        BreakdownEntry(label=labeler(row.dimension_value), value=row.count)
        for row in rank(rows, key=lambda row: row.count)
    ]


def extract_pages(rows: Optional[Sequence[BreakdownRow]]) -> list[BreakdownEntry]:
    return _extract(rows, page_label)


def extract_sources(rows: Optional[Sequence[BreakdownRow]]) -> list[BreakdownEntry]:
    return _extract(rows, source_label)


def extract_events(rows: Optional[Sequence[EventRow]]) -> list[EventEntry]:
    if not rows:
        return []
    return [
        EventEntry(label=event_label(row.event), count=row.count, unique_users=row.unique_users)
        for row in rank(rows, key=lambda row: row.count)
    ]
