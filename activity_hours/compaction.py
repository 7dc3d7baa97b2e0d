"""Compact instant payloads for the language-model estimate."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Sequence

from activity_hours import config
from activity_hours.date_utils import format_instant
from activity_hours.sessions import DEFAULT_GAP, validate_gap

DEFAULT_SAMPLE_LIMIT = config.SAMPLE_LIMIT


def _gap_minutes(gap: timedelta) -> int | float:
    minutes = gap.total_seconds() / 60
    return int(minutes) if minutes.is_integer() else minutes


def compact_for_delegation(
    instants: Sequence[datetime],
    gap: timedelta = DEFAULT_GAP,
    max_count: int = DEFAULT_SAMPLE_LIMIT,
) -> dict[str, Any]:
    """Return ``{"timestamps": [...], "gap_minutes": n}`` capped at ``max_count``."""
    if max_count <= 0:
        raise ValueError(f"max_count must be positive, got {max_count}")
    validate_gap(gap)
    return {
        "timestamps": [format_instant(instant) for instant in instants[:max_count]],
        "gap_minutes": _gap_minutes(gap),
    }
