"""Extraction, aggregation and compaction in one pass over a document."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable

from activity_hours import config
from activity_hours.compaction import compact_for_delegation
from activity_hours.extraction import TimestampExtractor
from activity_hours.sessions import SessionSummary, aggregate_sessions, gap_from_minutes


@dataclass(frozen=True)
class Analysis:
    instants: tuple[datetime, ...]
    summary: SessionSummary
    compact: dict[str, Any]


def analyze_document(
    document: Any,
    *,
    key_aliases: Iterable[str] | None = None,
    gap: timedelta | None = None,
    sample_limit: int | None = None,
    max_depth: int | None = None,
) -> Analysis:
    gap = gap if gap is not None else gap_from_minutes(config.GAP_MINUTES)
    extractor = TimestampExtractor(key_aliases=key_aliases, max_depth=max_depth)
    instants = extractor.extract(document)
    summary = aggregate_sessions(instants, gap)
    compact = compact_for_delegation(
        instants,
        gap,
        max_count=sample_limit if sample_limit is not None else config.SAMPLE_LIMIT,
    )
    return Analysis(instants=tuple(instants), summary=summary, compact=compact)
