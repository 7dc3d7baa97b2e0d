"""Gap-based session segmentation over sorted instants."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Sequence

from activity_hours.date_utils import format_optional_instant
from activity_hours.errors import InvalidGapThresholdError

MILLISECONDS_PER_HOUR = 3_600_000
MINIMUM_SESSION_MS = 60_000
DEFAULT_GAP = timedelta(minutes=30)


def _millis(delta: timedelta) -> int:
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


@dataclass(frozen=True)
class Session:
    """A maximal run of instants whose consecutive gaps stay below the threshold."""

    start: datetime
    end: datetime
    event_count: int

    @property
    def span_ms(self) -> int:
        return _millis(self.end - self.start)

    @property
    def duration_ms(self) -> int:
        """Span with the one-minute floor applied."""
        return max(self.span_ms, MINIMUM_SESSION_MS)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": format_optional_instant(self.start),
            "end": format_optional_instant(self.end),
            "event_count": self.event_count,
            "duration_ms": self.duration_ms,
        }


@dataclass(frozen=True)
class SessionSummary:
    total_duration_ms: int = 0
    session_count: int = 0
    event_count: int = 0
    first_instant: datetime | None = None
    last_instant: datetime | None = None
    sessions: tuple[Session, ...] = field(default_factory=tuple)

    @property
    def total_hours(self) -> float:
        return self.total_duration_ms / MILLISECONDS_PER_HOUR

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_hours": self.total_hours,
            "total_duration_ms": self.total_duration_ms,
            "session_count": self.session_count,
            "event_count": self.event_count,
            "first": format_optional_instant(self.first_instant),
            "last": format_optional_instant(self.last_instant),
            "sessions": [session.to_dict() for session in self.sessions],
        }


def validate_gap(gap: timedelta) -> timedelta:
    if not isinstance(gap, timedelta):
        raise InvalidGapThresholdError(f"Gap threshold must be a timedelta, got {type(gap).__name__}")
    if gap <= timedelta(0):
        raise InvalidGapThresholdError(f"Gap threshold must be positive, got {gap}")
    return gap


def gap_from_minutes(minutes: float) -> timedelta:
    try:
        value = float(minutes)
    except (TypeError, ValueError) as exc:
        raise InvalidGapThresholdError(f"Gap minutes must be a number, got {minutes!r}") from exc
    if not math.isfinite(value):
        raise InvalidGapThresholdError(f"Gap minutes must be finite, got {minutes!r}")
    try:
        gap = timedelta(minutes=value)
    except OverflowError as exc:
        raise InvalidGapThresholdError(f"Gap minutes out of range, got {minutes!r}") from exc
    return validate_gap(gap)


def aggregate_sessions(instants: Sequence[datetime], gap: timedelta = DEFAULT_GAP) -> SessionSummary:
    """Split ascending, deduplicated instants into sessions and total their time.

    A gap between consecutive instants that is greater than or equal to
    ``gap`` closes the current session. Each session contributes its span
    (last minus first), floored at one minute. The input is not re-sorted.
    """
    validate_gap(gap)
    if not instants:
        return SessionSummary()

    sessions: list[Session] = []
    session_start = instants[0]
    previous = instants[0]
    session_events = 1
    total_ms = 0

    for instant in instants[1:]:
        if instant - previous >= gap:
            closed = Session(start=session_start, end=previous, event_count=session_events)
            sessions.append(closed)
            total_ms += closed.duration_ms
            session_start = instant
            session_events = 0
        session_events += 1
        previous = instant

    closed = Session(start=session_start, end=previous, event_count=session_events)
    sessions.append(closed)
    total_ms += closed.duration_ms

    return SessionSummary(
        total_duration_ms=total_ms,
        session_count=len(sessions),
        event_count=len(instants),
        first_instant=instants[0],
        last_instant=instants[-1],
        sessions=tuple(sessions),
    )
