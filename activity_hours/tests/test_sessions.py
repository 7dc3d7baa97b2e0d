import unittest
from datetime import datetime, timedelta, timezone

from activity_hours.errors import InvalidGapThresholdError
from activity_hours.sessions import (
    MINIMUM_SESSION_MS,
    SessionSummary,
    aggregate_sessions,
    gap_from_minutes,
)

GAP = timedelta(minutes=30)


def _at(hour: int, minute: int, second: int = 0, microsecond: int = 0) -> datetime:
    return datetime(2024, 1, 1, hour, minute, second, microsecond, tzinfo=timezone.utc)


class AggregateSessionsTests(unittest.TestCase):
    def test_isolated_event_gets_one_minute_floor(self) -> None:
        summary = aggregate_sessions([_at(10, 0), _at(10, 5), _at(11, 0)], GAP)

        self.assertEqual(summary.session_count, 2)
        self.assertEqual(summary.event_count, 3)
        self.assertEqual(summary.total_duration_ms, 6 * 60_000)
        self.assertAlmostEqual(summary.total_hours, 0.1)
        self.assertEqual([s.duration_ms for s in summary.sessions], [5 * 60_000, 60_000])
        self.assertEqual([s.event_count for s in summary.sessions], [2, 1])

    def test_short_gaps_form_a_single_session(self) -> None:
        instants = [_at(10, 0), _at(10, 10), _at(10, 20), _at(10, 30)]
        summary = aggregate_sessions(instants, GAP)

        self.assertEqual(summary.session_count, 1)
        self.assertEqual(summary.total_duration_ms, 30 * 60_000)
        self.assertEqual(summary.first_instant, _at(10, 0))
        self.assertEqual(summary.last_instant, _at(10, 30))

    def test_gap_equal_to_threshold_ends_session(self) -> None:
        summary = aggregate_sessions([_at(10, 0), _at(10, 30)], GAP)
        self.assertEqual(summary.session_count, 2)
        self.assertEqual(summary.total_duration_ms, 2 * MINIMUM_SESSION_MS)

    def test_gap_just_below_threshold_keeps_session(self) -> None:
        summary = aggregate_sessions([_at(10, 0), _at(10, 29, 59, 999000)], GAP)
        self.assertEqual(summary.session_count, 1)
        self.assertEqual(summary.total_duration_ms, 30 * 60_000 - 1)

    def test_sub_minute_session_is_floored(self) -> None:
        summary = aggregate_sessions([_at(10, 0), _at(10, 0, 30)], GAP)
        self.assertEqual(summary.session_count, 1)
        self.assertEqual(summary.total_duration_ms, MINIMUM_SESSION_MS)

    def test_every_session_contributes_at_least_one_minute(self) -> None:
        instants = [_at(h, 0) for h in range(0, 24, 2)]
        summary = aggregate_sessions(instants, GAP)
        self.assertEqual(summary.session_count, 12)
        self.assertTrue(all(s.duration_ms >= MINIMUM_SESSION_MS for s in summary.sessions))
        self.assertEqual(summary.total_duration_ms, 12 * MINIMUM_SESSION_MS)

    def test_boundaries_follow_gap_threshold(self) -> None:
        offsets = [0, 5, 40, 41, 71, 100, 130, 131, 200, 229]
        base = _at(0, 0)
        instants = [base + timedelta(minutes=m) for m in offsets]
        summary = aggregate_sessions(instants, GAP)

        long_gaps = sum(1 for a, b in zip(instants, instants[1:]) if b - a >= GAP)
        self.assertEqual(summary.session_count, long_gaps + 1)
        for earlier, later in zip(summary.sessions, summary.sessions[1:]):
            self.assertGreaterEqual(later.start - earlier.end, GAP)
        for session in summary.sessions:
            inside = [dt for dt in instants if session.start <= dt <= session.end]
            for a, b in zip(inside, inside[1:]):
                self.assertLess(b - a, GAP)

    def test_empty_input_returns_zero_summary(self) -> None:
        summary = aggregate_sessions([], GAP)

        self.assertEqual(summary, SessionSummary())
        self.assertEqual(
            summary.to_dict(),
            {
                "total_hours": 0.0,
                "total_duration_ms": 0,
                "session_count": 0,
                "event_count": 0,
                "first": None,
                "last": None,
                "sessions": [],
            },
        )

    def test_to_dict_uses_iso_instants(self) -> None:
        data = aggregate_sessions([_at(10, 0), _at(10, 5)], GAP).to_dict()
        self.assertEqual(data["first"], "2024-01-01T10:00:00.000Z")
        self.assertEqual(data["last"], "2024-01-01T10:05:00.000Z")
        self.assertEqual(
            data["sessions"],
            [
                {
                    "start": "2024-01-01T10:00:00.000Z",
                    "end": "2024-01-01T10:05:00.000Z",
                    "event_count": 2,
                    "duration_ms": 300_000,
                }
            ],
        )

    def test_non_positive_gap_is_rejected(self) -> None:
        for gap in (timedelta(0), timedelta(minutes=-5)):
            with self.subTest(gap=gap):
                with self.assertRaises(InvalidGapThresholdError):
                    aggregate_sessions([_at(10, 0)], gap)
        with self.assertRaises(ValueError):
            aggregate_sessions([], timedelta(0))


class GapFromMinutesTests(unittest.TestCase):
    def test_builds_timedelta(self) -> None:
        self.assertEqual(gap_from_minutes(30), timedelta(minutes=30))
        self.assertEqual(gap_from_minutes("1.5"), timedelta(seconds=90))

    def test_rejects_invalid_values(self) -> None:
        for value in (0, -1, "abc", None, float("nan"), float("inf"), 1e300):
            with self.subTest(value=value):
                with self.assertRaises(InvalidGapThresholdError):
                    gap_from_minutes(value)


if __name__ == "__main__":
    unittest.main()
