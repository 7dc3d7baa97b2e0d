#!/usr/bin/env python3
"""Summarize active hours in a local JSON or NDJSON activity export.

Usage:
  activity-hours export.json
  activity-hours export.ndjson --gap-minutes 15 --json
  activity-hours export.json --keys created_at,ts --compact
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from activity_hours import config
from activity_hours.analysis import analyze_document
from activity_hours.documents import load_document
from activity_hours.errors import ActivityHoursError
from activity_hours.sessions import gap_from_minutes


def _parse_keys(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    return [token.strip() for token in raw.split(",") if token.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="activity-hours",
        description="Estimate active hours from timestamps in a JSON/NDJSON export.",
    )
    parser.add_argument("path", help="Path to a JSON or NDJSON file.")
    parser.add_argument(
        "--gap-minutes",
        type=float,
        default=config.GAP_MINUTES,
        help=f"Idle gap that ends a session (default: {config.GAP_MINUTES:g}).",
    )
    parser.add_argument(
        "--sample-limit",
        type=int,
        default=config.SAMPLE_LIMIT,
        help=f"Maximum timestamps in the --compact payload (default: {config.SAMPLE_LIMIT}).",
    )
    parser.add_argument(
        "--keys",
        default=None,
        help="Comma-separated timestamp key names (default: built-in alias list).",
    )
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON.")
    parser.add_argument(
        "--compact",
        action="store_true",
        help="Print the capped timestamp payload sent to the language model.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    ns = build_parser().parse_args(argv)
    path = Path(ns.path).expanduser()

    try:
        gap = gap_from_minutes(ns.gap_minutes)
        document = load_document(path)
        analysis = analyze_document(
            document,
            key_aliases=_parse_keys(ns.keys),
            gap=gap,
            sample_limit=ns.sample_limit,
        )
    except OSError as exc:
        print(f"Error: cannot read {path}: {exc}", file=sys.stderr)
        return 1
    except (ActivityHoursError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if ns.compact:
        print(json.dumps(analysis.compact, indent=2))
        return 0

    summary = analysis.summary
    if ns.json:
        print(json.dumps(summary.to_dict(), indent=2))
        return 0

    data = summary.to_dict()
    print(f"events: {summary.event_count}")
    print(f"sessions: {summary.session_count}")
    print(f"total_hours: {summary.total_hours:.2f}")
    print(f"first: {data['first'] or '-'}")
    print(f"last: {data['last'] or '-'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
