"""Timestamp discovery in arbitrarily nested JSON documents."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from activity_hours import config
from activity_hours.date_utils import decode_instant, format_instant
from activity_hours.errors import DocumentTooDeepError

logger = logging.getLogger("activity_hours.extraction")


def _normalize_aliases(key_aliases: Iterable[str]) -> frozenset[str]:
    aliases: set[str] = set()
    for alias in key_aliases:
        if not isinstance(alias, str) or not alias.strip():
            raise ValueError(f"Timestamp key aliases must be non-empty strings, got {alias!r}")
        aliases.add(alias.strip().lower())
    return frozenset(aliases)


class TimestampExtractor:
    """Collects distinct instants stored under timestamp-like keys.

    A key matches when its lowercased name is one of ``key_aliases``; the
    ancestor path plays no part. Every nested dict or list is visited,
    including values of matching keys. Values that cannot be decoded are
    skipped silently.
    """

    def __init__(
        self,
        key_aliases: Iterable[str] | None = None,
        max_depth: int | None = None,
    ) -> None:
        self.key_aliases = _normalize_aliases(
            config.TIMESTAMP_KEYS if key_aliases is None else key_aliases
        )
        self.max_depth = config.MAX_DEPTH if max_depth is None else int(max_depth)
        if self.max_depth < 0:
            raise ValueError("max_depth must be zero or positive")

    def extract(self, document: Any) -> list[datetime]:
        found: dict[str, datetime] = {}
        if not self.key_aliases:
            return []

        stack: list[tuple[Any, int]] = [(document, 0)]
        while stack:
            node, depth = stack.pop()
            if depth > self.max_depth:
                raise DocumentTooDeepError(self.max_depth)

            if isinstance(node, dict):
                for key, value in node.items():
                    if value is None:
                        continue
                    if str(key).lower() in self.key_aliases:
                        decoded = decode_instant(value)
                        if decoded is not None:
                            found.setdefault(format_instant(decoded.instant), decoded.instant)
                        else:
                            logger.debug("Skipping undecodable value under key %r", key)
                    if isinstance(value, (dict, list)):
                        stack.append((value, depth + 1))
            elif isinstance(node, list):
                for item in node:
                    if isinstance(item, (dict, list)):
                        stack.append((item, depth + 1))

        return sorted(found.values())


def extract_timestamps(
    document: Any,
    key_aliases: Iterable[str] | None = None,
    max_depth: int | None = None,
) -> list[datetime]:
    """Return the sorted, deduplicated instants found in ``document``."""
    return TimestampExtractor(key_aliases=key_aliases, max_depth=max_depth).extract(document)
