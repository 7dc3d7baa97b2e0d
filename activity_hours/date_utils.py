"""Instant decoding and formatting helpers.

Every timestamp the extractor sees goes through ``decode_instant``, which
recognizes exactly three encodings:

* ISO-8601-like date/time strings (plus a few common fallback layouts),
* Unix epoch seconds (values above 1e9),
* Unix epoch milliseconds (values above 1e12),

and returns a ``DecodedInstant`` tagged with the encoding that produced it, or
``None`` when the value is not a usable timestamp. Instants are always
timezone-aware UTC datetimes truncated to millisecond precision, so two
encodings of the same moment compare equal.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NUMERIC_RE = re.compile(r"^\d+(\.\d+)?$")
_EPOCH_DIGITS_RE = re.compile(r"^\d{10,13}(\.\d+)?$")
_MILLISECONDS_THRESHOLD = 1e12
_SECONDS_THRESHOLD = 1e9
_FALLBACK_FORMATS = (
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
)


class InstantEncoding(str, Enum):
    ISO_STRING = "iso_string"
    EPOCH_SECONDS = "epoch_seconds"
    EPOCH_MILLISECONDS = "epoch_milliseconds"


@dataclass(frozen=True)
class DecodedInstant:
    instant: datetime
    encoding: InstantEncoding


def _to_utc_millis(value: datetime) -> datetime:
    dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.replace(microsecond=(dt.microsecond // 1000) * 1000)


def _parse_datetime_token(token: str) -> datetime | None:
    cleaned = token.strip()
    if not cleaned:
        return None
    iso_token = cleaned[:-1] + "+00:00" if cleaned[-1] in "Zz" else cleaned
    try:
        return datetime.fromisoformat(iso_token)
    except ValueError:
        pass
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    # RFC 2822, e.g. "Mon, 01 Jan 2024 10:00:00 GMT"
    try:
        return parsedate_to_datetime(cleaned)
    except (TypeError, ValueError, IndexError):
        return None


def _from_epoch(value: float) -> DecodedInstant | None:
    if math.isnan(value) or math.isinf(value):
        return None
    if value > _MILLISECONDS_THRESHOLD:
        millis = math.trunc(value)
        encoding = InstantEncoding.EPOCH_MILLISECONDS
    elif value > _SECONDS_THRESHOLD:
        millis = round(value * 1000)
        encoding = InstantEncoding.EPOCH_SECONDS
    else:
        return None
    try:
        return DecodedInstant(_EPOCH + timedelta(milliseconds=millis), encoding)
    except OverflowError:
        return None


def _decode_string(value: str) -> DecodedInstant | None:
    token = value.strip()
    if not token:
        return None
    if _NUMERIC_RE.match(token):
        # Digit-only strings are never calendar dates here.
        if not _EPOCH_DIGITS_RE.match(token):
            return None
        return _from_epoch(float(token))
    parsed = _parse_datetime_token(token)
    if parsed is None:
        return None
    try:
        return DecodedInstant(_to_utc_millis(parsed), InstantEncoding.ISO_STRING)
    except (OverflowError, ValueError):
        return None


def decode_instant(value: Any) -> DecodedInstant | None:
    """Decode a raw JSON value into a tagged instant, or ``None``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return _from_epoch(float(value))
        except OverflowError:
            return None
    if isinstance(value, str):
        return _decode_string(value)
    return None


def to_instant(value: Any) -> datetime | None:
    decoded = decode_instant(value)
    return decoded.instant if decoded else None


def format_instant(value: datetime) -> str:
    """Canonical ISO form, e.g. ``2024-01-01T00:00:00.000Z``."""
    dt = _to_utc_millis(value)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_optional_instant(value: datetime | None) -> str | None:
    if value is None:
        return None
    return format_instant(value)
