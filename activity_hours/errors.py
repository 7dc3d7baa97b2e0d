"""Exception types raised by activity-hours."""
from __future__ import annotations


class ActivityHoursError(Exception):
    """Base class for all activity-hours errors."""


class DocumentTooDeepError(ActivityHoursError):
    def __init__(self, max_depth: int | None = None) -> None:
        if max_depth is None:
            super().__init__("Document is too deeply nested to parse")
        else:
            super().__init__(f"Document is too deeply nested (max depth {max_depth})")
        self.max_depth = max_depth


class InvalidGapThresholdError(ActivityHoursError, ValueError):
    """Raised for a zero or negative inactivity gap."""


class DocumentFetchError(ActivityHoursError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DocumentParseError(ActivityHoursError, ValueError):
    """Raised when text is neither JSON nor NDJSON."""


class DelegationError(ActivityHoursError):
    """Raised when the language-model estimate cannot be obtained."""
