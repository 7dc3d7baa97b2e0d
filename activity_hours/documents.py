"""Retrieval and JSON / NDJSON parsing of activity documents."""
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

import requests

from activity_hours import config
from activity_hours.errors import DocumentFetchError, DocumentParseError, DocumentTooDeepError

_LINE_SPLIT_RE = re.compile(r"\r?\n")


def fetch_document_text(
    url: str,
    *,
    timeout: float | None = None,
    session: requests.Session | None = None,
) -> str:
    http = session or requests
    try:
        res = http.get(url, timeout=timeout or config.FETCH_TIMEOUT_SECONDS)
    except requests.RequestException as exc:
        raise DocumentFetchError(f"Failed to fetch file: {exc}") from exc
    if not res.ok:
        raise DocumentFetchError(f"Failed to fetch file: {res.status_code}", status_code=res.status_code)
    return res.text


def parse_document(text: str) -> Any:
    """Parse a JSON document, falling back to one JSON value per line."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    except RecursionError as exc:
        raise DocumentTooDeepError() from exc

    lines = [line for line in _LINE_SPLIT_RE.split(text.strip()) if line.strip()]
    if not lines:
        raise DocumentParseError("File is not valid JSON or NDJSON")
    try:
        return [json.loads(line) for line in lines]
    except json.JSONDecodeError as exc:
        raise DocumentParseError("File is not valid JSON or NDJSON") from exc
    except RecursionError as exc:
        raise DocumentTooDeepError() from exc


def load_document(path: Path) -> Any:
    return parse_document(path.read_text(encoding="utf-8"))
