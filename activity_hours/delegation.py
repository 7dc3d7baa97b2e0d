"""Secondary total-hours estimate from an OpenAI chat model.

The compact payload built by ``compact_for_delegation`` is sent as the user
message; the model is asked to run the same session algorithm and answer with
strict JSON. The answer is returned as-is and never trusted or validated.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from openai import OpenAI, OpenAIError

from activity_hours import config
from activity_hours.errors import DelegationError

logger = logging.getLogger("activity_hours.delegation")

SYSTEM_PROMPT = """
You are given JSON with an array "timestamps" (ISO 8601 strings) sorted earliest->latest and a "gap_minutes" threshold.
A "session" ends when the gap between consecutive timestamps is >= gap_minutes.
Total time = sum over sessions of (last - first). If a session would be under one minute, count it as 1 minute.
Return STRICT JSON: {"total_hours": number, "sessions": number, "first": isoOrNull, "last": isoOrNull }.
""".strip()


def build_client(api_key: str, timeout: float | None = None) -> OpenAI:
    return OpenAI(api_key=api_key, timeout=timeout or config.OPENAI_TIMEOUT_SECONDS)


def _parse_reply(text: str) -> dict[str, Any]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Model reply was not JSON; returning raw text")
        return {"raw": text}
    if not isinstance(payload, dict):
        return {"raw": text}
    return payload


def estimate_with_llm(
    compact: dict[str, Any],
    *,
    api_key: str | None = None,
    model: str | None = None,
    client: Any | None = None,
) -> dict[str, Any]:
    """Ask the model for ``{total_hours, sessions, first, last}``."""
    if client is None:
        key = api_key if api_key is not None else config.OPENAI_API_KEY
        if not key:
            raise DelegationError("OPENAI_API_KEY missing")
        client = build_client(key)

    selected_model = model or config.OPENAI_MODEL
    try:
        completion = client.chat.completions.create(
            model=selected_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": json.dumps(compact)},
            ],
            response_format={"type": "json_object"},
            temperature=0,
        )
    except OpenAIError as exc:
        raise DelegationError(f"OpenAI error: {exc}") from exc

    choices = getattr(completion, "choices", None) or []
    text = ""
    if choices:
        text = (choices[0].message.content or "").strip()
    return _parse_reply(text or "{}")
