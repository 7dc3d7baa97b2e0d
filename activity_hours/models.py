"""Pydantic models for the analyze API."""
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Any, Optional


# ── Request models ─────────────────────────────────────────────────

class AnalyzeRequest(BaseModel):
    fileUrl: str = ""
    filename: Optional[str] = None
    useOpenAI: bool = False
    gapMinutes: Optional[float] = None


# ── Summary models ─────────────────────────────────────────────────

class SessionSpan(BaseModel):
    start: Optional[str] = None
    end: Optional[str] = None
    event_count: int = 0
    duration_ms: int = 0


class SessionSummaryModel(BaseModel):
    total_hours: float = 0.0
    total_duration_ms: int = 0
    session_count: int = 0
    event_count: int = 0
    first: Optional[str] = None
    last: Optional[str] = None
    sessions: list[SessionSpan] = Field(default_factory=list)


class AnalyzeResponse(BaseModel):
    summary: SessionSummaryModel
    openai: Optional[dict[str, Any]] = None  # unverified model estimate
    openaiError: Optional[str] = None
    filename: Optional[str] = None
    source: str = ""
