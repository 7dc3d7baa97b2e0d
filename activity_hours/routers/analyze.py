"""Analyze API router."""
from __future__ import annotations

import logging
import time

from fastapi import APIRouter, HTTPException

from activity_hours import config
from activity_hours.analysis import analyze_document
from activity_hours.delegation import estimate_with_llm
from activity_hours.documents import fetch_document_text, parse_document
from activity_hours.errors import (
    DelegationError,
    DocumentFetchError,
    DocumentParseError,
    DocumentTooDeepError,
    InvalidGapThresholdError,
)
from activity_hours.models import AnalyzeRequest, AnalyzeResponse, SessionSummaryModel
from activity_hours.observability import record_analysis, record_delegation_failure, start_span
from activity_hours.sessions import gap_from_minutes

logger = logging.getLogger("activity_hours.analyze")

analyze_router = APIRouter(prefix="/api", tags=["analyze"])


def _elapsed_ms(started: float) -> float:
    return (time.monotonic() - started) * 1000


@analyze_router.post("/analyze", response_model=AnalyzeResponse)
def analyze(req: AnalyzeRequest) -> AnalyzeResponse:
    """Fetch a JSON/NDJSON activity export and summarize its active time."""
    started = time.monotonic()
    file_url = (req.fileUrl or "").strip()
    if not file_url:
        raise HTTPException(status_code=400, detail="fileUrl is required")
    if req.useOpenAI and not config.OPENAI_API_KEY:
        raise HTTPException(status_code=400, detail="OPENAI_API_KEY missing")

    try:
        gap = gap_from_minutes(req.gapMinutes if req.gapMinutes is not None else config.GAP_MINUTES)
    except InvalidGapThresholdError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        with start_span("analyze.fetch", {"source": file_url}):
            text = fetch_document_text(file_url)
        document = parse_document(text)
    except (DocumentFetchError, DocumentParseError) as exc:
        record_analysis("input_error", _elapsed_ms(started))
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except DocumentTooDeepError as exc:
        record_analysis("too_deep", _elapsed_ms(started))
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    try:
        with start_span("analyze.extract"):
            analysis = analyze_document(document, gap=gap)
    except DocumentTooDeepError as exc:
        record_analysis("too_deep", _elapsed_ms(started))
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    summary = analysis.summary
    record_analysis("success", _elapsed_ms(started), event_count=summary.event_count)
    logger.info(
        "Analyzed %s: %d events, %d sessions, %.2f hours",
        req.filename or file_url,
        summary.event_count,
        summary.session_count,
        summary.total_hours,
    )

    estimate = None
    estimate_error = None
    if req.useOpenAI:
        try:
            with start_span("analyze.delegate", {"model": config.OPENAI_MODEL}):
                estimate = estimate_with_llm(analysis.compact, api_key=config.OPENAI_API_KEY)
        except DelegationError as exc:
            logger.warning("Language-model estimate failed: %s", exc)
            record_delegation_failure(config.OPENAI_MODEL)
            estimate_error = str(exc)

    return AnalyzeResponse(
        summary=SessionSummaryModel(**summary.to_dict()),
        openai=estimate,
        openaiError=estimate_error,
        filename=req.filename,
        source=file_url,
    )
