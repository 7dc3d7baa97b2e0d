"""activity-hours FastAPI application entry point."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from activity_hours import config
from activity_hours.routers.analyze import analyze_router
from activity_hours.observability import initialize as initialize_observability, shutdown as shutdown_observability

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("activity_hours")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("activity-hours starting up")
    initialize_observability(app)
    yield
    logger.info("activity-hours shutting down")
    shutdown_observability(app)


app = FastAPI(
    title="activity-hours API",
    description="Estimate active hours from timestamped activity exports",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config.CORS_ORIGINS),
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(analyze_router)


@app.get("/api/health")
def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "openai": "configured" if config.OPENAI_API_KEY else "missing",
    }

