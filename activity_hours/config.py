"""activity-hours configuration."""
import os


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    items = tuple(token.strip() for token in value.split(",") if token.strip())
    return items or default


DEFAULT_TIMESTAMP_KEYS: tuple[str, ...] = (
    "created",
    "created_at",
    "timestamp",
    "ts",
    "time",
    "date",
    "create_time",
    "update_time",
    "modified_at",
    "last_activity_time",
)

# Session detection
GAP_MINUTES = _env_float("ACTIVITY_HOURS_GAP_MINUTES", 30.0)
SAMPLE_LIMIT = _env_int("ACTIVITY_HOURS_SAMPLE_LIMIT", 1000)
MAX_DEPTH = _env_int("ACTIVITY_HOURS_MAX_DEPTH", 512)
TIMESTAMP_KEYS = _env_list("ACTIVITY_HOURS_TIMESTAMP_KEYS", DEFAULT_TIMESTAMP_KEYS)

# Remote documents
FETCH_TIMEOUT_SECONDS = _env_float("ACTIVITY_HOURS_FETCH_TIMEOUT_SECONDS", 30.0)

# Delegation
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("ACTIVITY_HOURS_OPENAI_MODEL", "gpt-4o-mini")
OPENAI_TIMEOUT_SECONDS = _env_float("ACTIVITY_HOURS_OPENAI_TIMEOUT_SECONDS", 60.0)

# Observability
OTEL_ENABLED = _env_bool("ACTIVITY_HOURS_OTEL_ENABLED", False)
OTEL_ENDPOINT = os.getenv("ACTIVITY_HOURS_OTEL_ENDPOINT", "http://localhost:4318")
OTEL_SERVICE_NAME = os.getenv("ACTIVITY_HOURS_OTEL_SERVICE_NAME", "activity-hours")
PROM_PORT = _env_int("ACTIVITY_HOURS_PROM_PORT", 9464)

# CORS
CORS_ORIGINS = _env_list("ACTIVITY_HOURS_CORS_ORIGINS", ("*",))
