"""OpenTelemetry + Prometheus fallback wiring for activity-hours."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any

from fastapi import FastAPI

from activity_hours import config

logger = logging.getLogger("activity_hours.observability")


_initialized = False
_enabled = False
_tracer: Any | None = None
_trace_provider: Any | None = None
_meter_provider: Any | None = None
_fastapi_instrumentor: Any | None = None

_analysis_counter: Any | None = None
_analysis_latency_hist: Any | None = None
_events_hist: Any | None = None
_delegation_failure_counter: Any | None = None

_prom_enabled = False
_prom_analysis_counter: Any | None = None
_prom_analysis_latency_hist: Any | None = None
_prom_events_hist: Any | None = None
_prom_delegation_failure_counter: Any | None = None


def _normalize_otlp_endpoint(base_endpoint: str, signal_path: str) -> str:
    endpoint = (base_endpoint or "").strip()
    if not endpoint:
        return ""
    if endpoint.endswith(signal_path):
        return endpoint
    if endpoint.endswith("/"):
        endpoint = endpoint[:-1]
    if endpoint.endswith("/v1"):
        return f"{endpoint}{signal_path[3:]}"
    return f"{endpoint}{signal_path}"


def initialize(app: FastAPI | None = None) -> None:
    global _initialized, _enabled, _tracer, _trace_provider, _meter_provider, _fastapi_instrumentor
    global _analysis_counter, _analysis_latency_hist, _events_hist, _delegation_failure_counter
    global _prom_enabled
    global _prom_analysis_counter, _prom_analysis_latency_hist, _prom_events_hist
    global _prom_delegation_failure_counter

    if _initialized:
        if _enabled and app and _fastapi_instrumentor:
            _fastapi_instrumentor.instrument_app(app)
        return

    _initialized = True

    if not config.OTEL_ENABLED:
        logger.info("OpenTelemetry disabled (ACTIVITY_HOURS_OTEL_ENABLED=false)")
        return

    try:
        from opentelemetry import metrics, trace
        from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
        from opentelemetry.sdk.metrics import MeterProvider
        from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor
    except ImportError as exc:
        logger.warning("OpenTelemetry dependencies unavailable: %s", exc)
        return

    traces_endpoint = _normalize_otlp_endpoint(config.OTEL_ENDPOINT, "/v1/traces")
    metrics_endpoint = _normalize_otlp_endpoint(config.OTEL_ENDPOINT, "/v1/metrics")
    service_name = config.OTEL_SERVICE_NAME or "activity-hours"

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.namespace": "activity-hours",
        }
    )

    trace_provider = TracerProvider(resource=resource)
    trace_exporter = OTLPSpanExporter(endpoint=traces_endpoint or None)
    trace_provider.add_span_processor(BatchSpanProcessor(trace_exporter))
    trace.set_tracer_provider(trace_provider)
    tracer = trace.get_tracer("activity_hours")

    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=metrics_endpoint or None)
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(meter_provider)
    meter = metrics.get_meter("activity_hours")

    _analysis_counter = meter.create_counter(
        "activity_hours_analyses_total",
        unit="1",
        description="Count of analyze requests by outcome",
    )
    _analysis_latency_hist = meter.create_histogram(
        "activity_hours_analysis_latency_ms",
        unit="ms",
        description="Latency of fetch, extraction and aggregation",
    )
    _events_hist = meter.create_histogram(
        "activity_hours_events_extracted",
        unit="1",
        description="Distinct instants extracted per document",
    )
    _delegation_failure_counter = meter.create_counter(
        "activity_hours_delegation_failures_total",
        unit="1",
        description="Count of failed language-model estimates",
    )

    _trace_provider = trace_provider
    _meter_provider = meter_provider
    _tracer = tracer
    _fastapi_instrumentor = FastAPIInstrumentor()
    _enabled = True

    if app:
        _fastapi_instrumentor.instrument_app(app)

    if config.PROM_PORT > 0:
        try:
            from prometheus_client import Counter, Histogram, start_http_server

            start_http_server(config.PROM_PORT)
            _prom_enabled = True
            _prom_analysis_counter = Counter(
                "activity_hours_analyses_total",
                "Count of analyze requests by outcome",
                ["result"],
            )
            _prom_analysis_latency_hist = Histogram(
                "activity_hours_analysis_latency_ms",
                "Latency of fetch, extraction and aggregation",
                ["result"],
            )
            _prom_events_hist = Histogram(
                "activity_hours_events_extracted",
                "Distinct instants extracted per document",
            )
            _prom_delegation_failure_counter = Counter(
                "activity_hours_delegation_failures_total",
                "Count of failed language-model estimates",
                ["model"],
            )
            logger.info("Prometheus fallback metrics server listening on port %s", config.PROM_PORT)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Prometheus fallback not started: %s", exc)
            _prom_enabled = False

    logger.info(
        "OpenTelemetry initialized (service=%s endpoint=%s)",
        service_name,
        config.OTEL_ENDPOINT,
    )


def shutdown(app: FastAPI | None = None) -> None:
    global _enabled
    if not _initialized:
        return
    try:
        if app and _fastapi_instrumentor:
            _fastapi_instrumentor.uninstrument_app(app)
    except Exception:
        logger.debug("FastAPI uninstrument failed", exc_info=True)
    try:
        if _meter_provider is not None:
            _meter_provider.shutdown()
    except Exception:
        logger.debug("Meter provider shutdown failed", exc_info=True)
    try:
        if _trace_provider is not None:
            _trace_provider.shutdown()
    except Exception:
        logger.debug("Trace provider shutdown failed", exc_info=True)
    _enabled = False


@contextmanager
def start_span(name: str, attributes: dict[str, Any] | None = None):
    if not _enabled or _tracer is None:
        yield None
        return
    with _tracer.start_as_current_span(name) as span:
        if attributes:
            for key, value in attributes.items():
                if value is not None:
                    span.set_attribute(key, value)
        yield span


def record_analysis(result: str, duration_ms: float, *, event_count: int = 0) -> None:
    labels = {"result": result or "unknown"}
    latency = max(0.0, float(duration_ms))
    if _enabled and _analysis_counter is not None:
        _analysis_counter.add(1, labels)
    if _enabled and _analysis_latency_hist is not None:
        _analysis_latency_hist.record(latency, labels)
    if _enabled and _events_hist is not None and result == "success":
        _events_hist.record(max(0, int(event_count)))
    if _prom_enabled and _prom_analysis_counter is not None:
        _prom_analysis_counter.labels(**labels).inc()
    if _prom_enabled and _prom_analysis_latency_hist is not None:
        _prom_analysis_latency_hist.labels(**labels).observe(latency)
    if _prom_enabled and _prom_events_hist is not None and result == "success":
        _prom_events_hist.observe(max(0, int(event_count)))


def record_delegation_failure(model: str) -> None:
    labels = {"model": (model or "unknown").strip() or "unknown"}
    if _enabled and _delegation_failure_counter is not None:
        _delegation_failure_counter.add(1, labels)
    if _prom_enabled and _prom_delegation_failure_counter is not None:
        _prom_delegation_failure_counter.labels(**labels).inc()
