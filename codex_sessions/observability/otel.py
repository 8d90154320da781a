"""OpenTelemetry + Prometheus fallback wiring for the session catalog."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any

from fastapi import FastAPI

from codex_sessions import config

logger = logging.getLogger("codex_sessions.observability")


_initialized = False
_enabled = False
_tracer: Any | None = None
_trace_provider: Any | None = None
_meter_provider: Any | None = None
_fastapi_instrumentor: Any | None = None

_listing_counter: Any | None = None
_listing_latency_hist: Any | None = None
_parser_failure_counter: Any | None = None
_deletion_counter: Any | None = None

_prom_enabled = False
_prom_listing_counter: Any | None = None
_prom_listing_latency_hist: Any | None = None
_prom_parser_failure_counter: Any | None = None
_prom_deletion_counter: Any | None = None


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


def _label(value: str) -> str:
    return (value or "").strip() or "unknown"


def initialize(app: FastAPI | None = None) -> None:
    global _initialized, _enabled, _tracer, _trace_provider, _meter_provider, _fastapi_instrumentor
    global _listing_counter, _listing_latency_hist, _parser_failure_counter, _deletion_counter
    global _prom_enabled
    global _prom_listing_counter, _prom_listing_latency_hist, _prom_parser_failure_counter, _prom_deletion_counter

    if _initialized:
        if _enabled and app and _fastapi_instrumentor:
            _fastapi_instrumentor.instrument_app(app)
        return

    _initialized = True

    if not config.OTEL_ENABLED:
        logger.info("OpenTelemetry disabled (CODEX_SESSIONS_OTEL_ENABLED=false)")
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
    service_name = config.OTEL_SERVICE_NAME or "codex-sessions"

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.namespace": "codex_sessions",
        }
    )

    trace_provider = TracerProvider(resource=resource)
    trace_exporter = OTLPSpanExporter(endpoint=traces_endpoint or None)
    trace_provider.add_span_processor(BatchSpanProcessor(trace_exporter))
    trace.set_tracer_provider(trace_provider)
    tracer = trace.get_tracer("codex_sessions")

    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=metrics_endpoint or None)
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(meter_provider)
    meter = metrics.get_meter("codex_sessions")

    _listing_counter = meter.create_counter(
        "codex_sessions_listings_total",
        unit="1",
        description="Count of session root listings",
    )
    _listing_latency_hist = meter.create_histogram(
        "codex_sessions_listing_latency_ms",
        unit="ms",
        description="Latency of session root listings",
    )
    _parser_failure_counter = meter.create_counter(
        "codex_sessions_parser_failures_total",
        unit="1",
        description="Count of session files that failed to parse",
    )
    _deletion_counter = meter.create_counter(
        "codex_sessions_deletions_total",
        unit="1",
        description="Session file deletion outcomes",
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
            _prom_listing_counter = Counter(
                "codex_sessions_listings_total",
                "Count of session root listings",
                ["root", "result"],
            )
            _prom_listing_latency_hist = Histogram(
                "codex_sessions_listing_latency_ms",
                "Latency of session root listings",
                ["root", "result"],
            )
            _prom_parser_failure_counter = Counter(
                "codex_sessions_parser_failures_total",
                "Count of session files that failed to parse",
                ["parser"],
            )
            _prom_deletion_counter = Counter(
                "codex_sessions_deletions_total",
                "Session file deletion outcomes",
                ["result"],
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
        pass
    try:
        if _meter_provider is not None:
            _meter_provider.shutdown()
    except Exception:
        pass
    try:
        if _trace_provider is not None:
            _trace_provider.shutdown()
    except Exception:
        pass
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


def record_listing(root: str, result: str, duration_ms: float, *, count: int = 0) -> None:
    labels = {"root": _label(root), "result": _label(result)}
    if _enabled and _listing_counter is not None:
        _listing_counter.add(1, labels)
    if _enabled and _listing_latency_hist is not None:
        _listing_latency_hist.record(max(0.0, float(duration_ms)), labels)
    if _prom_enabled and _prom_listing_counter is not None:
        _prom_listing_counter.labels(**labels).inc()
    if _prom_enabled and _prom_listing_latency_hist is not None:
        _prom_listing_latency_hist.labels(**labels).observe(max(0.0, float(duration_ms)))
    logger.debug("Listed %s root (%s): %d entries in %.1fms", root, result, count, duration_ms)


def record_parser_failure(parser: str) -> None:
    labels = {"parser": _label(parser)}
    if _enabled and _parser_failure_counter is not None:
        _parser_failure_counter.add(1, labels)
    if _prom_enabled and _prom_parser_failure_counter is not None:
        _prom_parser_failure_counter.labels(**labels).inc()


def record_deletion(result: str) -> None:
    labels = {"result": _label(result)}
    if _enabled and _deletion_counter is not None:
        _deletion_counter.add(1, labels)
    if _prom_enabled and _prom_deletion_counter is not None:
        _prom_deletion_counter.labels(**labels).inc()
