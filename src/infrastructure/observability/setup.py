"""OpenTelemetry and structlog setup."""

import logging
from typing import TYPE_CHECKING

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ParentBasedTraceIdRatio

from src.infrastructure.observability.structlog_processor import add_trace_context

if TYPE_CHECKING:
    from fastapi import FastAPI

_tracer_provider: TracerProvider | None = None
_initialized: bool = False


def init_observability(
    service_name: str,
    service_version: str,
    *,
    otlp_endpoint: str | None = None,
    console_export: bool = False,
    enabled: bool = True,
    sample_rate: float = 1.0,
    debug: bool = False,
    app: "FastAPI | None" = None,
) -> None:
    """Configure structlog and, when enabled, OpenTelemetry tracing.

    Logging is always configured. Tracing installs a global tracer provider
    exporting to an OTLP collector and/or the console, and instruments
    FastAPI and outgoing httpx calls (the OpenAI client uses httpx).

    Calling this more than once is a no-op until shutdown_observability().

    Args:
        service_name: Service name resource attribute.
        service_version: Service version resource attribute.
        otlp_endpoint: OTLP/HTTP collector base URL, e.g. "http://localhost:4318".
        console_export: Also print spans to stdout.
        enabled: When False, no tracer provider is installed and spans are
            non-recording.
        sample_rate: Trace sampling ratio between 0.0 and 1.0.
        debug: Log at DEBUG instead of INFO.
        app: FastAPI application to instrument.
    """
    global _tracer_provider, _initialized

    if _initialized:
        return

    _configure_structlog(logging.DEBUG if debug else logging.INFO)

    if not enabled:
        # The default proxy provider hands out non-recording spans
        _initialized = True
        return

    resource = Resource.create(
        {
            SERVICE_NAME: service_name,
            SERVICE_VERSION: service_version,
        }
    )
    _tracer_provider = TracerProvider(
        resource=resource, sampler=ParentBasedTraceIdRatio(sample_rate)
    )

    if console_export:
        _tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    if otlp_endpoint:
        exporter = OTLPSpanExporter(endpoint=f"{otlp_endpoint}/v1/traces")
        _tracer_provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(_tracer_provider)

    if app is not None:
        FastAPIInstrumentor.instrument_app(app)
    HTTPXClientInstrumentor().instrument()

    _initialized = True


def shutdown_observability() -> None:
    """Flush pending spans and allow re-initialization."""
    global _tracer_provider, _initialized

    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        _tracer_provider = None

    _initialized = False


def _configure_structlog(level: int) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", level=level)
