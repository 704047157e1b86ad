import logging
import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

# OpenTelemetry
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from shared.config.settings import Settings, get_settings


# 1. Structlog Processor: Injects Trace/Span IDs into every log line
def add_otel_ids(logger, log_method, event_dict):
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = trace.format_trace_id(ctx.trace_id)
        event_dict["span_id"] = trace.format_span_id(ctx.span_id)
    return event_dict


# 2. Configure Structlog for JSON output
def configure_logging():
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_otel_ids,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


# 3. Configure OpenTelemetry Tracing
def configure_tracing(app: FastAPI, service_name: str, otlp_endpoint: str):
    resource = Resource.create({SERVICE_NAME: service_name})
    provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(provider)

    # Export to Jaeger via OTLP gRPC
    exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
    provider.add_span_processor(BatchSpanProcessor(exporter))

    # Creates spans for all incoming requests
    FastAPIInstrumentor.instrument_app(app)


# 4. Configure Prometheus Metrics
def configure_metrics(app: FastAPI):
    # HTTP latency and status codes, exposed at /metrics
    Instrumentator().instrument(app).expose(app)


def setup_observability(app: FastAPI, service_name: str, settings: Settings | None = None):
    """
    Bootstraps Logging, Tracing, and Metrics for a FastAPI app.

    Logging is always configured. Tracing and /metrics are skipped when
    OBSERVABILITY_ENABLED is false (local runs and the test-suite).
    """
    settings = settings or get_settings()
    configure_logging()
    if not settings.observability_enabled:
        return
    configure_tracing(app, service_name, settings.otlp_endpoint)
    configure_metrics(app)
