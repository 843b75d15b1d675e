"""OpenTelemetry wiring: tracer provider, exporters and library instrumentation.

The provider is created once in the lifespan and kept on app.state; the
service code only ever talks to the global tracer through tracing.traced().
"""

import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import Settings

logger = logging.getLogger(__name__)

# Probes are polled constantly and carry no useful trace.
_UNTRACED_URLS = "/api/v1/health,/api/v1/health/ready"


def _exporter(settings: Settings) -> SpanExporter | None:
    kind = settings.telemetry_exporter
    if kind == "none":
        return None
    if kind == "otlp":
        endpoint = settings.telemetry_otlp_endpoint
        if endpoint:
            return OTLPSpanExporter(endpoint=endpoint, insecure=endpoint.startswith("http://"))
        logger.warning("TELEMETRY_OTLP_ENDPOINT is not set; falling back to console exporter")
    elif kind != "console":
        logger.warning("Unknown telemetry exporter %r; using console", kind)
    return ConsoleSpanExporter()


def configure_tracing(settings: Settings) -> TracerProvider:
    """Build the tracer provider for this service and install it globally."""
    provider = TracerProvider(
        resource=Resource(
            attributes={
                SERVICE_NAME: settings.app_name,
                SERVICE_VERSION: settings.app_version,
                "deployment.environment": settings.environment,
            }
        ),
        sampler=TraceIdRatioBased(settings.telemetry_sample_rate),
    )
    exporter = _exporter(settings)
    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    logger.info(
        "Tracing enabled (exporter=%s, sample_rate=%s)",
        settings.telemetry_exporter,
        settings.telemetry_sample_rate,
    )
    return provider


def instrument(app: FastAPI, provider: TracerProvider, engine: AsyncEngine | None) -> None:
    """Instrument FastAPI requests, Redis commands and (when given) SQL statements."""
    FastAPIInstrumentor.instrument_app(
        app, tracer_provider=provider, excluded_urls=_UNTRACED_URLS
    )
    RedisInstrumentor().instrument(tracer_provider=provider)
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, tracer_provider=provider)


def shutdown_tracing(provider: TracerProvider) -> None:
    """Flush pending spans and stop the exporters."""
    provider.shutdown()
    logger.info("Tracing shut down")
