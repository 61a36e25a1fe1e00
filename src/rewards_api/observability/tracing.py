from __future__ import annotations

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.semconv.resource import ResourceAttributes

from rewards_api.core.settings import settings

_TRACER_PROVIDER: TracerProvider | None = None


def _build_exporter() -> SpanExporter:
    if settings.otel_exporter_otlp_endpoint:
        return OTLPSpanExporter(
            endpoint=settings.otel_exporter_otlp_endpoint,
            headers=settings.otlp_headers or None,
        )
    return ConsoleSpanExporter()


def _get_tracer_provider(*, service_name: str, service_version: str, environment: str) -> TracerProvider:
    global _TRACER_PROVIDER

    if _TRACER_PROVIDER is None:
        resource = Resource.create(
            {
                ResourceAttributes.SERVICE_NAME: service_name,
                ResourceAttributes.SERVICE_VERSION: service_version,
                ResourceAttributes.DEPLOYMENT_ENVIRONMENT: environment,
            }
        )
        provider = TracerProvider(resource=resource)
        provider.add_span_processor(BatchSpanProcessor(_build_exporter()))
        trace.set_tracer_provider(provider)
        LoggingInstrumentor().instrument(set_logging_format=False)
        _TRACER_PROVIDER = provider
    return _TRACER_PROVIDER


def configure_tracing(
    app: FastAPI,
    *,
    service_name: str,
    service_version: str,
    environment: str,
) -> bool:
    """Instrument the app with OpenTelemetry spans; returns False when tracing is switched off."""

    if not settings.tracing_enabled:
        return False

    provider = _get_tracer_provider(
        service_name=service_name,
        service_version=service_version,
        environment=environment,
    )
    FastAPIInstrumentor.instrument_app(app, tracer_provider=provider)
    return True


__all__ = ["configure_tracing"]
