from __future__ import annotations

import logging
import os
import sys

try:
    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
except Exception:  # pragma: no cover - optional dependency resolution
    trace = None
    Resource = None
    TracerProvider = None
    BatchSpanProcessor = None
    ConsoleSpanExporter = None
    OTLPSpanExporter = None


logger = logging.getLogger("med_reminders.observability")


def _traces_exporter() -> str:
    return os.getenv("OTEL_TRACES_EXPORTER", "console").lower()


def init_observability(service_name: str = "medicine-reminders") -> bool:
    """Install a tracer provider. Returns True when tracing was set up here."""
    if "pytest" in sys.modules:
        return False
    if trace is None or TracerProvider is None:
        return False
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        return False

    exporter_name = _traces_exporter()
    if exporter_name == "none":
        return False

    resource = Resource.create({"service.name": os.getenv("OTEL_SERVICE_NAME", service_name)})
    provider = TracerProvider(resource=resource)

    otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if otlp_endpoint and OTLPSpanExporter is not None:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
        exporter_name = "otlp"
    elif exporter_name == "console":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    logger.info("tracing_enabled exporter=%s", exporter_name)
    return True
