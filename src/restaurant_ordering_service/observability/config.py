"""OpenTelemetry and logging setup.

Environment:
    OTEL_SERVICE_NAME: service name reported on spans and metrics
    OTEL_EXPORTER_OTLP_ENDPOINT: collector base URL (OTLP over HTTP)
    ENVIRONMENT: deployment environment; "test" disables every exporter
    LOG_LEVEL: overrides the level passed to configure_logging
"""

import logging
import os
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.botocore import BotocoreInstrumentor
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from pythonjsonlogger import jsonlogger

logger = logging.getLogger(__name__)

SERVICE_NAME = "ordering-svc"
DEFAULT_COLLECTOR = "http://localhost:4318"
METRIC_EXPORT_INTERVAL_MS = 60_000
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _collector_url(signal: str) -> str:
    base = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", DEFAULT_COLLECTOR).rstrip("/")
    return f"{base}/v1/{signal}"


def build_resource() -> Resource:
    """Identify this process to the collector."""
    return Resource.create(
        {
            "service.name": os.getenv("OTEL_SERVICE_NAME", SERVICE_NAME),
            "deployment.environment": os.getenv("ENVIRONMENT", "development"),
        }
    )


def _install_providers(resource: Resource, export: bool) -> None:
    tracer_provider = TracerProvider(resource=resource)
    readers = []

    if export:
        span_exporter = OTLPSpanExporter(endpoint=_collector_url("traces"))
        tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))
        readers.append(
            PeriodicExportingMetricReader(
                OTLPMetricExporter(endpoint=_collector_url("metrics")),
                export_interval_millis=METRIC_EXPORT_INTERVAL_MS,
            )
        )

    trace.set_tracer_provider(tracer_provider)
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=readers))

    if export:
        collector = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", DEFAULT_COLLECTOR)
        logger.info(f"Exporting traces and metrics to {collector}")
    else:
        logger.info("Telemetry exporters disabled")


def setup_observability(app: Any = None, enable_exporters: bool = True) -> None:
    """Install tracer and meter providers and instrument libraries.

    Outgoing httpx requests and botocore (DynamoDB) calls are always
    instrumented; the FastAPI app is instrumented when one is given.

    Args:
        app: Optional FastAPI application to instrument
        enable_exporters: Send telemetry to the OTLP collector. Ignored (treated
            as False) when ENVIRONMENT is "test".
    """
    export = enable_exporters and os.getenv("ENVIRONMENT", "development") != "test"
    _install_providers(build_resource(), export)

    HTTPXClientInstrumentor().instrument()
    BotocoreInstrumentor().instrument()
    if app is not None:
        FastAPIInstrumentor.instrument_app(app)


def configure_logging(log_level: str = "INFO") -> None:
    """Send every log record to stdout/stderr as one JSON object per line.

    Existing root handlers are replaced so repeated calls (warm Lambda
    containers) do not duplicate output.
    """
    level_name = os.getenv("LOG_LEVEL", log_level).upper()

    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT, timestamp=True))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level_name, logging.INFO))

    logger.debug(f"JSON logging enabled at {level_name}")
