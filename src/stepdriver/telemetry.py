"""OpenTelemetry tracing for script runs.

The runner opens one span per run and one per executed step through the
global tracer. Nothing is exported unless ``init_telemetry`` installs a
provider, which happens when ``OTEL_ENABLED=true``. Spans go to an OTLP gRPC
endpoint, or to stderr when ``OTEL_EXPORTER=console``.
"""

import logging
import os

logger = logging.getLogger(__name__)

_initialized = False


def _enabled() -> bool:
    return os.getenv("OTEL_ENABLED", "false").lower() == "true"


def init_telemetry() -> bool:
    """Install a tracer provider if tracing is enabled; return whether it was."""
    global _initialized

    if not _enabled():
        logger.debug("OpenTelemetry tracing disabled (OTEL_ENABLED=false)")
        return False

    service_name = os.getenv("OTEL_SERVICE_NAME", "stepdriver")
    exporter_name = os.getenv("OTEL_EXPORTER", "otlp").lower()
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "")

    if exporter_name != "console" and not endpoint:
        logger.warning(
            "OTEL_ENABLED=true but OTEL_EXPORTER_OTLP_ENDPOINT not set. "
            "Skipping OpenTelemetry initialization."
        )
        return False

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )

        resource = Resource.create(
            {
                "service.name": service_name,
                "deployment.environment": os.getenv("ENVIRONMENT", "development"),
            }
        )
        provider = TracerProvider(resource=resource)

        if exporter_name == "console":
            provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
        else:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                OTLPSpanExporter,
            )

            exporter = OTLPSpanExporter(endpoint=endpoint, insecure=True)
            provider.add_span_processor(BatchSpanProcessor(exporter))

        trace.set_tracer_provider(provider)
        _initialized = True
        logger.info(
            "OpenTelemetry initialized: service=%s, exporter=%s", service_name, exporter_name
        )
        return True

    except ImportError as e:
        logger.error(
            "OpenTelemetry packages not installed: %s. "
            "Install with: pip install 'stepdriver[otlp]'",
            e,
        )
    return False


def shutdown_telemetry() -> None:
    """Flush and shut down the tracer provider installed by ``init_telemetry``."""
    global _initialized

    if not _initialized:
        return

    from opentelemetry import trace

    provider = trace.get_tracer_provider()
    if hasattr(provider, "shutdown"):
        provider.shutdown()
        logger.info("OpenTelemetry tracer provider shut down")
    _initialized = False
