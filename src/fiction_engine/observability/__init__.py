"""
observability/__init__.py

PURPOSE: Opt-in OpenTelemetry tracing for turns and LLM calls.
DEPENDENCIES: opentelemetry-api, opentelemetry-sdk (optional)

ARCHITECTURE NOTES:
- Works without otel packages installed (no-op mode)
- Console span export when enabled, OTLP when an endpoint is configured
"""

from fiction_engine.observability.telemetry import (
    get_tracer,
    init_telemetry,
    shutdown_telemetry,
)

__all__ = ["init_telemetry", "get_tracer", "shutdown_telemetry"]
