"""
telemetry.py

PURPOSE: Tracer setup for the engine's turn loop and LLM collaborators.
DEPENDENCIES: opentelemetry-api, opentelemetry-sdk, opentelemetry-exporter-otlp (all optional)

ARCHITECTURE NOTES:
Modules grab a tracer at import time with get_tracer(__name__). The tracer
is lazy: until init_telemetry() has installed a provider, every span is a
no-op, so engine code never needs to check whether tracing is on.

Span names in use:
    engine.process_command   one per player turn
    llm.complete             free-text completion
    llm.complete_json        tool-use structured completion
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from fiction_engine.config import OpenTelemetrySettings

logger = logging.getLogger(__name__)

_initialized = False
_tracer_provider: object | None = None


class Span(Protocol):
    """The subset of the otel span API the engine uses."""

    def __enter__(self) -> Span: ...
    def __exit__(self, *args: object) -> None: ...
    def set_attribute(self, key: str, value: object) -> None: ...
    def record_exception(self, exception: BaseException) -> None: ...


class Tracer(Protocol):
    def start_as_current_span(self, name: str, **kwargs: object) -> Span: ...


class NoOpSpan:
    """Span stand-in used while tracing is off."""

    def __enter__(self) -> Span:
        return self

    def __exit__(self, *args: object) -> None:
        pass

    def set_attribute(self, key: str, value: object) -> None:  # noqa: ARG002
        pass

    def record_exception(self, exception: BaseException) -> None:  # noqa: ARG002
        pass


class NoOpTracer:
    def start_as_current_span(
        self,
        name: str,  # noqa: ARG002
        **kwargs: object,  # noqa: ARG002
    ) -> Span:
        return NoOpSpan()


class LazyTracer:
    """Resolves the real tracer on each span, so import order doesn't matter."""

    def __init__(self, name: str) -> None:
        self._name = name

    def _resolve(self) -> Tracer:
        if not _initialized or _tracer_provider is None:
            return NoOpTracer()

        from opentelemetry import trace

        return trace.get_tracer(self._name)  # type: ignore[return-value]

    def start_as_current_span(self, name: str, **kwargs: object) -> Span:
        return self._resolve().start_as_current_span(name, **kwargs)


def init_telemetry(settings: OpenTelemetrySettings) -> None:
    """
    Install a tracer provider if tracing is enabled.

    Safe to call when the otel packages are missing (logs a warning and
    stays in no-op mode). Only the first call has any effect.
    """
    global _initialized, _tracer_provider

    if _initialized:
        return

    _initialized = True
    if not settings.enabled:
        logger.debug("Tracing disabled")
        return

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
    except ImportError:
        logger.warning(
            "Tracing requested but OpenTelemetry is not installed. "
            "Install with: pip install fiction-engine[observability]"
        )
        return

    provider = TracerProvider(resource=Resource.create({"service.name": settings.service_name}))

    if settings.endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        except ImportError:
            logger.warning("OTLP exporter not installed, exporting spans to console")
            provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        else:
            provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.endpoint))
            )
            logger.info(f"Exporting spans to {settings.endpoint}")
    else:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer_provider = provider
    logger.info(f"Tracing enabled for {settings.service_name}")


def get_tracer(name: str) -> Tracer:
    """Tracer for a module; call with __name__."""
    return LazyTracer(name)


def shutdown_telemetry() -> None:
    """Flush pending spans and return to no-op mode."""
    global _initialized, _tracer_provider

    shutdown = getattr(_tracer_provider, "shutdown", None)
    if shutdown is not None:
        shutdown()
        logger.debug("Tracer provider shut down")

    _tracer_provider = None
    _initialized = False
