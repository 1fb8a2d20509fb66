"""OpenTelemetry tracing helpers for chatshell.

The rest of the codebase calls ``get_tracer()`` without caring whether the
SDK is installed.  Without a configured SDK the API hands back no-op
tracers, so spans cost next to nothing.

Usage::

    from chatshell.utils.telemetry import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("chatshell.sandbox.run") as span:
        span.set_attribute(ATTR_SANDBOX_STAGE, "exec")

To export spans call :func:`configure_telemetry` once at startup (requires
the ``otel`` extra: ``pip install chatshell[otel]``).
"""

from __future__ import annotations

from opentelemetry import trace

# ---------------------------------------------------------------------------
# Semantic attribute keys used throughout chatshell instrumentation
# ---------------------------------------------------------------------------

ATTR_CALLER = "chatshell.caller"
ATTR_RESOURCE_HINT = "chatshell.resource_hint"
ATTR_PERSIST = "chatshell.persist"
ATTR_OUTCOME = "chatshell.outcome"
ATTR_REJECTED = "chatshell.rejected"
ATTR_SANDBOX_STAGE = "chatshell.sandbox.failed_stage"
ATTR_SANDBOX_TRUNCATED = "chatshell.sandbox.truncated"

_INSTRUMENTATION_NAME = "chatshell"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(*, service_name: str = "chatshell", export_to_console: bool = True) -> None:
    """Install an SDK tracer provider (requires ``chatshell[otel]``).

    Raises
    ------
    ImportError
        If the ``opentelemetry-sdk`` package is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install chatshell[otel]"
        )
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    if export_to_console:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
