"""Tracing helpers built on the global OpenTelemetry tracer provider."""

import asyncio
from collections.abc import Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode, Tracer

P = ParamSpec("P")
R = TypeVar("R")


def get_tracer(name: str) -> Tracer:
    """Get a tracer for a module, typically called with __name__."""
    return trace.get_tracer(name)


def add_span_attributes(attributes: dict[str, str | int | float | bool]) -> None:
    """Set attributes on the current span if it is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)


def traced(
    span_name: str | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator wrapping a sync or async function in a span.

    Exceptions are recorded on the span and re-raised unchanged.

    Args:
        span_name: Name for the span. Defaults to the function's qualified name.

    Example:
        @traced("documents.store")
        async def store(...): ...
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        name = span_name or fn.__qualname__

        if asyncio.iscoroutinefunction(fn):

            @wraps(fn)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
                # Resolved per call so a provider installed after import is used
                tracer = get_tracer(fn.__module__)
                with tracer.start_as_current_span(
                    name, record_exception=False, set_status_on_exception=False
                ) as span:
                    try:
                        result = await fn(*args, **kwargs)
                    except Exception as e:
                        span.record_exception(e)
                        span.set_status(Status(StatusCode.ERROR, str(e)))
                        raise
                    span.set_status(Status(StatusCode.OK))
                    return result

            return async_wrapper  # type: ignore[return-value]

        @wraps(fn)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            tracer = get_tracer(fn.__module__)
            with tracer.start_as_current_span(
                name, record_exception=False, set_status_on_exception=False
            ) as span:
                try:
                    result = fn(*args, **kwargs)
                except Exception as e:
                    span.record_exception(e)
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return sync_wrapper

    return decorator
