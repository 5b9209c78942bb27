"""The @traced decorator used on service methods."""

import functools
import inspect
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from opentelemetry import trace

F = TypeVar("F", bound=Callable[..., Any])


def _record_failure(span: trace.Span, error: Exception) -> None:
    span.set_attribute("success", False)
    span.set_attribute("error.type", type(error).__name__)
    span.set_attribute("error.message", str(error))
    span.record_exception(error)


@contextmanager
def _call_span(
    tracer: trace.Tracer, name: str, service_name: str, func_name: str | None
) -> Iterator[trace.Span]:
    with tracer.start_as_current_span(name) as span:
        span.set_attribute("service.name", service_name)
        if func_name is not None:
            span.set_attribute("function.name", func_name)
        try:
            yield span
        except Exception as e:
            _record_failure(span, e)
            raise
        span.set_attribute("success", True)


def traced(span_name: str | None = None, service_name: str = "ordering-svc") -> Callable[[F], F]:
    """Run each call of the decorated function inside its own span.

    The span is named ``span_name`` or, when omitted, after the function.
    Exceptions are recorded on the span and re-raised unchanged. Coroutine
    functions get an async wrapper.

    Example:
        @traced("order.create")
        async def create_order(self, user_id: str, lines: list[OrderLineRequest]) -> OrderView:
            ...
    """

    def decorator(func: F) -> F:
        tracer = trace.get_tracer(service_name)
        name = span_name or func.__name__
        # function.name is only worth adding when it differs from the span name
        func_name = func.__name__ if span_name else None

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def run_async(*args: Any, **kwargs: Any) -> Any:
                with _call_span(tracer, name, service_name, func_name):
                    return await func(*args, **kwargs)

            return run_async  # type: ignore[return-value]

        @functools.wraps(func)
        def run(*args: Any, **kwargs: Any) -> Any:
            with _call_span(tracer, name, service_name, func_name):
                return func(*args, **kwargs)

        return run  # type: ignore[return-value]

    return decorator
