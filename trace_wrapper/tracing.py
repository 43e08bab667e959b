"""OpenTelemetry agent that wraps the handler and records custom attributes."""

from __future__ import annotations

import functools
import json
from collections.abc import Callable, Sequence
from typing import Any, Protocol

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Tracer

LOGGER = structlog.get_logger(__name__)

_PRIMITIVES = (str, bool, int, float)

Handler = Callable[[Any, Any], Any]


class TelemetryAgent(Protocol):
    def wrap(self, handler: Handler) -> Handler: ...

    def add_custom_attribute(self, key: str, value: Any) -> None: ...


def _coerce_attribute(value: Any) -> Any:
    if isinstance(value, _PRIMITIVES):
        return value
    if (
        isinstance(value, Sequence)
        and not isinstance(value, (str, bytes, bytearray))
        and value
        and isinstance(value[0], _PRIMITIVES)
        and all(type(item) is type(value[0]) for item in value)
    ):
        return list(value)
    try:
        return json.dumps(value, default=str, sort_keys=True)
    except TypeError:
        return _encode_unsorted(value)
    except (ValueError, RecursionError):
        return None


def _encode_unsorted(value: Any) -> str | None:
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError, RecursionError):
        return None


class TracingAgent:
    """Runs each invocation inside a server span named after the function."""

    def __init__(self, tracer: Tracer | None = None, *, span_name: str = "handler") -> None:
        self._tracer = tracer or trace.get_tracer(__name__)
        self.span_name = span_name
        self._cold_start = True

    def wrap(self, handler: Handler) -> Handler:
        @functools.wraps(handler)
        def traced(event: Any, context: Any) -> Any:
            cold_start, self._cold_start = self._cold_start, False
            with self._tracer.start_as_current_span(self.span_name, kind=SpanKind.SERVER) as span:
                span.set_attribute("faas.name", self.span_name)
                span.set_attribute("faas.coldstart", cold_start)
                request_id = getattr(context, "aws_request_id", None)
                if request_id:
                    span.set_attribute("faas.invocation_id", str(request_id))
                return handler(event, context)

        return traced

    def add_custom_attribute(self, key: str, value: Any) -> None:
        if value is None:
            LOGGER.debug("tracing.attribute_skipped", key=key, reason="null_value")
            return
        coerced = _coerce_attribute(value)
        if coerced is None:
            LOGGER.debug("tracing.attribute_skipped", key=key, reason="unencodable_value")
            return
        trace.get_current_span().set_attribute(key, coerced)
