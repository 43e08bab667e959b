"""Invocation orchestration for the wrapped handler."""

from __future__ import annotations

from collections.abc import Sequence
from time import perf_counter
from typing import Any

import structlog

from trace_wrapper import metrics
from trace_wrapper.attributes import extract_custom_attributes, parse_attribute_names
from trace_wrapper.event_sources import (
    EventShapeDescriptor,
    detect,
    registry_from_settings,
    source_attributes,
)
from trace_wrapper.legacy import attach_legacy_shim
from trace_wrapper.loader import resolve_handler
from trace_wrapper.settings import Settings, get_settings
from trace_wrapper.tracing import TelemetryAgent, TracingAgent

LOGGER = structlog.get_logger(__name__)


class InvocationWrapper:
    """Lambda handler that tags the active span and forwards to the user handler."""

    def __init__(
        self,
        settings: Settings,
        agent: TelemetryAgent,
        *,
        registry: Sequence[EventShapeDescriptor] | None = None,
    ) -> None:
        self.settings = settings
        self.agent = agent
        self.registry = tuple(registry) if registry is not None else registry_from_settings(settings)
        self.attribute_names = parse_attribute_names(settings.custom_request_body_names)
        self._traced = agent.wrap(self._invoke)

    def __call__(self, event: Any, context: Any) -> Any:
        if self.settings.legacy_context_shim:
            attach_legacy_shim(context, self.agent)
        return self._traced(event, context)

    def _tag(self, attributes: dict[str, Any]) -> int:
        tagged = 0
        for key, value in attributes.items():
            self.agent.add_custom_attribute(key, value)
            if value is not None:
                tagged += 1
        return tagged

    def _invoke(self, event: Any, context: Any) -> Any:
        descriptor = detect(event, self.registry)
        LOGGER.debug("invocation.start", event_source=descriptor.name)

        tagged = self._tag(source_attributes(event, descriptor))
        tagged += self._tag(extract_custom_attributes(event, descriptor, self.attribute_names))
        metrics.observe_attributes(tagged)

        user_handler = resolve_handler(self.settings.lambda_handler, self.settings.task_root)

        start = perf_counter()
        failed = False
        try:
            return user_handler(event, context)
        except Exception:
            failed = True
            LOGGER.error("invocation.failed", event_source=descriptor.name, exc_info=True)
            raise
        finally:
            latency_ms = (perf_counter() - start) * 1000
            metrics.observe_invocation(
                event_source=descriptor.name,
                latency_ms=latency_ms,
                failed=failed,
            )
            LOGGER.debug(
                "invocation.end",
                event_source=descriptor.name,
                attributes=tagged,
                failed=failed,
                latency_ms=latency_ms,
            )


def build_handler(
    settings: Settings | None = None,
    agent: TelemetryAgent | None = None,
) -> InvocationWrapper:
    settings = settings or get_settings()
    agent = agent or TracingAgent(span_name=settings.span_name)
    return InvocationWrapper(settings, agent)
