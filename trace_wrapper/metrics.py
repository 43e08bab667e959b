"""Prometheus metrics helpers."""

from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

INVOCATIONS_TOTAL = Counter(
    "lambda_wrapper_invocations_total",
    "Number of wrapped handler invocations",
    labelnames=("event_source",),
    registry=REGISTRY,
)

INVOCATION_ERRORS = Counter(
    "lambda_wrapper_invocation_errors_total",
    "Number of invocations that raised",
    labelnames=("event_source",),
    registry=REGISTRY,
)

INVOCATION_LATENCY = Histogram(
    "lambda_wrapper_invocation_latency_seconds",
    "Latency of the wrapped handler",
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=REGISTRY,
)

CUSTOM_ATTRIBUTES = Counter(
    "lambda_wrapper_custom_attributes_total",
    "Number of custom attributes recorded on invocation spans",
    registry=REGISTRY,
)


def observe_invocation(*, event_source: str, latency_ms: float, failed: bool) -> None:
    INVOCATIONS_TOTAL.labels(event_source=event_source).inc()
    INVOCATION_LATENCY.observe(latency_ms / 1000.0)
    if failed:
        INVOCATION_ERRORS.labels(event_source=event_source).inc()


def observe_attributes(count: int) -> None:
    if count > 0:
        CUSTOM_ATTRIBUTES.inc(count)


def render_metrics() -> tuple[bytes, str]:
    payload = generate_latest(REGISTRY)
    return payload, CONTENT_TYPE_LATEST
