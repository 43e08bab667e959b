"""
Lambda trace wrapper.

Resolves the user's handler from configuration, runs it inside a traced span
and tags the span with attributes pulled from the incoming event.

Usage:
    from trace_wrapper import build_handler

    handler = build_handler()
"""

from trace_wrapper.event_sources import (
    API_GATEWAY,
    DEFAULT_REGISTRY,
    UNKNOWN_EVENT_SOURCE,
    EventShapeDescriptor,
    detect,
)
from trace_wrapper.invocation import InvocationWrapper, build_handler
from trace_wrapper.paths import resolve, split_path

__all__ = [
    "API_GATEWAY",
    "DEFAULT_REGISTRY",
    "UNKNOWN_EVENT_SOURCE",
    "EventShapeDescriptor",
    "InvocationWrapper",
    "build_handler",
    "detect",
    "resolve",
    "split_path",
]
