"""Custom attribute extraction from invocation events."""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from trace_wrapper.event_sources import API_GATEWAY, EventShapeDescriptor
from trace_wrapper.paths import resolve

LOGGER = structlog.get_logger(__name__)

MAX_BODY_BYTES = 1024 * 1024


def parse_attribute_names(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated list of attribute names."""

    if not raw:
        return ()
    names: list[str] = []
    for item in raw.split(","):
        name = item.strip()
        if name and name not in names:
            names.append(name)
    return tuple(names)


def decode_body(event: Any) -> dict[str, Any] | None:
    """Return the JSON object carried in an API Gateway ``body``, if any."""

    body = resolve(event, "body", None)
    if body is None:
        return None

    if isinstance(body, (str, bytes, bytearray)) and len(body) > MAX_BODY_BYTES:
        LOGGER.debug("attributes.body_too_large", size=len(body), limit=MAX_BODY_BYTES)
        return None

    if resolve(event, "isBase64Encoded", False) is True and isinstance(body, str):
        try:
            body = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError):
            LOGGER.debug("attributes.body_not_base64")
            return None

    if not isinstance(body, (str, bytes, bytearray)):
        return None

    try:
        parsed = json.loads(body)
    except (ValueError, RecursionError):
        LOGGER.debug("attributes.body_not_json")
        return None

    return parsed if isinstance(parsed, dict) else None


def _pick(source: Mapping[str, Any], names: Iterable[str]) -> dict[str, Any]:
    return {name: source[name] for name in names if name in source}


def extract_custom_attributes(
    event: Any,
    descriptor: EventShapeDescriptor,
    names: Iterable[str],
) -> dict[str, Any]:
    """Pick the configured top-level fields for tagging.

    API Gateway events are read from their JSON body, unknown events from the
    event itself. Other recognised sources are not inspected.
    """

    names = tuple(names)
    if not names:
        return {}

    if descriptor.name == API_GATEWAY.name:
        body = decode_body(event)
        return _pick(body, names) if body is not None else {}

    if descriptor.is_unknown and isinstance(event, Mapping):
        return _pick(event, names)

    return {}
