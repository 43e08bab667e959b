"""Event source registry and shape detection."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import structlog
import yaml

from trace_wrapper.paths import resolve

if TYPE_CHECKING:
    from trace_wrapper.settings import Settings

LOGGER = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class EventShapeDescriptor:
    """A named set of key paths that identifies one kind of event payload."""

    name: str
    required_key_paths: tuple[str, ...] = ()
    attribute_map: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "required_key_paths", tuple(self.required_key_paths))
        object.__setattr__(self, "attribute_map", MappingProxyType(dict(self.attribute_map)))

    @property
    def is_unknown(self) -> bool:
        return self is UNKNOWN_EVENT_SOURCE


EventSourceRegistry = tuple[EventShapeDescriptor, ...]

UNKNOWN_EVENT_SOURCE = EventShapeDescriptor(name="unknown")

API_GATEWAY = EventShapeDescriptor(
    name="apiGateway",
    required_key_paths=(
        "headers",
        "httpMethod",
        "path",
        "requestContext",
        "requestContext.stage",
    ),
    attribute_map={
        "aws.lambda.eventSource.accountId": "requestContext.accountId",
        "aws.lambda.eventSource.apiId": "requestContext.apiId",
        "aws.lambda.eventSource.resourceId": "requestContext.resourceId",
        "aws.lambda.eventSource.resourcePath": "requestContext.resourcePath",
        "aws.lambda.eventSource.stage": "requestContext.stage",
    },
)

DEFAULT_REGISTRY: EventSourceRegistry = (API_GATEWAY,)


def matches(event: Any, descriptor: EventShapeDescriptor) -> bool:
    """True when every required path of ``descriptor`` holds a non-null value."""
    return all(resolve(event, path, None) is not None for path in descriptor.required_key_paths)


def detect(
    event: Any,
    registry: Sequence[EventShapeDescriptor] = DEFAULT_REGISTRY,
) -> EventShapeDescriptor:
    """Return the first descriptor in ``registry`` that ``event`` satisfies.

    A descriptor with no required paths matches every event. When nothing
    matches, ``UNKNOWN_EVENT_SOURCE`` is returned.
    """

    for descriptor in registry:
        if matches(event, descriptor):
            return descriptor
    return UNKNOWN_EVENT_SOURCE


def source_attributes(event: Any, descriptor: EventShapeDescriptor) -> dict[str, Any]:
    """Resolve the descriptor's attribute map against the event."""

    attributes: dict[str, Any] = {}
    for attribute, path in descriptor.attribute_map.items():
        value = resolve(event, path, None)
        if value is not None:
            attributes[attribute] = value
    return attributes


def _ensure_str_list(value: Any, *, field_name: str, source: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, Iterable):
        raise ValueError(f"Event source '{source}' field '{field_name}' must be a list of strings")
    items = tuple(value)
    if not all(isinstance(item, str) for item in items):
        raise ValueError(f"Event source '{source}' field '{field_name}' must be a list of strings")
    return items


def _parse_descriptor(raw: Any) -> EventShapeDescriptor:
    if not isinstance(raw, dict):
        raise ValueError(f"Unsupported event source entry type: {type(raw)!r}")

    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise ValueError("Event source entry must define a non-empty 'name'")
    if name == UNKNOWN_EVENT_SOURCE.name:
        raise ValueError(f"Event source name '{name}' is reserved")

    required = _ensure_str_list(raw.get("required_keys"), field_name="required_keys", source=name)
    if not required:
        LOGGER.warning("event_sources.matches_everything", name=name)

    attributes = raw.get("attributes") or {}
    if not isinstance(attributes, dict):
        raise ValueError(f"Event source '{name}' attributes must be a mapping")

    return EventShapeDescriptor(
        name=name,
        required_key_paths=required,
        attribute_map={str(key): str(path) for key, path in attributes.items()},
    )


def load_registry(path: Path) -> EventSourceRegistry:
    """Load an ordered event source registry from a YAML file."""

    resolved = path.resolve()
    if not resolved.is_file():
        raise FileNotFoundError(f"Event source file {resolved} not found")

    data = yaml.safe_load(resolved.read_text(encoding="utf-8"))
    if data is None:
        raise ValueError(f"Event source file {resolved} is empty")

    entries = data.get("event_sources") if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ValueError("event_sources must be a list of entries")

    registry = tuple(_parse_descriptor(entry) for entry in entries)
    names = [descriptor.name for descriptor in registry]
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate event source names in {resolved}")

    LOGGER.info("event_sources.loaded", path=str(resolved), sources=names)
    return registry


def registry_from_settings(settings: Settings) -> EventSourceRegistry:
    if settings.event_sources_file is None:
        return DEFAULT_REGISTRY
    return load_registry(settings.event_sources_file)
