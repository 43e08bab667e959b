"""Compatibility shim for handlers still calling ``context.iopipe``.

The old IOpipe API is no longer supported. Calls are mapped onto custom span
attributes where possible and every call logs a deprecation warning.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import structlog

from trace_wrapper.tracing import TelemetryAgent

LOGGER = structlog.get_logger(__name__)

DEPRECATION_MESSAGE = (
    "Use of context.iopipe.* is no longer supported. "
    "Record custom attributes on the active OpenTelemetry span instead."
)


def _now_ms() -> float:
    return time.time() * 1000


@dataclass(slots=True)
class Mark:
    start: float | None = None
    end: float | None = None


class _MarkApi:
    def __init__(self, shim: IOpipeShim) -> None:
        self._shim = shim

    def start(self, name: str) -> Mark:
        mark = self._shim.marks.setdefault(name, Mark())
        mark.start = _now_ms()
        mark.end = None
        return mark

    def end(self, name: str) -> None:
        mark = self._shim.marks.setdefault(name, Mark())
        mark.end = _now_ms()
        self._shim.measure(name, name, name)


class IOpipeShim:
    """Per-invocation stand-in for the ``context.iopipe`` object."""

    def __init__(self, agent: TelemetryAgent) -> None:
        self._agent = agent
        self.marks: dict[str, Mark] = {}
        self.mark = _MarkApi(self)

    def _record(self, method: str, key: str | None, value: Any) -> None:
        if key is not None and value is not None:
            self._agent.add_custom_attribute(key, value)
        LOGGER.warning("legacy.iopipe_deprecated", method=method, message=DEPRECATION_MESSAGE)

    def label(self, name: str) -> None:
        self._record("label", f"customLabel.{name}", name)

    def metric(self, name: str, value: Any) -> None:
        self._record("metric", f"customMetric.{name}", value)

    def measure(self, name: str, start: str, end: str) -> None:
        start_mark = self.marks.get(start)
        end_mark = self.marks.get(end)
        if (
            name
            and start_mark is not None
            and end_mark is not None
            and start_mark.start is not None
            and end_mark.end is not None
        ):
            self._record("measure", f"customMetric.{name}", end_mark.end - start_mark.start)
        else:
            self._record("measure", None, None)


def attach_legacy_shim(context: Any, agent: TelemetryAgent) -> IOpipeShim | None:
    """Expose ``context.iopipe`` unless the context already carries one."""

    if context is None or isinstance(context, (str, bytes, int, float, bool)):
        return None
    if getattr(context, "iopipe", None) is not None:
        return None

    shim = IOpipeShim(agent)
    try:
        setattr(context, "iopipe", shim)
    except AttributeError:
        LOGGER.debug("legacy.context_readonly", context_type=type(context).__name__)
        return None
    return shim
