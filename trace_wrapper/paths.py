"""Safe dotted-path lookups over decoded JSON payloads."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar, Union

T = TypeVar("T")

PathExpression = Union[str, Sequence[Union[str, int]]]

MAX_PATH_SEGMENTS = 64

_BRACKET_INDEX = re.compile(r"\[(\d+)\]")
_MISSING = object()


def split_path(path: PathExpression) -> list[str | int]:
    """Normalize a path expression into its segments.

    ``a[0].b`` and ``a.0.b`` both become ``["a", "0", "b"]``. Anything that is
    not a well-formed ``[N]`` suffix stays part of a literal segment.
    """

    if isinstance(path, str):
        return _BRACKET_INDEX.sub(r".\1", path).split(".")
    return list(path)


def _step(current: Any, segment: str | int) -> Any:
    if isinstance(current, Mapping):
        if segment in current:
            return current[segment]
        if isinstance(segment, int) and str(segment) in current:
            return current[str(segment)]
        return _MISSING

    if isinstance(current, Sequence) and not isinstance(current, (str, bytes, bytearray)):
        if isinstance(segment, bool):
            return _MISSING
        if isinstance(segment, str):
            if not segment.isdigit():
                return _MISSING
            index = int(segment)
        elif isinstance(segment, int):
            index = segment
        else:
            return _MISSING
        if 0 <= index < len(current):
            return current[index]
        return _MISSING

    return _MISSING


def resolve(root: Any, path: PathExpression, fallback: T = None) -> Any | T:
    """Return the value at ``path`` inside ``root`` or ``fallback``.

    Missing keys, out-of-range indexes and values that cannot be indexed all
    produce the fallback. Paths deeper than ``MAX_PATH_SEGMENTS`` are refused.
    """

    segments = split_path(path)
    if not segments or len(segments) > MAX_PATH_SEGMENTS:
        return fallback

    current = root
    for segment in segments:
        try:
            current = _step(current, segment)
        except (TypeError, KeyError, IndexError, ValueError):
            return fallback
        if current is _MISSING:
            return fallback
    return current
