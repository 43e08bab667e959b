"""Locate and import the user handler named in configuration."""

from __future__ import annotations

import sys
from collections.abc import Callable
from importlib import import_module
from pathlib import Path
from threading import Lock
from typing import Any

import structlog

from trace_wrapper.errors import (
    HandlerFormatError,
    HandlerMissing,
    HandlerModuleNotFound,
    HandlerNotCallable,
    HandlerNotConfigured,
)

LOGGER = structlog.get_logger(__name__)

_PATH_LOCK = Lock()
_MISSING = object()


def parse_handler_path(value: str | None) -> tuple[str, str]:
    """Split ``<module>.<export>`` into its module and export names.

    The module part may use ``/`` as a package separator (``api/users.handler``).
    """

    if not value:
        raise HandlerNotConfigured("No TRACE_WRAPPER_HANDLER environment variable set.")

    module_name, sep, export_name = value.strip().rpartition(".")
    module_name = module_name.replace("/", ".")
    if not sep or not module_name or not export_name or ".." in module_name:
        raise HandlerFormatError(f"Improperly formatted handler environment variable: {value}")
    if module_name.startswith(".") or module_name.endswith("."):
        raise HandlerFormatError(f"Improperly formatted handler environment variable: {value}")
    return module_name, export_name


def _ensure_on_path(task_root: Path) -> None:
    root = str(task_root.resolve())
    with _PATH_LOCK:
        if root not in sys.path:
            sys.path.insert(1, root)


def _is_handler_module(missing: str | None, module_name: str) -> bool:
    if not missing:
        return False
    return module_name == missing or module_name.startswith(f"{missing}.")


def resolve_handler(value: str | None, task_root: Path | str = ".") -> Callable[..., Any]:
    """Import the configured module and return its handler callable."""

    module_name, export_name = parse_handler_path(value)
    _ensure_on_path(Path(task_root))

    try:
        module = import_module(module_name)
    except ModuleNotFoundError as exc:
        if _is_handler_module(exc.name, module_name):
            raise HandlerModuleNotFound(f"Unable to import module '{module_name}'") from exc
        raise

    user_handler = getattr(module, export_name, _MISSING)
    if user_handler is _MISSING:
        raise HandlerMissing(f"Handler '{export_name}' missing on module '{module_name}'")
    if not callable(user_handler):
        raise HandlerNotCallable(f"Handler '{export_name}' from '{module_name}' is not a function")

    LOGGER.debug("handler.resolved", module=module_name, handler=export_name)
    return user_handler
