from __future__ import annotations

import importlib
import sys
import textwrap
import uuid
from pathlib import Path

import pytest

from trace_wrapper.errors import (
    HandlerFormatError,
    HandlerMissing,
    HandlerModuleNotFound,
    HandlerNotCallable,
    HandlerNotConfigured,
)
from trace_wrapper.loader import parse_handler_path, resolve_handler


@pytest.fixture()
def task_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setattr(sys, "path", list(sys.path))
    return tmp_path


def write_module(root: Path, source: str) -> str:
    name = f"user_mod_{uuid.uuid4().hex}"
    (root / f"{name}.py").write_text(textwrap.dedent(source), encoding="utf-8")
    importlib.invalidate_caches()
    return name


class TestParseHandlerPath:
    def test_module_and_export(self) -> None:
        assert parse_handler_path("index.handler") == ("index", "handler")

    def test_nested_module(self) -> None:
        assert parse_handler_path("api.users.handler") == ("api.users", "handler")
        assert parse_handler_path("api/users.handler") == ("api.users", "handler")

    @pytest.mark.parametrize("value", [None, ""])
    def test_not_configured(self, value: str | None) -> None:
        with pytest.raises(HandlerNotConfigured):
            parse_handler_path(value)

    @pytest.mark.parametrize("value", ["handler", ".handler", "index.", "a..b.handler", "/index.handler"])
    def test_bad_format(self, value: str) -> None:
        with pytest.raises(HandlerFormatError, match="Improperly formatted"):
            parse_handler_path(value)


def test_resolves_callable(task_root: Path) -> None:
    name = write_module(
        task_root,
        """
        def handler(event, context):
            return {"echo": event}
        """,
    )

    user_handler = resolve_handler(f"{name}.handler", task_root)

    assert user_handler({"a": 1}, None) == {"echo": {"a": 1}}
    assert str(task_root.resolve()) in sys.path


def test_module_not_found(task_root: Path) -> None:
    with pytest.raises(HandlerModuleNotFound, match="Unable to import module 'does_not_exist_mod'"):
        resolve_handler("does_not_exist_mod.handler", task_root)


def test_missing_dependency_is_not_masked(task_root: Path) -> None:
    name = write_module(
        task_root,
        """
        import dependency_that_is_not_installed_xyz

        def handler(event, context):
            return None
        """,
    )

    with pytest.raises(ModuleNotFoundError) as excinfo:
        resolve_handler(f"{name}.handler", task_root)

    assert not isinstance(excinfo.value, HandlerModuleNotFound)
    assert excinfo.value.name == "dependency_that_is_not_installed_xyz"


def test_import_errors_propagate(task_root: Path) -> None:
    name = write_module(task_root, "raise RuntimeError('boom at import')\n")

    with pytest.raises(RuntimeError, match="boom at import"):
        resolve_handler(f"{name}.handler", task_root)


def test_export_missing(task_root: Path) -> None:
    name = write_module(task_root, "other = 1\n")

    with pytest.raises(HandlerMissing, match=f"Handler 'handler' missing on module '{name}'"):
        resolve_handler(f"{name}.handler", task_root)


@pytest.mark.parametrize("value", ["'text'", "None", "42"])
def test_export_not_callable(task_root: Path, value: str) -> None:
    name = write_module(task_root, f"handler = {value}\n")

    with pytest.raises(HandlerNotCallable, match="is not a function"):
        resolve_handler(f"{name}.handler", task_root)


def test_package_module_with_slash_separator(task_root: Path) -> None:
    package = f"pkg_{uuid.uuid4().hex}"
    (task_root / package).mkdir()
    (task_root / package / "__init__.py").write_text("", encoding="utf-8")
    (task_root / package / "api.py").write_text(
        "def handler(event, context):\n    return 'nested'\n",
        encoding="utf-8",
    )
    importlib.invalidate_caches()

    assert resolve_handler(f"{package}/api.handler", task_root)(None, None) == "nested"
