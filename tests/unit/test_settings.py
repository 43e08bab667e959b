from __future__ import annotations

from pathlib import Path

import pytest

from trace_wrapper.settings import Settings, apply_environment_defaults


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRACE_WRAPPER_HANDLER", "index.handler")
    monkeypatch.setenv("LAMBDA_TASK_ROOT", "/var/task")
    monkeypatch.setenv("CUSTOM_REQUEST_BODY_NAMES", "orderId")
    monkeypatch.setenv("IOPIPE_COMPAT_ENABLED", "false")

    settings = Settings()

    assert settings.lambda_handler == "index.handler"
    assert settings.task_root == Path("/var/task")
    assert settings.custom_request_body_names == "orderId"
    assert settings.legacy_context_shim is False


def test_span_name_preference() -> None:
    assert Settings(service_name="svc", function_name="fn").span_name == "svc"
    assert Settings(service_name=None, function_name="fn").span_name == "fn"
    assert Settings(service_name=None, function_name=None).span_name == "handler"


def test_environment_defaults_fill_service_name() -> None:
    env = {"AWS_LAMBDA_FUNCTION_NAME": "orders"}

    apply_environment_defaults(env)

    assert env["OTEL_SERVICE_NAME"] == "orders"


def test_environment_defaults_keep_explicit_values() -> None:
    env = {"AWS_LAMBDA_FUNCTION_NAME": "orders", "OTEL_SERVICE_NAME": "checkout"}
    apply_environment_defaults(env)
    assert env["OTEL_SERVICE_NAME"] == "checkout"

    empty: dict[str, str] = {}
    apply_environment_defaults(empty)
    assert empty == {}


def test_blank_event_sources_file_is_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EVENT_SOURCES_FILE", "")

    assert Settings().event_sources_file is None
    assert Settings(event_sources_file="  ").event_sources_file is None
