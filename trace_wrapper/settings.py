"""Wrapper settings loaded from environment variables."""

from __future__ import annotations

import os
from collections.abc import MutableMapping
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration with sensible defaults."""

    lambda_handler: str | None = Field(default=None, alias="TRACE_WRAPPER_HANDLER")
    task_root: Path = Field(default=Path("."), alias="LAMBDA_TASK_ROOT")
    custom_request_body_names: str = Field(default="", alias="CUSTOM_REQUEST_BODY_NAMES")
    function_name: str | None = Field(default=None, alias="AWS_LAMBDA_FUNCTION_NAME")
    service_name: str | None = Field(default=None, alias="OTEL_SERVICE_NAME")
    event_sources_file: Path | None = Field(default=None, alias="EVENT_SOURCES_FILE")
    legacy_context_shim: bool = Field(default=True, alias="IOPIPE_COMPAT_ENABLED")
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    metrics_enabled: bool = Field(default=True, alias="METRICS_ENABLED")
    invoke_timeout_seconds: float = Field(default=30.0, alias="INVOKE_TIMEOUT_SECONDS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    @field_validator("event_sources_file", mode="before")
    @classmethod
    def blank_path_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def span_name(self) -> str:
        return self.service_name or self.function_name or "handler"


def apply_environment_defaults(environ: MutableMapping[str, str] | None = None) -> None:
    """Fill in tracing variables the Lambda runtime already implies."""

    env = os.environ if environ is None else environ
    function_name = env.get("AWS_LAMBDA_FUNCTION_NAME")
    if function_name and not env.get("OTEL_SERVICE_NAME"):
        env["OTEL_SERVICE_NAME"] = function_name


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
