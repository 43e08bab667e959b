"""FastAPI application for invoking the wrapped handler locally."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from time import perf_counter
from types import SimpleNamespace
from typing import Annotated, Any

import structlog
from fastapi import Depends, FastAPI, HTTPException, Response, status
from pydantic import BaseModel, Field

from trace_wrapper import metrics
from trace_wrapper.errors import HandlerError
from trace_wrapper.invocation import build_handler
from trace_wrapper.settings import Settings, get_settings

SettingsDep = Annotated[Settings, Depends(get_settings)]

LOGGER = structlog.get_logger(__name__)


def configure_logging(log_level: str) -> None:
    numeric_level = logging.getLevelName(log_level.upper())
    if isinstance(numeric_level, str):
        numeric_level = logging.INFO
    logging.basicConfig(level=numeric_level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=True,
    )


class InvokeRequestModel(BaseModel):
    event: Any = None
    context: dict[str, Any] = Field(default_factory=dict)


class InvokeResponseModel(BaseModel):
    result: Any = None
    latency_ms: float


def build_context(settings: Settings, overrides: dict[str, Any]) -> SimpleNamespace:
    """Build a Lambda-like context object for a local invocation."""

    values: dict[str, Any] = {
        "aws_request_id": str(uuid.uuid4()),
        "function_name": settings.function_name or "local",
        "function_version": "$LATEST",
        "memory_limit_in_mb": 128,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def create_app(
    settings: Settings | None = None,
    handler: Callable[[Any, Any], Any] | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    wrapped = handler or build_handler(settings)

    app = FastAPI(title="Lambda Trace Wrapper")
    app.dependency_overrides[get_settings] = lambda: settings

    @app.get("/healthz", response_class=Response)
    async def healthz() -> Response:
        return Response(content="ok\n", media_type="text/plain")

    @app.post("/invoke", response_model=InvokeResponseModel)
    async def invoke_endpoint(request: InvokeRequestModel) -> InvokeResponseModel:
        context = build_context(settings, request.context)
        start = perf_counter()
        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(wrapped, request.event, context),
                timeout=settings.invoke_timeout_seconds,
            )
        except asyncio.TimeoutError:
            LOGGER.warning(
                "invoke.timeout",
                request_id=context.aws_request_id,
                timeout_seconds=settings.invoke_timeout_seconds,
            )
            raise HTTPException(
                status_code=status.HTTP_408_REQUEST_TIMEOUT,
                detail="invocation timeout",
            ) from None
        except HandlerError as exc:
            LOGGER.error("invoke.handler_unavailable", error=str(exc))
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"errorType": type(exc).__name__, "errorMessage": str(exc)},
            ) from exc
        except Exception as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail={"errorType": type(exc).__name__, "errorMessage": str(exc)},
            ) from exc

        return InvokeResponseModel(result=result, latency_ms=(perf_counter() - start) * 1000)

    @app.get("/metrics")
    async def metrics_endpoint(current: SettingsDep) -> Response:
        if not current.metrics_enabled:
            raise HTTPException(status_code=404, detail="metrics disabled")
        payload, content_type = metrics.render_metrics()
        return Response(content=payload, media_type=content_type)

    return app
