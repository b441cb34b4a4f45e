from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from registry_api.core.errors import RegistryError

logger = logging.getLogger(__name__)


def _get_request_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def register_exception_handlers(app: FastAPI) -> None:
    """Translate registry errors into JSON responses with a stable ``code``."""

    @app.exception_handler(RegistryError)
    async def _registry_error_handler(request: Request, exc: RegistryError) -> Response:
        request_id = _get_request_id(request)
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_public_dict(request_id=request_id),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> Response:
        payload: dict[str, Any] = {
            "detail": jsonable_encoder(exc.errors()),
            "code": "http.validation_error",
        }
        request_id = _get_request_id(request)
        if request_id:
            payload["request_id"] = request_id
        return JSONResponse(status_code=422, content=payload)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception) -> Response:
        request_id = _get_request_id(request)
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        payload: dict[str, Any] = {
            "detail": "Internal Server Error",
            "code": "internal.unhandled",
        }
        if request_id:
            payload["request_id"] = request_id
        return JSONResponse(status_code=500, content=payload)


__all__ = ["register_exception_handlers"]
