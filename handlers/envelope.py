"""
handlers/envelope.py
--------------------
Response envelope, context dependency and error mapping shared by every
router. Success is `{ok: true, data}`, failure `{ok: false, error}`.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from context import AppContext
from utils.errors import FinStatError
from utils.logger import get_logger

logger = get_logger(__name__)


def get_context(request: Request) -> AppContext:
    return request.app.state.ctx


def _render(data: Any) -> Any:
    if hasattr(data, "to_dict"):
        return data.to_dict()
    if isinstance(data, list):
        return [_render(item) for item in data]
    return data


def ok(data: Any = None) -> dict:
    """Wrap a payload (models, lists of models, plain dicts) in the success envelope."""
    return {"ok": True, "data": _render(data)}


def failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder({"ok": False, "error": message}))


def _describe(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def install_error_handlers(app: FastAPI) -> None:
    """Map every failure to the error envelope with its HTTP status."""

    @app.exception_handler(FinStatError)
    async def handle_app_error(request: Request, exc: FinStatError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return failure(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return failure(400, _describe(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return failure(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return failure(500, "Internal server error")
