"""JSON envelopes shared by the member endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from rewards_api.services.discount_codes import DiscountCodeError
from rewards_api.services.lucky_draw.errors import LuckyDrawError
from rewards_api.services.retail import RetailApiError


HANDLED_ERRORS = (LuckyDrawError, RetailApiError, DiscountCodeError, SQLAlchemyError)

HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}

_INTERNAL_MESSAGE = "Internal server error"
_EXTERNAL_MESSAGE = "External service error"
_UNPROCESSABLE = 422


def success(data: Any) -> dict[str, Any]:
    return {"success": True, "data": jsonable_encoder(data)}


def failure(
    status_code: int,
    code: str,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"code": code, "message": message}},
        headers=headers,
    )


def failure_from_exception(exc: Exception) -> JSONResponse:
    """Translate a service error into the failure envelope; internals are not leaked."""

    if isinstance(exc, LuckyDrawError):
        return failure(exc.status_code, exc.code, exc.response_message)
    if isinstance(exc, RetailApiError):
        logger.error("Retail API call failed", url=exc.url, reason=str(exc))
        return failure(status.HTTP_502_BAD_GATEWAY, "EXTERNAL_API_ERROR", _EXTERNAL_MESSAGE)
    logger.error("Request failed with internal error", error=type(exc).__name__, reason=str(exc))
    return failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", _INTERNAL_MESSAGE)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap dependency and routing errors (auth, unknown paths) in the failure envelope."""

    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        return failure(exc.status_code, "INTERNAL_ERROR", _INTERNAL_MESSAGE, exc.headers)

    code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    message = exc.detail if isinstance(exc.detail, str) else code.replace("_", " ").capitalize()
    return failure(exc.status_code, code, message, exc.headers)


def _describe_validation(errors: list[dict[str, Any]]) -> str:
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return failure(
        _UNPROCESSABLE,
        "VALIDATION_ERROR",
        _describe_validation(list(exc.errors())),
    )


__all__ = [
    "HANDLED_ERRORS",
    "failure",
    "failure_from_exception",
    "http_exception_handler",
    "success",
    "validation_exception_handler",
]
