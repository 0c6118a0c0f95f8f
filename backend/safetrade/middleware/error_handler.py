"""
Exception handlers for the collaborator API.

WHAT: Uniform JSON error body {error, message, details, timestamp}
WHY: DealAgreementClient maps `error` into CollaboratorResponseError.code
HOW: Request validation -> 400 VALIDATION_ERROR; BusinessException -> its http_status
"""

from datetime import datetime
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..utils.exceptions import BusinessException
from ..utils.logger import get_logger

logger = get_logger(__name__)


def error_body(code: str, message: str, details: Any = None) -> dict:
    return {
        "error": code,
        "message": message,
        "details": details,
        "timestamp": datetime.now().isoformat(),
    }


def _jsonable_error(error: dict) -> dict:
    """Keep the useful pydantic error keys; ctx may carry exception objects."""
    cleaned = {key: error.get(key) for key in ("type", "loc", "msg", "input")}
    if "ctx" in error:
        cleaned["ctx"] = {
            key: str(value) if isinstance(value, Exception) else value
            for key, value in error["ctx"].items()
        }
    return cleaned


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Missing query parameters or an invalid submission body.

    Returns:
        400 with the per-field errors under `details`
    """
    errors = [_jsonable_error(error) for error in exc.errors()]
    fields = [".".join(str(part) for part in error["loc"] or ()) for error in errors]
    logger.warning(f"Validation error on {request.method} {request.url.path}: {fields}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("VALIDATION_ERROR", "Request validation failed", errors),
    )


async def business_exception_handler(request: Request, exc: BusinessException):
    logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.http_status,
        content=error_body(exc.code, exc.message, exc.details),
    )


def register_exception_handlers(app: FastAPI):
    """
    Register the handlers on the app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(BusinessException, business_exception_handler)
