"""API error handling and response helpers."""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.services.errors import (
    HoaError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


def error_response(code: str, message: str) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        "error": {
            "code": code,
            "message": message,
        }
    }


def _classify(error: HoaError) -> tuple[int, str]:
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND, "not_found"
    if isinstance(error, InvalidTransitionError):
        return status.HTTP_400_BAD_REQUEST, "invalid_transition"
    if isinstance(error, InvalidInputError):
        return status.HTTP_400_BAD_REQUEST, "invalid_input"
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "server_error"


async def hoa_error_handler(request: Request, exc: HoaError) -> JSONResponse:
    """Translate domain exceptions into JSON error responses."""
    http_status, code = _classify(exc)
    if http_status >= 500:
        logger.error("Unhandled ledger error on %s: %s", request.url.path, exc, exc_info=exc)
    else:
        logger.info("%s %s -> %d %s: %s", request.method, request.url.path, http_status, code, exc)
    return JSONResponse(status_code=http_status, content=error_response(code, str(exc)))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HoaError, hoa_error_handler)


__all__ = ["error_response", "hoa_error_handler", "register_error_handlers"]
