"""Exception handlers that keep every failure in the ``{success, error}`` envelope."""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from consult_invoice.periods import InvalidPeriodError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def invalid_period_handler(request: Request, exc: InvalidPeriodError) -> JSONResponse:
    return error_response(400, str(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"Invalid request: {location} {first.get('msg', '')}".strip()
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return error_response(400, message)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback server-side, return a generic message."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")
