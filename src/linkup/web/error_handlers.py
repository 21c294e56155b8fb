from typing import cast

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response

from linkup.config import Config
from linkup.errors import AccessDeniedError, AuthenticationError, NotFoundError, ValidationError
from linkup.web.responses import error_response

logger = structlog.get_logger(__name__)


def format_validation_errors(errors: list[dict[str, object]]) -> dict[str, str]:
    """Key each failing field as "[location.path]", keeping only its first message."""
    formatted: dict[str, str] = {}
    for err in errors:
        loc = [str(part) for part in cast(tuple[object, ...], err.get("loc", ()))]
        location = loc[0] if loc else "unknown"
        path = ".".join(loc[1:]) or "unknown"
        key = f"[{location}.{path}]"
        if key not in formatted:
            formatted[key] = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
    return formatted


async def user_error_handler(request: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    error = None
    if isinstance(exc, AuthenticationError):
        status_code = 401
    elif isinstance(exc, AccessDeniedError):
        status_code = 403
    elif isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, ValidationError):
        status_code = 400
        error = exc.errors
    else:
        # Default for any other UserError subclass
        status_code = 400

    logger.info("user_error", path=request.url.path, status_code=status_code, error_type=type(exc).__name__)
    return error_response(status_code, str(exc), error)


async def request_validation_handler(request: Request, exc: Exception) -> Response:
    """Handle request schema failures (400) with field-keyed messages."""
    errors = format_validation_errors(list(cast(RequestValidationError, exc).errors()))
    logger.warning("request_validation_failed", path=request.url.path, errors=errors)
    return error_response(400, "Validation Error", errors)


async def transient_error_handler(request: Request, exc: Exception) -> Response:
    """Storage unavailable or timed out (503). Clients may retry later."""
    logger.warning("transient_error", path=request.url.path, error=str(exc))
    return error_response(503, "Service temporarily unavailable, please retry later.")


async def general_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("unexpected_error", path=request.url.path, method=request.method)
    config = cast(Config, request.app.state.config)
    detail = str(exc) if config.expose_error_details else None
    return error_response(500, "An unexpected error occurred.", detail)
