"""
Error boundary helpers for the route modules.

Routes are the only place where exceptions become responses: validation
problems map to 400, everything else to 500 with the exception message.
"""

import logging

from fastapi.responses import JSONResponse

from contact_store import ContactValidationError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the {ok: false, error} envelope."""
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


def handle_route_error(exc: Exception, action: str) -> JSONResponse:
    """
    Convert an exception raised by a route into a JSON error response.

    Args:
        exc: The exception that aborted the request
        action: Short description of what the route was doing (for logs)

    Returns:
        400 response for ContactValidationError, 500 for anything else
    """
    if isinstance(exc, ContactValidationError):
        logger.warning(f"{action} rejected: {exc}")
        return error_response(400, str(exc))

    logger.exception(f"{action} failed: {exc}")
    return error_response(500, str(exc) or "Unknown error")
