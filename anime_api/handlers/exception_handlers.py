"""Exception handlers."""

import traceback
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger

from anime_api.metrics.asgi_metrics import UPDATES_FAILED
from anime_bot.errors import AnimeBotError, ParseError, PersistenceError, PublishError

ERROR_RESPONSES: dict[type[AnimeBotError], tuple[int, str]] = {
    ParseError: (400, "error.parse"),
    PersistenceError: (503, "error.persistence"),
    PublishError: (502, "error.publish"),
}


async def handle_bot_error(request: Request, exception: Exception, **_: Any) -> JSONResponse:
    """Map update handling errors onto HTTP responses.

    Args:
        request (Request): The request object.
        exception (Exception): A ParseError, PersistenceError or PublishError.

    Returns:
        JSONResponse: The JSON response.
    """
    status_code, error = next(
        (response for error_class, response in ERROR_RESPONSES.items() if isinstance(exception, error_class)),
        (500, "error.unexpected"),
    )
    UPDATES_FAILED.labels(error=type(exception).__name__).inc()

    if isinstance(exception, ParseError):
        logger.warning(f"Rejected update on {request.url.path}: {exception}")
    else:
        logger.opt(exception=exception).error(f"Failed to handle update on {request.url.path}: {exception}")

    return JSONResponse(content={"error": error, "detail": str(exception)}, status_code=status_code)


async def handle_unexpected_exception(request: Request, exception: Exception, **_: Any) -> JSONResponse:
    """Handle unexpected exceptions.

    Args:
        request (Request): The request object.
        exception (Exception): The exception object.

    Returns:
        JSONResponse: The JSON response.
    """
    UPDATES_FAILED.labels(error=type(exception).__name__).inc()
    logger.opt(exception=exception).error(f"Unexpected error on {request.url.path}")
    return JSONResponse(
        content={
            "error": "error.unexpected",
            "detail": {
                "exception": {
                    "class": str(exception.__class__),
                    "traceback": "".join(traceback.TracebackException.from_exception(exception).format()),
                },
            },
        },
        status_code=500,
    )
