"""Middleware for processing time header."""

from collections.abc import Awaitable, Callable
from time import perf_counter

from fastapi import Request
from fastapi.responses import Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette_context import context
from starlette_context.header_keys import HeaderKeys

from anime_api.logger.log import CORRELATION_ID_KEY


def current_correlation_id() -> str | None:
    """Return the correlation id of the request being served, if any."""
    if not context.exists():
        return None
    return context.get(HeaderKeys.correlation_id)


class ProcessTimeMiddleware(BaseHTTPMiddleware):
    """Middleware setting the X-Process-Time header and logging the request outcome."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Dispatch the middleware.

        Args:
            request (Request): The request object.
            call_next (Callable[[Request], Awaitable[Response]]): The next middleware or endpoint to call.

        Returns:
            Response: The response object.
        """
        start_time = perf_counter()
        with logger.contextualize(**{CORRELATION_ID_KEY: current_correlation_id()}):
            response = await call_next(request)
            process_time = (perf_counter() - start_time) * 1000  # time in millis
            response.headers["X-Process-Time"] = str(process_time)
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} in {process_time:.1f} ms",
            )
        return response
