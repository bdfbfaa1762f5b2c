"""Prometheus middleware."""

import time

from starlette.routing import Match
from starlette.status import HTTP_200_OK, HTTP_500_INTERNAL_SERVER_ERROR
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from anime_api.metrics.asgi_metrics import (
    EXCEPTIONS,
    REQUESTS,
    REQUESTS_IN_PROGRESS,
    REQUESTS_PROCESSING_TIME,
    RESPONSES,
)


def resolve_path_template(scope: Scope) -> str | None:
    """Return the route path matching the request, or None for unrouted paths.

    Routes without a ``path`` (such as included sub-routers) are skipped.

    Args:
        scope: The ASGI scope.

    Returns:
        The route template such as ``/telegram/webhook``.
    """
    for route in scope["app"].routes:
        path = getattr(route, "path", None)
        if path is None:
            continue
        match, _ = route.matches(scope)
        if match == Match.FULL:
            return path
    return None


class PrometheusMiddleware:
    """Pure ASGI middleware counting requests, responses, latency and exceptions."""

    def __init__(self, app: ASGIApp, *, filter_unhandled_paths: bool = False) -> None:
        """Initialize the Prometheus middleware.

        Args:
            app: The ASGI app to wrap.
            filter_unhandled_paths: Skip requests that match no route, so scanners
                cannot inflate label cardinality.
        """
        self.app = app
        self.filter_unhandled_paths = filter_unhandled_paths

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process the request and collect metrics.

        Args:
            scope: The ASGI scope.
            receive: The ASGI receive function.
            send: The ASGI send function.
        """
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path_template = resolve_path_template(scope)
        if path_template is None:
            if self.filter_unhandled_paths:
                await self.app(scope, receive, send)
                return
            path_template = scope["path"]

        labels = {"method": scope["method"], "path_template": path_template}
        status_code = HTTP_200_OK

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        REQUESTS.labels(**labels).inc()
        REQUESTS_IN_PROGRESS.labels(**labels).inc()
        started = time.perf_counter()
        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exp:
            status_code = HTTP_500_INTERNAL_SERVER_ERROR
            EXCEPTIONS.labels(**labels, exception_type=type(exp).__name__).inc()
            raise
        finally:
            REQUESTS_PROCESSING_TIME.labels(**labels).observe(time.perf_counter() - started)
            RESPONSES.labels(**labels, status_code=status_code).inc()
            REQUESTS_IN_PROGRESS.labels(**labels).dec()
