"""App entrypoints."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger
from starlette.middleware import Middleware
from starlette_context.middleware import ContextMiddleware
from starlette_context.plugins.correlation_id import CorrelationIdPlugin

from anime_api.containers.containers import init_app_container
from anime_api.handlers.exception_handlers import handle_bot_error, handle_unexpected_exception
from anime_api.metrics.asgi_metrics import metrics_endpoint
from anime_api.middleware.metrics import PrometheusMiddleware
from anime_api.middleware.process_time import ProcessTimeMiddleware
from anime_api.routes import (
    health_endpoints,  # noqa: F401
    webhook_endpoints,
)
from anime_api.routes.routers import status_check_bp, telegram_router
from anime_api.settings import settings
from anime_bot.errors import AnimeBotError


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open storage before serving and release the bus connection on shutdown."""
    container = app.container  # type: ignore

    database = container.database()
    logger.info(f"Serving updates with database {database.db_path}.")
    logger.info(f"Publishing notifications to channel {settings.notifications_channel}.")

    yield

    container.redis_client().close()
    logger.info("Bus connection closed.")


def create_app() -> FastAPI:
    """Create a FastAPI instance with configured routes and middleware.

    Returns:
        FastAPI: An instance of the FastAPI application.
    """
    modules_to_inject = [webhook_endpoints]
    container = init_app_container(modules_to_inject, settings)

    middleware = [
        Middleware(ContextMiddleware, plugins=(CorrelationIdPlugin(),)),
        Middleware(ProcessTimeMiddleware),
        Middleware(PrometheusMiddleware, filter_unhandled_paths=True),
    ]

    app: FastAPI = FastAPI(
        title=settings.api_name,
        version=settings.api_version,
        middleware=middleware,
        description="Telegram webhook of the anime release notification bot.",
        lifespan=lifespan,
    )

    # Attach container to app for access in lifespan
    app.container = container  # type: ignore

    app.add_exception_handler(AnimeBotError, handle_bot_error)
    # Register the exception handler for catching unexpected errors
    app.add_exception_handler(Exception, handle_unexpected_exception)

    app.include_router(status_check_bp, prefix="/health", tags=["status_check"])
    app.include_router(telegram_router, prefix="/telegram", tags=["telegram"])
    app.add_route("/metrics", metrics_endpoint)
    return app
