"""Containers for injection."""

import sys
from typing import Any

import loguru
import redis
from dependency_injector import containers, providers
from loguru import logger

from anime_api.logger.log import DevelopFormatter
from anime_api.settings import Settings
from anime_api.storage.catalog import SqliteCatalogStore
from anime_api.storage.database import SqliteDatabase
from anime_api.storage.subscriptions import SqliteSubscriptionStore
from anime_api.storage.users import SqliteUserStore
from anime_bot.dispatcher import UpdateDispatcher
from anime_bot.publisher import NotificationPublisher
from anime_bot.router import CommandRouter
from anime_bot.subscriptions import SubscriptionToggler
from anime_bot.users import UserResolver


class LoggerInitializer:
    """Configures the loguru sinks of the service."""

    def __init__(self) -> None:
        """Initialize the logger initializer."""
        self.develop_fmt = DevelopFormatter("anime-bot-api")

    def init_logger(self) -> "loguru.Logger":
        """Replace the default sink with the formatted stderr sink.

        Returns:
            loguru.Logger: The configured logger.
        """
        logger.remove()
        logger.add(sys.stderr, format=self.develop_fmt)  # type: ignore
        return logger


class AppContainer(containers.DeclarativeContainer):
    """Dependency injection container wiring stores, bus and the update pipeline.

    Every collaborator is built once per container; the core classes receive
    them through their constructors.
    """

    # Get the configuration
    config = providers.Configuration()

    database: providers.Singleton[SqliteDatabase] = providers.Singleton(
        SqliteDatabase,
        db_path=config.database_path,
        timeout=config.database_timeout,
    )

    catalog_store: providers.Singleton[SqliteCatalogStore] = providers.Singleton(SqliteCatalogStore, database=database)
    user_store: providers.Singleton[SqliteUserStore] = providers.Singleton(SqliteUserStore, database=database)
    subscription_store: providers.Singleton[SqliteSubscriptionStore] = providers.Singleton(
        SqliteSubscriptionStore,
        database=database,
    )

    redis_client: providers.Singleton[redis.Redis] = providers.Singleton(
        redis.Redis.from_url,
        url=config.redis_url,
        decode_responses=True,
    )

    publisher: providers.Singleton[NotificationPublisher] = providers.Singleton(
        NotificationPublisher,
        bus=redis_client,
        channel=config.notifications_channel,
    )

    user_resolver: providers.Singleton[UserResolver] = providers.Singleton(UserResolver, users=user_store)

    toggler: providers.Singleton[SubscriptionToggler] = providers.Singleton(
        SubscriptionToggler,
        subscriptions=subscription_store,
    )

    command_router: providers.Singleton[CommandRouter] = providers.Singleton(
        CommandRouter,
        catalog=catalog_store,
        subscriptions=subscription_store,
        toggler=toggler,
        inline_results_limit=config.inline_results_limit,
    )

    dispatcher: providers.Singleton[UpdateDispatcher] = providers.Singleton(
        UpdateDispatcher,
        resolver=user_resolver,
        router=command_router,
        publisher=publisher,
    )

    # Singleton and Callable provider for the Logger resource.
    logger_initializer: providers.Singleton[LoggerInitializer] = providers.Singleton(LoggerInitializer)
    logger = providers.Callable(logger_initializer().init_logger)


def init_app_container(modules_to_wire: list[Any], config: Settings) -> AppContainer:
    """Initialize the app container.

    Args:
        modules_to_wire (list[Any]): The modules to wire.
        config (Settings): The configuration.

    Returns:
        AppContainer: The container.
    """
    container = AppContainer()
    json_config = config.model_dump(mode="json")
    container.config.from_dict(json_config)
    container.wire(modules_to_wire)
    container.logger()
    return container
