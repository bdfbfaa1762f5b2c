"""Pytest configuration, environment setup, and shared fixtures.

This module sets environment variables for settings initialization and
provides storage, bus and update fixtures shared by all test modules.
"""

import os
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest
from dependency_injector import providers


def _set_required_envs() -> None:
    """Set environment variables for tests."""
    os.environ.setdefault("ANIME_BOT_REDIS_URL", "redis://localhost:6379/15")
    os.environ.setdefault("ANIME_BOT_NOTIFICATIONS_CHANNEL", "test:notifications")
    os.environ.setdefault("ANIME_BOT_METRICS_PREFIX", "anime_bot_test")


_set_required_envs()

from anime_api.storage.catalog import SqliteCatalogStore  # noqa: E402
from anime_api.storage.database import SqliteDatabase  # noqa: E402
from anime_api.storage.subscriptions import SqliteSubscriptionStore  # noqa: E402
from anime_api.storage.users import SqliteUserStore  # noqa: E402
from anime_bot.dispatcher import UpdateDispatcher  # noqa: E402
from anime_bot.models import CatalogItem  # noqa: E402
from anime_bot.publisher import NotificationPublisher  # noqa: E402
from anime_bot.router import CommandRouter  # noqa: E402
from anime_bot.subscriptions import SubscriptionToggler  # noqa: E402
from anime_bot.users import UserResolver  # noqa: E402

CHANNEL = "test:notifications"


# =============================================================================
# Provider Override Helper
# =============================================================================


@contextmanager
def override_providers(*overrides: tuple[providers.Provider, object]) -> Generator[None, None, None]:
    """Temporarily override dependency-injector providers.

    Args:
        *overrides: Tuples of (provider, value) to inject.
    """
    try:
        for provider, value in overrides:
            provider.override(providers.Object(value))
        yield
    finally:
        for provider, _ in overrides:
            provider.reset_override()


# =============================================================================
# Row Count Helpers
# =============================================================================


def count_users(database: SqliteDatabase) -> int:
    """Count stored users."""
    with database.connect() as conn:
        return conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]


def count_subscriptions(database: SqliteDatabase, user_id: int | None = None) -> int:
    """Count subscriptions, optionally of one user."""
    with database.connect() as conn:
        if user_id is None:
            return conn.execute("SELECT COUNT(*) FROM subscriptions").fetchone()[0]
        return conn.execute("SELECT COUNT(*) FROM subscriptions WHERE user_id = ?", (user_id,)).fetchone()[0]


# =============================================================================
# Update Builders
# =============================================================================


def make_sender(user_id: int = 1001, username: str | None = "kakashi") -> dict[str, Any]:
    """Build the ``from`` object of an update."""
    return {"id": user_id, "is_bot": False, "first_name": "Kakashi", "username": username}


def make_message_update(text: str, user_id: int = 1001, chat_id: int | None = None) -> dict[str, Any]:
    """Build an update carrying a text message."""
    return {
        "update_id": 1,
        "message": {
            "message_id": 77,
            "date": 1700000000,
            "from": make_sender(user_id),
            "chat": {"id": chat_id or user_id, "type": "private"},
            "text": text,
        },
    }


def make_inline_update(query: str, user_id: int = 1001) -> dict[str, Any]:
    """Build an update carrying an inline query."""
    return {
        "update_id": 2,
        "inline_query": {"id": "iq-1", "from": make_sender(user_id), "query": query, "offset": ""},
    }


def make_callback_update(data: str, user_id: int = 1001, chat_id: int | None = None) -> dict[str, Any]:
    """Build an update carrying a callback query."""
    return {
        "update_id": 3,
        "callback_query": {
            "id": "cb-1",
            "from": make_sender(user_id),
            "chat_instance": "ci",
            "data": data,
            "message": {
                "message_id": 55,
                "date": 1700000000,
                "chat": {"id": chat_id or user_id, "type": "private"},
            },
        },
    }


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def database(tmp_path: Path) -> SqliteDatabase:
    """Create a fresh SQLite database in a temporary directory."""
    return SqliteDatabase(str(tmp_path / "anime_bot.db"))


@pytest.fixture
def catalog_store(database: SqliteDatabase) -> SqliteCatalogStore:
    """Create a catalog store over the test database."""
    return SqliteCatalogStore(database)


@pytest.fixture
def user_store(database: SqliteDatabase) -> SqliteUserStore:
    """Create a user store over the test database."""
    return SqliteUserStore(database)


@pytest.fixture
def subscription_store(database: SqliteDatabase) -> SqliteSubscriptionStore:
    """Create a subscription store over the test database."""
    return SqliteSubscriptionStore(database)


@pytest.fixture
def catalog(catalog_store: SqliteCatalogStore) -> dict[str, CatalogItem]:
    """Seed the catalog with a few series."""
    return {
        "naruto": catalog_store.upsert(
            "20",
            "Наруто",
            "Naruto",
            image_url="https://example.com/naruto.jpg",
            next_episode_at="2026-10-20T15:00:00+00:00",
        ),
        "shippuden": catalog_store.upsert("1735", "Наруто: Ураганные хроники", "Naruto: Shippuuden"),
        "one_piece": catalog_store.upsert("21", "Ван-Пис", "One Piece"),
        "boruto": catalog_store.upsert("34566", "Боруто", "Boruto: Naruto Next Generations"),
    }


# =============================================================================
# Pipeline Fixtures
# =============================================================================


@pytest.fixture
def mock_bus() -> Mock:
    """Create a mock Redis client reporting one subscriber per publish."""
    bus = Mock()
    bus.publish.return_value = 1
    return bus


@pytest.fixture
def publisher(mock_bus: Mock) -> NotificationPublisher:
    """Create a publisher over the mock bus."""
    return NotificationPublisher(mock_bus, CHANNEL)


@pytest.fixture
def toggler(subscription_store: SqliteSubscriptionStore) -> SubscriptionToggler:
    """Create a toggler over the test subscription store."""
    return SubscriptionToggler(subscription_store)


@pytest.fixture
def command_router(
    catalog_store: SqliteCatalogStore,
    subscription_store: SqliteSubscriptionStore,
    toggler: SubscriptionToggler,
) -> CommandRouter:
    """Create a router over the test stores."""
    return CommandRouter(catalog_store, subscription_store, toggler, inline_results_limit=10)


@pytest.fixture
def dispatcher(
    user_store: SqliteUserStore,
    command_router: CommandRouter,
    publisher: NotificationPublisher,
) -> UpdateDispatcher:
    """Create the full update pipeline over the test stores and mock bus."""
    return UpdateDispatcher(UserResolver(user_store), command_router, publisher)
