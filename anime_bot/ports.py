"""Ports (interfaces) consumed by the bot core.

Storage and bus adapters live outside the core; these protocols are the only
contract the router, resolver and toggler rely on.
"""

from contextlib import AbstractContextManager
from typing import Protocol

from anime_bot.models import CatalogItem, CatalogSearchResult, User


class CatalogStore(Protocol):
    """Read access to the anime catalog."""

    def find_by_id(self, item_id: int) -> CatalogItem | None:
        ...

    def find_by_external_id(self, external_id: str) -> CatalogItem | None:
        ...

    def find_by_name(self, name: str) -> CatalogItem | None:
        ...

    def search(self, text: str, user_id: int, limit: int) -> list[CatalogSearchResult]:
        ...

    def list_subscribed(self, user_id: int) -> list[CatalogItem]:
        ...

    def list_not_subscribed(self, user_id: int) -> list[CatalogItem]:
        ...


class UserStore(Protocol):
    """Lookup and creation of bot users."""

    def find_by_external_id(self, external_id: str) -> User | None:
        ...

    def insert_if_absent(self, external_id: str, display_name: str | None) -> bool:
        ...


class SubscriptionTransaction(Protocol):
    """Subscription operations bound to one open storage transaction."""

    def exists(self, user_id: int, item_id: int) -> bool:
        ...

    def insert(self, user_id: int, item_id: int) -> None:
        ...

    def delete(self, user_id: int, item_id: int) -> None:
        ...


class SubscriptionStore(Protocol):
    """Read access to memberships and factory of subscription transactions."""

    def is_subscribed(self, user_id: int, item_id: int) -> bool:
        ...

    def transaction(self) -> AbstractContextManager[SubscriptionTransaction]:
        ...


class MessageBus(Protocol):
    """Minimal publish contract of the bus client (satisfied by ``redis.Redis``)."""

    def publish(self, channel: str, message: str) -> int:
        ...
