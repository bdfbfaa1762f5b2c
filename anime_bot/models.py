"""Domain records shared by the bot core and the storage adapters."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class ToggleAction(str, Enum):
    """Outcome of a subscription toggle."""

    SUBSCRIBED = "subscribed"
    UNSUBSCRIBED = "unsubscribed"


@dataclass(frozen=True)
class User:
    """Represents a bot user identified by their Telegram id."""

    id: int
    external_id: str
    display_name: str | None


class CatalogItem(BaseModel):
    """Pydantic model representing an anime series tracked for releases."""

    id: int
    external_id: str
    primary_name: str | None = None
    alternate_name: str | None = None
    image_url: str | None = None
    next_release_at: datetime | None = None
    notified: bool = False


class CatalogSearchResult(CatalogItem):
    """Catalog item annotated with the requesting user's membership."""

    subscribed: bool
