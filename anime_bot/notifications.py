"""Outbound notification contracts handed to the delivery worker."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter

from anime_bot.models import CatalogItem, CatalogSearchResult, ToggleAction


class WelcomeNotification(BaseModel):
    """Greeting sent in reply to a bare ``/start``."""

    type: Literal["welcome"] = "welcome"
    chat_id: int
    text: str
    returning: bool


class CatalogListNotification(BaseModel):
    """Series the user can still subscribe to."""

    type: Literal["catalog_list"] = "catalog_list"
    chat_id: int
    text: str
    items: list[CatalogItem]


class SubscriptionListNotification(BaseModel):
    """Series the user is subscribed to."""

    type: Literal["subscription_list"] = "subscription_list"
    chat_id: int
    text: str
    items: list[CatalogItem]


class InlineResultsNotification(BaseModel):
    """Answer to an inline query."""

    type: Literal["inline_results"] = "inline_results"
    query_id: str
    items: list[CatalogSearchResult]


class TogglePromptNotification(BaseModel):
    """Deep-link prompt offering to subscribe to or unsubscribe from one series."""

    type: Literal["toggle_prompt"] = "toggle_prompt"
    chat_id: int
    item: CatalogItem
    subscribed: bool


class ToggleResultNotification(BaseModel):
    """Result of a committed subscription toggle."""

    type: Literal["toggle_result"] = "toggle_result"
    action: ToggleAction
    chat_id: int
    message_id: int | None = None
    callback_query_id: str | None = None
    item_id: int
    item: CatalogItem
    text: str


class ErrorNotification(BaseModel):
    """Request could not be fulfilled; nothing was changed."""

    type: Literal["error"] = "error"
    reason: str
    chat_id: int | None = None
    callback_query_id: str | None = None


OutboundNotification = Annotated[
    WelcomeNotification
    | CatalogListNotification
    | SubscriptionListNotification
    | InlineResultsNotification
    | TogglePromptNotification
    | ToggleResultNotification
    | ErrorNotification,
    Field(discriminator="type"),
]

notification_adapter: TypeAdapter[OutboundNotification] = TypeAdapter(OutboundNotification)


def decode_notification(raw: str | bytes) -> OutboundNotification:
    """Parse a notification from its wire form.

    Args:
        raw: JSON document as published on the bus.

    Returns:
        The concrete notification selected by its ``type`` field.
    """
    return notification_adapter.validate_json(raw)
