"""Decoding of Telegram webhook updates into interaction variants."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from anime_bot.errors import ParseError
from anime_bot.models import ToggleAction

INTERACTION_FIELDS = ("message", "inline_query", "callback_query")

CALLBACK_ACTIONS = {
    "sub": ToggleAction.SUBSCRIBED,
    "unsub": ToggleAction.UNSUBSCRIBED,
}

# Largest value of an SQLite INTEGER column.
MAX_ITEM_ID = 2**63 - 1


class TelegramUser(BaseModel):
    """Subset of Telegram user data required by the webhook."""

    id: int
    first_name: str | None = None
    username: str | None = None

    @property
    def display_name(self) -> str | None:
        """Username if set, otherwise the first name."""
        return self.username or self.first_name


class TelegramChat(BaseModel):
    """Subset of Telegram chat data required by the webhook."""

    id: int


class TelegramMessage(BaseModel):
    """Subset of Telegram message data required by the webhook."""

    message_id: int
    from_user: TelegramUser = Field(alias="from")
    chat: TelegramChat
    text: str


class TelegramInlineQuery(BaseModel):
    """Subset of Telegram inline query data required by the webhook."""

    id: str
    from_user: TelegramUser = Field(alias="from")
    query: str


class TelegramCallbackMessage(BaseModel):
    """Message the pressed inline button was attached to."""

    message_id: int
    chat: TelegramChat


class TelegramCallbackQuery(BaseModel):
    """Subset of Telegram callback query data required by the webhook."""

    id: str
    from_user: TelegramUser = Field(alias="from")
    data: str
    message: TelegramCallbackMessage


@dataclass(frozen=True)
class TextMessage:
    """A plain text message or command sent to the bot."""

    sender_id: str
    sender_name: str | None
    chat_id: int
    message_id: int
    text: str


@dataclass(frozen=True)
class InlineSearch:
    """An inline query typed after the bot's username."""

    id: str
    sender_id: str
    sender_name: str | None
    query_text: str


@dataclass(frozen=True)
class CallbackAction:
    """A press on an inline keyboard button carrying ``"<action> <itemId>"``."""

    id: str
    sender_id: str
    sender_name: str | None
    action_token: str
    action: ToggleAction
    item_id: int
    source_chat_id: int
    source_message_id: int


Interaction = TextMessage | InlineSearch | CallbackAction


def parse_callback_data(data: str) -> tuple[ToggleAction, int]:
    """Parse callback data of the form ``"sub 42"`` or ``"unsub 42"``.

    Args:
        data: Raw ``callback_query.data`` string.

    Returns:
        The requested toggle direction and the catalog item id.

    Raises:
        ParseError: If the data is not exactly two space-separated tokens,
            the action is unknown, or the item id is not an ASCII number
            that fits an SQLite INTEGER.
    """
    parts = data.split(" ")
    if len(parts) != 2:  # noqa: PLR2004
        raise ParseError(f"Callback data must have two tokens: {data!r}")

    action_token, item_token = parts
    action = CALLBACK_ACTIONS.get(action_token)
    if action is None:
        raise ParseError(f"Unknown callback action: {action_token!r}")
    if not (item_token.isascii() and item_token.isdigit()):
        raise ParseError(f"Callback item id is not numeric: {item_token!r}")
    item_id = int(item_token)
    if item_id > MAX_ITEM_ID:
        raise ParseError(f"Callback item id out of range: {item_token!r}")
    return action, item_id


def _validate(model: type[BaseModel], field: str, value: Any) -> Any:
    try:
        return model.model_validate(value)
    except ValidationError as err:
        raise ParseError(f"Invalid {field}: {err.error_count()} validation error(s)") from err


def parse_update(payload: Any) -> Interaction:
    """Decode a raw Telegram update into exactly one interaction variant.

    Args:
        payload: Decoded JSON body of the webhook request.

    Returns:
        The interaction carried by the update.

    Raises:
        ParseError: If the payload is not an object, carries zero or several
            interaction fields, or misses a required sub-field.
    """
    if not isinstance(payload, Mapping):
        raise ParseError("Update payload must be a JSON object")

    present = [field for field in INTERACTION_FIELDS if payload.get(field) is not None]
    if len(present) != 1:
        raise ParseError(f"Update must carry exactly one of {INTERACTION_FIELDS}, got {present}")

    field = present[0]
    value = payload[field]

    if field == "message":
        message = _validate(TelegramMessage, field, value)
        return TextMessage(
            sender_id=str(message.from_user.id),
            sender_name=message.from_user.display_name,
            chat_id=message.chat.id,
            message_id=message.message_id,
            text=message.text,
        )

    if field == "inline_query":
        inline_query = _validate(TelegramInlineQuery, field, value)
        return InlineSearch(
            id=inline_query.id,
            sender_id=str(inline_query.from_user.id),
            sender_name=inline_query.from_user.display_name,
            query_text=inline_query.query,
        )

    callback_query = _validate(TelegramCallbackQuery, field, value)
    action, item_id = parse_callback_data(callback_query.data)
    return CallbackAction(
        id=callback_query.id,
        sender_id=str(callback_query.from_user.id),
        sender_name=callback_query.from_user.display_name,
        action_token=callback_query.data,
        action=action,
        item_id=item_id,
        source_chat_id=callback_query.message.chat.id,
        source_message_id=callback_query.message.message_id,
    )
