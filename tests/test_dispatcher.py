"""Tests for command routing and the update pipeline."""
# ruff: noqa: S101, PLR2004

from unittest.mock import Mock

import pytest

from anime_api.storage.catalog import SqliteCatalogStore
from anime_api.storage.database import SqliteDatabase
from anime_api.storage.subscriptions import SqliteSubscriptionStore
from anime_api.storage.users import SqliteUserStore
from anime_bot.dispatcher import UpdateDispatcher
from anime_bot.errors import ParseError
from anime_bot.interactions import TextMessage
from anime_bot.models import CatalogItem, ToggleAction
from anime_bot.notifications import decode_notification
from anime_bot.router import CommandRouter, split_command
from anime_bot.users import UserResolver
from tests.conftest import (
    CHANNEL,
    count_subscriptions,
    count_users,
    make_callback_update,
    make_inline_update,
    make_message_update,
)


def _published(mock_bus: Mock) -> list:
    """Decode every notification sent through the mock bus."""
    return [decode_notification(call.args[1]) for call in mock_bus.publish.call_args_list]


def _subscription_count(store: SqliteSubscriptionStore, users: SqliteUserStore, external_id: str = "1001") -> int:
    user = users.find_by_external_id(external_id)
    return count_subscriptions(store.database, user.id) if user else 0


# =============================================================================
# split_command Tests
# =============================================================================


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("/start", ("/start", [])),
        ("/start 20", ("/start", ["20"])),
        ("  /start   20  ", ("/start", ["20"])),
        ("/start@anime_bot", ("/start", [])),
        ("One Piece", ("One", ["Piece"])),
        ("   ", ("", [])),
    ],
)
def test_split_command(text: str, expected: tuple[str, list[str]]) -> None:
    """Split text into a command and its arguments."""
    assert split_command(text) == expected


# =============================================================================
# Welcome
# =============================================================================


def test_start_new_then_returning_user(
    dispatcher: UpdateDispatcher,
    mock_bus: Mock,
    user_store: SqliteUserStore,
) -> None:
    """First /start greets a new user, the second a returning one, with one stored row."""
    first = dispatcher.handle(make_message_update("/start"))
    second = dispatcher.handle(make_message_update("/start"))

    assert first.type == "welcome"
    assert first.returning is False
    assert second.type == "welcome"
    assert second.returning is True
    assert first.text != second.text
    assert count_users(user_store.database) == 1

    assert _published(mock_bus) == [first, second]
    assert all(call.args[0] == CHANNEL for call in mock_bus.publish.call_args_list)


# =============================================================================
# Text commands
# =============================================================================


def test_start_with_known_external_id_prompts(
    dispatcher: UpdateDispatcher,
    catalog: dict[str, CatalogItem],
) -> None:
    """A deep link to a known series prompts with the current membership."""
    notification = dispatcher.handle(make_message_update("/start 20", chat_id=99))

    assert notification.type == "toggle_prompt"
    assert notification.chat_id == 99
    assert notification.item == catalog["naruto"]
    assert notification.subscribed is False


def test_start_prompt_reflects_existing_subscription(
    dispatcher: UpdateDispatcher,
    catalog: dict[str, CatalogItem],
) -> None:
    """The prompt reports an existing subscription."""
    dispatcher.handle(make_message_update("Naruto"))
    notification = dispatcher.handle(make_message_update("/start 20"))

    assert notification.type == "toggle_prompt"
    assert notification.item.id == catalog["naruto"].id
    assert notification.subscribed is True


@pytest.mark.usefixtures("catalog")
def test_start_with_unknown_external_id_falls_through(
    dispatcher: UpdateDispatcher,
    subscription_store: SqliteSubscriptionStore,
    user_store: SqliteUserStore,
) -> None:
    """An unknown deep link falls back to the title lookup and finds nothing."""
    notification = dispatcher.handle(make_message_update("/start 404"))

    assert notification.type == "error"
    assert notification.reason == "not found"
    assert _subscription_count(subscription_store, user_store) == 0


def test_title_toggles_subscription(
    dispatcher: UpdateDispatcher,
    catalog: dict[str, CatalogItem],
) -> None:
    """Sending an exact title subscribes, sending it again unsubscribes."""
    first = dispatcher.handle(make_message_update("One Piece", chat_id=99))
    second = dispatcher.handle(make_message_update("Ван-Пис", chat_id=99))

    assert first.type == "toggle_result"
    assert first.action == ToggleAction.SUBSCRIBED
    assert first.item_id == catalog["one_piece"].id
    assert first.chat_id == 99
    assert first.message_id == 77
    assert second.action == ToggleAction.UNSUBSCRIBED


def test_blank_text_reports_not_found(
    dispatcher: UpdateDispatcher,
    catalog_store: SqliteCatalogStore,
    subscription_store: SqliteSubscriptionStore,
    user_store: SqliteUserStore,
) -> None:
    """Whitespace-only text never matches a series, even one with an empty title."""
    catalog_store.upsert("999", "", "Untitled")

    notification = dispatcher.handle(make_message_update("   "))

    assert notification.type == "error"
    assert notification.reason == "not found"
    assert _subscription_count(subscription_store, user_store) == 0


def test_prompt_reads_while_a_write_transaction_is_open(
    command_router: CommandRouter,
    catalog: dict[str, CatalogItem],
    database: SqliteDatabase,
    user_store: SqliteUserStore,
) -> None:
    """The deep-link prompt does not wait for the database write lock."""
    user, _ = UserResolver(user_store).resolve("1001", "kakashi")
    message = TextMessage(sender_id="1001", sender_name="kakashi", chat_id=5, message_id=1, text="/start 20")

    with database.transaction():
        notification = command_router.route(message, user, existed_before=True)

    assert notification.type == "toggle_prompt"
    assert notification.item == catalog["naruto"]
    assert notification.subscribed is False


@pytest.mark.usefixtures("catalog")
def test_unknown_title_reports_not_found(dispatcher: UpdateDispatcher, mock_bus: Mock) -> None:
    """Unknown titles produce an error notification for the chat."""
    notification = dispatcher.handle(make_message_update("Bleach", chat_id=99))

    assert notification.type == "error"
    assert notification.reason == "not found"
    assert notification.chat_id == 99
    mock_bus.publish.assert_called_once()


def test_animes_lists_unsubscribed_series(
    dispatcher: UpdateDispatcher,
    catalog: dict[str, CatalogItem],
) -> None:
    """/animes lists the series the user can still subscribe to."""
    dispatcher.handle(make_message_update("Naruto"))
    notification = dispatcher.handle(make_message_update("/animes"))

    assert notification.type == "catalog_list"
    assert catalog["naruto"] not in notification.items
    assert len(notification.items) == 3


def test_subscriptions_lists_subscribed_series(
    dispatcher: UpdateDispatcher,
    catalog: dict[str, CatalogItem],
) -> None:
    """/subscriptions lists the user's series."""
    dispatcher.handle(make_message_update("Naruto"))
    notification = dispatcher.handle(make_message_update("/subscriptions"))

    assert notification.type == "subscription_list"
    assert notification.items == [catalog["naruto"]]


# =============================================================================
# Inline search
# =============================================================================


def test_inline_search_annotates_membership(
    dispatcher: UpdateDispatcher,
    catalog: dict[str, CatalogItem],
) -> None:
    """Inline results match both titles and flag the user's subscriptions."""
    dispatcher.handle(make_message_update("Naruto: Shippuuden"))
    notification = dispatcher.handle(make_inline_update("naruto"))

    assert notification.type == "inline_results"
    assert notification.query_id == "iq-1"
    flags = {item.id: item.subscribed for item in notification.items}
    assert flags == {
        catalog["naruto"].id: False,
        catalog["shippuden"].id: True,
        catalog["boruto"].id: False,
    }


# =============================================================================
# Callbacks
# =============================================================================


def test_callback_subscribe_then_unsubscribe(
    dispatcher: UpdateDispatcher,
    catalog: dict[str, CatalogItem],
) -> None:
    """Buttons subscribe and unsubscribe, answering the callback."""
    item_id = catalog["one_piece"].id

    subscribed = dispatcher.handle(make_callback_update(f"sub {item_id}", chat_id=300))
    unsubscribed = dispatcher.handle(make_callback_update(f"unsub {item_id}", chat_id=300))

    assert subscribed.type == "toggle_result"
    assert subscribed.action == ToggleAction.SUBSCRIBED
    assert subscribed.chat_id == 300
    assert subscribed.message_id == 55
    assert subscribed.callback_query_id == "cb-1"
    assert unsubscribed.action == ToggleAction.UNSUBSCRIBED


def test_repeated_subscribe_callback_is_noop(
    dispatcher: UpdateDispatcher,
    catalog: dict[str, CatalogItem],
    subscription_store: SqliteSubscriptionStore,
    user_store: SqliteUserStore,
) -> None:
    """Pressing 'subscribe' twice keeps a single subscription."""
    item_id = catalog["one_piece"].id
    dispatcher.handle(make_callback_update(f"sub {item_id}"))
    notification = dispatcher.handle(make_callback_update(f"sub {item_id}"))

    assert notification.type == "error"
    assert notification.reason == "already subscribed"
    assert notification.callback_query_id == "cb-1"
    assert _subscription_count(subscription_store, user_store) == 1


@pytest.mark.usefixtures("catalog")
def test_callback_for_unknown_series(dispatcher: UpdateDispatcher) -> None:
    """A button for a removed series reports not found."""
    notification = dispatcher.handle(make_callback_update("sub 9999"))

    assert notification.type == "error"
    assert notification.reason == "not found"
    assert notification.callback_query_id == "cb-1"


@pytest.mark.parametrize("data", ["sub", "sub x", "sub \u0664\u0662", "sub " + "9" * 30])
def test_malformed_callback_mutates_nothing(
    data: str,
    dispatcher: UpdateDispatcher,
    mock_bus: Mock,
    user_store: SqliteUserStore,
) -> None:
    """Malformed callback data is rejected before any store write or publish."""
    with pytest.raises(ParseError):
        dispatcher.handle(make_callback_update(data))

    assert count_users(user_store.database) == 0
    mock_bus.publish.assert_not_called()


def test_unsupported_interaction_type_raises(
    dispatcher: UpdateDispatcher,
    user_store: SqliteUserStore,
) -> None:
    """The router refuses objects that are not interaction variants."""
    user, _ = dispatcher.resolver.resolve("1", "a")
    with pytest.raises(TypeError):
        dispatcher.router.route(object(), user, existed_before=True)  # type: ignore[arg-type]
    assert count_users(user_store.database) == 1
