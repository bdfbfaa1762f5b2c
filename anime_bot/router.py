"""Command routing for parsed interactions."""

from loguru import logger

from anime_bot.errors import NotFoundError
from anime_bot.interactions import CallbackAction, InlineSearch, Interaction, TextMessage
from anime_bot.models import CatalogItem, User
from anime_bot.notifications import (
    CatalogListNotification,
    ErrorNotification,
    InlineResultsNotification,
    OutboundNotification,
    SubscriptionListNotification,
    TogglePromptNotification,
    WelcomeNotification,
)
from anime_bot.ports import CatalogStore, SubscriptionStore
from anime_bot.subscriptions import SubscriptionToggler
from anime_bot.texts import (
    CATALOG_TEXT,
    NOT_FOUND_REASON,
    SUBSCRIPTIONS_TEXT,
    WELCOME_BACK_TEXT,
    WELCOME_TEXT,
)

START_COMMAND = "/start"
ANIMES_COMMAND = "/animes"
SUBSCRIPTIONS_COMMAND = "/subscriptions"

DEFAULT_INLINE_RESULTS_LIMIT = 50


def split_command(text: str) -> tuple[str, list[str]]:
    """Split message text into a command token and its arguments.

    A ``@botname`` suffix on the command token is dropped.

    Args:
        text: Raw message text.

    Returns:
        The command token (empty for blank text) and the remaining tokens.
    """
    tokens = text.split()
    if not tokens:
        return "", []
    command = tokens[0]
    if command.startswith("/"):
        command = command.split("@", 1)[0]
    return command, tokens[1:]


class CommandRouter:
    """Dispatches interactions to the matching command handler."""

    def __init__(
        self,
        catalog: CatalogStore,
        subscriptions: SubscriptionStore,
        toggler: SubscriptionToggler,
        inline_results_limit: int = DEFAULT_INLINE_RESULTS_LIMIT,
    ) -> None:
        """Initialize the router.

        Args:
            catalog: Catalog store for lookups and searches.
            subscriptions: Subscription store for membership checks.
            toggler: Toggler performing subscription changes.
            inline_results_limit: Maximum number of inline results returned.
        """
        self.catalog = catalog
        self.subscriptions = subscriptions
        self.toggler = toggler
        self.inline_results_limit = inline_results_limit

    def route(self, interaction: Interaction, user: User, *, existed_before: bool) -> OutboundNotification:
        """Handle one interaction on behalf of ``user``.

        Args:
            interaction: Parsed interaction.
            user: Resolved acting user.
            existed_before: Whether the user was known before this interaction.

        Returns:
            The notification describing the outcome.

        Raises:
            TypeError: If the interaction is not a known variant.
        """
        if isinstance(interaction, TextMessage):
            try:
                return self._route_message(interaction, user, existed_before=existed_before)
            except NotFoundError as exp:
                logger.info(f"Message from user {user.id} not handled: {exp}")
                return ErrorNotification(reason=NOT_FOUND_REASON, chat_id=interaction.chat_id)

        if isinstance(interaction, InlineSearch):
            return self._route_inline_search(interaction, user)

        if isinstance(interaction, CallbackAction):
            try:
                return self._route_callback(interaction, user)
            except NotFoundError as exp:
                logger.info(f"Callback from user {user.id} not handled: {exp}")
                return ErrorNotification(
                    reason=NOT_FOUND_REASON,
                    chat_id=interaction.source_chat_id,
                    callback_query_id=interaction.id,
                )

        raise TypeError(f"Unsupported interaction: {type(interaction).__name__}")

    def _route_message(self, message: TextMessage, user: User, *, existed_before: bool) -> OutboundNotification:
        command, args = split_command(message.text)

        if command == START_COMMAND and not args:
            return WelcomeNotification(
                chat_id=message.chat_id,
                text=WELCOME_BACK_TEXT if existed_before else WELCOME_TEXT,
                returning=existed_before,
            )

        if command == START_COMMAND:
            item = self.catalog.find_by_external_id(args[0])
            if item is not None:
                return self._prompt(message, user, item)
            logger.debug(f"Deep link {args[0]!r} matches no series, falling back to title lookup.")

        elif command == ANIMES_COMMAND:
            return CatalogListNotification(
                chat_id=message.chat_id,
                text=CATALOG_TEXT,
                items=self.catalog.list_not_subscribed(user.id),
            )

        elif command == SUBSCRIPTIONS_COMMAND:
            return SubscriptionListNotification(
                chat_id=message.chat_id,
                text=SUBSCRIPTIONS_TEXT,
                items=self.catalog.list_subscribed(user.id),
            )

        return self._toggle_by_name(message, user)

    def _prompt(self, message: TextMessage, user: User, item: CatalogItem) -> TogglePromptNotification:
        subscribed = self.subscriptions.is_subscribed(user.id, item.id)
        return TogglePromptNotification(chat_id=message.chat_id, item=item, subscribed=subscribed)

    def _toggle_by_name(self, message: TextMessage, user: User) -> OutboundNotification:
        name = message.text.strip()
        item = self.catalog.find_by_name(name) if name else None
        if item is None:
            raise NotFoundError(f"No series named {name!r}")
        return self.toggler.toggle(user.id, item, message.chat_id, message.message_id)

    def _route_inline_search(self, search: InlineSearch, user: User) -> InlineResultsNotification:
        items = self.catalog.search(search.query_text.strip(), user.id, self.inline_results_limit)
        return InlineResultsNotification(query_id=search.id, items=items)

    def _route_callback(self, callback: CallbackAction, user: User) -> OutboundNotification:
        item = self.catalog.find_by_id(callback.item_id)
        if item is None:
            raise NotFoundError(f"No series with id {callback.item_id}")
        return self.toggler.toggle(
            user.id,
            item,
            callback.source_chat_id,
            callback.source_message_id,
            requested=callback.action,
            callback_query_id=callback.id,
        )
