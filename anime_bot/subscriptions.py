"""Subscription toggle state machine."""

from loguru import logger

from anime_bot.models import CatalogItem, ToggleAction
from anime_bot.notifications import ErrorNotification, ToggleResultNotification
from anime_bot.ports import SubscriptionStore
from anime_bot.texts import (
    ALREADY_SUBSCRIBED_REASON,
    NOT_SUBSCRIBED_REASON,
    SUBSCRIBED_TEXT,
    UNSUBSCRIBED_TEXT,
)

NOOP_REASONS = {
    ToggleAction.SUBSCRIBED: ALREADY_SUBSCRIBED_REASON,
    ToggleAction.UNSUBSCRIBED: NOT_SUBSCRIBED_REASON,
}

RESULT_TEXTS = {
    ToggleAction.SUBSCRIBED: SUBSCRIBED_TEXT,
    ToggleAction.UNSUBSCRIBED: UNSUBSCRIBED_TEXT,
}


class SubscriptionToggler:
    """Flips a user's membership for one catalog item."""

    def __init__(self, subscriptions: SubscriptionStore) -> None:
        """Initialize the toggler.

        Args:
            subscriptions: Transactional subscription store.
        """
        self.subscriptions = subscriptions

    def toggle(  # noqa: PLR0913
        self,
        user_id: int,
        item: CatalogItem,
        chat_id: int,
        message_id: int | None = None,
        *,
        requested: ToggleAction | None = None,
        callback_query_id: str | None = None,
    ) -> ToggleResultNotification | ErrorNotification:
        """Subscribe if absent, unsubscribe if present.

        The existence check and the mutation run in one transaction. When
        ``requested`` is given and the current state already matches it,
        nothing is written and an error notification is returned.

        Args:
            user_id: Internal user id.
            item: Catalog item to toggle.
            chat_id: Chat the result is reported to.
            message_id: Message the result refers to, if any.
            requested: Direction asked for by an inline button.
            callback_query_id: Callback query to answer, if any.

        Returns:
            The toggle result, or an error notification for a no-op.

        Raises:
            PersistenceError: If the store fails; the transaction is rolled back.
        """
        with self.subscriptions.transaction() as tx:
            subscribed = tx.exists(user_id, item.id)
            target = ToggleAction.UNSUBSCRIBED if subscribed else ToggleAction.SUBSCRIBED

            if requested is not None and requested != target:
                logger.info(f"Ignoring {requested.value} request of user {user_id} for item {item.id}: no change.")
                return ErrorNotification(
                    reason=NOOP_REASONS[requested],
                    chat_id=chat_id,
                    callback_query_id=callback_query_id,
                )

            if subscribed:
                tx.delete(user_id, item.id)
            else:
                tx.insert(user_id, item.id)

        logger.info(f"User {user_id} {target.value} item {item.id}.")
        return ToggleResultNotification(
            action=target,
            chat_id=chat_id,
            message_id=message_id,
            callback_query_id=callback_query_id,
            item_id=item.id,
            item=item,
            text=RESULT_TEXTS[target],
        )
