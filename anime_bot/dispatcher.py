"""Update handling pipeline: parse, resolve, route, publish."""

from typing import Any

from loguru import logger

from anime_bot.interactions import parse_update
from anime_bot.notifications import OutboundNotification
from anime_bot.publisher import NotificationPublisher
from anime_bot.router import CommandRouter
from anime_bot.users import UserResolver


class UpdateDispatcher:
    """Handles one inbound webhook update end to end."""

    def __init__(self, resolver: UserResolver, router: CommandRouter, publisher: NotificationPublisher) -> None:
        """Initialize the dispatcher.

        Args:
            resolver: Find-or-create resolver for the acting user.
            router: Command router producing the notification.
            publisher: Publisher handing the notification to the bus.
        """
        self.resolver = resolver
        self.router = router
        self.publisher = publisher

    def handle(self, payload: Any) -> OutboundNotification:
        """Process a raw update and publish its notification.

        A state change committed by the router is kept even when publishing
        fails afterwards.

        Args:
            payload: Decoded JSON body of the webhook request.

        Returns:
            The notification that was published.

        Raises:
            ParseError: If the payload is malformed; nothing is stored or sent.
            PersistenceError: If a store operation fails; nothing is sent.
            PublishError: If the bus rejects the notification.
        """
        interaction = parse_update(payload)
        logger.debug(f"Parsed {type(interaction).__name__} from user {interaction.sender_id}.")

        user, existed_before = self.resolver.resolve(interaction.sender_id, interaction.sender_name)
        notification = self.router.route(interaction, user, existed_before=existed_before)

        self.publisher.publish(notification)
        logger.info(f"Handled {type(interaction).__name__} of user {user.id}: {notification.type}.")
        return notification
