"""Update dispatch and subscription toggle engine of the anime release bot."""

from anime_bot.dispatcher import UpdateDispatcher
from anime_bot.errors import AnimeBotError, NotFoundError, ParseError, PersistenceError, PublishError
from anime_bot.interactions import CallbackAction, InlineSearch, Interaction, TextMessage, parse_update
from anime_bot.notifications import OutboundNotification, decode_notification
from anime_bot.publisher import NotificationPublisher
from anime_bot.router import CommandRouter
from anime_bot.subscriptions import SubscriptionToggler
from anime_bot.users import UserResolver

__all__ = [
    "AnimeBotError",
    "CallbackAction",
    "CommandRouter",
    "InlineSearch",
    "Interaction",
    "NotFoundError",
    "NotificationPublisher",
    "OutboundNotification",
    "ParseError",
    "PersistenceError",
    "PublishError",
    "SubscriptionToggler",
    "TextMessage",
    "UpdateDispatcher",
    "UserResolver",
    "decode_notification",
    "parse_update",
]
