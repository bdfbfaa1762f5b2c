"""Publishing of outbound notifications to the Redis message bus."""

import redis
from loguru import logger
from pydantic import BaseModel

from anime_bot.errors import PublishError
from anime_bot.ports import MessageBus


class NotificationPublisher:
    """Serializes notifications and publishes them on a Redis channel.

    Each call publishes exactly once. There is no retry and no buffering;
    a bus failure is reported to the caller as ``PublishError``.
    """

    def __init__(self, bus: MessageBus, channel: str) -> None:
        """Initialize the publisher.

        Args:
            bus: Redis client (or anything with a compatible ``publish``).
            channel: Pub/sub channel the delivery worker listens on.
        """
        self.bus = bus
        self.channel = channel

    def publish(self, notification: BaseModel) -> None:
        """Publish one notification.

        Args:
            notification: Any outbound notification model.

        Raises:
            PublishError: If the bus is unreachable or rejects the message.
        """
        data = notification.model_dump_json()
        try:
            receivers = self.bus.publish(self.channel, data)
        except redis.RedisError as err:
            raise PublishError(f"Failed to publish to {self.channel}: {err}") from err

        if not receivers:
            logger.warning(f"No subscribers on {self.channel}; notification dropped by the bus.")
        logger.debug(f"Published notification to {self.channel}: {data}")
