"""Error taxonomy for update handling."""


class AnimeBotError(Exception):
    """Base class for all errors raised while handling an update."""


class ParseError(AnimeBotError):
    """The inbound payload is malformed or ambiguous."""


class NotFoundError(AnimeBotError):
    """A user or catalog item referenced by the interaction does not exist."""


class PersistenceError(AnimeBotError):
    """A store operation failed and its transaction was rolled back."""


class PublishError(AnimeBotError):
    """The notification could not be handed to the message bus."""
