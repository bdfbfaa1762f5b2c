"""Find-or-create resolution of the acting user."""

from loguru import logger

from anime_bot.errors import PersistenceError
from anime_bot.models import User
from anime_bot.ports import UserStore


class UserResolver:
    """Resolves Telegram senders to stored users, creating them on first contact."""

    def __init__(self, users: UserStore) -> None:
        """Initialize the resolver.

        Args:
            users: User store to look up and insert users.
        """
        self.users = users

    def resolve(self, external_id: str, display_name: str | None) -> tuple[User, bool]:
        """Return the user for ``external_id`` and whether it existed before.

        The insert is conflict-tolerant, so concurrent first contacts with the
        same id create a single row and only one caller sees ``False``.

        Args:
            external_id: Telegram user id as a decimal string.
            display_name: Name stored when the user is created.

        Returns:
            Tuple of the stored user and ``existed_before``.

        Raises:
            PersistenceError: If the store fails or the user vanished after insert.
        """
        user = self.users.find_by_external_id(external_id)
        if user is not None:
            return user, True

        inserted = self.users.insert_if_absent(external_id, display_name)
        user = self.users.find_by_external_id(external_id)
        if user is None:
            raise PersistenceError(f"User {external_id} missing right after insert")

        if inserted:
            logger.info(f"Registered new user {external_id} ({display_name}).")
        return user, not inserted
