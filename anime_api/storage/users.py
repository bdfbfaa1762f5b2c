"""SQLite-based user storage."""

import sqlite3

from anime_api.storage.database import SqliteDatabase
from anime_bot.models import User


class SqliteUserStore:
    """Stores bot users keyed by their unique Telegram id."""

    def __init__(self, database: SqliteDatabase) -> None:
        """Initialize the user store.

        Args:
            database: Database to read from and write to.
        """
        self.database = database

    def find_by_external_id(self, external_id: str) -> User | None:
        """Get a user by Telegram id.

        Args:
            external_id: Telegram user id as a decimal string.

        Returns:
            The User or None if not found.
        """
        with self.database.connect() as conn:
            row = conn.execute(
                "SELECT id, external_id, display_name FROM users WHERE external_id = ?",
                (external_id,),
            ).fetchone()
        return self._row_to_user(row) if row else None

    def insert_if_absent(self, external_id: str, display_name: str | None) -> bool:
        """Insert a user unless one with the same Telegram id exists.

        Args:
            external_id: Telegram user id as a decimal string.
            display_name: Username or first name.

        Returns:
            True if a row was inserted, False if the user already existed.
        """
        with self.database.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO users (external_id, display_name)
                VALUES (?, ?)
                ON CONFLICT (external_id) DO NOTHING
                """,
                (external_id, display_name),
            )
            return cursor.rowcount > 0

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(id=row["id"], external_id=row["external_id"], display_name=row["display_name"])
