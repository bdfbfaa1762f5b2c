"""SQLite-based subscription storage."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

from anime_api.storage.database import SqliteDatabase


class SqliteSubscriptionTransaction:
    """Subscription operations inside one open write transaction."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize the transaction wrapper.

        Args:
            conn: Connection with an open transaction.
        """
        self.conn = conn

    def exists(self, user_id: int, item_id: int) -> bool:
        """Check whether the user is subscribed to the series."""
        row = self.conn.execute(
            "SELECT 1 FROM subscriptions WHERE user_id = ? AND anime_id = ?",
            (user_id, item_id),
        ).fetchone()
        return row is not None

    def insert(self, user_id: int, item_id: int) -> None:
        """Subscribe the user to the series."""
        self.conn.execute(
            "INSERT INTO subscriptions (user_id, anime_id) VALUES (?, ?)",
            (user_id, item_id),
        )

    def delete(self, user_id: int, item_id: int) -> None:
        """Unsubscribe the user from the series."""
        self.conn.execute(
            "DELETE FROM subscriptions WHERE user_id = ? AND anime_id = ?",
            (user_id, item_id),
        )


class SqliteSubscriptionStore:
    """Transactional storage of the (user, series) subscription relation."""

    def __init__(self, database: SqliteDatabase) -> None:
        """Initialize the subscription store.

        Args:
            database: Database to read from and write to.
        """
        self.database = database

    @contextmanager
    def transaction(self) -> Iterator[SqliteSubscriptionTransaction]:
        """Open a write transaction over subscriptions.

        Yields:
            Operations bound to the transaction; committed on normal exit.
        """
        with self.database.transaction() as conn:
            yield SqliteSubscriptionTransaction(conn)

    def is_subscribed(self, user_id: int, item_id: int) -> bool:
        """Check membership outside of a write transaction."""
        with self.database.connect() as conn:
            return SqliteSubscriptionTransaction(conn).exists(user_id, item_id)
