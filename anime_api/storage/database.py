"""SQLite database holding users, the anime catalog and subscriptions."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

from anime_bot.errors import PersistenceError


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


class SqliteDatabase:
    """Connection factory and schema owner for the service database."""

    def __init__(self, db_path: str = "storage/anime_bot.db", timeout: float = 5.0) -> None:
        """Initialize the database.

        Args:
            db_path: Path to the SQLite database file.
            timeout: Seconds a connection waits for a locked database.
        """
        self.db_path = Path(db_path)
        self.timeout = timeout
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the database schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self.connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    external_id TEXT NOT NULL UNIQUE,
                    display_name TEXT
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS animes (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    external_id TEXT NOT NULL UNIQUE,
                    rus_name TEXT,
                    eng_name TEXT,
                    image_url TEXT,
                    next_episode_at TIMESTAMP,
                    notified BOOLEAN DEFAULT FALSE
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS subscriptions (
                    user_id INTEGER NOT NULL REFERENCES users(id),
                    anime_id INTEGER NOT NULL REFERENCES animes(id),
                    PRIMARY KEY (user_id, anime_id)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_subscriptions_anime_id
                ON subscriptions(anime_id)
            """)
        logger.info(f"Database initialized at {self.db_path}")

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        return conn

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Open an autocommit connection for single statements.

        Yields:
            An open connection, closed on exit.

        Raises:
            PersistenceError: If any SQLite operation fails.
        """
        try:
            conn = self._open()
        except sqlite3.Error as err:
            raise PersistenceError(f"Cannot open database {self.db_path}: {err}") from err
        try:
            yield conn
        except sqlite3.Error as err:
            raise PersistenceError(str(err)) from err
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Open a write transaction that commits on success and rolls back on error.

        ``BEGIN IMMEDIATE`` takes the write lock up front, so concurrent
        check-then-act sequences are serialized.

        Yields:
            A connection inside an open transaction.

        Raises:
            PersistenceError: If any SQLite operation fails.
        """
        with self.connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.rollback()
                raise
            conn.commit()
