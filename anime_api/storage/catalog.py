"""SQLite-based anime catalog storage."""

import sqlite3

from anime_api.storage.database import SqliteDatabase
from anime_bot.models import CatalogItem, CatalogSearchResult

ANIME_COLUMNS = "a.id, a.external_id, a.rus_name, a.eng_name, a.image_url, a.next_episode_at, a.notified"


class SqliteCatalogStore:
    """Read access to the anime catalog, plus the upsert used by ingestion."""

    def __init__(self, database: SqliteDatabase) -> None:
        """Initialize the catalog store.

        Args:
            database: Database to read from and write to.
        """
        self.database = database

    def find_by_id(self, item_id: int) -> CatalogItem | None:
        """Get a series by internal id."""
        return self._find_one("a.id = ?", item_id)

    def find_by_external_id(self, external_id: str) -> CatalogItem | None:
        """Get a series by its id in the upstream catalog."""
        return self._find_one("a.external_id = ?", external_id)

    def find_by_name(self, name: str) -> CatalogItem | None:
        """Get a series whose Russian or English title equals ``name`` exactly."""
        return self._find_one("(a.rus_name = ? OR a.eng_name = ?)", name, name)

    def search(self, text: str, user_id: int, limit: int = 50) -> list[CatalogSearchResult]:
        """Search series by case-insensitive substring of either title.

        Args:
            text: Substring to look for; empty matches everything.
            user_id: User whose subscriptions annotate the results.
            limit: Maximum number of results.

        Returns:
            Matching series with the user's subscription flag, ordered by id.
        """
        needle = text.casefold()
        with self.database.connect() as conn:
            rows = conn.execute(
                f"""
                SELECT {ANIME_COLUMNS},
                       EXISTS (
                           SELECT 1 FROM subscriptions s
                           WHERE s.anime_id = a.id AND s.user_id = ?
                       ) AS subscribed
                FROM animes a
                WHERE instr(casefold(a.rus_name), ?) > 0
                   OR instr(casefold(a.eng_name), ?) > 0
                ORDER BY a.id
                LIMIT ?
                """,  # noqa: S608
                (user_id, needle, needle, limit),
            ).fetchall()

        return [
            CatalogSearchResult(**self._row_to_fields(row), subscribed=bool(row["subscribed"])) for row in rows
        ]

    def list_subscribed(self, user_id: int) -> list[CatalogItem]:
        """Get all series the user is subscribed to."""
        return self._find_many(
            "a.id IN (SELECT anime_id FROM subscriptions WHERE user_id = ?)",
            user_id,
        )

    def list_not_subscribed(self, user_id: int) -> list[CatalogItem]:
        """Get all series the user is not subscribed to."""
        return self._find_many(
            "a.id NOT IN (SELECT anime_id FROM subscriptions WHERE user_id = ?)",
            user_id,
        )

    def upsert(  # noqa: PLR0913
        self,
        external_id: str,
        rus_name: str | None,
        eng_name: str | None,
        image_url: str | None = None,
        next_episode_at: str | None = None,
        *,
        notified: bool = False,
    ) -> CatalogItem:
        """Insert a series or refresh it by external id.

        Args:
            external_id: Id of the series in the upstream catalog.
            rus_name: Russian title.
            eng_name: English title.
            image_url: Poster URL.
            next_episode_at: ISO timestamp of the next episode.
            notified: Whether subscribers were told about the next episode.

        Returns:
            The stored CatalogItem.
        """
        with self.database.connect() as conn:
            conn.execute(
                """
                INSERT INTO animes (external_id, rus_name, eng_name, image_url, next_episode_at, notified)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT (external_id) DO UPDATE SET
                    rus_name = excluded.rus_name,
                    eng_name = excluded.eng_name,
                    image_url = excluded.image_url,
                    next_episode_at = excluded.next_episode_at,
                    notified = excluded.notified
                """,
                (external_id, rus_name, eng_name, image_url, next_episode_at, notified),
            )
        item = self.find_by_external_id(external_id)
        if item is None:
            raise LookupError(f"Series {external_id} missing right after upsert")
        return item

    def _find_one(self, condition: str, *params: object) -> CatalogItem | None:
        with self.database.connect() as conn:
            row = conn.execute(
                f"SELECT {ANIME_COLUMNS} FROM animes a WHERE {condition} ORDER BY a.id LIMIT 1",  # noqa: S608
                params,
            ).fetchone()
        return CatalogItem(**self._row_to_fields(row)) if row else None

    def _find_many(self, condition: str, *params: object) -> list[CatalogItem]:
        with self.database.connect() as conn:
            rows = conn.execute(
                f"SELECT {ANIME_COLUMNS} FROM animes a WHERE {condition} ORDER BY a.id",  # noqa: S608
                params,
            ).fetchall()
        return [CatalogItem(**self._row_to_fields(row)) for row in rows]

    @staticmethod
    def _row_to_fields(row: sqlite3.Row) -> dict[str, object]:
        """Map an ``animes`` row onto CatalogItem fields."""
        return {
            "id": row["id"],
            "external_id": row["external_id"],
            "primary_name": row["rus_name"],
            "alternate_name": row["eng_name"],
            "image_url": row["image_url"],
            "next_release_at": row["next_episode_at"],
            "notified": bool(row["notified"]),
        }
