"""Catalog persistence for Resonance."""

import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional

from pydantic import ValidationError

from resonance.errors import StoreUnavailableError
from resonance.models import ENTITY_TYPES, Media, MediaKind

logger = logging.getLogger("resonance.store")

# Refreshed when an existing row is written again; kind, cached_at and the
# rating aggregates keep their first-insert values.
_DESCRIPTIVE_COLUMNS = [
    "title",
    "artist_name",
    "image_url",
    "release_date",
    "external_url",
    "description",
    "genre",
    "label",
    "duration_ms",
    "track_number",
    "thumbnail_url",
    "preview_url",
]

_INSERT_COLUMNS = ["id", "kind"] + _DESCRIPTIVE_COLUMNS + [
    "average_rating",
    "rating_count",
    "cached_at",
]

# Keeps IN (...) lists below SQLite's bound-parameter limit
_ID_CHUNK_SIZE = 500


class CatalogStore(ABC):
    """Persistence of cached catalog records keyed by catalog id."""

    @abstractmethod
    def find_by_id(self, media_id: str) -> Optional[Media]:
        """Return the cached record for an id, or None."""
        pass

    @abstractmethod
    def find_all_by_ids_in(self, ids: Iterable[str]) -> List[Media]:
        """Return cached records for the given ids.

        Order is unspecified and missing ids are silently omitted.
        """
        pass

    @abstractmethod
    def save_all(self, records: Iterable[Media]) -> List[Media]:
        """Upsert records by id and return their post-write state.

        A row never changes kind, and ``cached_at`` plus the rating
        aggregates are kept from the first insert.
        """
        pass

    def save(self, record: Media) -> Media:
        """Upsert a single record and return its post-write state."""
        saved = self.save_all([record])
        if not saved:
            raise StoreUnavailableError(f"Record {record.id} missing after save")
        return saved[0]

    @abstractmethod
    def update_rating_stats(
        self, media_id: str, average_rating: Optional[float], rating_count: int
    ) -> Optional[Media]:
        """Replace the rating aggregates of a cached record.

        Returns:
            The updated record, or None if the id is not cached
        """
        pass

    def add_rating(self, media_id: str, rating: float) -> Optional[Media]:
        """Fold one rating into the running average of a cached record."""
        media = self.find_by_id(media_id)
        if media is None:
            return None
        total = (media.average_rating or 0.0) * media.rating_count + rating
        count = media.rating_count + 1
        return self.update_rating_stats(media_id, total / count, count)

    def close(self) -> None:
        """Release any held resources."""


def check_rating_stats(average_rating: Optional[float], rating_count: int) -> None:
    """Validate a pair of rating aggregates.

    Raises:
        ValueError: if the pair breaks the aggregate invariants
    """
    if rating_count < 0:
        raise ValueError(f"rating_count must be non-negative, got {rating_count}")
    if rating_count == 0 and average_rating is not None:
        raise ValueError("average_rating must be None when rating_count is 0")
    if rating_count > 0:
        if average_rating is None:
            raise ValueError("average_rating is required when rating_count > 0")
        if not 0.0 <= average_rating <= 10.0:
            raise ValueError(f"average_rating must be within 0-10, got {average_rating}")


class SQLiteCatalogStore(CatalogStore):
    """SQLite-backed catalog store using one ``media`` table.

    Every operation opens its own connection, so a single instance can be
    shared between threads. Concurrent inserts of the same id converge on
    the primary key.
    """

    def __init__(self, db_path: str, timeout: float = 30.0):
        """Initialize store with database path."""
        self.db_path = db_path
        self.timeout = timeout
        logger.debug(f"Initializing catalog store at: {db_path}")
        self._initialize_db()

    def _initialize_db(self) -> None:
        """Initialize the SQLite database."""
        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS media (
                    id TEXT PRIMARY KEY,
                    kind TEXT NOT NULL CHECK (kind IN ('ALBUM', 'TRACK', 'ARTIST')),
                    title TEXT NOT NULL,
                    artist_name TEXT NOT NULL,
                    image_url TEXT,
                    release_date TEXT,
                    external_url TEXT,
                    description TEXT,
                    genre TEXT,
                    label TEXT,
                    duration_ms INTEGER,
                    track_number INTEGER,
                    thumbnail_url TEXT,
                    preview_url TEXT,
                    average_rating REAL,
                    rating_count INTEGER NOT NULL DEFAULT 0 CHECK (rating_count >= 0),
                    cached_at TIMESTAMP NOT NULL
                )
            """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_media_kind ON media(kind)")

        # WAL lets readers proceed while another thread writes
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
        logger.debug("Catalog store initialized successfully")

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection that is closed on every exit path."""
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Cannot open catalog store {self.db_path}: {e}") from e

        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Catalog store operation failed: {e}") from e
        finally:
            conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Run statements in one write transaction, rolled back on error."""
        with self._connect() as conn:
            # Take the write lock up front so the busy timeout applies
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def _row_to_media(self, row: sqlite3.Row) -> Optional[Media]:
        data = dict(row)
        try:
            data["kind"] = MediaKind(data["kind"])
            return ENTITY_TYPES[data["kind"]].model_validate(data)
        except (KeyError, ValueError, ValidationError) as e:
            logger.warning(f"Skipping unreadable catalog row {data.get('id')}: {e}")
            return None

    def _media_to_params(self, media: Media, now: str) -> List[Any]:
        data: Dict[str, Any] = media.model_dump()
        data["kind"] = media.kind.value
        data["cached_at"] = media.cached_at.isoformat() if media.cached_at else now
        return [data.get(column) for column in _INSERT_COLUMNS]

    def _select_ids(self, conn: sqlite3.Connection, ids: List[str]) -> List[Media]:
        found: List[Media] = []
        for start in range(0, len(ids), _ID_CHUNK_SIZE):
            chunk = ids[start:start + _ID_CHUNK_SIZE]
            placeholders = ", ".join("?" for _ in chunk)
            rows = conn.execute(
                f"SELECT * FROM media WHERE id IN ({placeholders})", chunk
            ).fetchall()
            for row in rows:
                media = self._row_to_media(row)
                if media is not None:
                    found.append(media)
        return found

    def find_by_id(self, media_id: str) -> Optional[Media]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM media WHERE id = ?", (media_id,)).fetchone()

        if row is None:
            logger.debug(f"Catalog miss: {media_id}")
            return None
        return self._row_to_media(row)

    def find_all_by_ids_in(self, ids: Iterable[str]) -> List[Media]:
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return []

        with self._connect() as conn:
            return self._select_ids(conn, unique_ids)

    def save_all(self, records: Iterable[Media]) -> List[Media]:
        records = list(records)
        if not records:
            return []

        columns = ", ".join(_INSERT_COLUMNS)
        placeholders = ", ".join("?" for _ in _INSERT_COLUMNS)
        updates = ", ".join(f"{column} = excluded.{column}" for column in _DESCRIPTIVE_COLUMNS)
        statement = (
            f"INSERT INTO media ({columns}) VALUES ({placeholders}) "
            f"ON CONFLICT(id) DO UPDATE SET {updates} "
            f"WHERE media.kind = excluded.kind"
        )

        now = datetime.now(timezone.utc).isoformat()
        with self._transaction() as conn:
            conn.executemany(statement, [self._media_to_params(record, now) for record in records])
            saved = self._select_ids(conn, list(dict.fromkeys(record.id for record in records)))

        logger.debug(f"Saved {len(records)} record(s) to catalog store")
        return saved

    def update_rating_stats(
        self, media_id: str, average_rating: Optional[float], rating_count: int
    ) -> Optional[Media]:
        check_rating_stats(average_rating, rating_count)

        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE media SET average_rating = ?, rating_count = ? WHERE id = ?",
                (average_rating, rating_count, media_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM media WHERE id = ?", (media_id,)).fetchone()

        return self._row_to_media(row)

    def add_rating(self, media_id: str, rating: float) -> Optional[Media]:
        if not 0.0 <= rating <= 10.0:
            raise ValueError(f"rating must be within 0-10, got {rating}")

        # Single statement so concurrent raters never lose an update
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE media
                SET average_rating = (COALESCE(average_rating, 0) * rating_count + ?) / (rating_count + 1),
                    rating_count = rating_count + 1
                WHERE id = ?
                """,
                (float(rating), media_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM media WHERE id = ?", (media_id,)).fetchone()

        return self._row_to_media(row)

    def count(self, kind: Optional[MediaKind] = None) -> int:
        """Number of cached records, optionally of one kind."""
        with self._connect() as conn:
            if kind is None:
                row = conn.execute("SELECT COUNT(*) FROM media").fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) FROM media WHERE kind = ?", (kind.value,)).fetchone()
        return row[0]

    def list_ids(self) -> List[str]:
        """All cached ids, sorted."""
        with self._connect() as conn:
            rows = conn.execute("SELECT id FROM media ORDER BY id").fetchall()
        return [row["id"] for row in rows]
