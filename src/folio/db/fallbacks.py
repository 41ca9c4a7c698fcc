# ABOUTME: Persistence for operator-registered fallback books.
# ABOUTME: Upsert, fetch, list, and delete rows in the fallback_books table.

import sqlite3
import threading

from folio.db.mapping import metadata_to_row, row_to_metadata
from folio.metadata.types import SOURCE_FALLBACK, BookMetadata


class FallbackStore:
    """Typed access to the fallback_books table, keyed by normalized ISBN."""

    def __init__(self, conn: sqlite3.Connection, lock: "threading.RLock | None" = None) -> None:
        self._conn = conn
        self._lock = lock or threading.RLock()

    def upsert(self, isbn: str, metadata: BookMetadata) -> None:
        """Insert or overwrite the entry for ``isbn``."""
        row = metadata_to_row(metadata, isbn)
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)
        updates = ", ".join(f"{col} = excluded.{col}" for col in row if col != "isbn")
        with self._lock:
            self._conn.execute(
                f"INSERT INTO fallback_books ({columns}) VALUES ({placeholders}) "
                f"ON CONFLICT(isbn) DO UPDATE SET {updates}, "
                "updated_at = strftime('%Y-%m-%dT%H:%M:%S', 'now')",
                list(row.values()),
            )
            self._conn.commit()

    def get(self, isbn: str) -> BookMetadata | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM fallback_books WHERE isbn = ?", (isbn,)
            ).fetchone()
        return row_to_metadata(row, SOURCE_FALLBACK) if row else None

    def delete(self, isbn: str) -> bool:
        """Remove an entry; returns False if there was none."""
        with self._lock:
            cursor = self._conn.execute("DELETE FROM fallback_books WHERE isbn = ?", (isbn,))
            self._conn.commit()
        return cursor.rowcount > 0

    def list_all(self) -> list[BookMetadata]:
        with self._lock:
            rows = self._conn.execute("SELECT * FROM fallback_books ORDER BY isbn").fetchall()
        return [row_to_metadata(row, SOURCE_FALLBACK) for row in rows]

    def count(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM fallback_books").fetchone()[0]
