# ABOUTME: Local catalog lookups and imports against the SQLite books table.
# ABOUTME: find_by_isbn is the first resolution step; add_book backs the import path.

import sqlite3
import threading

from folio.db.mapping import metadata_to_row, row_to_metadata
from folio.errors import DuplicateIsbnError, NotFoundError
from folio.metadata.types import SOURCE_LOCAL, BookMetadata


class LocalCatalog:
    """Wraps a sqlite3 connection and provides typed access to the books table.

    All ISBN arguments are expected in normalized 13-digit form.
    """

    def __init__(self, conn: sqlite3.Connection, lock: "threading.RLock | None" = None) -> None:
        self._conn = conn
        self._lock = lock or threading.RLock()

    def find_by_isbn(self, isbn: str) -> BookMetadata | None:
        """Point lookup by ISBN. Returned metadata carries source "local"."""
        with self._lock:
            row = self._conn.execute("SELECT * FROM books WHERE isbn = ?", (isbn,)).fetchone()
        return row_to_metadata(row, SOURCE_LOCAL) if row else None

    def add_book(self, metadata: BookMetadata, isbn: str, imported_from: str | None = None) -> int:
        """Add a book to the catalog.

        Returns:
            The row ID of the inserted book.

        Raises:
            DuplicateIsbnError: If a book with this ISBN already exists.
        """
        row = metadata_to_row(metadata, isbn)
        row["imported_from"] = imported_from
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)

        with self._lock:
            try:
                cursor = self._conn.execute(
                    f"INSERT INTO books ({columns}) VALUES ({placeholders})",
                    list(row.values()),
                )
                self._conn.commit()
            except sqlite3.IntegrityError as exc:
                self._conn.rollback()
                if "UNIQUE constraint failed: books.isbn" in str(exc):
                    raise DuplicateIsbnError(
                        f"A book with ISBN {isbn} already exists in the catalog"
                    ) from exc
                raise

        return cursor.lastrowid  # type: ignore[return-value]

    def list_books(self, limit: int | None = None, offset: int = 0) -> list[BookMetadata]:
        """Return books ordered by title."""
        sql = "SELECT * FROM books ORDER BY title"
        params: tuple[int, ...] = ()
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params = (limit, offset)
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        return [row_to_metadata(row, SOURCE_LOCAL) for row in rows]

    def delete_book(self, isbn: str) -> None:
        """Delete a book from the catalog.

        Raises:
            NotFoundError: If no book has this ISBN.
        """
        with self._lock:
            cursor = self._conn.execute("DELETE FROM books WHERE isbn = ?", (isbn,))
            self._conn.commit()
        if cursor.rowcount == 0:
            raise NotFoundError(f"No book with ISBN {isbn} in the catalog")

    def count(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM books").fetchone()[0]
