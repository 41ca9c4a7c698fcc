# ABOUTME: SQLite database connection management for the Folio catalog.
# ABOUTME: Opens or creates the database, applies schema and migrations, and shares it across threads.

import sqlite3
from pathlib import Path

from folio.config import DEFAULT_DB_PATH
from folio.db.schema import MIGRATIONS, SCHEMA_V1


def _schema_exists(conn: sqlite3.Connection) -> bool:
    """Check if the schema has already been applied."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    )
    return cursor.fetchone() is not None


def _apply_schema(conn: sqlite3.Connection) -> None:
    """Execute the DDL to create the base tables and indexes."""
    conn.executescript(SCHEMA_V1)


def _get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the current schema version from the database."""
    cursor = conn.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
    row = cursor.fetchone()
    return row[0] if row else 0


def _apply_migrations(conn: sqlite3.Connection) -> None:
    """Apply pending schema migrations sequentially.

    No-op if the database is already at the latest version.
    """
    current = _get_schema_version(conn)
    for version, sql in MIGRATIONS:
        if version > current:
            conn.executescript(sql)


def open_catalog(path: Path | str | None = None) -> sqlite3.Connection:
    """Open or create the Folio catalog database.

    Creates the database file and parent directories if they don't exist.
    The connection may be used from worker threads; callers serialize
    access with a shared lock (see LocalCatalog and FallbackStore).

    Args:
        path: Path to the database file, or ":memory:". Defaults to
            ~/.folio/catalog.db.
    """
    db_path = Path(path) if path else DEFAULT_DB_PATH
    if str(db_path) != ":memory:":
        db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")

    if not _schema_exists(conn):
        _apply_schema(conn)

    _apply_migrations(conn)

    return conn
