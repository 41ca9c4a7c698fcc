# ABOUTME: SQL DDL statements for the Folio catalog database schema.
# ABOUTME: Defines the books table, the fallback registry table, and schema versioning.

SCHEMA_V1 = """
-- Local catalog: books already known to this installation
CREATE TABLE books (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    isbn           TEXT NOT NULL,
    title          TEXT NOT NULL,
    authors        TEXT,
    categories     TEXT,
    edition_number INTEGER,
    edition_date   TEXT,
    publisher      TEXT,
    language       TEXT,
    description    TEXT,
    cover_url      TEXT,
    page_count     INTEGER,
    imported_from  TEXT,
    date_added     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    date_modified  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

CREATE UNIQUE INDEX idx_books_isbn ON books(isbn);
CREATE INDEX idx_books_title ON books(title);

-- Schema versioning for future migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""

MIGRATION_V2 = """
-- Operator-curated overrides consulted after automated resolution fails
CREATE TABLE fallback_books (
    isbn           TEXT PRIMARY KEY,
    title          TEXT NOT NULL,
    authors        TEXT,
    categories     TEXT,
    edition_number INTEGER,
    edition_date   TEXT,
    publisher      TEXT,
    language       TEXT,
    description    TEXT,
    cover_url      TEXT,
    page_count     INTEGER,
    registered_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    updated_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (2);
"""

MIGRATIONS: list[tuple[int, str]] = [
    (2, MIGRATION_V2),
]
