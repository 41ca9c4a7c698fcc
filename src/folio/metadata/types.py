# ABOUTME: Core metadata data structures returned by every resolution path.
# ABOUTME: BookMetadata is immutable; callers decide whether to persist it.

from dataclasses import dataclass, replace

SOURCE_LOCAL = "local"
SOURCE_FALLBACK = "fallback"


@dataclass(frozen=True)
class Author:
    """A book author, split into given name and surname."""

    name: str
    surname: str = ""
    nationality: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.name, self.surname) if part)

    @classmethod
    def from_full_name(cls, full_name: str, nationality: str | None = None) -> "Author":
        """Split "Given Names Surname" on the last space.

        Single-word names (e.g. "Voltaire") become the surname.
        """
        parts = full_name.strip().rsplit(" ", 1)
        if len(parts) == 1:
            return cls(name="", surname=parts[0], nationality=nationality)
        return cls(name=parts[0], surname=parts[1], nationality=nationality)


@dataclass(frozen=True)
class BookMetadata:
    """Structured metadata for a book identified by ISBN.

    ``source`` records which resolution path produced the record: "local",
    a provider name such as "openlibrary", or "fallback".
    """

    title: str
    isbn: str | None = None
    authors: tuple[Author, ...] = ()
    categories: tuple[str, ...] = ()
    edition_number: int | None = None
    edition_date: str | None = None
    publisher: str | None = None
    language: str | None = None
    description: str | None = None
    cover_url: str | None = None
    page_count: int | None = None
    source: str = ""

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display."""
        return ", ".join(a.full_name for a in self.authors)

    def with_source(self, source: str) -> "BookMetadata":
        return replace(self, source=source)
