# ABOUTME: Pydantic request and response models for the HTTP API.
# ABOUTME: Fields are snake_case in Python and camelCase on the wire.

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from folio.metadata.types import Author, BookMetadata


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuthorIn(CamelModel):
    name: str = ""
    surname: str = ""
    nationality: str | None = None


class BookIn(CamelModel):
    """Metadata supplied by an operator when registering a fallback."""

    title: str = Field(min_length=1, max_length=500)
    authors: list[AuthorIn | str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    edition_number: int | None = Field(default=None, ge=1)
    edition_date: str | None = None
    publisher: str | None = None
    language: str | None = None
    description: str | None = None
    cover_url: str | None = None
    page_count: int | None = Field(default=None, ge=1)

    def to_metadata(self) -> BookMetadata:
        authors = tuple(
            Author.from_full_name(a)
            if isinstance(a, str)
            else Author(name=a.name, surname=a.surname, nationality=a.nationality)
            for a in self.authors
        )
        return BookMetadata(
            title=self.title.strip(),
            authors=authors,
            categories=tuple(self.categories),
            edition_number=self.edition_number,
            edition_date=self.edition_date,
            publisher=self.publisher,
            language=self.language,
            description=self.description,
            cover_url=self.cover_url,
            page_count=self.page_count,
        )


class BatchLookupRequest(CamelModel):
    isbns: list[str] = Field(min_length=1)


class FallbackRequest(CamelModel):
    isbn: str = Field(min_length=1)
    metadata: BookIn


class ImportRequest(CamelModel):
    isbn: str = Field(min_length=1)


class AuthorOut(CamelModel):
    name: str
    surname: str
    full_name: str
    nationality: str | None = None


class BookOut(CamelModel):
    isbn: str | None
    title: str
    author: str
    authors: list[AuthorOut]
    categories: list[str]
    edition_number: int | None
    edition_date: str | None
    publisher: str | None
    language: str | None
    description: str | None
    cover_url: str | None
    page_count: int | None
    source: str

    @classmethod
    def from_metadata(cls, book: BookMetadata) -> "BookOut":
        return cls(
            isbn=book.isbn,
            title=book.title,
            author=book.author,
            authors=[
                AuthorOut(
                    name=a.name, surname=a.surname, full_name=a.full_name, nationality=a.nationality
                )
                for a in book.authors
            ],
            categories=list(book.categories),
            edition_number=book.edition_number,
            edition_date=book.edition_date,
            publisher=book.publisher,
            language=book.language,
            description=book.description,
            cover_url=book.cover_url,
            page_count=book.page_count,
            source=book.source,
        )


def book_payload(book: BookMetadata | None) -> dict[str, Any] | None:
    """Serialize metadata for a JSON response, or pass None through."""
    if book is None:
        return None
    return BookOut.from_metadata(book).model_dump(by_alias=True)
