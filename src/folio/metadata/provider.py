# ABOUTME: MetadataProvider protocol defining the contract for external metadata sources.
# ABOUTME: Open Library and Google Books implement this; the resilience layer wraps it.

from typing import Protocol, runtime_checkable

from folio.metadata.types import BookMetadata


@runtime_checkable
class MetadataProvider(Protocol):
    """Protocol for external ISBN metadata services.

    ``lookup`` returns None only for an authoritative "no such ISBN"
    answer. Transient trouble must surface as TransientFetchError and
    unusable responses as ProviderResponseError, so the caller can tell
    "they said no" from "we could not ask".
    """

    @property
    def name(self) -> str: ...

    def lookup(self, isbn: str) -> BookMetadata | None: ...

    def search_by_title(self, query: str, limit: int = 10) -> list[BookMetadata]: ...

    def ping(self) -> bool: ...
