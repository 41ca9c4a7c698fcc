# ABOUTME: Metadata package: data types, HTTP client, and external provider adapters.
# ABOUTME: Exports BookMetadata, Author, and the MetadataProvider protocol.

from folio.metadata.provider import MetadataProvider
from folio.metadata.types import SOURCE_FALLBACK, SOURCE_LOCAL, Author, BookMetadata

__all__ = [
    "SOURCE_FALLBACK",
    "SOURCE_LOCAL",
    "Author",
    "BookMetadata",
    "MetadataProvider",
]
