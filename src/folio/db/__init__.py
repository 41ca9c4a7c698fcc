# ABOUTME: Public API for the Folio database layer.
# ABOUTME: Exports connection management, the local catalog, and the fallback store.

from folio.db.catalog import LocalCatalog
from folio.db.connection import open_catalog
from folio.db.fallbacks import FallbackStore

__all__ = [
    "FallbackStore",
    "LocalCatalog",
    "open_catalog",
]
