# ABOUTME: Folio - ISBN resolution service for a book catalog.
# ABOUTME: Local catalog lookup, resilient external providers, and a manual fallback registry.

__version__ = "0.1.0"
