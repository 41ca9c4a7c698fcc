# ABOUTME: HTTP API package for Folio, built on FastAPI.
# ABOUTME: Exposes the application factory used by `folio serve` and tests.

from folio.api.app import create_app

__all__ = ["create_app"]
