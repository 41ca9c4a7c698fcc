# ABOUTME: FastAPI application factory for the Folio HTTP API.
# ABOUTME: Wires the lookup service, request logging, and translation of errors into the JSON envelope.

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from folio import __version__
from folio.api.middleware import RequestLoggingMiddleware
from folio.api.routes import router
from folio.config import Settings
from folio.core.service import LookupService, create_lookup_service
from folio.errors import FolioError

logger = logging.getLogger(__name__)


def _error_body(message: str, details: object = None) -> dict[str, object]:
    body: dict[str, object] = {"success": False, "error": message}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return body


def create_app(service: LookupService | None = None, settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        service: An existing LookupService. When omitted one is created from
            ``settings`` and closed again at shutdown.
        settings: Runtime settings; read from the environment when omitted.
    """
    settings = settings or (service.settings if service else Settings.from_env())
    owns_service = service is None
    service = service or create_lookup_service(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Folio API ready (providers: %s)", ", ".join(service.resolver.provider_names))
        yield
        if owns_service:
            service.close()

    app = FastAPI(
        title="Folio",
        description="ISBN resolution with a local catalog, resilient providers, and fallbacks",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(router)

    @app.exception_handler(FolioError)
    async def handle_folio_error(request: Request, exc: FolioError) -> JSONResponse:
        log = logger.warning if exc.status_code < 500 else logger.error
        log("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(_error_body(exc.message, exc.details), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("%s %s -> 400: invalid request", request.method, request.url.path)
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return JSONResponse(_error_body("Validation failed", errors), status_code=400)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        details = None if settings.is_production else {"detail": str(exc)}
        return JSONResponse(_error_body("Internal server error", details), status_code=500)

    @app.get("/health")
    def liveness() -> dict[str, str]:
        return {"status": "healthy", "version": __version__}

    return app
