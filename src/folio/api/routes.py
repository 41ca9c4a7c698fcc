# ABOUTME: The /isbn router: lookup, search, validation, formatting, and resilience administration.
# ABOUTME: Endpoints are sync so FastAPI runs them on its threadpool while providers are slow.

from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from folio.api.schemas import BatchLookupRequest, FallbackRequest, ImportRequest, book_payload
from folio.core.service import REASON_NOT_FOUND, LookupService
from folio.errors import ValidationError
from folio.isbn import clean_isbn

router = APIRouter(prefix="/isbn", tags=["isbn"])


def get_service(request: Request) -> LookupService:
    return request.app.state.service


def ok(data: Any = None, message: str | None = None, status_code: int = 200) -> JSONResponse:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return JSONResponse(body, status_code=status_code)


def _require_isbn(isbn: str | None) -> str:
    if not isbn or not isbn.strip():
        raise ValidationError("ISBN parameter is required")
    return isbn.strip()


def _lookup_response(service: LookupService, raw: str | None) -> JSONResponse:
    result = service.lookup_book(_require_isbn(raw))
    if result.book is not None:
        return ok(
            {
                "isbn": result.isbn,
                "source": result.source,
                "book": book_payload(result.book),
                "responseTime": result.response_time_ms,
            }
        )

    not_found = result.reason == REASON_NOT_FOUND
    return JSONResponse(
        {
            "success": False,
            "error": "Book not found" if not_found else "Book lookup temporarily unavailable",
            "details": {
                "isbn": result.isbn,
                "reason": result.reason,
                "error": result.error,
                "responseTime": result.response_time_ms,
            },
        },
        status_code=404 if not_found else 503,
    )


@router.get("/lookup")
def lookup_by_query(
    isbn: str | None = None, service: LookupService = Depends(get_service)
) -> JSONResponse:
    return _lookup_response(service, isbn)


@router.get("/lookup/{isbn}")
def lookup_by_path(isbn: str, service: LookupService = Depends(get_service)) -> JSONResponse:
    """Look up a single book by ISBN."""
    return _lookup_response(service, isbn)


@router.post("/lookup")
def batch_lookup(
    payload: BatchLookupRequest, service: LookupService = Depends(get_service)
) -> JSONResponse:
    """Look up several ISBNs; each item reports its own outcome."""
    batch = service.batch_lookup(payload.isbns)
    return ok(
        {
            "results": [
                {
                    "isbn": item.isbn,
                    "success": item.success,
                    "source": item.source,
                    "book": book_payload(item.book),
                    "error": item.error,
                    "reason": item.reason,
                }
                for item in batch.results
            ],
            "summary": batch.summary,
        }
    )


@router.get("/search")
def search(
    q: str | None = None,
    title: str | None = None,
    limit: int = 10,
    service: LookupService = Depends(get_service),
) -> JSONResponse:
    """Search external providers by title (``q`` or ``title``)."""
    query = q if q is not None else title
    results = service.search_by_title(query or "", limit)
    return ok(
        {
            "query": (query or "").strip(),
            "count": len(results),
            "results": [book_payload(book) for book in results],
        }
    )


def _validate_response(service: LookupService, raw: str | None) -> JSONResponse:
    original = _require_isbn(raw)
    result = service.validate(original)
    cleaned = clean_isbn(original)
    return ok(
        {
            "originalIsbn": original,
            "isValid": result.is_valid,
            "normalizedIsbn": result.normalized_isbn,
            "error": result.error,
            "details": {
                "length": len(cleaned),
                "hasCheckDigit": len(cleaned) >= 10,
                "inputFormat": {10: "ISBN-10", 13: "ISBN-13"}.get(len(cleaned), "unknown")
                if result.is_valid
                else "unknown",
            },
        }
    )


@router.get("/validate")
def validate_by_query(
    isbn: str | None = None, service: LookupService = Depends(get_service)
) -> JSONResponse:
    return _validate_response(service, isbn)


@router.get("/validate/{isbn}")
def validate_by_path(isbn: str, service: LookupService = Depends(get_service)) -> JSONResponse:
    return _validate_response(service, isbn)


@router.get("/format")
def format_isbn(
    isbn: str | None = None,
    style: str = Query("hyphenated", alias="format"),
    service: LookupService = Depends(get_service),
) -> JSONResponse:
    original = _require_isbn(isbn)
    formatted = service.format(original, style)
    return ok(
        {
            "originalIsbn": original,
            "normalizedIsbn": service.validate(original).normalized_isbn,
            "formattedIsbn": formatted,
            "format": style,
        }
    )


@router.get("/health")
def health(service: LookupService = Depends(get_service)) -> JSONResponse:
    """Probe every provider; 503 when none is reachable."""
    report = service.health()
    return ok(report, status_code=200 if report["available"] else 503)


@router.get("/stats")
def stats(service: LookupService = Depends(get_service)) -> JSONResponse:
    return ok(service.stats())


@router.get("/cache")
def cache_stats(service: LookupService = Depends(get_service)) -> JSONResponse:
    return ok(service.cache_stats())


@router.delete("/cache")
def clear_cache(
    isbn: str | None = None, service: LookupService = Depends(get_service)
) -> JSONResponse:
    removed = service.clear_cache(isbn)
    return ok({"cleared": removed}, message="Cache cleared")


@router.delete("/resilience")
def reset_resilience(
    provider: str | None = None, service: LookupService = Depends(get_service)
) -> JSONResponse:
    names = service.reset_resilience(provider)
    return ok({"reset": names}, message="Circuit breakers reset")


@router.post("/fallback")
def add_fallback(
    payload: FallbackRequest, service: LookupService = Depends(get_service)
) -> JSONResponse:
    """Register operator-supplied metadata for an ISBN."""
    book = service.add_fallback(payload.isbn, payload.metadata.to_metadata())
    return ok(
        {"isbn": book.isbn, "book": book_payload(book)},
        message="Fallback book added",
        status_code=201,
    )


@router.get("/fallback")
def list_fallbacks(service: LookupService = Depends(get_service)) -> JSONResponse:
    books = service.list_fallbacks()
    return ok({"count": len(books), "books": [book_payload(b) for b in books]})


@router.delete("/fallback/{isbn}")
def remove_fallback(isbn: str, service: LookupService = Depends(get_service)) -> JSONResponse:
    service.remove_fallback(isbn)
    return ok(message="Fallback book removed")


@router.post("/import")
def import_book(payload: ImportRequest, service: LookupService = Depends(get_service)) -> JSONResponse:
    """Resolve an ISBN and store it in the local catalog."""
    book = service.import_book(payload.isbn)
    return ok(
        {"isbn": book.isbn, "book": book_payload(book)},
        message="Book imported",
        status_code=201,
    )


@router.get("/catalog")
def list_catalog(
    limit: int | None = None, offset: int = 0, service: LookupService = Depends(get_service)
) -> JSONResponse:
    """Books imported into the local catalog, ordered by title."""
    books = service.list_catalog(limit=limit, offset=offset)
    return ok({"count": len(books), "books": [book_payload(b) for b in books]})


@router.delete("/catalog/{isbn}")
def remove_from_catalog(isbn: str, service: LookupService = Depends(get_service)) -> JSONResponse:
    removed = service.remove_book(isbn)
    return ok({"isbn": removed}, message="Book removed from catalog")
