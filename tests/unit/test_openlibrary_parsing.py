# ABOUTME: Unit tests for Open Library API response parsing functions.
# ABOUTME: Validates conversion from OL JSON structures to typed intermediates and BookMetadata.

import pytest

from folio.metadata.http import ProviderResponseError
from folio.metadata.openlibrary_parser import (
    OpenLibraryWork,
    build_cover_url,
    build_metadata,
    parse_author_name,
    parse_edition_number,
    parse_isbn_response,
    parse_search_results,
    parse_works_response,
)
from tests.fixtures.openlibrary_responses import (
    AUTHOR_RESPONSE,
    ISBN_RESPONSE,
    ISBN_RESPONSE_NO_TITLE,
    ISBN_RESPONSE_SECOND_EDITION,
    SEARCH_RESPONSE,
    SEARCH_RESPONSE_EMPTY,
    SEARCH_RESPONSE_WITH_UNTITLED_DOC,
    WORKS_RESPONSE_DICT_DESCRIPTION,
    WORKS_RESPONSE_NO_DESCRIPTION,
    WORKS_RESPONSE_STR_DESCRIPTION,
    WORKS_RESPONSE_WITH_AUTHORS,
)


class TestParseIsbnResponse:
    """Tests for parse_isbn_response."""

    def test_extracts_title(self) -> None:
        """Title is extracted from ISBN response."""
        edition = parse_isbn_response(ISBN_RESPONSE)
        assert edition.title == "The Name of the Rose"

    def test_appends_subtitle(self) -> None:
        """A subtitle is joined onto the title with a colon."""
        edition = parse_isbn_response(ISBN_RESPONSE_SECOND_EDITION)
        assert edition.title == "Effective Java: Programming Language Guide"

    def test_extracts_publisher_and_date(self) -> None:
        """First publisher and the publish date are extracted."""
        edition = parse_isbn_response(ISBN_RESPONSE)
        assert edition.publisher == "Harcourt"
        assert edition.edition_date == "1983"

    def test_extracts_isbn13(self) -> None:
        """ISBN-13 is preferred over ISBN-10."""
        edition = parse_isbn_response(ISBN_RESPONSE)
        assert edition.isbn == "9780156001311"

    def test_extracts_language(self) -> None:
        """Language key is reduced to its code."""
        edition = parse_isbn_response(ISBN_RESPONSE)
        assert edition.language == "eng"

    def test_extracts_keys_and_pages(self) -> None:
        """Works key, author keys, and page count are captured."""
        edition = parse_isbn_response(ISBN_RESPONSE)
        assert edition.works_key == "/works/OL456W"
        assert edition.author_keys == ["/authors/OL123A"]
        assert edition.page_count == 536

    def test_extracts_edition_number(self) -> None:
        """edition_name like "3rd ed." becomes an edition number."""
        edition = parse_isbn_response(ISBN_RESPONSE_SECOND_EDITION)
        assert edition.edition_number == 3

    def test_missing_fields_handled(self) -> None:
        """Optional fields default to None or empty."""
        edition = parse_isbn_response({"title": "Bare"})
        assert edition.publisher is None
        assert edition.language is None
        assert edition.works_key is None
        assert edition.author_keys == []

    def test_missing_title_raises(self) -> None:
        """An edition without a title is an unusable response."""
        with pytest.raises(ProviderResponseError, match="no title"):
            parse_isbn_response(ISBN_RESPONSE_NO_TITLE)

    def test_non_dict_raises(self) -> None:
        """A payload that is not an object is rejected."""
        with pytest.raises(ProviderResponseError):
            parse_isbn_response(["not", "a", "dict"])


class TestParseEditionNumber:
    """Tests for parse_edition_number."""

    def test_digits(self) -> None:
        """Leading digits are used."""
        assert parse_edition_number("2nd edition") == 2

    def test_words(self) -> None:
        """Ordinal words are recognized."""
        assert parse_edition_number("Third Edition") == 3

    def test_unrecognized(self) -> None:
        """Unparseable or missing names give None."""
        assert parse_edition_number("Collector's edition") is None
        assert parse_edition_number(None) is None


class TestParseWorksResponse:
    """Tests for parse_works_response."""

    def test_string_description(self) -> None:
        """Plain string description is extracted."""
        work = parse_works_response(WORKS_RESPONSE_STR_DESCRIPTION)
        assert work.description == "A mystery set in a medieval Italian monastery."

    def test_dict_description(self) -> None:
        """Dict-shaped description yields its value."""
        work = parse_works_response(WORKS_RESPONSE_DICT_DESCRIPTION)
        assert work.description == "A mystery set in a medieval Italian monastery."

    def test_missing_description(self) -> None:
        """Absent description gives None but keeps subjects."""
        work = parse_works_response(WORKS_RESPONSE_NO_DESCRIPTION)
        assert work.description is None
        assert work.subjects == ["Mystery"]

    def test_extracts_author_keys(self) -> None:
        """Works-level author references are unwrapped."""
        work = parse_works_response(WORKS_RESPONSE_WITH_AUTHORS)
        assert work.author_keys == ["/authors/OL123A"]


class TestParseAuthorName:
    """Tests for parse_author_name."""

    def test_extracts_name(self) -> None:
        """Author name is returned."""
        assert parse_author_name(AUTHOR_RESPONSE) == "Umberto Eco"

    def test_missing_name_returns_none(self) -> None:
        """No usable name gives None."""
        assert parse_author_name({"key": "/authors/OL1A"}) is None
        assert parse_author_name("garbage") is None


class TestBuildMetadata:
    """Tests for build_metadata."""

    def test_merges_edition_work_and_authors(self) -> None:
        """Work subjects become categories and authors are split into name parts."""
        edition = parse_isbn_response(ISBN_RESPONSE)
        work = parse_works_response(WORKS_RESPONSE_STR_DESCRIPTION)
        meta = build_metadata(edition, "9780156001311", ["Umberto Eco"], work)

        assert meta.title == "The Name of the Rose"
        assert meta.isbn == "9780156001311"
        assert meta.authors[0].name == "Umberto"
        assert meta.authors[0].surname == "Eco"
        assert meta.categories == ("Mystery", "Historical fiction")
        assert meta.description == "A mystery set in a medieval Italian monastery."
        assert meta.cover_url == build_cover_url("9780156001311")
        assert meta.source == "openlibrary"

    def test_without_work(self) -> None:
        """A missing work leaves categories and description empty."""
        edition = parse_isbn_response(ISBN_RESPONSE)
        meta = build_metadata(edition, "9780156001311", [], None)
        assert meta.categories == ()
        assert meta.description is None

    def test_empty_work(self) -> None:
        """An empty work record contributes nothing."""
        edition = parse_isbn_response(ISBN_RESPONSE)
        meta = build_metadata(edition, "9780156001311", [], OpenLibraryWork())
        assert meta.categories == ()


class TestParseSearchResults:
    """Tests for parse_search_results."""

    def test_parses_multiple_results(self) -> None:
        """Each doc becomes a BookMetadata."""
        results = parse_search_results(SEARCH_RESPONSE)
        assert len(results) == 2
        assert results[0].title == "The Name of the Rose"
        assert results[0].author == "Umberto Eco"

    def test_prefers_isbn13(self) -> None:
        """A 13-digit ISBN is preferred when the doc lists several."""
        results = parse_search_results(SEARCH_RESPONSE)
        assert results[0].isbn == "9780156001311"
        assert results[0].edition_date == "1980"

    def test_skips_untitled_docs(self) -> None:
        """Docs without a title are dropped."""
        results = parse_search_results(SEARCH_RESPONSE_WITH_UNTITLED_DOC)
        assert [r.title for r in results] == ["The Name of the Rose"]

    def test_empty_search(self) -> None:
        """No docs gives an empty list."""
        assert parse_search_results(SEARCH_RESPONSE_EMPTY) == []

    def test_missing_docs_raises(self) -> None:
        """A response without a docs list is rejected."""
        with pytest.raises(ProviderResponseError):
            parse_search_results({"numFound": 0})


class TestBuildCoverUrl:
    """Tests for build_cover_url."""

    def test_default_large_size(self) -> None:
        """Default size is L."""
        assert build_cover_url("9780156001311") == (
            "https://covers.openlibrary.org/b/isbn/9780156001311-L.jpg"
        )

    def test_custom_size(self) -> None:
        """Size can be overridden."""
        assert build_cover_url("9780156001311", "S").endswith("-S.jpg")
