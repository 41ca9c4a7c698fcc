# ABOUTME: ISBN normalization, checksum validation, and display formatting.
# ABOUTME: Pure functions; every valid ISBN is normalized to its 13-digit form.

import re
from dataclasses import dataclass

from folio.errors import InvalidIsbnError

_NON_ALNUM_RE = re.compile(r"[^0-9A-Za-z]")

FORMAT_STYLES = ("hyphenated", "clean", "isbn10", "isbn13")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a raw ISBN string."""

    is_valid: bool
    normalized_isbn: str | None = None
    error: str | None = None


def clean_isbn(raw: str) -> str:
    """Strip everything but letters and digits, uppercasing a trailing x."""
    return _NON_ALNUM_RE.sub("", raw or "").upper()


def isbn10_check_digit(first_nine: str) -> str:
    """Compute the ISBN-10 check character (mod 11, 10 becomes "X")."""
    total = sum((10 - idx) * int(digit) for idx, digit in enumerate(first_nine))
    check = (11 - total % 11) % 11
    return "X" if check == 10 else str(check)


def isbn13_check_digit(first_twelve: str) -> str:
    """Compute the ISBN-13 check digit (alternating 1/3 weights, mod 10)."""
    total = sum(int(digit) * (3 if idx % 2 else 1) for idx, digit in enumerate(first_twelve))
    return str((10 - total % 10) % 10)


def to_isbn13(isbn10: str) -> str:
    """Convert a clean, valid ISBN-10 to ISBN-13 with the 978 prefix."""
    prefix = "978" + isbn10[:9]
    return prefix + isbn13_check_digit(prefix)


def to_isbn10(isbn13: str) -> str:
    """Convert a clean ISBN-13 to ISBN-10.

    Raises:
        InvalidIsbnError: If the ISBN does not carry the 978 prefix.
    """
    if not isbn13.startswith("978"):
        raise InvalidIsbnError("Cannot convert this ISBN to ISBN-10 format")
    core = isbn13[3:12]
    return core + isbn10_check_digit(core)


def validate_isbn(raw: str) -> ValidationResult:
    """Validate a raw ISBN-10 or ISBN-13 string.

    Non-alphanumeric characters (hyphens, spaces) are ignored. A valid
    ISBN-10 is converted to ISBN-13 so callers always key on 13 digits.
    """
    value = clean_isbn(raw)
    if not value:
        return ValidationResult(False, error="Invalid ISBN: value is empty")

    if len(value) == 10:
        body, check = value[:9], value[9]
        if not body.isdigit() or not (check.isdigit() or check == "X"):
            return ValidationResult(False, error="Invalid ISBN: contains invalid characters")
    elif not value.isdigit():
        return ValidationResult(False, error="Invalid ISBN: contains invalid characters")

    if len(value) not in (10, 13):
        return ValidationResult(
            False, error=f"Invalid ISBN: expected 10 or 13 digits, got {len(value)}"
        )

    if len(value) == 10:
        if isbn10_check_digit(value[:9]) != value[9]:
            return ValidationResult(False, error="Invalid ISBN: checksum mismatch")
        return ValidationResult(True, normalized_isbn=to_isbn13(value))

    if isbn13_check_digit(value[:12]) != value[12]:
        return ValidationResult(False, error="Invalid ISBN: checksum mismatch")
    return ValidationResult(True, normalized_isbn=value)


def normalize_isbn(raw: str) -> str:
    """Return the 13-digit form of ``raw``.

    Raises:
        InvalidIsbnError: If ``raw`` does not validate.
    """
    result = validate_isbn(raw)
    if not result.is_valid or result.normalized_isbn is None:
        raise InvalidIsbnError(result.error or "Invalid ISBN")
    return result.normalized_isbn


def format_isbn(raw: str, style: str = "hyphenated") -> str:
    """Format an ISBN for display.

    The hyphenated style uses a fixed 3-1-2-6-1 grouping; real registration
    group boundaries vary by publisher range and are not looked up.

    Raises:
        InvalidIsbnError: If ``raw`` does not validate, or an ISBN-10 is
            requested for a 979-prefixed number.
        ValueError: If ``style`` is not one of FORMAT_STYLES.
    """
    if style not in FORMAT_STYLES:
        raise ValueError(f"Format must be one of: {', '.join(FORMAT_STYLES)}")

    isbn13 = normalize_isbn(raw)
    if style == "hyphenated":
        return f"{isbn13[:3]}-{isbn13[3]}-{isbn13[4:6]}-{isbn13[6:12]}-{isbn13[12]}"
    if style == "isbn10":
        return to_isbn10(isbn13)
    return isbn13
