"""
Book Catalog — Book Validation
================================

What:  Field-level rule checking on a Book.
Why:   Clients get every broken rule in one response instead of fixing
       fields one round trip at a time.
How:   Each rule returns a reason string when broken; all broken rules are
       collected and raised together as one ValidationError.
Who:   BookService, on Create, Update and Rate.

Rules:
    author        required, 1-30 characters
    title         required, 1-50 characters
    publisher     required, 1-20 characters
    status        required, CheckedIn (1) or CheckedOut (2)
    rating        one of 0, 1, 2, 3
    publish_date  required, 4-digit year
"""

import re
from typing import Dict, Optional

from bookcatalog.exceptions import ValidationError
from bookcatalog.models.book import Book, BookStatus

VALID_STATUSES = (BookStatus.CHECKED_IN, BookStatus.CHECKED_OUT)
VALID_RATINGS = (0, 1, 2, 3)

_YEAR_PATTERN = re.compile(r"[0-9]{4}")

# field name → (min length, max length)
_TEXT_BOUNDS = {
    "author": (1, 30),
    "title": (1, 50),
    "publisher": (1, 20),
}


def _check_text(value: str, min_length: int, max_length: int) -> Optional[str]:
    if not value:
        return "cannot be blank"
    if not min_length <= len(value) <= max_length:
        return f"the length must be between {min_length} and {max_length}"
    return None


def _check_status(value: int) -> Optional[str]:
    if value == BookStatus.UNKNOWN:
        return "cannot be blank"
    if value not in VALID_STATUSES:
        return "must be CheckedIn (1) or CheckedOut (2)"
    return None


def _check_rating(value: int) -> Optional[str]:
    if value not in VALID_RATINGS:
        return "must be one of 0, 1, 2, 3"
    return None


def _check_publish_date(value: str) -> Optional[str]:
    if not value:
        return "cannot be blank"
    if not _YEAR_PATTERN.fullmatch(value):
        return "must be a 4-digit year"
    return None


def book_errors(book: Book) -> Dict[str, str]:
    """Return field → reason for every broken rule, in field order."""
    errors: Dict[str, str] = {}
    for name, (min_length, max_length) in _TEXT_BOUNDS.items():
        reason = _check_text(getattr(book, name), min_length, max_length)
        if reason:
            errors[name] = reason
    for name, check, value in (
        ("status", _check_status, book.status),
        ("rating", _check_rating, book.rating),
        ("publish_date", _check_publish_date, book.publish_date),
    ):
        reason = check(value)
        if reason:
            errors[name] = reason
    return errors


def validate_book(book: Book) -> None:
    """
    Raise ValidationError if the book breaks any rule.

    Example message:
        "author: cannot be blank; rating: must be one of 0, 1, 2, 3"
    """
    errors = book_errors(book)
    if not errors:
        return
    message = "; ".join(f"{name}: {reason}" for name, reason in errors.items())
    field = next(iter(errors)) if len(errors) == 1 else None
    raise ValidationError(message=message, field=field, context={"fields": errors})
