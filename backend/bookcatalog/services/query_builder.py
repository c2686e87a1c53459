"""
Book Catalog — Query Filter Builder
=====================================

What:  Translates list query-string parameters into a FindQuery.
Why:   Kept apart from the route so query parsing is testable without
       an HTTP client.
How:   Reads recognized parameters (first occurrence wins), then computes
       pagination once all of them are known.
Who:   GET /books route handler.

Recognized parameters:
    size    page size; default 10, non-positive or unparsable → 10
    page    1-based page index; unparsable or < 1 → 1
    author  exact match; '+' characters become spaces
    status  exact match on the integer value; unparsable → ignored
    rating  exact match on the integer value; unparsable → ignored

Example:
    ?author=J+Doe&size=5&page=2
    → filters {"author": "J Doe"}, skip=5, limit=5
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Tuple

from bookcatalog.models.query import DEFAULT_PAGE_SIZE, FindQuery, Query, QueryOperator

logger = logging.getLogger(__name__)

NUMERIC_FILTERS = ("status", "rating")

INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_int(value: str) -> Optional[int]:
    """Parse a base-10 integer with optional sign; anything else → None."""
    if not INTEGER_PATTERN.fullmatch(value):
        return None
    return int(value)


def page_size(value: Optional[str]) -> int:
    size = parse_int(value) if value is not None else None
    if size is None or size <= 0:
        return DEFAULT_PAGE_SIZE
    return size


def page_number(value: Optional[str]) -> int:
    page = parse_int(value) if value is not None else None
    if page is None or page < 1:
        return 1
    return page


def build_find_query(params: Iterable[Tuple[str, str]]) -> FindQuery:
    """
    Build a FindQuery from (name, value) query parameter pairs.

    Accepts `request.query_params.multi_items()` or any list of pairs.
    Unrecognized parameters are ignored.
    """
    first: Dict[str, str] = {}
    for name, value in params:
        # Why setdefault: repeated parameters keep their first value
        first.setdefault(name, value)

    criteria: List[Query] = []
    if "author" in first:
        author = first["author"].replace("+", " ")
        criteria.append(Query("author", QueryOperator.EQUALS, author))

    for name in NUMERIC_FILTERS:
        if name not in first:
            continue
        value = parse_int(first[name])
        if value is None:
            logger.debug("Ignoring non-numeric %s filter: %r", name, first[name])
            continue
        criteria.append(Query(name, QueryOperator.EQUALS, value))

    # Why last: skip depends on the final size, whatever the parameter order
    limit = page_size(first.get("size"))
    skip = limit * (page_number(first.get("page")) - 1)

    return FindQuery(criteria=criteria, skip=skip, limit=limit)
