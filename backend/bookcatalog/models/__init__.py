# Models package init
"""
Book Catalog — Domain Models
==============================

    - book.py:   Book, BookStatus, document mapping, partial field-sets
    - query.py:  Query criteria and the assembled FindQuery
"""

from bookcatalog.models.book import Book, BookStatus, to_field_set
from bookcatalog.models.query import DEFAULT_PAGE_SIZE, FindQuery, Query, QueryOperator

__all__ = [
    "Book",
    "BookStatus",
    "to_field_set",
    "DEFAULT_PAGE_SIZE",
    "FindQuery",
    "Query",
    "QueryOperator",
]
