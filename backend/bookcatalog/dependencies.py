"""
Book Catalog — FastAPI Dependencies
=====================================

What:  Accessors handing request handlers the objects built in the lifespan.
Why:   Handlers never import the lifespan objects directly, so tests can
       swap them.
How:   The lifespan stores the MongoDB client and the BookService on
       `app.state`; these dependencies read them back per request.
       Tests replace `get_book_service` through `app.dependency_overrides`.
"""

from fastapi import Request
from pymongo import AsyncMongoClient

from bookcatalog.services.book_service import BookService


def get_book_service(request: Request) -> BookService:
    return request.app.state.book_service


def get_mongo_client(request: Request) -> AsyncMongoClient | None:
    """The shared client, or None when the lifespan has not run."""
    return getattr(request.app.state, "mongo_client", None)
