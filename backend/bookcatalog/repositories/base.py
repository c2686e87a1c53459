"""
Book Catalog — Abstract Book Repository
=========================================

What:  Abstract base class defining the storage gateway contract.
Why:   BookService depends on this contract, not on pymongo, so service
       tests run without a database.
How:   MongoBookRepository implements it against a MongoDB collection;
       tests substitute an in-memory implementation.
Who:   Called by BookService.

Contract:
    - Identifiers are opaque 24-hex-character tokens (ObjectId hex).
    - A malformed identifier behaves exactly like an unknown one.
    - Driver failures surface as StorageError (reads, updates, deletes)
      or PersistError (inserts), never as driver exceptions.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from bookcatalog.models.book import Book
from bookcatalog.models.query import FindQuery


class BookRepository(ABC):
    """Storage gateway for Book records."""

    @abstractmethod
    async def find_all(self, query: FindQuery) -> List[Book]:
        """
        Return the books matching `query.filters()`, in `query.sort` order,
        after skipping `query.skip` and capped at `query.limit`.

        Raises:
            StorageError: The query failed or a document could not be decoded.
        """
        ...

    @abstractmethod
    async def find_one(self, book_id: str) -> Book:
        """
        Return the book with the given id.

        Raises:
            NotFoundError: No document matches (or the id is malformed).
            StorageError: The query failed.
        """
        ...

    @abstractmethod
    async def update(self, book_id: str, fields: Dict[str, Any]) -> None:
        """
        Apply a partial update: only the given fields are written.

        Raises:
            NotFoundError: No document matches (or the id is malformed).
            StorageError: The update failed.
        """
        ...

    @abstractmethod
    async def delete(self, book_id: str) -> None:
        """
        Permanently remove the book.

        Raises:
            NotFoundError: The id is malformed.
            StorageError: The delete failed.
        """
        ...

    @abstractmethod
    async def is_existing_entry(self, book: Book) -> bool:
        """True if a book with the same author, title and publish_date is stored."""
        ...

    @abstractmethod
    async def save(self, book: Book) -> str:
        """
        Insert a new book and return its generated id.

        Raises:
            PersistError: The insert failed.
        """
        ...
