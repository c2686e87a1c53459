"""
Book Catalog — Book Service (Business Logic Orchestrator)
===========================================================

What:  Orchestrates validation, duplicate checking, the checkout/check-in
       state machine and rating updates on top of the repository.
Why:   Business rules stay independent of HTTP and of the storage driver.
How:   Receives a BookRepository at construction; raises domain errors and
       lets repository errors propagate (or wraps them as UpdateError for
       status and rating writes).
Who:   Called by the /books route handlers.

State Machine:
    ┌────────────┐   check_out    ┌─────────────┐
    │ CheckedIn  │ ─────────────▶ │ CheckedOut  │
    │            │ ◀───────────── │             │
    └────────────┘    check_in    └─────────────┘

    check_out on CheckedOut → AlreadyCheckedOutError
    check_in on CheckedIn   → AlreadyCheckedInError

Concurrency:
    Find-then-update sequences are not atomic. Two concurrent check_out
    calls on the same id can both succeed; the last write wins.
"""

import logging
from typing import List

from bookcatalog.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    ExistingRecordError,
    StorageError,
    UpdateError,
)
from bookcatalog.models.book import Book, BookStatus, to_field_set
from bookcatalog.models.query import FindQuery
from bookcatalog.repositories.base import BookRepository
from bookcatalog.validation import validate_book

logger = logging.getLogger(__name__)


class BookService:
    """
    Business logic layer for book operations.

    Error Handling Strategy:
        NotFoundError and StorageError from the repository propagate as-is,
        except for status and rating writes, where a StorageError is
        reported as UpdateError. Save failures surface as PersistError.
    """

    def __init__(self, repository: BookRepository):
        self.repository = repository

    async def find_all(self, query: FindQuery) -> List[Book]:
        return await self.repository.find_all(query)

    async def find_one(self, book_id: str) -> Book:
        return await self.repository.find_one(book_id)

    async def create(self, book: Book) -> str:
        """
        Create a new book and return its id.

        Workflow Steps:
            1. Reject duplicates (same author, title and publish_date)
            2. Validate the payload
            3. Persist

        The duplicate check runs first, so an invalid payload that matches
        a stored book is reported as ExistingRecordError.

        Raises:
            ExistingRecordError, ValidationError, PersistError, StorageError
        """
        # Why first: a duplicate is reported as such even if the payload is invalid
        if await self.repository.is_existing_entry(book):
            logger.info(
                "Rejected duplicate book: author=%r title=%r publish_date=%r",
                book.author, book.title, book.publish_date,
            )
            raise ExistingRecordError(
                context={
                    "author": book.author,
                    "title": book.title,
                    "publish_date": book.publish_date,
                }
            )

        validate_book(book)

        book_id = await self.repository.save(book)
        logger.info("Book %s created", book_id)
        return book_id

    async def update(self, book_id: str, book: Book) -> None:
        """
        Replace every field of an existing book except its id.

        Raises:
            ValidationError: The payload is invalid (checked first).
            NotFoundError: No book has this id.
            StorageError: The write failed.
        """
        validate_book(book)
        await self.repository.find_one(book_id)
        await self.repository.update(book_id, to_field_set(book))
        logger.info("Book %s updated", book_id)

    async def delete(self, book_id: str) -> None:
        await self.repository.find_one(book_id)
        await self.repository.delete(book_id)
        logger.info("Book %s deleted", book_id)

    async def check_out(self, book_id: str) -> None:
        """
        Move a book from CheckedIn to CheckedOut.

        Raises:
            NotFoundError: No book has this id.
            AlreadyCheckedOutError: The book is already checked out.
            UpdateError: The status write failed.
        """
        # Why re-read: the stored status decides the transition, not the caller
        book = await self.repository.find_one(book_id)
        if book.status == BookStatus.CHECKED_OUT:
            logger.info("Check-out of book %s rejected: already checked out", book_id)
            raise AlreadyCheckedOutError(book_id)

        await self._set_status(book_id, BookStatus.CHECKED_OUT)
        logger.info("Book %s checked out", book_id)

    async def check_in(self, book_id: str) -> None:
        """
        Move a book from CheckedOut to CheckedIn.

        Raises:
            NotFoundError: No book has this id.
            AlreadyCheckedInError: The book is already checked in.
            UpdateError: The status write failed.
        """
        book = await self.repository.find_one(book_id)
        if book.status == BookStatus.CHECKED_IN:
            logger.info("Check-in of book %s rejected: already checked in", book_id)
            raise AlreadyCheckedInError(book_id)

        await self._set_status(book_id, BookStatus.CHECKED_IN)
        logger.info("Book %s checked in", book_id)

    async def rate(self, book_id: str, rating: int) -> None:
        """
        Set a book's rating.

        The full book is re-validated with the new rating merged in, so an
        out-of-range rating (or any invalid stored field) is rejected and
        the stored document is left untouched.

        Raises:
            NotFoundError, ValidationError, UpdateError
        """
        book = await self.repository.find_one(book_id)
        # Why a copy: a rejected rating must leave the fetched book untouched
        rated = book.model_copy(update={"rating": rating})
        validate_book(rated)

        try:
            await self.repository.update(book_id, to_field_set(rated))
        except StorageError as e:
            raise UpdateError(message=e.message, context={"book_id": book_id, "field": "rating"})
        logger.info("Book %s rated %d", book_id, rating)

    async def _set_status(self, book_id: str, status: BookStatus) -> None:
        try:
            await self.repository.update(book_id, {"status": status.value})
        except StorageError as e:
            raise UpdateError(
                message=e.message,
                context={"book_id": book_id, "status": status.label},
            )
