"""
Book Catalog — MongoDB Book Repository
========================================

What:  Storage gateway executing queries and updates against the books
       collection.
Why:   Driver exceptions never reach the service or HTTP layers; callers
       only see NotFoundError, StorageError or PersistError.
How:   Wraps a pymongo AsyncCollection; every PyMongoError is logged and
       translated into a domain error before it leaves this module.
Who:   Constructed in the application lifespan; called by BookService.

Error translation:
    malformed id / no matching document  → NotFoundError
    find / cursor / update / delete error → StorageError
    undecodable document                  → StorageError
    insert error                          → PersistError
"""

import logging
from typing import Any, Dict, List

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError as PydanticValidationError
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from bookcatalog.exceptions import NotFoundError, PersistError, StorageError
from bookcatalog.models.book import ID_FIELD, Book
from bookcatalog.models.query import FindQuery
from bookcatalog.repositories.base import BookRepository

logger = logging.getLogger(__name__)


def parse_object_id(book_id: str) -> ObjectId:
    """
    Parse a 24-hex id, reporting malformed tokens as NotFoundError.

    ObjectId() also accepts 12-character strings as raw bytes, so only
    24-character tokens are handed to it.
    """
    if not isinstance(book_id, str) or len(book_id) != 24:
        raise NotFoundError(str(book_id))
    try:
        return ObjectId(book_id)
    except (InvalidId, TypeError):
        raise NotFoundError(book_id) from None


class MongoBookRepository(BookRepository):
    """BookRepository backed by a MongoDB collection."""

    def __init__(self, collection: AsyncCollection):
        self.collection = collection

    async def find_all(self, query: FindQuery) -> List[Book]:
        filters = query.filters()
        books: List[Book] = []
        try:
            # Why async with: a decode error mid-iteration must still close
            # the server-side cursor
            async with self.collection.find(
                filters,
                skip=query.skip,
                limit=query.limit,
                sort=query.sort,
            ) as cursor:
                async for document in cursor:
                    books.append(Book.from_document(document))
        except PyMongoError as e:
            logger.error("Book query failed (filters=%s): %s", filters, str(e))
            raise StorageError(message=str(e), context={"filters": filters})
        except PydanticValidationError as e:
            logger.error("Undecodable book document (filters=%s): %s", filters, str(e))
            raise StorageError(
                message="Stored book document could not be decoded",
                context={"error_count": e.error_count()},
            )

        logger.debug(
            "Found %d book(s) (filters=%s, skip=%d, limit=%d)",
            len(books), filters, query.skip, query.limit,
        )
        return books

    async def find_one(self, book_id: str) -> Book:
        object_id = parse_object_id(book_id)
        try:
            document = await self.collection.find_one({ID_FIELD: object_id})
        except PyMongoError as e:
            logger.error("Lookup of book %s failed: %s", book_id, str(e))
            raise StorageError(message=str(e), context={"book_id": book_id})

        if document is None:
            raise NotFoundError(book_id)

        try:
            return Book.from_document(document)
        except PydanticValidationError as e:
            logger.error("Book %s could not be decoded: %s", book_id, str(e))
            raise StorageError(
                message=f"Stored book {book_id} could not be decoded",
                context={"book_id": book_id},
            )

    async def update(self, book_id: str, fields: Dict[str, Any]) -> None:
        object_id = parse_object_id(book_id)
        # Why: the identifier is immutable whatever the caller passes
        fields = {k: v for k, v in fields.items() if k != ID_FIELD}
        try:
            result = await self.collection.update_one({ID_FIELD: object_id}, {"$set": fields})
        except PyMongoError as e:
            logger.error("Update of book %s failed: %s", book_id, str(e))
            raise StorageError(message=str(e), context={"book_id": book_id})

        if result.matched_count == 0:
            raise NotFoundError(book_id)
        logger.debug("Book %s updated: %s", book_id, sorted(fields))

    async def delete(self, book_id: str) -> None:
        object_id = parse_object_id(book_id)
        try:
            await self.collection.delete_one({ID_FIELD: object_id})
        except PyMongoError as e:
            logger.error("Delete of book %s failed: %s", book_id, str(e))
            raise StorageError(message=str(e), context={"book_id": book_id})

    async def is_existing_entry(self, book: Book) -> bool:
        filters = {
            "author": book.author,
            "title": book.title,
            "publish_date": book.publish_date,
        }
        try:
            document = await self.collection.find_one(filters, projection={ID_FIELD: 1})
        except PyMongoError as e:
            logger.error("Duplicate check failed: %s", str(e))
            raise StorageError(message=str(e), context={"filters": filters})
        return document is not None

    async def save(self, book: Book) -> str:
        try:
            result = await self.collection.insert_one(book.to_document())
        except PyMongoError as e:
            logger.error("Insert of book failed: %s", str(e))
            raise PersistError(str(e))
        return str(result.inserted_id)
