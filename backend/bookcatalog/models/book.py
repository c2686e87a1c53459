"""
Book Catalog — Book Model
===========================

What:  The Book record, its status enum, and conversions between the API
       JSON shape and the MongoDB document shape.
Why:   One model serves request bodies, stored documents and responses, so
       the `_id` mapping is defined in exactly one place.
How:   Every field has a zero-value default. A request body that fails to
       decode (bad JSON or any type mismatch) becomes the zero-valued Book,
       which validation then rejects. Field rules live in
       bookcatalog.validation, not here.
Who:   Routes (from_json), the repository (from_document, to_document) and
       BookService (to_field_set).

Persisted document shape:
    {
        "_id": ObjectId("65f0c0ffee0ddba11c0ffee0"),
        "author": "Ursula K. Le Guin",
        "title": "The Dispossessed",
        "publisher": "Harper & Row",
        "status": 1,
        "rating": 3,
        "publish_date": "1974"
    }
"""

import logging
from enum import IntEnum
from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

# Document key of the store-generated identifier
ID_FIELD = "_id"


class BookStatus(IntEnum):
    """
    Availability of a book.

    UNKNOWN is the zero value of an undecoded payload; it never passes
    validation.
    """

    UNKNOWN = 0
    CHECKED_IN = 1
    CHECKED_OUT = 2

    @property
    def label(self) -> str:
        return {
            BookStatus.CHECKED_IN: "CheckedIn",
            BookStatus.CHECKED_OUT: "CheckedOut",
        }.get(self, "Unknown")


class Book(BaseModel):
    """
    A catalog entry.

    `status` is kept as a plain int so that out-of-range values survive
    decoding and are reported by validation instead of by the decoder.
    """

    id: Optional[str] = Field(default=None, alias=ID_FIELD)
    author: str = ""
    title: str = ""
    publisher: str = ""
    status: int = BookStatus.UNKNOWN.value
    rating: int = 0
    publish_date: str = ""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_object_id(cls, v: Any) -> Any:
        """Documents read from MongoDB carry a bson ObjectId."""
        if isinstance(v, ObjectId):
            return str(v)
        return v

    @classmethod
    def from_json(cls, raw: bytes) -> "Book":
        """
        Decode a request body into a Book.

        Any decode failure (invalid JSON, wrong field types, non-object
        body) yields a default-valued Book, which then fails validation.
        The client-supplied `_id` is always discarded.

        Decoding is strict: "1" is not an int and true is not a rating.
        Only the request path is strict; documents read back from MongoDB
        go through from_document in lax mode.
        """
        try:
            # Why strict: a coerced "status": "1" would pass validation and be saved
            book = cls.model_validate_json(raw or b"{}", strict=True)
        except PydanticValidationError as exc:
            logger.debug("Discarding undecodable book payload: %d error(s)", exc.error_count())
            return cls()
        return book.model_copy(update={"id": None})

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Book":
        """Build a Book from a MongoDB document."""
        return cls.model_validate(document)

    def to_document(self) -> Dict[str, Any]:
        """Document for insertion; `_id` is left to the store to generate."""
        return self.model_dump(exclude={"id"})

    def to_response(self) -> Dict[str, Any]:
        """JSON shape returned by the API (`_id` key, hex string)."""
        return self.model_dump(by_alias=True)


def to_field_set(book: Book) -> Dict[str, Any]:
    """
    Map a Book to the partial field-set applied by an update.

    The identifier is never part of the field-set: updates and ratings
    must not overwrite `_id`, whatever the incoming payload carried.
    """
    fields = book.model_dump(by_alias=True)
    fields.pop(ID_FIELD, None)
    fields.pop("id", None)
    return fields
