"""
Book Catalog — Response Schemas
=================================

What:  Pydantic models documenting the API's non-book responses.
Why:   Error and health shapes appear in the generated OpenAPI schema.
How:   Used as `responses=` entries in route declarations (OpenAPI docs)
       and as the return type of the health endpoint.
"""

from typing import Optional

from pydantic import BaseModel, Field


class BookResponse(BaseModel):
    """
    What:  Shape of a book as returned by GET /books and GET /books/{id}.
    Why:   Documentation only; handlers serialize Book.to_response().
    """

    id: str = Field(alias="_id", description="Store-generated identifier (24 hex chars)")
    author: str = Field(description="Author, 1-30 characters")
    title: str = Field(description="Title, 1-50 characters")
    publisher: str = Field(description="Publisher, 1-20 characters")
    status: int = Field(description="1 = CheckedIn, 2 = CheckedOut")
    rating: int = Field(description="Rating, 0-3")
    publish_date: str = Field(description="Publication year (YYYY)")


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "AlreadyCheckedOut",
            "message": "Book 65f0c0ffee0ddba11c0ffee0 is already checked out",
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Error kind")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Field-level context (400 only)")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Document store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
