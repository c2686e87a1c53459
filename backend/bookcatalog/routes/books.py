"""
Book Catalog — Books Route Handlers
=====================================

What:  REST surface under /books: list, read, create, update, delete,
       check out, check in and rate.
Why:   Handlers stay thin; status codes are chosen by error kind in
       one place.
How:   Decodes path/query/body input, delegates to BookService, and
       returns the success response. Domain errors propagate to the
       global exception handlers in main.py, which pick the status code.

Route Inventory:
    GET    /books                     list (size, page, author, status, rating)
    GET    /books/{id}                read one
    POST   /books                     create → raw id string
    PUT    /books/{id}                replace all fields but the id
    DELETE /books/{id}                delete
    PUT    /books/checkout/{id}       CheckedIn → CheckedOut
    PUT    /books/checkin/{id}        CheckedOut → CheckedIn
    PUT    /books/{id}/rate/{rate}    set rating

Request bodies are read raw and decoded leniently: a malformed body becomes
a default-valued Book, which then fails validation with 400.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from bookcatalog.dependencies import get_book_service
from bookcatalog.exceptions import ValidationError
from bookcatalog.models.book import Book
from bookcatalog.schemas.responses import BookResponse, ErrorResponse
from bookcatalog.services.book_service import BookService
from bookcatalog.services.query_builder import build_find_query, parse_int

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/books", tags=["Books"])

NOT_FOUND = {404: {"description": "Book not found", "model": ErrorResponse}}
BAD_REQUEST = {400: {"description": "Invalid request", "model": ErrorResponse}}
SERVER_ERROR = {500: {"description": "Storage error", "model": ErrorResponse}}


def _require_id(book_id: str) -> str:
    if not book_id.strip():
        raise ValidationError(message="Missing ID!", field="id")
    return book_id


@router.get(
    "",
    response_model=list[BookResponse],
    responses=SERVER_ERROR,
    summary="List books",
    description=(
        "Returns a page of books. Query parameters: size (default 10), "
        "page (1-based), author, status, rating."
    ),
)
@router.get("/", include_in_schema=False)
async def list_books(
    request: Request,
    service: BookService = Depends(get_book_service),
) -> JSONResponse:
    query = build_find_query(request.query_params.multi_items())
    books = await service.find_all(query)
    return JSONResponse(content=[book.to_response() for book in books])


@router.post(
    "",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Id of the created book", "content": {"text/plain": {}}},
        **BAD_REQUEST,
        **SERVER_ERROR,
    },
    summary="Create a book",
)
@router.post("/", include_in_schema=False)
async def create_book(
    request: Request,
    service: BookService = Depends(get_book_service),
) -> PlainTextResponse:
    book = Book.from_json(await request.body())
    book_id = await service.create(book)
    return PlainTextResponse(content=book_id)


@router.put(
    "/checkout/{book_id}",
    responses={**BAD_REQUEST, **NOT_FOUND, **SERVER_ERROR},
    summary="Check a book out",
)
async def check_out_book(
    book_id: str,
    service: BookService = Depends(get_book_service),
) -> Response:
    await service.check_out(_require_id(book_id))
    return Response(status_code=200)


@router.put(
    "/checkin/{book_id}",
    responses={**BAD_REQUEST, **NOT_FOUND, **SERVER_ERROR},
    summary="Check a book in",
)
async def check_in_book(
    book_id: str,
    service: BookService = Depends(get_book_service),
) -> Response:
    await service.check_in(_require_id(book_id))
    return Response(status_code=200)


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Get a book by id",
)
async def get_book(
    book_id: str,
    service: BookService = Depends(get_book_service),
) -> JSONResponse:
    book = await service.find_one(book_id)
    return JSONResponse(content=book.to_response())


@router.put(
    "/{book_id}",
    responses={**BAD_REQUEST, **NOT_FOUND, **SERVER_ERROR},
    summary="Update a book",
    description="Replaces every field of the book except its id.",
)
async def update_book(
    book_id: str,
    request: Request,
    service: BookService = Depends(get_book_service),
) -> Response:
    book = Book.from_json(await request.body())
    await service.update(_require_id(book_id), book)
    return Response(status_code=200)


@router.delete(
    "/{book_id}",
    responses={**BAD_REQUEST, **NOT_FOUND, **SERVER_ERROR},
    summary="Delete a book",
)
async def delete_book(
    book_id: str,
    service: BookService = Depends(get_book_service),
) -> Response:
    await service.delete(_require_id(book_id))
    return Response(status_code=200)


@router.put(
    "/{book_id}/rate/{rate}",
    responses={**BAD_REQUEST, **NOT_FOUND, **SERVER_ERROR},
    summary="Rate a book",
    description="Sets the rating (0-3). A non-numeric rate is rejected before any lookup.",
)
async def rate_book(
    book_id: str,
    rate: str,
    service: BookService = Depends(get_book_service),
) -> Response:
    # Why before the service call: a non-numeric rate never triggers a lookup
    rating = parse_int(rate)
    if rating is None:
        raise ValidationError(message="Rate must be a number!", field="rate")

    await service.rate(_require_id(book_id), rating)
    return Response(status_code=200)
