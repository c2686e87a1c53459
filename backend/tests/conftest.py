"""
Book Catalog — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── sample_book_data:  Valid book fields as a dict
    ├── valid_book:        Book built from sample_book_data
    ├── fake_repository:   In-memory BookRepository (no MongoDB needed)
    ├── mock_collection:   MagicMock standing in for a pymongo AsyncCollection
    ├── mock_book_service: AsyncMock with BookService's interface
    ├── mock_mongo_client: MagicMock client whose ping succeeds
    └── test_client:       HTTPX AsyncClient wired to the app, service mocked
"""

import os
from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

# Set before any application import so settings never point at a real store
os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("DATABASE_NAME", "bookcatalog_test")
os.environ.setdefault("COLLECTION_NAME", "books")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from bookcatalog.dependencies import get_book_service, get_mongo_client  # noqa: E402
from bookcatalog.exceptions import NotFoundError, StorageError  # noqa: E402
from bookcatalog.models.book import ID_FIELD, Book  # noqa: E402
from bookcatalog.models.query import FindQuery  # noqa: E402
from bookcatalog.repositories.base import BookRepository  # noqa: E402
from bookcatalog.services.book_service import BookService  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles
# ══════════════════════════════════════════════════════════════════════════

class InMemoryBookRepository(BookRepository):
    """
    BookRepository over a dict of documents keyed by hex id.

    Supports equality filters only, which is all the query builder emits.
    Set `fail_writes` to make update() raise StorageError.
    """

    def __init__(self):
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.fail_writes = False

    async def find_all(self, query: FindQuery) -> List[Book]:
        filters = query.filters()
        matched = [
            doc for _, doc in sorted(self.documents.items())
            if all(doc.get(k) == v for k, v in filters.items())
        ]
        page = matched[query.skip:query.skip + query.limit]
        return [Book.from_document(doc) for doc in page]

    async def find_one(self, book_id: str) -> Book:
        document = self.documents.get(book_id)
        if document is None:
            raise NotFoundError(book_id)
        return Book.from_document(document)

    async def update(self, book_id: str, fields: Dict[str, Any]) -> None:
        if self.fail_writes:
            raise StorageError(message="write failed")
        if book_id not in self.documents:
            raise NotFoundError(book_id)
        self.documents[book_id].update(
            {k: v for k, v in fields.items() if k != ID_FIELD}
        )

    async def delete(self, book_id: str) -> None:
        self.documents.pop(book_id, None)

    async def is_existing_entry(self, book: Book) -> bool:
        return any(
            doc["author"] == book.author
            and doc["title"] == book.title
            and doc["publish_date"] == book.publish_date
            for doc in self.documents.values()
        )

    async def save(self, book: Book) -> str:
        object_id = ObjectId()
        document = book.to_document()
        document[ID_FIELD] = object_id
        self.documents[str(object_id)] = document
        return str(object_id)


class AsyncCursorStub:
    """
    Stand-in for a pymongo AsyncCursor: async-iterable and an async
    context manager that records whether it was closed.
    """

    def __init__(self, documents=None, error: Exception | None = None):
        self._documents = list(documents or [])
        self._error = error
        self.closed = False

    async def close(self):
        self.closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._error is not None:
            raise self._error
        if not self._documents:
            raise StopAsyncIteration
        return self._documents.pop(0)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sample_book_data():
    """Fields of a valid, checked-in book."""
    return {
        "author": "Ursula K. Le Guin",
        "title": "The Dispossessed",
        "publisher": "Harper & Row",
        "status": 1,
        "rating": 2,
        "publish_date": "1974",
    }


@pytest.fixture
def valid_book(sample_book_data):
    return Book(**sample_book_data)


@pytest.fixture
def fake_repository():
    return InMemoryBookRepository()


@pytest.fixture
def cursor_stub():
    """The AsyncCursorStub class, for tests that build their own cursors."""
    return AsyncCursorStub


@pytest.fixture
def mock_collection():
    """
    Provides a mock pymongo AsyncCollection.

    find() is synchronous in pymongo and returns a cursor; the write and
    lookup methods are coroutines.

    Usage:
        mock_collection.find_one.return_value = {"_id": ObjectId(), ...}
        book = await MongoBookRepository(mock_collection).find_one(book_id)
    """
    collection = MagicMock()
    collection.find = MagicMock(return_value=AsyncCursorStub())
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.update_one = AsyncMock()
    collection.delete_one = AsyncMock()
    return collection


@pytest.fixture
def mock_book_service():
    return AsyncMock(spec=BookService)


@pytest.fixture
def mock_mongo_client():
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1.0})
    return client


@pytest_asyncio.fixture
async def test_client(mock_book_service, mock_mongo_client):
    """
    Provides an async HTTP test client for endpoint testing.

    The lifespan does not run under ASGITransport, so the service and the
    MongoDB client are supplied through dependency overrides.

    Usage:
        async def test_get_book(test_client, mock_book_service):
            mock_book_service.find_one.return_value = book
            response = await test_client.get(f"/books/{book_id}")
    """
    from bookcatalog.main import create_app

    app = create_app()
    app.dependency_overrides[get_book_service] = lambda: mock_book_service
    app.dependency_overrides[get_mongo_client] = lambda: mock_mongo_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
