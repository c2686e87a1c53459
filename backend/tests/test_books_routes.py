"""
Book Catalog — HTTP API Tests
===============================

What:  Endpoint tests for /books and /health.
How:   HTTPX AsyncClient over ASGITransport with BookService mocked through
       dependency overrides; one class wires a real BookService over the
       in-memory repository to exercise lenient body decoding end to end.

What we test:
    ✅ Success status codes and bodies (JSON list, raw id text, empty 200s)
    ✅ Error kinds → 400 / 404 / 500 with the standard error body
    ✅ Non-numeric rate rejected before the service is called
    ✅ X-Request-ID assigned and echoed
    ✅ Health check healthy / unhealthy
"""

import json

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from pymongo.errors import ServerSelectionTimeoutError

from bookcatalog.dependencies import get_book_service, get_mongo_client
from bookcatalog.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    ExistingRecordError,
    NotFoundError,
    PersistError,
    StorageError,
    UpdateError,
    ValidationError,
)
from bookcatalog.models.book import Book
from bookcatalog.services.book_service import BookService


class TestListBooks:
    @pytest.mark.asyncio
    async def test_returns_json_list(self, test_client, mock_book_service, sample_book_data):
        book_id = str(ObjectId())
        mock_book_service.find_all.return_value = [Book(**sample_book_data, id=book_id)]

        response = await test_client.get("/books")

        assert response.status_code == 200
        assert response.json() == [{**sample_book_data, "_id": book_id}]

    @pytest.mark.asyncio
    async def test_query_parameters_reach_service(self, test_client, mock_book_service):
        mock_book_service.find_all.return_value = []

        response = await test_client.get("/books?author=J+Doe&size=5&page=2")

        assert response.status_code == 200
        assert response.json() == []
        query = mock_book_service.find_all.await_args.args[0]
        assert query.filters() == {"author": "J Doe"}
        assert (query.skip, query.limit) == (5, 5)

    @pytest.mark.asyncio
    async def test_trailing_slash_served(self, test_client, mock_book_service):
        mock_book_service.find_all.return_value = []

        response = await test_client.get("/books/")

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_storage_error_is_500(self, test_client, mock_book_service):
        mock_book_service.find_all.side_effect = StorageError(message="connection refused")

        response = await test_client.get("/books")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "StorageError"
        assert body["message"] == "connection refused"
        assert "details" not in body


class TestGetBook:
    @pytest.mark.asyncio
    async def test_found(self, test_client, mock_book_service, sample_book_data):
        book_id = str(ObjectId())
        mock_book_service.find_one.return_value = Book(**sample_book_data, id=book_id)

        response = await test_client.get(f"/books/{book_id}")

        assert response.status_code == 200
        assert response.json()["_id"] == book_id
        mock_book_service.find_one.assert_awaited_once_with(book_id)

    @pytest.mark.asyncio
    async def test_not_found_is_404(self, test_client, mock_book_service):
        mock_book_service.find_one.side_effect = NotFoundError("123")

        response = await test_client.get("/books/123")

        assert response.status_code == 404
        assert response.json()["error"] == "NotFoundError"
        assert response.json()["message"] == "Book 123 does not exist"


class TestCreateBook:
    @pytest.mark.asyncio
    async def test_returns_raw_id(self, test_client, mock_book_service, sample_book_data):
        book_id = str(ObjectId())
        mock_book_service.create.return_value = book_id

        response = await test_client.post("/books", json=sample_book_data)

        assert response.status_code == 200
        assert response.text == book_id
        assert response.headers["content-type"].startswith("text/plain")
        created = mock_book_service.create.await_args.args[0]
        assert created == Book(**sample_book_data)

    @pytest.mark.asyncio
    async def test_duplicate_is_400(self, test_client, mock_book_service, sample_book_data):
        mock_book_service.create.side_effect = ExistingRecordError(context={"title": "T"})

        response = await test_client.post("/books/", json=sample_book_data)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ExistingRecord"
        assert body["details"] == {"title": "T"}

    @pytest.mark.asyncio
    async def test_persist_error_is_500(self, test_client, mock_book_service, sample_book_data):
        mock_book_service.create.side_effect = PersistError("disk full")

        response = await test_client.post("/books", json=sample_book_data)

        assert response.status_code == 500
        assert response.json()["message"] == "Error saving book: disk full"


class TestStateTransitions:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", ["checkout", "checkin"])
    async def test_success_is_empty_200(self, test_client, mock_book_service, action):
        book_id = str(ObjectId())

        response = await test_client.put(f"/books/{action}/{book_id}")

        assert response.status_code == 200
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_already_checked_out_is_400(self, test_client, mock_book_service):
        book_id = str(ObjectId())
        mock_book_service.check_out.side_effect = AlreadyCheckedOutError(book_id)

        response = await test_client.put(f"/books/checkout/{book_id}")

        assert response.status_code == 400
        assert response.json()["error"] == "AlreadyCheckedOut"

    @pytest.mark.asyncio
    async def test_already_checked_in_is_400(self, test_client, mock_book_service):
        book_id = str(ObjectId())
        mock_book_service.check_in.side_effect = AlreadyCheckedInError(book_id)

        response = await test_client.put(f"/books/checkin/{book_id}")

        assert response.status_code == 400
        assert response.json()["error"] == "AlreadyCheckedIn"

    @pytest.mark.asyncio
    async def test_update_error_is_500(self, test_client, mock_book_service):
        mock_book_service.check_out.side_effect = UpdateError(message="write failed")

        response = await test_client.put(f"/books/checkout/{ObjectId()}")

        assert response.status_code == 500
        assert response.json()["error"] == "UpdateError"

    @pytest.mark.asyncio
    async def test_blank_id_is_400(self, test_client, mock_book_service):
        response = await test_client.put("/books/checkout/%20")

        assert response.status_code == 400
        assert response.json()["message"] == "Missing ID!"
        mock_book_service.check_out.assert_not_awaited()


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_update_success(self, test_client, mock_book_service, sample_book_data):
        book_id = str(ObjectId())

        response = await test_client.put(f"/books/{book_id}", json=sample_book_data)

        assert response.status_code == 200
        called_id, book = mock_book_service.update.await_args.args
        assert called_id == book_id
        assert book.title == sample_book_data["title"]

    @pytest.mark.asyncio
    async def test_update_validation_error_is_400(self, test_client, mock_book_service):
        mock_book_service.update.side_effect = ValidationError(
            message="title: cannot be blank", field="title"
        )

        response = await test_client.put(f"/books/{ObjectId()}", json={})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationError"
        assert body["details"]["field"] == "title"

    @pytest.mark.asyncio
    async def test_delete_success(self, test_client, mock_book_service):
        book_id = str(ObjectId())

        response = await test_client.delete(f"/books/{book_id}")

        assert response.status_code == 200
        mock_book_service.delete.assert_awaited_once_with(book_id)

    @pytest.mark.asyncio
    async def test_delete_unknown_is_404(self, test_client, mock_book_service):
        mock_book_service.delete.side_effect = NotFoundError("nope")

        response = await test_client.delete("/books/nope")

        assert response.status_code == 404


class TestRateBook:
    @pytest.mark.asyncio
    async def test_rate_success(self, test_client, mock_book_service):
        book_id = str(ObjectId())

        response = await test_client.put(f"/books/{book_id}/rate/3")

        assert response.status_code == 200
        mock_book_service.rate.assert_awaited_once_with(book_id, 3)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rate", ["three", "1.5", "x1"])
    async def test_non_numeric_rate_rejected_before_lookup(self, test_client, mock_book_service, rate):
        response = await test_client.put(f"/books/{ObjectId()}/rate/{rate}")

        assert response.status_code == 400
        assert response.json()["message"] == "Rate must be a number!"
        mock_book_service.rate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_out_of_range_rate_is_400(self, test_client, mock_book_service):
        mock_book_service.rate.side_effect = ValidationError(
            message="rating: must be one of 0, 1, 2, 3", field="rating"
        )

        response = await test_client.put(f"/books/{ObjectId()}/rate/5")

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"


class TestRequestId:
    @pytest.mark.asyncio
    async def test_generated_when_absent(self, test_client, mock_book_service):
        mock_book_service.find_all.return_value = []

        response = await test_client.get("/books")

        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_echoed_in_header_and_error_body(self, test_client, mock_book_service):
        mock_book_service.find_one.side_effect = NotFoundError("abc")

        response = await test_client.get("/books/abc", headers={"X-Request-ID": "trace-42"})

        assert response.headers["X-Request-ID"] == "trace-42"
        assert response.json()["request_id"] == "trace-42"


class TestUnexpectedError:
    """Unhandled exceptions still return the request id and a generic body."""

    @pytest_asyncio.fixture
    async def lenient_client(self, mock_book_service, mock_mongo_client):
        from bookcatalog.main import create_app

        app = create_app()
        app.dependency_overrides[get_book_service] = lambda: mock_book_service
        app.dependency_overrides[get_mongo_client] = lambda: mock_mongo_client

        # ServerErrorMiddleware re-raises after responding; keep the response
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

    @pytest.mark.asyncio
    async def test_request_id_in_body_and_header(self, lenient_client, mock_book_service):
        mock_book_service.find_one.side_effect = RuntimeError("boom")

        response = await lenient_client.get(
            f"/books/{ObjectId()}", headers={"X-Request-ID": "trace-500"}
        )

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "internal_server_error"
        assert body["message"] == "An unexpected error occurred."
        assert "boom" not in response.text
        assert body["request_id"] == "trace-500"
        assert response.headers["X-Request-ID"] == "trace-500"


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthy(self, test_client, mock_mongo_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        mock_mongo_client.admin.command.assert_awaited_once_with("ping")

    @pytest.mark.asyncio
    async def test_unhealthy_when_ping_fails(self, test_client, mock_mongo_client):
        mock_mongo_client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")

        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "disconnected"


class TestLenientBodyDecoding:
    """Malformed bodies decode to a default Book, which then fails validation."""

    @pytest_asyncio.fixture
    async def real_client(self, fake_repository):
        from bookcatalog.main import create_app

        app = create_app()
        app.dependency_overrides[get_book_service] = lambda: BookService(fake_repository)
        app.dependency_overrides[get_mongo_client] = lambda: None

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b"",
            b'{"rating": "three"}',
            b'{"author": "A", "title": "T", "publisher": "P", "status": "1", '
            b'"rating": true, "publish_date": "2020"}',
        ],
    )
    async def test_malformed_body_is_400(self, real_client, fake_repository, body):
        response = await real_client.post("/books", content=body)

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"
        assert fake_repository.documents == {}

    @pytest.mark.asyncio
    async def test_create_then_get(self, real_client, sample_book_data):
        created = await real_client.post("/books", content=json.dumps(sample_book_data))
        book_id = created.text

        response = await real_client.get(f"/books/{book_id}")

        assert response.status_code == 200
        assert response.json() == {**sample_book_data, "_id": book_id}

    @pytest.mark.asyncio
    async def test_checkout_twice_then_checkin(self, real_client, sample_book_data):
        book_id = (await real_client.post("/books", json=sample_book_data)).text

        assert (await real_client.put(f"/books/checkout/{book_id}")).status_code == 200
        assert (await real_client.put(f"/books/checkout/{book_id}")).status_code == 400
        assert (await real_client.put(f"/books/checkin/{book_id}")).status_code == 200

    @pytest.mark.asyncio
    async def test_health_without_client_is_unhealthy(self, real_client):
        response = await real_client.get("/health")

        assert response.json()["status"] == "unhealthy"
