"""Mock tests for ChromaConnection."""

import aiohttp
import pytest
from aioresponses import aioresponses
from yarl import URL

from chroma_playground.core.connection import ChromaConnection, extract_error_message
from chroma_playground.core.errors import (
    ChromaConnectionError,
    HttpError,
    PlaygroundError,
)

BASE = "http://chroma.test:8000"


@pytest.fixture
async def session() -> aiohttp.ClientSession:
    """Create aiohttp session for tests."""
    async with aiohttp.ClientSession() as session:
        yield session


@pytest.fixture
def connection(session: aiohttp.ClientSession) -> ChromaConnection:
    """Create connection instance for tests."""
    return ChromaConnection(f"{BASE}/", session)


class TestExtractErrorMessage:
    """Tests for extract_error_message()."""

    def test_detail_field(self) -> None:
        assert extract_error_message(400, '{"detail": "bad where"}') == "bad where"

    def test_message_field(self) -> None:
        body = '{"error": "UniqueConstraintError", "message": "Collection docs already exists"}'
        assert extract_error_message(409, body) == "Collection docs already exists"

    def test_structured_detail_is_serialized(self) -> None:
        body = '{"detail": [{"loc": ["body", "name"], "msg": "required"}]}'
        assert extract_error_message(422, body) == '[{"loc": ["body", "name"], "msg": "required"}]'

    def test_json_without_known_fields_returns_raw_text(self) -> None:
        assert extract_error_message(500, '{"error": "x"}') == '{"error": "x"}'

    def test_plain_text(self) -> None:
        assert extract_error_message(502, "Bad Gateway") == "Bad Gateway"

    def test_empty_body(self) -> None:
        assert extract_error_message(503, "") == "HTTP 503"


class TestChromaConnectionInit:
    """Tests for URL and header construction."""

    def test_trailing_slash_is_stripped(self, connection: ChromaConnection) -> None:
        assert connection.base_url == BASE
        assert connection.url("/heartbeat") == f"{BASE}/api/v2/heartbeat"

    def test_headers_without_token(self, connection: ChromaConnection) -> None:
        assert connection.headers() == {"Content-Type": "application/json"}

    def test_headers_with_token(self, connection: ChromaConnection) -> None:
        connection.auth_token = "secret"
        assert connection.headers()["Authorization"] == "Bearer secret"


class TestRequest:
    """Tests for request()."""

    async def test_decodes_json(self, connection: ChromaConnection) -> None:
        with aioresponses() as m:
            m.get(f"{BASE}/api/v2/heartbeat", payload={"nanosecond heartbeat": 123})

            result = await connection.request("GET", "/heartbeat")

            assert result == {"nanosecond heartbeat": 123}

    async def test_sends_json_body_and_headers(self, connection: ChromaConnection) -> None:
        connection.auth_token = "secret"
        url = f"{BASE}/api/v2/collections/c1/count"
        with aioresponses() as m:
            m.post(url, payload=3)

            await connection.request("POST", "/collections/c1/count", body={"limit": 1})

            call = m.requests[("POST", URL(url))][0]
            assert call.kwargs["json"] == {"limit": 1}
            assert call.kwargs["headers"]["Authorization"] == "Bearer secret"
            assert call.kwargs["headers"]["Content-Type"] == "application/json"

    async def test_empty_body_is_none(self, connection: ChromaConnection) -> None:
        with aioresponses() as m:
            m.post(f"{BASE}/api/v2/reset", body="")

            assert await connection.request("POST", "/reset") is None

    async def test_http_error(self, connection: ChromaConnection) -> None:
        with aioresponses() as m:
            m.get(
                f"{BASE}/api/v2/collections/x",
                status=404,
                payload={"error": "NotFoundError", "message": "Collection x does not exist"},
            )

            with pytest.raises(HttpError) as exc_info:
                await connection.request("GET", "/collections/x")

            assert exc_info.value.status == 404
            assert exc_info.value.message == "Collection x does not exist"
            assert exc_info.value.details["method"] == "GET"

    async def test_http_error_without_body(self, connection: ChromaConnection) -> None:
        with aioresponses() as m:
            m.get(f"{BASE}/api/v2/version", status=500, body="")

            with pytest.raises(HttpError, match="HTTP 500"):
                await connection.request("GET", "/version")

    async def test_unreachable_server(self, connection: ChromaConnection) -> None:
        with aioresponses() as m:
            m.get(
                f"{BASE}/api/v2/heartbeat",
                exception=aiohttp.ClientConnectionError("Connection refused"),
            )

            with pytest.raises(ChromaConnectionError) as exc_info:
                await connection.request("GET", "/heartbeat")

            assert "Connection refused" in exc_info.value.message
            assert exc_info.value.suggestion

    async def test_timeout(self, connection: ChromaConnection) -> None:
        with aioresponses() as m:
            m.get(f"{BASE}/api/v2/heartbeat", exception=TimeoutError())

            with pytest.raises(ChromaConnectionError) as exc_info:
                await connection.request("GET", "/heartbeat")

            assert exc_info.value.message == f"Cannot connect to Chroma at {BASE}"

    async def test_non_json_success_body(self, connection: ChromaConnection) -> None:
        with aioresponses() as m:
            m.get(f"{BASE}/api/v2/version", body="<html>proxy</html>")

            with pytest.raises(PlaygroundError, match="not JSON"):
                await connection.request("GET", "/version")
