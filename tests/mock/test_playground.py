"""Mock tests for Playground operator flows."""

import json
from pathlib import Path

import aiohttp
import pytest
from aioresponses import aioresponses
from yarl import URL

from chroma_playground.config import SavedSettings
from chroma_playground.core.client import ChromaClient
from chroma_playground.core.errors import InvalidParametersError, UnknownMethodError
from chroma_playground.playground import Playground
from chroma_playground.store import AppStore

BASE = "http://chroma.test:8000"
API = f"{BASE}/api/v2"
DB = f"{API}/tenants/default_tenant/databases/default_database"
DOCS = {"id": "c1", "name": "docs", "metadata": None}


@pytest.fixture
async def session() -> aiohttp.ClientSession:
    """Create aiohttp session for tests."""
    async with aiohttp.ClientSession() as session:
        yield session


@pytest.fixture
def settings(tmp_path: Path) -> SavedSettings:
    return SavedSettings(path=tmp_path / "settings.json")


@pytest.fixture
def playground(session: aiohttp.ClientSession, settings: SavedSettings) -> Playground:
    client = ChromaClient(session, base_url=BASE)
    store = AppStore(client)
    yield Playground(client, store, settings)
    store.close()


async def _connect(playground: Playground, collections: list[dict] | None = None) -> None:
    with aioresponses() as m:
        m.get(f"{API}/heartbeat", payload={})
        m.get(f"{DB}/collections", payload=collections or [])
        result = await playground.connect()
    assert result.success


async def _select_docs(playground: Playground) -> None:
    with aioresponses() as m:
        m.get(f"{DB}/collections/docs", payload=DOCS)
        result = await playground.select_collection("docs")
    assert result.success


class TestConnect:
    """Tests for connect and disconnect flows."""

    async def test_connect_loads_collections(self, playground: Playground) -> None:
        await _connect(playground, [DOCS])

        state = playground.state
        assert state.is_connected is True
        assert state.is_executing is False
        assert state.collections == ["docs"]

    async def test_connect_remembers_namespace(
        self, playground: Playground, settings: SavedSettings
    ) -> None:
        with aioresponses() as m:
            m.get(f"{API}/heartbeat", payload={})
            m.get(f"{API}/tenants/acme/databases/prod/collections", payload=[])
            await playground.connect(tenant="acme", database="prod", auth_token="secret")

        saved = json.loads(settings.path.read_text(encoding="utf-8"))
        assert saved == {"tenant": "acme", "database": "prod"}

    async def test_connect_failure(self, playground: Playground) -> None:
        with aioresponses() as m:
            m.get(f"{API}/heartbeat", exception=aiohttp.ClientConnectionError("refused"))
            result = await playground.connect()

        assert result.success is False
        assert playground.state.is_connected is False
        assert playground.state.is_executing is False

    async def test_disconnect(self, playground: Playground) -> None:
        await _connect(playground, [DOCS])
        await _select_docs(playground)

        state = playground.disconnect()

        assert state.is_connected is False
        assert state.current_collection_name is None
        assert playground.client.current_collection is None


class TestMethodEditing:
    """Tests for selecting methods and editing parameters."""

    def test_select_method(self, playground: Playground) -> None:
        state = playground.select_method("peek")
        assert state.current_method is not None
        assert state.current_method.id == "peek"
        assert json.loads(state.parameter_json) == {"limit": 5}

    def test_select_unknown_method(self, playground: Playground) -> None:
        with pytest.raises(UnknownMethodError):
            playground.select_method("dropEverything")

    def test_reset_parameters(self, playground: Playground) -> None:
        playground.select_method("peek")
        playground.set_parameters('{"limit": 1}')

        state = playground.reset_parameters()

        assert json.loads(state.parameter_json) == {"limit": 5}

    def test_format_parameters(self, playground: Playground) -> None:
        playground.set_parameters('{"limit":1}')
        assert playground.format_parameters().parameter_json == '{\n  "limit": 1\n}'

    def test_format_invalid_parameters(self, playground: Playground) -> None:
        playground.set_parameters("{oops")
        with pytest.raises(InvalidParametersError):
            playground.format_parameters()


class TestExecute:
    """Tests for execute()."""

    async def test_not_connected(self, playground: Playground) -> None:
        with aioresponses() as m:
            result = await playground.execute("heartbeat")
            assert m.requests == {}

        assert result.success is False
        assert result.error == "Not connected. Use connect() first"
        assert playground.state.last_result is None

    async def test_scoped_method_without_collection(self, playground: Playground) -> None:
        await _connect(playground)
        with aioresponses() as m:
            result = await playground.execute("count")
            assert m.requests == {}

        assert result.success is False
        assert result.error == "count requires a selected collection"
        assert result.duration == 0

    async def test_invalid_json(self, playground: Playground) -> None:
        await _connect(playground)
        with aioresponses() as m:
            result = await playground.execute("listCollections", "{limit: 5")
            assert m.requests == {}

        assert result.success is False
        assert (result.error or "").startswith("Invalid JSON")
        assert playground.state.parameter_json == "{limit: 5"

    async def test_non_object_json(self, playground: Playground) -> None:
        await _connect(playground)
        result = await playground.execute("listCollections", "[1, 2]")
        assert result.error == "Parameters must be a JSON object"

    async def test_success_records_result(self, playground: Playground) -> None:
        await _connect(playground)
        with aioresponses() as m:
            m.get(f"{API}/version", payload="1.0.0")
            result = await playground.execute("version")

        state = playground.state
        assert result.success is True
        assert state.last_result == result
        assert state.is_executing is False

    async def test_uses_edited_parameters(self, playground: Playground) -> None:
        await _connect(playground)
        await _select_docs(playground)
        playground.select_method("peek")
        playground.set_parameters('{"limit": 2}')
        url = f"{API}/collections/c1/get"

        with aioresponses() as m:
            m.post(url, payload={"ids": ["a", "b"]})
            result = await playground.execute()

            assert m.requests[("POST", URL(url))][0].kwargs["json"]["limit"] == 2

        assert result.data == {"ids": ["a", "b"]}

    async def test_method_id_reseeds_example(self, playground: Playground) -> None:
        """Passing the current method id discards edited text for its example."""
        await _connect(playground)
        await _select_docs(playground)
        playground.select_method("peek")
        playground.set_parameters('{"limit": 2}')
        url = f"{API}/collections/c1/get"

        with aioresponses() as m:
            m.post(url, payload={"ids": []})
            await playground.execute("peek")

            assert m.requests[("POST", URL(url))][0].kwargs["json"]["limit"] == 5

        assert json.loads(playground.state.parameter_json) == {"limit": 5}

    async def test_create_refreshes_and_selects(self, playground: Playground) -> None:
        await _connect(playground)
        with aioresponses() as m:
            m.post(f"{DB}/collections", payload=DOCS)
            m.get(f"{DB}/collections", payload=[DOCS])
            result = await playground.execute("createCollection", '{"name": "docs"}')

        state = playground.state
        assert result.success is True
        assert state.collections == ["docs"]
        assert state.current_collection_name == "docs"

    async def test_get_collection_syncs_current_name(self, playground: Playground) -> None:
        await _connect(playground)
        with aioresponses() as m:
            m.get(f"{DB}/collections/docs", payload=DOCS)
            await playground.execute("getCollection", '{"name": "docs"}')

        assert playground.state.current_collection_name == "docs"

    async def test_delete_current_clears_selection(self, playground: Playground) -> None:
        await _connect(playground, [DOCS])
        await _select_docs(playground)
        with aioresponses() as m:
            m.delete(f"{DB}/collections/docs", body="")
            m.get(f"{DB}/collections", payload=[])
            result = await playground.execute("deleteCollection", '{"name": "docs"}')

        state = playground.state
        assert result.success is True
        assert state.collections == []
        assert state.current_collection_name is None

    async def test_server_failure_is_recorded(self, playground: Playground) -> None:
        await _connect(playground)
        with aioresponses() as m:
            m.get(f"{DB}/collections/missing", status=404, payload={"message": "not found"})
            result = await playground.execute("getCollection", '{"name": "missing"}')

        assert result.success is False
        assert playground.state.last_result == result
        assert playground.state.current_collection_name is None
