"""Stateful client for a Chroma server's HTTP API."""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, NamedTuple, TypeVar
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from chroma_playground.core.connection import ChromaConnection
from chroma_playground.core.errors import InvalidParametersError, NoCollectionSelectedError
from chroma_playground.core.events import ListenerRegistry
from chroma_playground.core.params import (
    CollectionNameParams,
    CommandParams,
    CreateCollectionParams,
    DeleteParams,
    GetParams,
    ListCollectionsParams,
    ModifyParams,
    NoParams,
    PeekParams,
    QueryParams,
    RecordsParams,
)
from chroma_playground.models import (
    DEFAULT_DATABASE,
    DEFAULT_TENANT,
    ApiResult,
    Collection,
    ConnectionConfig,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_N_RESULTS = 10
DEFAULT_PEEK_LIMIT = 10
DEFAULT_GET_INCLUDE = ("documents", "metadatas")
DEFAULT_QUERY_INCLUDE = ("documents", "metadatas", "distances")

NO_COLLECTION_MESSAGE = "No collection selected. Please select or create a collection first."


def _elapsed_ms(start: float) -> int:
    return round((time.perf_counter() - start) * 1000)


def _compact(body: dict[str, Any]) -> dict[str, Any]:
    """Drop absent fields so they are not sent on the wire."""
    return {key: value for key, value in body.items() if value is not None}


def _format_validation_error(method_id: str, exc: ValidationError) -> str:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or 'params'}: {err['msg']}"
        for err in exc.errors()
    )
    return f"Invalid parameters for {method_id}: {problems}"


class ChromaClient:
    """Stateful facade over one Chroma server.

    Owns the connection config and the current collection context. Every
    public operation returns an ApiResult and never raises: transport, HTTP
    and precondition failures all become ``success=False`` results with the
    elapsed time.

    Calls are not serialized. Two overlapping calls that both adopt a current
    collection (e.g. two getCollection calls) leave whichever settled last as
    the current collection.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str = DEFAULT_BASE_URL,
        config: ConnectionConfig | None = None,
    ) -> None:
        self._config = config.model_copy() if config else ConnectionConfig()
        self._connection = ChromaConnection(base_url, session, self._config.auth_token)
        self._current_collection: Collection | None = None
        self._connected = False
        self._listeners: ListenerRegistry[bool] = ListenerRegistry()

    # =========================================================================
    # Context
    # =========================================================================

    @property
    def base_url(self) -> str:
        return self._connection.base_url

    @property
    def config(self) -> ConnectionConfig:
        return self._config.model_copy()

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def current_collection(self) -> Collection | None:
        if self._current_collection is None:
            return None
        return self._current_collection.model_copy(deep=True)

    @property
    def current_collection_name(self) -> str | None:
        return self._current_collection.name if self._current_collection else None

    @property
    def current_collection_id(self) -> str | None:
        return self._current_collection.id if self._current_collection else None

    def on_connection_change(self, listener: Callable[[bool], None]) -> Callable[[], None]:
        """Register a connectivity listener. Returns the unsubscribe handle."""
        return self._listeners.add(listener)

    def _set_connected(self, connected: bool) -> None:
        self._connected = connected
        if not connected:
            self._current_collection = None
        logger.info("Chroma %s (%s)", "connected" if connected else "disconnected", self.base_url)
        self._listeners.emit(connected)

    def _database_path(self) -> str:
        tenant = quote(self._config.tenant or DEFAULT_TENANT, safe="")
        database = quote(self._config.database or DEFAULT_DATABASE, safe="")
        return f"/tenants/{tenant}/databases/{database}"

    def _collections_path(self, name: str | None = None) -> str:
        path = f"{self._database_path()}/collections"
        if name is not None:
            path += f"/{quote(name, safe='')}"
        return path

    def _require_collection(self) -> str:
        if self._current_collection is None or not self._current_collection.id:
            raise NoCollectionSelectedError(
                NO_COLLECTION_MESSAGE,
                suggestion="Use getCollection, createCollection or getOrCreateCollection",
            )
        return self._current_collection.id

    def _scoped_path(self, suffix: str = "") -> str:
        return f"/collections/{quote(self._require_collection(), safe='')}{suffix}"

    def _adopt(self, raw: Any) -> Collection:
        collection = Collection.model_validate(raw)
        self._current_collection = collection
        logger.info("Current collection: %s (%s)", collection.name, collection.id)
        return collection

    async def _execute(self, body: Callable[[], Awaitable[T]]) -> ApiResult[T]:
        """Run body, timing it and converting any failure into a result."""
        start = time.perf_counter()
        try:
            data = await body()
        except Exception as e:
            duration = _elapsed_ms(start)
            logger.warning("Chroma call failed after %dms: %s", duration, e)
            return ApiResult(success=False, error=str(e) or type(e).__name__, duration=duration)
        return ApiResult(success=True, data=data, duration=_elapsed_ms(start))

    # =========================================================================
    # Connection
    # =========================================================================

    async def connect(
        self,
        tenant: str | None = None,
        database: str | None = None,
        auth_token: str | None = None,
    ) -> ApiResult[bool]:
        """Merge the given fields into the config and probe the server.

        Omitted fields keep their previous values. The config is updated even
        when the probe fails, so a retry reuses the corrected fields. A
        successful connect to a different tenant or database drops the
        current collection.
        """
        previous = (self._config.tenant, self._config.database)
        updates = {
            key: value
            for key, value in (("tenant", tenant), ("database", database), ("auth_token", auth_token))
            if value is not None
        }
        self._config = self._config.model_copy(update=updates)
        self._connection.auth_token = self._config.auth_token

        async def probe() -> bool:
            await self._connection.request("GET", "/heartbeat")
            if (self._config.tenant, self._config.database) != previous:
                self._current_collection = None
            self._set_connected(True)
            return True

        result = await self._execute(probe)
        if not result.success and self._connected:
            self._set_connected(False)
        return result

    def disconnect(self) -> None:
        """Drop the collection context and mark the client disconnected."""
        self._set_connected(False)

    # =========================================================================
    # Client API
    # =========================================================================

    async def heartbeat(self) -> ApiResult[dict[str, int]]:
        return await self._execute(lambda: self._connection.request("GET", "/heartbeat"))

    async def version(self) -> ApiResult[str]:
        return await self._execute(lambda: self._connection.request("GET", "/version"))

    async def reset(self) -> ApiResult[bool]:
        """Erase all server-side data. Clears the current collection."""

        async def body() -> bool:
            await self._connection.request("POST", "/reset")
            self._current_collection = None
            return True

        return await self._execute(body)

    async def list_collections(
        self,
        limit: int | None = None,
        offset: int | None = None,
    ) -> ApiResult[list[Collection]]:
        params: dict[str, str] = {}
        if limit:
            params["limit"] = str(limit)
        if offset:
            params["offset"] = str(offset)

        async def body() -> list[Collection]:
            raw = await self._connection.request("GET", self._collections_path(), params=params)
            return [Collection.model_validate(item) for item in raw or []]

        return await self._execute(body)

    async def count_collections(self) -> ApiResult[int]:
        path = f"{self._database_path()}/count_collections"
        return await self._execute(lambda: self._connection.request("GET", path))

    # =========================================================================
    # Collection Management
    # =========================================================================

    async def _create(
        self,
        name: str,
        metadata: dict[str, Any] | None,
        get_or_create: bool,
    ) -> Collection:
        raw = await self._connection.request(
            "POST",
            self._collections_path(),
            body=_compact({"name": name, "metadata": metadata, "get_or_create": get_or_create}),
        )
        return self._adopt(raw)

    async def create_collection(
        self,
        name: str,
        metadata: dict[str, Any] | None = None,
    ) -> ApiResult[Collection]:
        """Create a collection and make it current. The server rejects duplicates."""
        return await self._execute(lambda: self._create(name, metadata, get_or_create=False))

    async def get_or_create_collection(
        self,
        name: str,
        metadata: dict[str, Any] | None = None,
    ) -> ApiResult[Collection]:
        """Fetch or create a collection and make it current.

        The server applies metadata only when it creates the collection.
        """
        return await self._execute(lambda: self._create(name, metadata, get_or_create=True))

    async def get_collection(self, name: str) -> ApiResult[Collection]:
        """Fetch a collection by name and make it current."""

        async def body() -> Collection:
            return self._adopt(await self._connection.request("GET", self._collections_path(name)))

        return await self._execute(body)

    async def select_collection(self, name: str) -> ApiResult[Collection]:
        return await self.get_collection(name)

    async def delete_collection(self, name: str) -> ApiResult[None]:
        """Delete a collection. Clears the context if it was current."""

        async def body() -> None:
            await self._connection.request("DELETE", self._collections_path(name))
            if self._current_collection is not None and self._current_collection.name == name:
                self._current_collection = None

        return await self._execute(body)

    # =========================================================================
    # Collection Operations
    # =========================================================================

    async def _write_records(
        self,
        operation: str,
        ids: list[str],
        documents: list[str] | None,
        embeddings: list[list[float]] | None,
        metadatas: list[dict[str, Any]] | None,
    ) -> bool:
        await self._connection.request(
            "POST",
            self._scoped_path(f"/{operation}"),
            body=_compact(
                {
                    "ids": ids,
                    "documents": documents,
                    "embeddings": embeddings,
                    "metadatas": metadatas,
                }
            ),
        )
        return True

    async def add(
        self,
        ids: list[str],
        documents: list[str] | None = None,
        embeddings: list[list[float]] | None = None,
        metadatas: list[dict[str, Any]] | None = None,
    ) -> ApiResult[bool]:
        return await self._execute(
            lambda: self._write_records("add", ids, documents, embeddings, metadatas)
        )

    async def upsert(
        self,
        ids: list[str],
        documents: list[str] | None = None,
        embeddings: list[list[float]] | None = None,
        metadatas: list[dict[str, Any]] | None = None,
    ) -> ApiResult[bool]:
        return await self._execute(
            lambda: self._write_records("upsert", ids, documents, embeddings, metadatas)
        )

    async def update(
        self,
        ids: list[str],
        documents: list[str] | None = None,
        embeddings: list[list[float]] | None = None,
        metadatas: list[dict[str, Any]] | None = None,
    ) -> ApiResult[bool]:
        return await self._execute(
            lambda: self._write_records("update", ids, documents, embeddings, metadatas)
        )

    async def get(
        self,
        ids: list[str] | None = None,
        where: dict[str, Any] | None = None,
        where_document: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int | None = None,
        include: list[str] | None = None,
    ) -> ApiResult[dict[str, Any]]:
        async def body() -> dict[str, Any]:
            return await self._connection.request(
                "POST",
                self._scoped_path("/get"),
                body=_compact(
                    {
                        "ids": ids,
                        "where": where,
                        "where_document": where_document,
                        "limit": limit,
                        "offset": offset,
                        "include": include or list(DEFAULT_GET_INCLUDE),
                    }
                ),
            )

        return await self._execute(body)

    async def query(
        self,
        query_texts: list[str] | None = None,
        query_embeddings: list[list[float]] | None = None,
        n_results: int | None = None,
        where: dict[str, Any] | None = None,
        where_document: dict[str, Any] | None = None,
        include: list[str] | None = None,
    ) -> ApiResult[dict[str, Any]]:
        """Similarity search. Defaults to 10 results with documents, metadatas, distances."""

        async def body() -> dict[str, Any]:
            return await self._connection.request(
                "POST",
                self._scoped_path("/query"),
                body=_compact(
                    {
                        "query_texts": query_texts,
                        "query_embeddings": query_embeddings,
                        "n_results": n_results or DEFAULT_N_RESULTS,
                        "where": where,
                        "where_document": where_document,
                        "include": include or list(DEFAULT_QUERY_INCLUDE),
                    }
                ),
            )

        return await self._execute(body)

    async def delete(
        self,
        ids: list[str] | None = None,
        where: dict[str, Any] | None = None,
        where_document: dict[str, Any] | None = None,
    ) -> ApiResult[Any]:
        async def body() -> Any:
            return await self._connection.request(
                "POST",
                self._scoped_path("/delete"),
                body=_compact({"ids": ids, "where": where, "where_document": where_document}),
            )

        return await self._execute(body)

    async def peek(self, limit: int | None = None) -> ApiResult[dict[str, Any]]:
        async def body() -> dict[str, Any]:
            return await self._connection.request(
                "POST",
                self._scoped_path("/get"),
                body={"limit": limit or DEFAULT_PEEK_LIMIT, "include": list(DEFAULT_GET_INCLUDE)},
            )

        return await self._execute(body)

    async def count(self) -> ApiResult[int]:
        async def body() -> int:
            return await self._connection.request("GET", self._scoped_path("/count"))

        return await self._execute(body)

    async def modify(
        self,
        name: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ApiResult[None]:
        """Rename the current collection and/or replace its metadata.

        The cached current collection follows the change, so later calls
        still address the same id under its new name.
        """

        async def body() -> None:
            collection_id = self._require_collection()
            await self._connection.request(
                "PUT",
                self._scoped_path(),
                body=_compact({"new_name": name, "new_metadata": metadata}),
            )
            current = self._current_collection
            if current is None or current.id != collection_id:
                return
            updates: dict[str, Any] = {}
            if name:
                updates["name"] = name
            if metadata:
                updates["metadata"] = metadata
            self._current_collection = current.model_copy(update=updates)

        return await self._execute(body)

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def execute_method(
        self,
        method_id: str,
        params: dict[str, Any] | None = None,
    ) -> ApiResult[Any]:
        """Invoke a catalog method by id with already-parsed parameters.

        Unknown ids fail with zero duration without invoking anything.
        """
        command = COMMANDS.get(method_id)
        if command is None:
            logger.warning("Unknown method: %s", method_id)
            return ApiResult(success=False, error=f"Unknown method: {method_id}", duration=0)

        start = time.perf_counter()
        try:
            parsed = command.params.model_validate(params or {})
        except ValidationError as e:
            error = InvalidParametersError(
                _format_validation_error(method_id, e),
                details={"method": method_id},
            )
            logger.warning("%s", error)
            return ApiResult(success=False, error=str(error), duration=_elapsed_ms(start))

        return await command.run(self, **parsed.model_dump(exclude_none=True))


class Command(NamedTuple):
    """Parameter shape and client operation for one method id."""

    params: type[CommandParams]
    run: Callable[..., Awaitable[ApiResult[Any]]]


COMMANDS: dict[str, Command] = {
    "heartbeat": Command(NoParams, ChromaClient.heartbeat),
    "version": Command(NoParams, ChromaClient.version),
    "reset": Command(NoParams, ChromaClient.reset),
    "listCollections": Command(ListCollectionsParams, ChromaClient.list_collections),
    "countCollections": Command(NoParams, ChromaClient.count_collections),
    "createCollection": Command(CreateCollectionParams, ChromaClient.create_collection),
    "getCollection": Command(CollectionNameParams, ChromaClient.get_collection),
    "getOrCreateCollection": Command(CreateCollectionParams, ChromaClient.get_or_create_collection),
    "deleteCollection": Command(CollectionNameParams, ChromaClient.delete_collection),
    "add": Command(RecordsParams, ChromaClient.add),
    "upsert": Command(RecordsParams, ChromaClient.upsert),
    "get": Command(GetParams, ChromaClient.get),
    "query": Command(QueryParams, ChromaClient.query),
    "update": Command(RecordsParams, ChromaClient.update),
    "delete": Command(DeleteParams, ChromaClient.delete),
    "peek": Command(PeekParams, ChromaClient.peek),
    "count": Command(NoParams, ChromaClient.count),
    "modify": Command(ModifyParams, ChromaClient.modify),
}
