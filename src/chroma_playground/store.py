"""Observable application state mirroring the client's context."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from chroma_playground.core.events import ListenerRegistry
from chroma_playground.models import ApiMethod, ApiResult, AppState
from chroma_playground.schemas.catalog import ALL_METHODS

if TYPE_CHECKING:
    from chroma_playground.core.client import ChromaClient

logger = logging.getLogger(__name__)

StateListener = Callable[[AppState], None]


def _snapshot(state: AppState) -> AppState:
    return state.model_copy(deep=True)


def format_example(method: ApiMethod) -> str:
    """Pretty-printed example payload, as seeded into the parameter editor."""
    return json.dumps(method.example, indent=2, ensure_ascii=False)


class AppStore:
    """Holds one AppState snapshot and notifies subscribers on every change.

    The snapshot is replaced, never mutated. Subscribers and ``get_state``
    callers receive deep copies. Connection and collection context belong to
    the client; the store only mirrors them.
    """

    def __init__(self, client: ChromaClient) -> None:
        self._client = client
        self._state = AppState(
            is_connected=client.is_connected,
            current_method=ALL_METHODS[0],
            current_collection_name=client.current_collection_name,
        )
        self._listeners: ListenerRegistry[AppState] = ListenerRegistry(copy=_snapshot)
        self._pending: set[asyncio.Task[None]] = set()
        self._detach = client.on_connection_change(self._on_connection_change)

    def get_state(self) -> AppState:
        return _snapshot(self._state)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call listener now with the current state, then on every change.

        Returns a handle that unsubscribes; calling it again is a no-op.
        """
        unsubscribe = self._listeners.add(listener)
        self._listeners.notify(listener, self._state)
        return unsubscribe

    def _set_state(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)
        self._listeners.emit(self._state)

    # =========================================================================
    # Mutations
    # =========================================================================

    def select_method(self, method: ApiMethod) -> None:
        """Select a method, reseed parameters from its example, drop the stale result."""
        self._set_state(
            current_method=method,
            parameter_json=format_example(method),
            last_result=None,
        )

    def set_parameter_json(self, text: str) -> None:
        """Store raw editor text. Validation happens at execution time."""
        self._set_state(parameter_json=text)

    def set_executing(self, executing: bool) -> None:
        self._set_state(is_executing=executing)

    def set_result(self, result: ApiResult[Any]) -> None:
        self._set_state(last_result=result, is_executing=False)

    def set_current_collection(self, name: str | None) -> None:
        self._set_state(current_collection_name=name)

    async def refresh_collections(self) -> None:
        """Reload collection names from the server. No-op while disconnected."""
        if not self._state.is_connected:
            return

        result = await self._client.list_collections()
        if not result.success:
            logger.warning("Failed to refresh collections: %s", result.error)
            return

        self._set_state(
            collections=[collection.name for collection in result.data or []],
            current_collection_name=self._client.current_collection_name,
        )

    # =========================================================================
    # Connectivity
    # =========================================================================

    def _on_connection_change(self, connected: bool) -> None:
        if not connected:
            self._set_state(is_connected=False, current_collection_name=None)
            return

        self._set_state(is_connected=True)
        task = asyncio.get_running_loop().create_task(self.refresh_collections())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for collection refreshes scheduled by connectivity changes."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def close(self) -> None:
        """Stop following the client's connectivity changes."""
        self._detach()
        self._listeners.clear()
