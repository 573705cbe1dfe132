"""Operator flows over the client and store."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chroma_playground.core.errors import InvalidParametersError, UnknownMethodError
from chroma_playground.models import ApiMethod, ApiResult, AppState
from chroma_playground.schemas.catalog import get_method_by_id
from chroma_playground.store import format_example

if TYPE_CHECKING:
    from chroma_playground.config import SavedSettings
    from chroma_playground.core.client import ChromaClient
    from chroma_playground.store import AppStore

logger = logging.getLogger(__name__)

# Methods that change which collections exist or what they are called
REFRESH_AFTER = frozenset(
    {"createCollection", "deleteCollection", "getOrCreateCollection", "reset", "modify"}
)


def _input_failure(message: str) -> ApiResult[Any]:
    return ApiResult(success=False, error=message, duration=0)


class Playground:
    """Connect, browse, edit and execute, the way an operator drives the client.

    Input problems (unparseable JSON, no collection selected for a scoped
    method) are reported as failed results without dispatching anything and
    without touching the store's last result.
    """

    def __init__(
        self,
        client: ChromaClient,
        store: AppStore,
        settings: SavedSettings,
    ) -> None:
        self.client = client
        self.store = store
        self.settings = settings

    @property
    def state(self) -> AppState:
        return self.store.get_state()

    # =========================================================================
    # Connection
    # =========================================================================

    async def connect(
        self,
        tenant: str | None = None,
        database: str | None = None,
        auth_token: str | None = None,
    ) -> ApiResult[bool]:
        """Connect, remembering tenant/database for the next session."""
        config = self.client.config
        tenant = tenant or config.tenant
        database = database or config.database
        self.settings.save(tenant, database)

        self.store.set_executing(True)
        try:
            result = await self.client.connect(
                tenant=tenant, database=database, auth_token=auth_token
            )
        finally:
            self.store.set_executing(False)
        await self.store.drain()
        return result

    def disconnect(self) -> AppState:
        self.client.disconnect()
        return self.state

    async def refresh_collections(self) -> AppState:
        await self.store.refresh_collections()
        return self.state

    async def select_collection(self, name: str) -> ApiResult[Any]:
        """Make an existing collection current."""
        result = await self.client.select_collection(name)
        if result.success:
            self.store.set_current_collection(self.client.current_collection_name)
        return result

    # =========================================================================
    # Method Editing
    # =========================================================================

    def _lookup(self, method_id: str) -> ApiMethod:
        method = get_method_by_id(method_id)
        if method is None:
            raise UnknownMethodError(
                f"Unknown method: {method_id}",
                details={"method": method_id},
                suggestion="Use get_methods() to list method ids",
            )
        return method

    def select_method(self, method_id: str) -> AppState:
        self.store.select_method(self._lookup(method_id))
        return self.state

    def set_parameters(self, text: str) -> AppState:
        self.store.set_parameter_json(text)
        return self.state

    def reset_parameters(self) -> AppState:
        """Reseed the parameters from the current method's example."""
        method = self.state.current_method
        if method is not None:
            self.store.set_parameter_json(format_example(method))
        return self.state

    def format_parameters(self) -> AppState:
        """Pretty-print the parameter text.

        Raises:
            InvalidParametersError: The text is not valid JSON.
        """
        text = self.state.parameter_json
        try:
            parsed = json.loads(text or "{}")
        except ValueError as e:
            raise InvalidParametersError(f"Invalid JSON: {e}") from e
        self.store.set_parameter_json(json.dumps(parsed, indent=2, ensure_ascii=False))
        return self.state

    # =========================================================================
    # Execution
    # =========================================================================

    async def execute(
        self,
        method_id: str | None = None,
        parameter_json: str | None = None,
    ) -> ApiResult[Any]:
        """Execute the current (or given) method with the current (or given) JSON.

        Args:
            method_id: Select this method first, even if already current. Its
                example replaces the edited text unless parameter_json is
                also given.
            parameter_json: Replace the parameter text first.

        Returns:
            The client's result, or a failed result for input problems.
        """
        if method_id is not None:
            self.store.select_method(self._lookup(method_id))
        if parameter_json is not None:
            self.store.set_parameter_json(parameter_json)

        state = self.state
        method = state.current_method
        if method is None:
            return _input_failure("No method selected")

        if not state.is_connected:
            return _input_failure("Not connected. Use connect() first")

        if method.requires_collection and not state.current_collection_name:
            return _input_failure(f"{method.name} requires a selected collection")

        try:
            params = json.loads(state.parameter_json or "{}")
        except ValueError as e:
            return _input_failure(f"Invalid JSON: {e}")
        if not isinstance(params, dict):
            return _input_failure("Parameters must be a JSON object")

        self.store.set_executing(True)
        result = await self.client.execute_method(method.id, params)
        self.store.set_result(result)
        logger.info(
            "%s %s in %dms", method.id, "succeeded" if result.success else "failed", result.duration
        )

        if method.id in REFRESH_AFTER:
            await self.store.refresh_collections()
        if self.state.current_collection_name != self.client.current_collection_name:
            self.store.set_current_collection(self.client.current_collection_name)

        return result
