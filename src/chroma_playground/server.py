"""FastMCP server for exploring a Chroma server's HTTP API."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, TypeAlias

import aiohttp
from mcp.server.fastmcp import Context, FastMCP

from chroma_playground.config import SavedSettings, load_config
from chroma_playground.core import ChromaClient, PlaygroundError
from chroma_playground.models import ApiResult, AppState, ConnectionConfig
from chroma_playground.playground import Playground
from chroma_playground.schemas import (
    CATEGORIES,
    format_method_docs,
    generate_catalog_overview,
    get_catalog_summary,
    get_method_by_id,
    get_methods_by_category,
)
from chroma_playground.store import AppStore

# Context is generic over (Session, LifespanContext, Request) - use Any for all
Ctx: TypeAlias = Context[Any, Any, Any]

logger = logging.getLogger(__name__)

config = load_config()


# =============================================================================
# Lifespan - one client, store and controller per server session
# =============================================================================
@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Initialize and cleanup shared resources."""
    timeout = aiohttp.ClientTimeout(total=config.request_timeout)
    session = aiohttp.ClientSession(timeout=timeout)

    settings = SavedSettings.load(config.settings_path)
    client = ChromaClient(
        session,
        base_url=config.base_url,
        config=ConnectionConfig(
            tenant=config.tenant or settings.tenant,
            database=config.database or settings.database,
            auth_token=config.auth_token,
        ),
    )
    store = AppStore(client)
    playground = Playground(client, store, settings)
    logger.info("Chroma playground targeting %s", config.base_url)

    yield {"session": session, "playground": playground}

    # Shutdown
    store.close()
    await session.close()


mcp = FastMCP(
    "Chroma Playground",
    instructions=generate_catalog_overview(),
    lifespan=lifespan,
)


def _playground(ctx: Ctx) -> Playground:
    playground: Playground = ctx.request_context.lifespan_context["playground"]
    return playground


# =============================================================================
# Connection Tools
# =============================================================================
@mcp.tool()  # type: ignore[untyped-decorator]
async def connect(
    ctx: Ctx,
    tenant: str | None = None,
    database: str | None = None,
    auth_token: str | None = None,
) -> ApiResult[Any]:
    """
    Connect to the Chroma server.

    Omitted fields keep their previous values (last-used tenant/database are
    remembered between sessions). On success the collection list is loaded.

    Args:
        tenant: Tenant name (default "default_tenant")
        database: Database name (default "default_database")
        auth_token: Bearer token, if the server requires one
    """
    return await _playground(ctx).connect(tenant, database, auth_token)


@mcp.tool()  # type: ignore[untyped-decorator]
async def disconnect(ctx: Ctx) -> AppState:
    """Disconnect and clear the selected collection."""
    return _playground(ctx).disconnect()


@mcp.tool()  # type: ignore[untyped-decorator]
async def refresh_collections(ctx: Ctx) -> AppState:
    """Reload the list of collection names."""
    return await _playground(ctx).refresh_collections()


@mcp.tool()  # type: ignore[untyped-decorator]
async def select_collection(ctx: Ctx, name: str) -> ApiResult[Any]:
    """Select an existing collection for collection operations."""
    return await _playground(ctx).select_collection(name)


# =============================================================================
# Method Tools
# =============================================================================
@mcp.tool()  # type: ignore[untyped-decorator]
async def get_methods(
    ctx: Ctx,
    category: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """
    Browse the API methods.

    USAGE:
      get_methods()                                  # Method ids by category
      get_methods(category="collection-operations")  # Docs for a category
      get_methods(method="query")                    # Full docs for one method

    Categories: client, collection-management, collection-operations
    """
    if method:
        found = get_method_by_id(method)
        if found is None:
            return {
                "query": {"method": method},
                "error": f"Method '{method}' not found",
                "suggestion": "Use get_methods() to list method ids",
            }
        return {"method": found.id, "docs": format_method_docs(found)}

    if category:
        if category not in CATEGORIES:
            return {
                "query": {"category": category},
                "error": f"Unknown category '{category}'",
                "suggestion": f"Categories: {', '.join(CATEGORIES)}",
            }
        return {
            "category": category,
            "methods": [format_method_docs(m) for m in get_methods_by_category(category)],
        }

    return get_catalog_summary()


@mcp.tool()  # type: ignore[untyped-decorator]
async def select_method(ctx: Ctx, method_id: str) -> AppState | dict[str, Any]:
    """Select a method. Its parameters are reset to the documented example."""
    try:
        return _playground(ctx).select_method(method_id)
    except PlaygroundError as e:
        return e.to_dict()


@mcp.tool()  # type: ignore[untyped-decorator]
async def set_parameters(ctx: Ctx, parameter_json: str) -> AppState:
    """Replace the parameter JSON text of the selected method."""
    return _playground(ctx).set_parameters(parameter_json)


@mcp.tool()  # type: ignore[untyped-decorator]
async def execute(
    ctx: Ctx,
    method_id: str | None = None,
    parameter_json: str | None = None,
) -> ApiResult[Any] | dict[str, Any]:
    """
    Execute the selected method with its parameter JSON.

    Args:
        method_id: Select this method first (its example is used unless
            parameter_json is given)
        parameter_json: Parameter JSON object, e.g. '{"queryTexts": ["hi"]}'

    Returns:
        {success, data | error, duration} with duration in milliseconds.
    """
    try:
        return await _playground(ctx).execute(method_id, parameter_json)
    except PlaygroundError as e:
        return e.to_dict()


@mcp.tool()  # type: ignore[untyped-decorator]
async def get_state(ctx: Ctx) -> AppState:
    """Current connection, method, parameters, collections and last result."""
    return _playground(ctx).state


# =============================================================================
# Entry Point
# =============================================================================
def main() -> None:
    """Run the MCP server."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
