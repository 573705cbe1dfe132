"""Operator-readable documentation generated from the method catalog."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from chroma_playground.schemas.catalog import CATEGORIES, get_methods_by_category

if TYPE_CHECKING:
    from chroma_playground.models import ApiMethod

CATEGORY_TITLES = {
    "client": "Client API",
    "collection-management": "Collection Management",
    "collection-operations": "Collection Operations",
}


def _format_value(value: object) -> str:
    return json.dumps(value, ensure_ascii=False)


def format_method_docs(method: ApiMethod) -> str:
    """Format full documentation for one method.

    Example:
        peek()  [collection-operations]
          Show a sample of the collection's records.
          Requires a selected collection.

        PARAMETERS:
          limit: number (optional, default 10) - Number of records to show

        EXAMPLE:
          {"limit": 5}
    """
    lines = [f"{method.name}()  [{method.category}]", f"  {method.description}"]
    if method.requires_collection:
        lines.append("  Requires a selected collection.")

    lines.append("")
    if method.parameters:
        lines.append("PARAMETERS:")
        for param in method.parameters:
            flags = ["required" if param.required else "optional"]
            if param.default is not None:
                flags.append(f"default {_format_value(param.default)}")
            lines.append(f"  {param.name}: {param.type} ({', '.join(flags)}) - {param.description}")
    else:
        lines.append("PARAMETERS: none")

    lines.append("")
    lines.append("EXAMPLE:")
    example = json.dumps(method.example, indent=2, ensure_ascii=False)
    lines.extend(f"  {line}" for line in example.split("\n"))

    return "\n".join(lines)


def generate_catalog_overview() -> str:
    """Generate a categorized overview of all methods.

    Used as the server's instructions text.
    """
    lines = [
        "Explore a Chroma server's HTTP API.",
        "",
        "WORKFLOW:",
        "  1. connect(tenant, database, auth_token)",
        "  2. select_method(method_id) -> parameters seeded from the example",
        "  3. set_parameters(json) to edit, then execute()",
        "  Collection operations need a collection: use select_collection(name),",
        "  createCollection, getCollection or getOrCreateCollection first.",
    ]
    for category in CATEGORIES:
        lines.append("")
        lines.append(f"{CATEGORY_TITLES[category].upper()}:")
        for method in get_methods_by_category(category):
            lines.append(f"  {method.id} - {method.description}")

    return "\n".join(lines)


def get_catalog_summary() -> dict[str, list[str]]:
    """Category title -> method ids."""
    return {
        CATEGORY_TITLES[category]: [m.id for m in get_methods_by_category(category)]
        for category in CATEGORIES
    }
