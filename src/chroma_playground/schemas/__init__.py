"""Method catalog and its generated documentation."""

from chroma_playground.schemas.catalog import (
    ALL_METHODS,
    CATEGORIES,
    get_method_by_id,
    get_methods_by_category,
)
from chroma_playground.schemas.docgen import (
    format_method_docs,
    generate_catalog_overview,
    get_catalog_summary,
)

__all__ = [
    "ALL_METHODS",
    "CATEGORIES",
    "format_method_docs",
    "generate_catalog_overview",
    "get_catalog_summary",
    "get_method_by_id",
    "get_methods_by_category",
]
