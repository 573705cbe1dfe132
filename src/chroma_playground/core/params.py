"""Typed parameter shapes, one per catalog method.

Keys are accepted in the catalog's camelCase (``nResults``) or as the
snake_case field names. Unknown keys are rejected.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Metadata = dict[str, Any]
Filter = dict[str, Any]


class CommandParams(BaseModel):
    """Base for all method parameter models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class NoParams(CommandParams):
    pass


class ListCollectionsParams(CommandParams):
    limit: int | None = None
    offset: int | None = None


class CollectionNameParams(CommandParams):
    name: str


class CreateCollectionParams(CommandParams):
    name: str
    metadata: Metadata | None = None


class RecordsParams(CommandParams):
    """Shared by add, upsert and update."""

    ids: list[str]
    documents: list[str] | None = None
    embeddings: list[list[float]] | None = None
    metadatas: list[Metadata] | None = None


class GetParams(CommandParams):
    ids: list[str] | None = None
    where: Filter | None = None
    where_document: Filter | None = None
    limit: int | None = None
    offset: int | None = None
    include: list[str] | None = None


class QueryParams(CommandParams):
    query_texts: list[str] | None = None
    query_embeddings: list[list[float]] | None = None
    n_results: int | None = None
    where: Filter | None = None
    where_document: Filter | None = None
    include: list[str] | None = None


class DeleteParams(CommandParams):
    ids: list[str] | None = None
    where: Filter | None = None
    where_document: Filter | None = None


class PeekParams(CommandParams):
    limit: int | None = None


class ModifyParams(CommandParams):
    name: str | None = None
    metadata: Metadata | None = None
