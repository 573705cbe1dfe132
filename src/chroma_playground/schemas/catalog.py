"""Catalog of every API method the playground can invoke."""

from chroma_playground.models import ApiMethod, ApiParameter, Category

# =============================================================================
# Client Methods
# =============================================================================

CLIENT_METHODS: tuple[ApiMethod, ...] = (
    ApiMethod(
        id="heartbeat",
        name="heartbeat",
        description="Check that the server is reachable. Returns the current timestamp.",
        category="client",
    ),
    ApiMethod(
        id="version",
        name="version",
        description="Return the Chroma server version.",
        category="client",
    ),
    ApiMethod(
        id="reset",
        name="reset",
        description="Delete all data in the database and reset it. Destructive.",
        category="client",
    ),
    ApiMethod(
        id="listCollections",
        name="listCollections",
        description="List collections in the current tenant/database.",
        category="client",
        parameters=(
            ApiParameter(
                name="limit",
                type="number",
                required=False,
                description="Maximum number of collections to return",
                example=10,
            ),
            ApiParameter(
                name="offset",
                type="number",
                required=False,
                description="Number of collections to skip (pagination)",
                example=0,
            ),
        ),
        example={"limit": 10, "offset": 0},
    ),
    ApiMethod(
        id="countCollections",
        name="countCollections",
        description="Return the total number of collections.",
        category="client",
    ),
)

# =============================================================================
# Collection Management Methods
# =============================================================================

COLLECTION_MANAGEMENT_METHODS: tuple[ApiMethod, ...] = (
    ApiMethod(
        id="createCollection",
        name="createCollection",
        description="Create a new collection. Fails if the name is taken.",
        category="collection-management",
        parameters=(
            ApiParameter(
                name="name",
                type="string",
                required=True,
                description="Collection name (must be unique)",
                example="my_collection",
            ),
            ApiParameter(
                name="metadata",
                type="object",
                required=False,
                description="Collection metadata",
                example={"description": "My test collection"},
            ),
        ),
        example={"name": "my_collection", "metadata": {"description": "My test collection"}},
    ),
    ApiMethod(
        id="getCollection",
        name="getCollection",
        description="Fetch an existing collection by name and select it.",
        category="collection-management",
        parameters=(
            ApiParameter(
                name="name",
                type="string",
                required=True,
                description="Name of the collection to fetch",
                example="my_collection",
            ),
        ),
        example={"name": "my_collection"},
    ),
    ApiMethod(
        id="getOrCreateCollection",
        name="getOrCreateCollection",
        description="Fetch a collection, creating it if it does not exist.",
        category="collection-management",
        parameters=(
            ApiParameter(
                name="name",
                type="string",
                required=True,
                description="Collection name",
                example="my_collection",
            ),
            ApiParameter(
                name="metadata",
                type="object",
                required=False,
                description="Collection metadata (applied only when created)",
                example={"description": "My collection"},
            ),
        ),
        example={"name": "my_collection", "metadata": {"description": "My collection"}},
    ),
    ApiMethod(
        id="deleteCollection",
        name="deleteCollection",
        description="Delete a collection and all of its data. Destructive.",
        category="collection-management",
        parameters=(
            ApiParameter(
                name="name",
                type="string",
                required=True,
                description="Name of the collection to delete",
                example="my_collection",
            ),
        ),
        example={"name": "my_collection"},
    ),
)

# =============================================================================
# Collection Operations (require a selected collection)
# =============================================================================

COLLECTION_OPERATIONS_METHODS: tuple[ApiMethod, ...] = (
    ApiMethod(
        id="add",
        name="add",
        description="Add documents or embeddings to the collection.",
        category="collection-operations",
        requires_collection=True,
        parameters=(
            ApiParameter(
                name="ids",
                type="array",
                required=True,
                description="Unique record ids",
                example=["id1", "id2", "id3"],
            ),
            ApiParameter(
                name="documents",
                type="array",
                required=False,
                description="Document texts (embedded by the server)",
                example=["Hello world", "Goodbye world", "Test document"],
            ),
            ApiParameter(
                name="embeddings",
                type="array",
                required=False,
                description="Embedding vectors given explicitly",
                example=[[1.0, 2.0, 3.0], [4.0, 5.0, 6.0], [7.0, 8.0, 9.0]],
            ),
            ApiParameter(
                name="metadatas",
                type="array",
                required=False,
                description="Metadata for each document",
                example=[{"source": "doc1"}, {"source": "doc2"}, {"source": "doc3"}],
            ),
        ),
        example={
            "ids": ["id1", "id2", "id3"],
            "documents": ["Hello world", "Goodbye world", "Test document"],
            "metadatas": [{"source": "doc1"}, {"source": "doc2"}, {"source": "doc3"}],
        },
    ),
    ApiMethod(
        id="upsert",
        name="upsert",
        description="Add records, or update them when the id already exists.",
        category="collection-operations",
        requires_collection=True,
        parameters=(
            ApiParameter(
                name="ids",
                type="array",
                required=True,
                description="Unique record ids",
                example=["id1", "id2"],
            ),
            ApiParameter(
                name="documents",
                type="array",
                required=False,
                description="Document texts",
                example=["Updated document 1", "New document 2"],
            ),
            ApiParameter(
                name="embeddings",
                type="array",
                required=False,
                description="Embedding vectors",
                example=[[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]],
            ),
            ApiParameter(
                name="metadatas",
                type="array",
                required=False,
                description="Metadata for each record",
                example=[{"updated": True}, {"new": True}],
            ),
        ),
        example={
            "ids": ["id1", "id2"],
            "documents": ["Updated document 1", "New document 2"],
            "metadatas": [{"updated": True}, {"new": True}],
        },
    ),
    ApiMethod(
        id="get",
        name="get",
        description="Fetch records by id or filter.",
        category="collection-operations",
        requires_collection=True,
        parameters=(
            ApiParameter(
                name="ids",
                type="array",
                required=False,
                description="Record ids to fetch",
                example=["id1", "id2"],
            ),
            ApiParameter(
                name="where",
                type="object",
                required=False,
                description="Metadata filter",
                example={"source": "doc1"},
            ),
            ApiParameter(
                name="whereDocument",
                type="object",
                required=False,
                description="Document content filter",
                example={"$contains": "hello"},
            ),
            ApiParameter(
                name="limit",
                type="number",
                required=False,
                description="Maximum number of records",
                example=10,
            ),
            ApiParameter(
                name="offset",
                type="number",
                required=False,
                description="Number of records to skip",
                example=0,
            ),
            ApiParameter(
                name="include",
                type="array",
                required=False,
                description="Fields to include (embeddings, documents, metadatas)",
                default=["documents", "metadatas"],
                example=["documents", "metadatas"],
            ),
        ),
        example={"ids": ["id1", "id2"], "include": ["documents", "metadatas"]},
    ),
    ApiMethod(
        id="query",
        name="query",
        description="Run a similarity search.",
        category="collection-operations",
        requires_collection=True,
        parameters=(
            ApiParameter(
                name="queryTexts",
                type="array",
                required=False,
                description="Query texts",
                example=["What is the meaning of life?"],
            ),
            ApiParameter(
                name="queryEmbeddings",
                type="array",
                required=False,
                description="Query embedding vectors",
                example=[[1.0, 2.0, 3.0]],
            ),
            ApiParameter(
                name="nResults",
                type="number",
                required=False,
                description="Number of results per query",
                default=10,
                example=5,
            ),
            ApiParameter(
                name="where",
                type="object",
                required=False,
                description="Metadata filter",
                example={"category": "science"},
            ),
            ApiParameter(
                name="whereDocument",
                type="object",
                required=False,
                description="Document content filter",
                example={"$contains": "important"},
            ),
            ApiParameter(
                name="include",
                type="array",
                required=False,
                description="Fields to include",
                default=["documents", "metadatas", "distances"],
                example=["documents", "metadatas", "distances"],
            ),
        ),
        example={
            "queryTexts": ["What is the meaning of life?"],
            "nResults": 5,
            "include": ["documents", "metadatas", "distances"],
        },
    ),
    ApiMethod(
        id="update",
        name="update",
        description="Update existing records.",
        category="collection-operations",
        requires_collection=True,
        parameters=(
            ApiParameter(
                name="ids",
                type="array",
                required=True,
                description="Record ids to update",
                example=["id1"],
            ),
            ApiParameter(
                name="documents",
                type="array",
                required=False,
                description="New document texts",
                example=["Updated content"],
            ),
            ApiParameter(
                name="embeddings",
                type="array",
                required=False,
                description="New embedding vectors",
                example=[[1.1, 2.2, 3.3]],
            ),
            ApiParameter(
                name="metadatas",
                type="array",
                required=False,
                description="New metadata",
                example=[{"updated_at": "2024-01-01"}],
            ),
        ),
        example={
            "ids": ["id1"],
            "documents": ["Updated content"],
            "metadatas": [{"updated_at": "2024-01-01"}],
        },
    ),
    ApiMethod(
        id="delete",
        name="delete",
        description="Delete records by id or filter.",
        category="collection-operations",
        requires_collection=True,
        parameters=(
            ApiParameter(
                name="ids",
                type="array",
                required=False,
                description="Record ids to delete",
                example=["id1", "id2"],
            ),
            ApiParameter(
                name="where",
                type="object",
                required=False,
                description="Metadata filter of records to delete",
                example={"status": "deleted"},
            ),
            ApiParameter(
                name="whereDocument",
                type="object",
                required=False,
                description="Document content filter of records to delete",
                example={"$contains": "deprecated"},
            ),
        ),
        example={"ids": ["id1", "id2"]},
    ),
    ApiMethod(
        id="peek",
        name="peek",
        description="Show a sample of the collection's records.",
        category="collection-operations",
        requires_collection=True,
        parameters=(
            ApiParameter(
                name="limit",
                type="number",
                required=False,
                description="Number of records to show",
                default=10,
                example=5,
            ),
        ),
        example={"limit": 5},
    ),
    ApiMethod(
        id="count",
        name="count",
        description="Return the number of records in the collection.",
        category="collection-operations",
        requires_collection=True,
    ),
    ApiMethod(
        id="modify",
        name="modify",
        description="Rename the collection or replace its metadata.",
        category="collection-operations",
        requires_collection=True,
        parameters=(
            ApiParameter(
                name="name",
                type="string",
                required=False,
                description="New collection name",
                example="new_collection_name",
            ),
            ApiParameter(
                name="metadata",
                type="object",
                required=False,
                description="New metadata",
                example={"description": "Updated description"},
            ),
        ),
        example={"metadata": {"description": "Updated description"}},
    ),
)

ALL_METHODS: tuple[ApiMethod, ...] = (
    *CLIENT_METHODS,
    *COLLECTION_MANAGEMENT_METHODS,
    *COLLECTION_OPERATIONS_METHODS,
)

CATEGORIES: tuple[Category, ...] = ("client", "collection-management", "collection-operations")

_BY_ID: dict[str, ApiMethod] = {method.id: method for method in ALL_METHODS}


def get_method_by_id(method_id: str) -> ApiMethod | None:
    """Look up a method by id. Returns None when unknown."""
    return _BY_ID.get(method_id)


def get_methods_by_category(category: str) -> list[ApiMethod]:
    """Methods of a category in declaration order."""
    return [method for method in ALL_METHODS if method.category == category]
