"""Pydantic models for the playground's methods, connection context and state."""

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")

Category = Literal["client", "collection-management", "collection-operations"]
ParameterType = Literal["string", "number", "boolean", "array", "object", "json"]

DEFAULT_TENANT = "default_tenant"
DEFAULT_DATABASE = "default_database"


class ApiParameter(BaseModel):
    """One documented parameter of an API method."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: ParameterType
    required: bool
    description: str
    default: Any | None = None
    example: Any | None = None


class ApiMethod(BaseModel):
    """A catalog entry describing one invocable API method."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: Category
    parameters: tuple[ApiParameter, ...] = ()
    example: dict[str, Any] = {}
    requires_collection: bool = False


class ConnectionConfig(BaseModel):
    """Tenant/database namespace and optional bearer token."""

    tenant: str = DEFAULT_TENANT
    database: str = DEFAULT_DATABASE
    auth_token: str | None = None


class Collection(BaseModel):
    """A server-side collection. Extra server fields are preserved."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    metadata: dict[str, Any] | None = None


class ApiResult(BaseModel, Generic[T]):
    """Uniform success/failure envelope with elapsed milliseconds."""

    success: bool
    data: T | None = None
    error: str | None = None
    duration: int


class AppState(BaseModel):
    """Immutable snapshot of operator-facing state."""

    model_config = ConfigDict(frozen=True)

    is_connected: bool = False
    current_method: ApiMethod | None = None
    current_collection_name: str | None = None
    collections: list[str] = []
    parameter_json: str = "{}"
    last_result: ApiResult[Any] | None = None
    is_executing: bool = False
