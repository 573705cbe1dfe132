"""Core components: client, transport, listeners and errors."""

from chroma_playground.core.client import COMMANDS, ChromaClient
from chroma_playground.core.connection import ChromaConnection
from chroma_playground.core.errors import (
    ChromaConnectionError,
    HttpError,
    InvalidParametersError,
    NoCollectionSelectedError,
    PlaygroundError,
    UnknownMethodError,
)
from chroma_playground.core.events import ListenerRegistry

__all__ = [
    "COMMANDS",
    "ChromaClient",
    "ChromaConnection",
    "ChromaConnectionError",
    "HttpError",
    "InvalidParametersError",
    "ListenerRegistry",
    "NoCollectionSelectedError",
    "PlaygroundError",
    "UnknownMethodError",
]
