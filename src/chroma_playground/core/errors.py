"""Typed exceptions raised inside the client before results are normalized."""

from typing import Any


class PlaygroundError(Exception):
    """Base error with structured info for the operator.

    All errors include:
    - message: Human-readable error description
    - details: Dict with context (url, status, method, etc.)
    - suggestion: Actionable fix suggestion
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        suggestion: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestion = suggestion

    def to_dict(self) -> dict[str, Any]:
        """Serialize error for tool response."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "suggestion": self.suggestion,
        }


class ChromaConnectionError(PlaygroundError):
    """Chroma server not reachable."""

    pass


class HttpError(PlaygroundError):
    """Server answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status: int,
        details: dict[str, Any] | None = None,
        suggestion: str = "",
    ) -> None:
        super().__init__(message, details={"status": status, **(details or {})}, suggestion=suggestion)
        self.status = status


class NoCollectionSelectedError(PlaygroundError):
    """Collection-scoped operation attempted without a current collection."""

    pass


class InvalidParametersError(PlaygroundError):
    """Parameters are not valid JSON or do not match the method."""

    pass


class UnknownMethodError(PlaygroundError):
    """Method id is not in the catalog."""

    pass
