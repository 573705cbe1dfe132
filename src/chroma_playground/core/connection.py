"""JSON-over-HTTP transport to a Chroma server."""

import json
import logging
from typing import Any

import aiohttp

from chroma_playground.core.errors import (
    ChromaConnectionError,
    HttpError,
    PlaygroundError,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v2"


def extract_error_message(status: int, text: str) -> str:
    """Pick a human-readable message out of an error response body.

    The body is first parsed as JSON and its ``detail`` or ``message`` field
    used. Otherwise the raw text wins, and an empty body falls back to
    ``"HTTP <status>"``.
    """
    try:
        payload = json.loads(text)
    except ValueError:
        return text or f"HTTP {status}"

    if isinstance(payload, dict):
        for key in ("detail", "message"):
            value = payload.get(key)
            if value:
                return value if isinstance(value, str) else json.dumps(value)
    return text


class ChromaConnection:
    """Sends requests to one Chroma server.

    Every request carries ``Content-Type: application/json`` and, when a token
    is set, ``Authorization: Bearer <token>``.
    """

    def __init__(
        self,
        base_url: str,
        session: aiohttp.ClientSession,
        auth_token: str | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.auth_token = auth_token

    def url(self, path: str) -> str:
        """Absolute URL for a path below the API prefix."""
        return f"{self.base_url}{API_PREFIX}{path}"

    def headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and decode its JSON body.

        Args:
            method: HTTP method.
            path: Path below ``/api/v2``, starting with a slash.
            params: Query string parameters.
            body: JSON body.

        Returns:
            Decoded JSON, or None for an empty body.

        Raises:
            ChromaConnectionError: The server could not be reached.
            HttpError: The server answered with a non-2xx status.
        """
        url = self.url(path)
        kwargs: dict[str, Any] = {"headers": self.headers()}
        if params:
            kwargs["params"] = params
        if body is not None:
            kwargs["json"] = body

        try:
            async with self.session.request(method, url, **kwargs) as resp:
                text = await resp.text()
                status = resp.status
                ok = resp.ok
        except (TimeoutError, aiohttp.ClientError) as e:
            raise ChromaConnectionError(
                str(e) or f"Cannot connect to Chroma at {self.base_url}",
                details={"url": url, "error": repr(e)},
                suggestion="Ensure the Chroma server is running and the URL is correct",
            ) from e

        if not ok:
            raise HttpError(
                extract_error_message(status, text),
                status=status,
                details={"method": method, "url": url},
            )

        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError as e:
            raise PlaygroundError(
                "Server returned a body that is not JSON",
                details={"method": method, "url": url, "body": text[:200]},
            ) from e
