"""Playground configuration and persisted connection settings."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from chroma_playground.core.client import DEFAULT_BASE_URL
from chroma_playground.models import DEFAULT_DATABASE, DEFAULT_TENANT

logger = logging.getLogger(__name__)


def default_settings_path() -> Path:
    """Where last-used tenant/database are remembered between sessions."""
    return Path.home() / ".chroma-playground" / "settings.json"


# =============================================================================
# Persisted Settings
# =============================================================================


@dataclass
class SavedSettings:
    """Last-used tenant and database, kept across sessions.

    Auth tokens are never written to disk.
    """

    path: Path
    tenant: str = DEFAULT_TENANT
    database: str = DEFAULT_DATABASE

    @classmethod
    def load(cls, path: Path) -> SavedSettings:
        """Read settings from path, falling back to defaults.

        Missing or unreadable files are not an error.
        """
        if not path.exists():
            return cls(path=path)

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", path, e)
            return cls(path=path)

        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: expected an object", path)
            return cls(path=path)

        return cls(
            path=path,
            tenant=str(data.get("tenant") or DEFAULT_TENANT),
            database=str(data.get("database") or DEFAULT_DATABASE),
        )

    def save(self, tenant: str, database: str) -> None:
        """Remember tenant and database. Write failures are logged."""
        self.tenant = tenant
        self.database = database
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump({"tenant": tenant, "database": database}, f, indent=2)
        except OSError as e:
            logger.warning("Could not save settings to %s: %s", self.path, e)


# =============================================================================
# Configuration Loading
# =============================================================================


@dataclass
class PlaygroundConfig:
    """Runtime configuration for the playground server.

    Attributes:
        base_url: Root URL of the Chroma server (``/api/v2`` is appended).
        tenant: Tenant to connect to when none is given or saved.
        database: Database to connect to when none is given or saved.
        auth_token: Bearer token attached to every request.
        settings_path: File for persisted tenant/database.
        request_timeout: Total seconds per request, or None for no timeout.
    """

    base_url: str = DEFAULT_BASE_URL
    tenant: str | None = None
    database: str | None = None
    auth_token: str | None = None
    settings_path: Path = field(default_factory=default_settings_path)
    request_timeout: float | None = None


def load_config() -> PlaygroundConfig:
    """Load configuration from environment variables.

    Environment variables:
        CHROMA_PLAYGROUND_URL: Chroma server URL (default http://localhost:8000)
        CHROMA_PLAYGROUND_TENANT: Tenant override
        CHROMA_PLAYGROUND_DATABASE: Database override
        CHROMA_PLAYGROUND_AUTH_TOKEN: Bearer token
        CHROMA_PLAYGROUND_SETTINGS: Path of the persisted settings file
        CHROMA_PLAYGROUND_TIMEOUT: Request timeout in seconds (unset or <= 0 = none)

    Returns:
        PlaygroundConfig instance.
    """
    base_url = os.environ.get("CHROMA_PLAYGROUND_URL", "").strip() or DEFAULT_BASE_URL

    settings_env = os.environ.get("CHROMA_PLAYGROUND_SETTINGS", "").strip()
    settings_path = Path(settings_env).expanduser() if settings_env else default_settings_path()

    timeout: float | None = None
    timeout_env = os.environ.get("CHROMA_PLAYGROUND_TIMEOUT", "").strip()
    if timeout_env:
        try:
            timeout = float(timeout_env)
        except ValueError:
            logger.warning("Ignoring invalid CHROMA_PLAYGROUND_TIMEOUT=%r", timeout_env)
        else:
            if timeout <= 0:
                timeout = None

    return PlaygroundConfig(
        base_url=base_url,
        tenant=os.environ.get("CHROMA_PLAYGROUND_TENANT") or None,
        database=os.environ.get("CHROMA_PLAYGROUND_DATABASE") or None,
        auth_token=os.environ.get("CHROMA_PLAYGROUND_AUTH_TOKEN") or None,
        settings_path=settings_path,
        request_timeout=timeout,
    )
