"""Settings for peering-spine.

``SpineBaseSettings`` carries what every spine service needs (host, port,
log level, debug mode); ``PeeringSettings`` adds the PeeringDB backend,
identifier scheme and bulk throttle knobs. Everything is read from
``PEERINGDB_*`` environment variables or a ``.env`` file.

Examples:
    >>> from peering_spine.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.base_url
    'https://www.peeringdb.com/api'

Tags:
    settings, configuration, pydantic, environment, peering-spine

Doc-Types:
    - Configuration Guide
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from peering_spine import __version__


class SpineBaseSettings(BaseSettings):
    """Common settings shared across spine services.

    Fields
    ──────
    host         : Bind address for the streamable HTTP MCP transport
    port         : Bind port for the streamable HTTP MCP transport
    debug        : Enable debug mode (verbose logging, etc.)
    log_level    : Structlog log level
    log_json     : Force JSON (True) or console (False) rendering; auto when unset
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Network ──────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8000

    # ── Observability ────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool | None = None


class PeeringSettings(SpineBaseSettings):
    """peering-spine configuration (``PEERINGDB_`` prefix)."""

    model_config = SettingsConfigDict(
        env_prefix="PEERINGDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    port: int = 8110

    # ── Backend ──────────────────────────────────────────────────
    api_key: SecretStr | None = Field(default=None, description="API key sent on write operations")
    base_url: str = Field(default="https://www.peeringdb.com/api")
    timeout_seconds: float = Field(default=30.0, gt=0)
    user_agent: str = Field(default=f"peering-spine/{__version__}")

    # ── Engine ───────────────────────────────────────────────────
    resource_scheme: str = Field(default="peeringdb", description="Scheme of resource identifiers")
    default_batch_size: int = Field(default=10, ge=1)
    batch_delay_seconds: float = Field(default=1.0, ge=0)
    registry_file: Path | None = Field(
        default=None,
        description="YAML file replacing the built-in object type registry",
    )

    @property
    def has_api_key(self) -> bool:
        return self.api_key is not None and bool(self.api_key.get_secret_value())


@lru_cache
def get_settings() -> PeeringSettings:
    """Return cached settings instance."""
    return PeeringSettings()
