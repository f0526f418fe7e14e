"""
Centralized settings for feedrecon.

Every constant the engine needs from its caller (feed queries, page and
chunk sizes, event ceilings, the completion marker) lives here, validated
once and overridable through ``FEEDRECON_*`` environment variables or a
``.env`` file. CLI options override individual fields per invocation.

Examples:
    >>> from feedrecon.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.chunk_size
    50

Tags:
    feedrecon, configuration, settings, pydantic
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from feedrecon.core.errors import InvalidConfigError
from feedrecon.framework.sources.protocol import DEFAULT_MAX_PAGE_SIZE

DEFAULT_INGEST_QUERY = 'subject:"hs consórcios enviou um documento para você assinar" -lembrete transferência'
DEFAULT_COMPLETION_QUERY = 'subject:"O documento Transferência de Cotas" subject:"foi assinado por todos."'


class ReconSettings(BaseSettings):
    """feedrecon configuration.

    All fields can be set via ``FEEDRECON_*`` environment variables (e.g.
    ``FEEDRECON_CHUNK_SIZE=25``).
    """

    model_config = SettingsConfigDict(
        env_prefix="FEEDRECON_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Feed queries ─────────────────────────────────────────────
    ingest_query: str = Field(default=DEFAULT_INGEST_QUERY)
    completion_query: str = Field(default=DEFAULT_COMPLETION_QUERY)

    # ── Paging ───────────────────────────────────────────────────
    page_size: int = Field(default=DEFAULT_MAX_PAGE_SIZE, ge=1, le=DEFAULT_MAX_PAGE_SIZE)
    chunk_size: int = Field(default=50, ge=1, le=DEFAULT_MAX_PAGE_SIZE)
    ingest_max_events: int = Field(default=2000, ge=1, description="Ceiling on events read by one ingestion")
    completion_max_events: int = Field(default=200, ge=1, description="Ceiling on events read by one marking run")

    # ── Ledger ───────────────────────────────────────────────────
    completion_marker: str = Field(default="ok", min_length=1)
    date_format: str = Field(default="%d/%m/%Y")
    header_rows: int = Field(default=1, ge=0)
    sheet: str | None = Field(default=None, description="Worksheet name for xlsx ledgers")
    owner_identity: str | None = Field(default=None, description="Identity checked against the ledger header")

    # ── HTTP feed ────────────────────────────────────────────────
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @field_validator("completion_marker")
    @classmethod
    def _strip_marker(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("completion_marker must not be blank")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


_settings_cache: dict[str, ReconSettings] = {}


def get_settings(*, _force_reload: bool = False) -> ReconSettings:
    """Load, validate and cache a :class:`ReconSettings` instance.

    Raises:
        InvalidConfigError: A ``FEEDRECON_*`` variable or ``.env`` entry
            failed validation.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    try:
        settings = ReconSettings()
    except ValidationError as e:
        problems = "; ".join(
            f"FEEDRECON_{'.'.join(str(p) for p in err['loc']).upper()}: {err['msg']}" for err in e.errors()
        )
        raise InvalidConfigError(f"Invalid settings: {problems}", cause=e) from e
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    _settings_cache.clear()


__all__ = [
    "DEFAULT_INGEST_QUERY",
    "DEFAULT_COMPLETION_QUERY",
    "ReconSettings",
    "get_settings",
    "clear_settings_cache",
]
