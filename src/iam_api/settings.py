"""IAM API settings (pydantic-settings, ``IAM_*`` environment variables)."""

from __future__ import annotations

import json
from collections.abc import Callable
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
ALLOWED_LOG_FORMATS = frozenset({"console", "json"})

# ---- Defaults ---------------------------------------------------------------

DEFAULT_DATABASE_URL = "sqlite:///data/iam.sqlite"
DEFAULT_COUCHDB_URL = "http://localhost:5984"
DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 500


def iam_settings_config(*, enable_decoding: bool = True) -> SettingsConfigDict:
    """Return the standard ``BaseSettings`` config dict."""

    return SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="IAM_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        enable_decoding=enable_decoding,
        str_strip_whitespace=True,
    )


def normalize_log_format(value: str, *, env_var: str = "IAM_LOG_FORMAT") -> str:
    normalized = value.strip().lower()
    if normalized not in ALLOWED_LOG_FORMATS:
        allowed = ", ".join(sorted(ALLOWED_LOG_FORMATS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


def normalize_log_level(value: str | None, *, env_var: str) -> str | None:
    if value is None:
        return None
    normalized = value.strip().upper()
    if normalized not in ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(ALLOWED_LOG_LEVELS))
        raise ValueError(f"{env_var} must be one of: {allowed}.")
    return normalized


# ---- Settings ---------------------------------------------------------------


class Settings(BaseSettings):
    """FastAPI settings loaded from IAM_* environment variables."""

    model_config = iam_settings_config(enable_decoding=False)

    # Core
    app_name: str = "IAM API"
    app_version: str = "0.1.0"
    api_docs_enabled: bool = True
    docs_url: str = "/api/swagger"
    openapi_url: str = "/api/openapi.json"
    log_format: str = "console"
    log_level: str = "INFO"
    request_log_level: str | None = None
    access_log_enabled: bool = True

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = Field(8000, ge=1, le=65535)
    api_processes: int = Field(1, ge=1)
    server_cors_origins: list[str] = Field(default_factory=list)

    # Listing
    default_page_size: int = Field(DEFAULT_PAGE_SIZE, ge=1)
    max_page_size: int = Field(MAX_PAGE_SIZE, ge=1)

    # Document store
    document_store: Literal["sql", "couchdb"] = "sql"
    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False
    database_log_level: str | None = None
    couchdb_url: str = DEFAULT_COUCHDB_URL
    couchdb_database: str = "iam"
    couchdb_username: str | None = None
    couchdb_password: SecretStr | None = None
    couchdb_timeout_seconds: float = Field(10.0, gt=0)

    # ---- Validators ----

    @field_validator("server_cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                return []
            if raw.startswith("["):
                try:
                    parsed = json.loads(raw)
                except json.JSONDecodeError as exc:
                    raise ValueError("IAM_SERVER_CORS_ORIGINS must be valid JSON.") from exc
                return parsed
            return [item.strip() for item in raw.split(",") if item.strip()]
        return value

    @field_validator("log_format", mode="before")
    @classmethod
    def _normalize_log_format(cls, value: object) -> object:
        if value is None:
            return "console"
        return normalize_log_format(str(value))

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if value is None:
            return "INFO"
        return normalize_log_level(str(value), env_var="IAM_LOG_LEVEL")

    @field_validator("request_log_level", "database_log_level", mode="before")
    @classmethod
    def _normalize_optional_levels(cls, value: object) -> object:
        if value is None:
            return None
        return normalize_log_level(str(value), env_var="IAM_*_LOG_LEVEL")

    @field_validator("couchdb_url", mode="after")
    @classmethod
    def _strip_couchdb_url(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def _validate_page_sizes(self) -> Settings:
        if self.default_page_size > self.max_page_size:
            raise ValueError("IAM_DEFAULT_PAGE_SIZE must not exceed IAM_MAX_PAGE_SIZE.")
        return self

    # ---- Derived ----

    @property
    def effective_request_log_level(self) -> str:
        return self.request_log_level or self.log_level

    @property
    def couchdb_auth(self) -> tuple[str, str] | None:
        if not self.couchdb_username:
            return None
        password = self.couchdb_password.get_secret_value() if self.couchdb_password else ""
        return self.couchdb_username, password


def create_settings_accessors[T](
    settings_type: type[T],
) -> tuple[Callable[[], T], Callable[[], T]]:
    """Create ``get_settings`` and ``reload_settings`` helpers for a settings class."""

    @lru_cache(maxsize=1)
    def _build() -> T:
        return settings_type()

    def get_settings() -> T:
        return _build()

    def reload_settings() -> T:
        _build.cache_clear()
        return _build()

    return get_settings, reload_settings


get_settings, reload_settings = create_settings_accessors(Settings)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "Settings",
    "get_settings",
    "reload_settings",
]
