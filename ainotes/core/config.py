"""
Configuration Management.

Loads secrets from config/.env and settings from config/settings/*.yaml.
All configuration comes from these two sources.

Secrets (.env):
    SUPABASE_ANON_KEY, AI_API_KEY

Settings (YAML):
    application.yaml   - App identity
    logging.yaml       - Logging configuration
    storage.yaml       - Local note cache location
    remote.yaml        - Remote note store mode, endpoint, circuit breaker
    ai.yaml            - Refine model and prompt
    concurrency.yaml   - Semaphore sizes
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ainotes.core.config_schema import (
    AiSchema,
    ApplicationSchema,
    ConcurrencySchema,
    LoggingSchema,
    RemoteSchema,
    StorageSchema,
)


def find_project_root() -> Path:
    """Find project root by looking for .project_root marker file."""
    current = Path.cwd()
    while current != current.parent:
        if (current / ".project_root").exists():
            return current
        current = current.parent
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Validate that the project root can be found.

    Raises SystemExit with a clear message if .project_root is not found.
    Use this in entry scripts before any configuration loading.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file from config/settings/."""
    project_root = find_project_root()
    config_path = project_root / "config" / "settings" / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets loaded from config/.env. Both are optional: without them the app runs offline."""

    supabase_anon_key: str | None = None
    ai_api_key: str | None = None

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type, filename: str) -> Any:
    """Load YAML and validate against schema. Returns typed model instance."""
    raw = load_yaml_config(filename)
    try:
        return schema_cls(**raw)
    except ValidationError as e:
        raise ValueError(
            f"Invalid configuration in {filename}:\n{e}"
        ) from e


class AppConfig:
    """
    Application configuration loaded from YAML files.

    Each YAML file is validated against its Pydantic schema at load time.
    Properties return typed Pydantic model instances with attribute access.
    """

    def __init__(self) -> None:
        self._application = _load_validated(ApplicationSchema, "application.yaml")
        self._logging = _load_validated(LoggingSchema, "logging.yaml")
        self._storage = _load_validated(StorageSchema, "storage.yaml")
        self._remote = _load_validated(RemoteSchema, "remote.yaml")
        self._ai = _load_validated(AiSchema, "ai.yaml")
        self._concurrency = _load_validated(ConcurrencySchema, "concurrency.yaml")

    @property
    def application(self) -> ApplicationSchema:
        """Application settings."""
        return self._application

    @property
    def logging(self) -> LoggingSchema:
        """Logging settings."""
        return self._logging

    @property
    def storage(self) -> StorageSchema:
        """Local cache settings."""
        return self._storage

    @property
    def remote(self) -> RemoteSchema:
        """Remote note store settings."""
        return self._remote

    @property
    def ai(self) -> AiSchema:
        """Refine model settings."""
        return self._ai

    @property
    def concurrency(self) -> ConcurrencySchema:
        """Concurrency settings (semaphores)."""
        return self._concurrency


@lru_cache
def get_settings() -> Settings:
    """Get cached secrets instance. Resolves .env path from project root."""
    env_path = find_project_root() / "config" / ".env"
    return Settings(_env_file=str(env_path))


@lru_cache
def get_app_config() -> AppConfig:
    """Get cached application configuration."""
    return AppConfig()


def get_cache_path(storage: StorageSchema | None = None) -> Path:
    """
    Resolve the local note cache file from storage.yaml.

    Relative paths are resolved against the project root.

    Args:
        storage: Storage settings. If None, reads from config/settings/storage.yaml.

    Returns:
        Absolute path of the cache file.
    """
    storage = storage or get_app_config().storage
    configured = Path(storage.cache_path).expanduser()
    if configured.is_absolute():
        return configured
    return find_project_root() / configured
