"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    LoggingSchema      → logging.yaml
    StorageSchema      → storage.yaml
    RemoteSchema       → remote.yaml
    AiSchema           → ai.yaml
    ConcurrencySchema  → concurrency.yaml
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool


# =============================================================================
# logging.yaml
# =============================================================================


class LogFileSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class LoggingSchema(_StrictBase):
    level: str
    format: str
    file: LogFileSchema


# =============================================================================
# storage.yaml
# =============================================================================


class StorageSchema(_StrictBase):
    cache_path: str


# =============================================================================
# remote.yaml
# =============================================================================


class CircuitBreakerSchema(_StrictBase):
    fail_max: int
    timeout_duration: int


class RemoteSchema(_StrictBase):
    mode: Literal["online", "offline"]
    url: str
    table: str
    timeout_seconds: float
    circuit_breaker: CircuitBreakerSchema


# =============================================================================
# ai.yaml
# =============================================================================


class AiSchema(_StrictBase):
    model: str
    temperature: float
    instructions: str


# =============================================================================
# concurrency.yaml
# =============================================================================


class SemaphoresSchema(_StrictBase):
    remote_store: int
    llm: int


class ConcurrencySchema(_StrictBase):
    semaphores: SemaphoresSchema
