"""
Service Factory.

Builds the sync engine and refine service from configuration. The engine's
remote store and mode are decided here, once, and passed in explicitly.

Usage:
    from ainotes.services.factory import build_sync_service

    service = build_sync_service()
"""

from typing import Any

from ainotes.core.config import AppConfig, Settings, get_app_config, get_cache_path, get_settings
from ainotes.core.logging import get_logger
from ainotes.core.resilience import create_circuit_breaker
from ainotes.repositories.local import LocalNoteCache
from ainotes.repositories.remote import RemoteNoteStore
from ainotes.repositories.supabase import SupabaseNoteStore
from ainotes.services.refine import RefineService
from ainotes.services.sync import NoteSyncService, SyncConfig, SyncMode

logger = get_logger(__name__)


def build_remote_store(app_config: AppConfig, settings: Settings) -> RemoteNoteStore | None:
    """
    Create the Supabase store if remote.yaml and the secrets allow it.

    Returns:
        SupabaseNoteStore, or None when offline mode is configured or the
        URL or API key is missing
    """
    remote = app_config.remote
    if remote.mode == SyncMode.OFFLINE.value:
        return None
    if not remote.url or not settings.supabase_anon_key:
        logger.info(
            "Remote store not configured, running offline",
            extra={"has_url": bool(remote.url), "has_key": bool(settings.supabase_anon_key)},
        )
        return None

    breaker = create_circuit_breaker(
        "supabase",
        fail_max=remote.circuit_breaker.fail_max,
        timeout_duration=remote.circuit_breaker.timeout_duration,
    )
    return SupabaseNoteStore(
        remote.url,
        settings.supabase_anon_key,
        table=remote.table,
        timeout=remote.timeout_seconds,
        breaker=breaker,
    )


def build_sync_service(
    app_config: AppConfig | None = None,
    settings: Settings | None = None,
    cache: LocalNoteCache | None = None,
    remote_store: RemoteNoteStore | None = None,
) -> NoteSyncService:
    """
    Construct the sync engine.

    Args:
        app_config: YAML configuration. If None, loaded from config/settings/.
        settings: Secrets. If None, loaded from config/.env.
        cache: Local cache override. If None, uses storage.yaml's path.
        remote_store: Remote store override. If None, built from remote.yaml.

    Returns:
        NoteSyncService with an explicit SyncConfig
    """
    app_config = app_config or get_app_config()
    settings = settings or get_settings()
    cache = cache or LocalNoteCache(get_cache_path(app_config.storage))

    if remote_store is None:
        remote_store = build_remote_store(app_config, settings)

    mode = SyncMode(app_config.remote.mode)
    if remote_store is None:
        mode = SyncMode.OFFLINE

    logger.debug(
        "Sync service built",
        extra={"mode": mode.value, "cache_path": str(cache.path)},
    )
    return NoteSyncService(cache, SyncConfig(remote_store=remote_store, mode=mode))


def _build_model(model_name: str, api_key: str) -> Any:
    """Gemini model bound to an explicit API key."""
    from pydantic_ai.models.google import GoogleModel
    from pydantic_ai.providers.google import GoogleProvider

    return GoogleModel(model_name, provider=GoogleProvider(api_key=api_key))


def build_refine_service(
    app_config: AppConfig | None = None,
    settings: Settings | None = None,
) -> RefineService:
    """
    Construct the refine service.

    Without an AI API key the service is built anyway and reports
    ServiceUnavailableError when used.
    """
    app_config = app_config or get_app_config()
    settings = settings or get_settings()
    ai = app_config.ai

    model = _build_model(ai.model, settings.ai_api_key) if settings.ai_api_key else None
    return RefineService(model, instructions=ai.instructions, temperature=ai.temperature)
