"""
Concurrency Infrastructure.

Named semaphores that bound concurrent calls to external services
(the remote note store, the refine model). Sizing is configured in
config/settings/concurrency.yaml.

Usage:
    from ainotes.core.concurrency import get_semaphore

    async with get_semaphore("remote_store"):
        rows = await store.query_notes(...)
"""

import asyncio

from ainotes.core.logging import get_logger

logger = get_logger(__name__)

_semaphores: dict[str, asyncio.Semaphore] = {}
_semaphore_capacities: dict[str, int] = {}


def get_semaphore(name: str) -> asyncio.Semaphore:
    """Get a named semaphore for concurrency-limiting external calls.

    Semaphores are created lazily. The capacity is read from concurrency.yaml
    under `semaphores.<name>`. If the name is not configured, defaults to 20.
    """
    if name not in _semaphores:
        from ainotes.core.config import get_app_config
        semaphore_config = get_app_config().concurrency.semaphores
        capacity = getattr(semaphore_config, name, 20)
        _semaphores[name] = asyncio.Semaphore(capacity)
        _semaphore_capacities[name] = capacity
        logger.debug("Semaphore created", extra={"name": name, "capacity": capacity})
    return _semaphores[name]


def get_semaphore_capacity(name: str) -> int | None:
    """Capacity a named semaphore was created with, or None if not created yet."""
    return _semaphore_capacities.get(name)


def reset_semaphores() -> None:
    """Drop all semaphores. Called when an event loop is torn down."""
    _semaphores.clear()
    _semaphore_capacities.clear()
    logger.debug("Semaphores cleared")
