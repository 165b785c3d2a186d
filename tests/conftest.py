"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Tests run against the real YAML configuration under config/settings/.
Semaphores are module-level asyncio objects bound to the loop that first
used them, so they are dropped after every test.
"""

from collections.abc import Generator

import pytest

from ainotes.core.concurrency import reset_semaphores


@pytest.fixture(autouse=True)
def _fresh_semaphores() -> Generator[None, None, None]:
    """Every test gets semaphores created on its own event loop."""
    reset_semaphores()
    yield
    reset_semaphores()


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"
