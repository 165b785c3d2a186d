"""
Base Service.

Base class for services providing common patterns: structured operation
logging, required-field validation, and running remote store calls as
tasks whose outcome is handed to an explicit reconcile step.

Usage:
    from ainotes.services.base import BaseService

    class NoteSyncService(BaseService):
        async def delete(self, note_id):
            ...local write...
            outcome = await self._run_remote(
                "delete_note", lambda: store.delete_note(note_id.value),
            )
            if not outcome.ok:
                ...keep local state...
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ainotes.core.concurrency import get_semaphore
from ainotes.core.exceptions import RemoteUnreachableError, ValidationError
from ainotes.core.logging import get_logger

T = TypeVar("T")


@dataclass
class RemoteOutcome(Generic[T]):
    """Result of one remote call: either a value or the unreachable error."""

    ok: bool
    value: T | None = None
    error: RemoteUnreachableError | None = None


class BaseService:
    """
    Base class for all services.

    Provides:
    - Logging context
    - Remote call execution with failure capture
    - Common validation patterns
    """

    def __init__(self) -> None:
        self._logger = get_logger(self.__class__.__module__)

    async def _run_remote(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
    ) -> RemoteOutcome[T]:
        """
        Run a remote store call as a task and capture its outcome.

        The call is bounded by the `remote_store` semaphore. An unreachable
        remote is returned as a failed outcome instead of being raised.

        Args:
            operation: Description of the operation for logging
            call: Zero-argument factory producing the remote coroutine

        Returns:
            RemoteOutcome with the call's value, or the captured error
        """

        async def guarded() -> T:
            async with get_semaphore("remote_store"):
                return await call()

        task = asyncio.create_task(guarded(), name=f"remote:{operation}")
        try:
            value = await task
        except RemoteUnreachableError as e:
            self._logger.warning(
                "Remote call failed",
                extra={"operation": operation, "error": e.message, "code": e.code},
            )
            return RemoteOutcome(ok=False, error=e)
        return RemoteOutcome(ok=True, value=value)

    def _validate_required(
        self,
        fields: dict[str, Any],
        field_names: list[str],
    ) -> None:
        """
        Validate that required fields are present and not empty.

        Args:
            fields: Dictionary of field names to values
            field_names: List of required field names

        Raises:
            ValidationError: If any required field is missing or empty
        """
        missing = []
        for name in field_names:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)

        if missing:
            raise ValidationError(
                "Required fields missing",
                details={"missing_fields": missing},
            )

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """
        Log a service operation with context.

        Args:
            operation: Description of the operation
            **context: Additional context to include in log
        """
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """Log debug information with service context."""
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
