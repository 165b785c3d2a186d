"""
Supabase Note Store.

RemoteNoteStore backed by a Supabase project's PostgREST endpoint
(`<url>/rest/v1/<table>`), called with httpx. Every call goes through a
circuit breaker; transport errors, error statuses, malformed payloads and an
open breaker all surface as RemoteUnreachableError.
"""

from typing import Any

import aiobreaker
import httpx
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import to_jsonable_python

from ainotes.core.exceptions import RemoteUnreachableError
from ainotes.core.logging import get_logger, log_with_source
from ainotes.core.resilience import create_circuit_breaker
from ainotes.repositories.remote import NoteFilter, RemoteNoteStore, SortOrder
from ainotes.schemas.note import Note, NoteCreate

logger = get_logger(__name__)


def _order_param(sort: list[SortOrder]) -> str:
    """PostgREST `order` value, e.g. "is_pinned.desc,updated_at.desc"."""
    return ",".join(
        f"{term.field}.{'asc' if term.ascending else 'desc'}" for term in sort
    )


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


class SupabaseNoteStore(RemoteNoteStore):
    """
    PostgREST client for the notes table.

    Usage:
        store = SupabaseNoteStore("https://xyz.supabase.co", api_key)
        notes = await store.query_notes("u1", NoteFilter(False), ACTIVE_ORDER)
        await store.close()
    """

    def __init__(
        self,
        url: str,
        api_key: str | None,
        table: str = "notes",
        timeout: float = 10.0,
        breaker: aiobreaker.CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            url: Supabase project URL
            api_key: Anon/public API key
            table: Notes table name
            timeout: Request timeout in seconds
            breaker: Circuit breaker to route calls through; one is created if None
            transport: httpx transport override (used by tests)
        """
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.timeout = timeout
        self._breaker = breaker or create_circuit_breaker("supabase")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def is_offline_mode(self) -> bool:
        return not self.url or not self.api_key

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=f"{self.url}/rest/v1",
                timeout=self.timeout,
                headers={
                    "apikey": self.api_key or "",
                    "Authorization": f"Bearer {self.api_key or ''}",
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _send(self, method: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        response = await client.request(method, f"/{self.table}", **kwargs)
        response.raise_for_status()
        return response

    async def _request(self, method: str, **kwargs: Any) -> httpx.Response:
        """
        Send one request through the circuit breaker.

        Raises:
            RemoteUnreachableError: On transport error, error status, or open breaker
        """
        log_with_source(logger, "remote", "debug", "Remote request", method=method)
        try:
            return await self._breaker.call_async(self._send, method, **kwargs)
        except aiobreaker.CircuitBreakerError as e:
            raise RemoteUnreachableError(f"Remote note store circuit open: {e}") from e
        except httpx.HTTPError as e:
            log_with_source(
                logger, "remote", "warning", "Remote request failed",
                method=method, error=str(e),
            )
            raise RemoteUnreachableError(f"Remote note store request failed: {e}") from e

    def _parse_rows(self, response: httpx.Response) -> list[Note]:
        try:
            payload = response.json()
            rows = payload if isinstance(payload, list) else [payload]
            return [Note.from_remote(row) for row in rows]
        except (ValueError, KeyError, TypeError, PydanticValidationError) as e:
            raise RemoteUnreachableError(f"Malformed response from remote note store: {e}") from e

    async def query_notes(
        self,
        user_id: str,
        note_filter: NoteFilter,
        sort: list[SortOrder],
    ) -> list[Note]:
        params = {
            "select": "*",
            "user_id": f"eq.{user_id}",
            "is_archived": f"eq.{_bool_param(note_filter.is_archived)}",
        }
        if sort:
            params["order"] = _order_param(sort)
        response = await self._request("GET", params=params)
        return self._parse_rows(response)

    async def insert_note(self, user_id: str, data: NoteCreate) -> Note:
        row = {
            "user_id": user_id,
            "title": data.title,
            "content": data.content,
            "is_pinned": data.is_pinned,
            "is_archived": False,
            "color": data.color,
        }
        response = await self._request(
            "POST",
            json=[row],
            headers={"Prefer": "return=representation"},
        )
        notes = self._parse_rows(response)
        if not notes:
            raise RemoteUnreachableError("Remote note store returned no row for insert")
        return notes[0]

    async def update_note(self, remote_id: str, fields: dict[str, Any]) -> None:
        await self._request(
            "PATCH",
            params={"id": f"eq.{remote_id}"},
            json=to_jsonable_python(fields),
        )

    async def delete_note(self, remote_id: str) -> None:
        await self._request("DELETE", params={"id": f"eq.{remote_id}"})
