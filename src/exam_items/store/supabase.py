"""Supabase record store implementation."""

import asyncio
import logging
import uuid
from typing import Any, Callable, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import create_client, Client, SupabaseException

from ..errors import RecordNotFoundError, StoreError
from .base import RecordStore

logger = logging.getLogger(__name__)


class SupabaseClientManager:
    """Manages Supabase client lifecycle."""

    def __init__(self, url: str, key: str):
        self.url = url
        self.key = key
        self._client: Optional[Client] = None

    def get_client(self) -> Client:
        """Get or create Supabase client."""
        if self._client is None:
            self._client = create_client(self.url, self.key)
        return self._client


class SupabaseRecordStore(RecordStore):
    """Supabase-backed store for one table."""

    def __init__(self, client_manager: SupabaseClientManager, table: str, record_kind: str):
        self.client_manager = client_manager
        self.table = table
        self.record_kind = record_kind

    async def _execute(self, operation: str, build: Callable[[Client], Any]) -> list[dict]:
        """Run a query off the event loop and wrap transport failures."""
        def run() -> list[dict]:
            query = build(self.client_manager.get_client())
            return query.execute().data or []

        try:
            return await asyncio.to_thread(run)
        except APIError as e:
            raise StoreError(e.message or str(e), operation, self.record_kind) from e
        except httpx.HTTPError as e:
            raise StoreError(str(e), operation, self.record_kind) from e
        except SupabaseException as e:
            raise StoreError(f"Cannot create client: {e}", operation, self.record_kind) from e

    async def list_records(self, filters: Optional[dict] = None) -> list[dict]:
        def build(client: Client):
            query = client.table(self.table).select("*")
            for field, value in (filters or {}).items():
                query = query.eq(field, value)
            return query

        return await self._execute("list", build)

    async def get(self, id: str) -> Optional[dict]:
        rows = await self._execute(
            "get",
            lambda client: client.table(self.table).select("*").eq("id", id).limit(1),
        )
        if rows:
            return rows[0]
        return None

    async def create(self, fields: dict) -> dict:
        record = {"id": str(uuid.uuid4()), **fields}
        rows = await self._execute(
            "create",
            lambda client: client.table(self.table).insert(record),
        )
        if not rows:
            raise StoreError("Insert returned no row", "create", self.record_kind)
        logger.debug("Created %s %s", self.record_kind, rows[0]["id"])
        return rows[0]

    async def update(self, id: str, fields: dict) -> dict:
        rows = await self._execute(
            "update",
            lambda client: client.table(self.table).update(fields).eq("id", id),
        )
        if not rows:
            raise RecordNotFoundError(self.record_kind, id, "update")
        return rows[0]

    async def delete(self, id: str) -> None:
        rows = await self._execute(
            "delete",
            lambda client: client.table(self.table).delete().eq("id", id),
        )
        if not rows:
            raise RecordNotFoundError(self.record_kind, id, "delete")
