"""Local JSON file record store implementation."""

import asyncio
import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from ..errors import RecordNotFoundError, StoreError
from .base import RecordStore


class LocalRecordStore(RecordStore):
    """JSON file-based store for one record kind."""

    def __init__(self, data_path: str, file_name: str, record_kind: str):
        self.file_path = Path(data_path) / file_name
        self.record_kind = record_kind
        self._lock = asyncio.Lock()

    async def _read_all(self) -> list[dict]:
        """Read all records from file."""
        if not self.file_path.exists():
            return []
        try:
            async with aiofiles.open(self.file_path, "r") as f:
                content = await f.read()
            return json.loads(content) if content else []
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read {self.file_path}: {e}", "read", self.record_kind) from e

    async def _write_all(self, data: list[dict]) -> None:
        """Write all records to a temp file and replace the data file with it."""
        temp_path = self.file_path.with_name(f"{self.file_path.name}.tmp")
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(temp_path, "w") as f:
                await f.write(json.dumps(data, indent=2, default=str))
            await aiofiles.os.replace(temp_path, self.file_path)
        except OSError as e:
            raise StoreError(f"Cannot write {self.file_path}: {e}", "write", self.record_kind) from e

    async def list_records(self, filters: Optional[dict] = None) -> list[dict]:
        data = await self._read_all()
        filters = filters or {}
        return [
            item for item in data
            if all(item.get(field) == value for field, value in filters.items())
        ]

    async def get(self, id: str) -> Optional[dict]:
        data = await self._read_all()
        for item in data:
            if item["id"] == id:
                return item
        return None

    async def create(self, fields: dict) -> dict:
        # Serialize read-modify-write so concurrent creates are not lost
        async with self._lock:
            data = await self._read_all()
            record = {
                **fields,
                "id": str(uuid.uuid4()),
                "createdAt": datetime.now(timezone.utc).isoformat(),
            }
            data.append(record)
            await self._write_all(data)
        return record

    async def update(self, id: str, fields: dict) -> dict:
        async with self._lock:
            data = await self._read_all()
            for item in data:
                if item["id"] == id:
                    item.update({k: v for k, v in fields.items() if k != "id"})
                    await self._write_all(data)
                    return item
        raise RecordNotFoundError(self.record_kind, id, "update")

    async def delete(self, id: str) -> None:
        async with self._lock:
            data = await self._read_all()
            remaining = [item for item in data if item["id"] != id]
            if len(remaining) == len(data):
                raise RecordNotFoundError(self.record_kind, id, "delete")
            await self._write_all(remaining)
