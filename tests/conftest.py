import asyncio
import itertools
from datetime import datetime
from typing import Callable, Optional

import pytest

from exam_items.errors import RecordNotFoundError, StoreError
from exam_items.models import ExamItem, Response
from exam_items.repository import ExamItemRepository
from exam_items.store.base import RecordStore

FIXED_NOW = datetime(2026, 10, 19, 15, 4, 5)


class MemoryRecordStore(RecordStore):
    """In-memory record store with failure injection."""

    def __init__(self, record_kind: str):
        self.record_kind = record_kind
        self.records: dict[str, dict] = {}
        self.calls: list[tuple[str, object]] = []
        self._failures: dict[str, Callable[[object], bool]] = {}
        self._ids = itertools.count(1)

    def fail(self, operation: str, when: Callable[[object], bool] = lambda arg: True) -> None:
        self._failures[operation] = when

    async def _check(self, operation: str, arg: object) -> None:
        self.calls.append((operation, arg))
        # Yield so concurrent calls interleave like network round trips
        await asyncio.sleep(0)
        when = self._failures.get(operation)
        if when is not None and when(arg):
            raise StoreError("injected failure", operation, self.record_kind)

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)

    async def list_records(self, filters: Optional[dict] = None) -> list[dict]:
        await self._check("list", filters)
        filters = filters or {}
        return [
            dict(record) for record in self.records.values()
            if all(record.get(k) == v for k, v in filters.items())
        ]

    async def get(self, id: str) -> Optional[dict]:
        await self._check("get", id)
        record = self.records.get(id)
        return dict(record) if record else None

    async def create(self, fields: dict) -> dict:
        await self._check("create", fields)
        id = f"{self.record_kind.lower()}-{next(self._ids)}"
        self.records[id] = {**fields, "id": id}
        return dict(self.records[id])

    async def update(self, id: str, fields: dict) -> dict:
        await self._check("update", (id, fields))
        if id not in self.records:
            raise RecordNotFoundError(self.record_kind, id, "update")
        self.records[id].update(fields)
        return dict(self.records[id])

    async def delete(self, id: str) -> None:
        await self._check("delete", id)
        if id not in self.records:
            raise RecordNotFoundError(self.record_kind, id, "delete")
        del self.records[id]


@pytest.fixture
def item_store():
    return MemoryRecordStore("ExamItem")


@pytest.fixture
def response_store():
    return MemoryRecordStore("Response")


@pytest.fixture
def repository(item_store, response_store):
    return ExamItemRepository(item_store, response_store, clock=lambda: FIXED_NOW)


@pytest.fixture
def sample_item():
    return ExamItem(
        id="new-1",
        question_id="Q1",
        stem="2+2=?",
        responses=[
            Response(id="r-tmp-1", text="4", rationale="correct", is_correct=True),
            Response(id="r-tmp-2", text="5", rationale="wrong", is_correct=False),
        ],
    )
