"""Exam item repository.

The only module that talks to the record stores. Every item it returns is
hydrated with the full set of response records whose ``examItemId`` matches
the item's id at the time of the call.

Items and responses live in two independent stores with no cross-record
transaction, so writes run parent-then-children:

- read: fetch the item record(s), then list responses by ``examItemId``
- create: create the item, then create every response under the new id
- update: update scalar fields; when responses are supplied, delete every
  existing response and create the new ones (response ids change)
- delete: delete every response, then the item

There is no locking. Concurrent callers on the same item may interleave.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from .errors import RecordNotFoundError, StoreError
from .models import ExamItem, ExamItemChanges, OperationResult, Response
from .store.base import RecordStore

logger = logging.getLogger(__name__)

FOREIGN_KEY = "examItemId"


def format_timestamp(moment: datetime) -> str:
    """Format a timestamp like ``10/19/2026, 3:04:05 PM``."""
    hour = moment.hour % 12 or 12
    return f"{moment.month}/{moment.day}/{moment.year}, {hour}:{moment:%M:%S} {moment:%p}"


def _position(record: dict) -> tuple[bool, int]:
    position = record.get("position")
    return (position is None, position or 0)


class ExamItemRepository:
    """Facade over the exam item and response stores."""

    def __init__(
        self,
        item_store: RecordStore,
        response_store: RecordStore,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.item_store = item_store
        self.response_store = response_store
        self.clock = clock

    def _timestamp(self) -> str:
        return format_timestamp(self.clock())

    async def _fetch_responses(self, item_id: str) -> list[Response]:
        rows = await self.response_store.list_records({FOREIGN_KEY: item_id})
        return [Response.from_record(row) for row in sorted(rows, key=_position)]

    async def _hydrate(self, record: dict) -> ExamItem:
        responses = await self._fetch_responses(record["id"])
        return ExamItem.from_record(record, responses)

    async def _create_responses(
        self,
        item_id: str,
        responses: list[Response],
        errors: list[StoreError],
    ) -> list[Response]:
        """Create all responses concurrently; failed ones are dropped."""
        results = await asyncio.gather(
            *(
                self.response_store.create(response.to_record(item_id, position))
                for position, response in enumerate(responses)
            ),
            return_exceptions=True,
        )

        created = []
        for result in results:
            if isinstance(result, StoreError):
                logger.warning("Dropped response for exam item %s: %s", item_id, result)
                errors.append(result)
            elif isinstance(result, BaseException):
                raise result
            else:
                created.append(Response.from_record(result))
        return created

    async def _delete_response(self, id: str) -> None:
        try:
            await self.response_store.delete(id)
        except RecordNotFoundError:
            logger.debug("Response %s already deleted", id)

    async def _delete_responses(self, item_id: str) -> None:
        rows = await self.response_store.list_records({FOREIGN_KEY: item_id})
        await asyncio.gather(*(self._delete_response(row["id"]) for row in rows))

    async def list_result(self) -> OperationResult[list[ExamItem]]:
        """Get all exam items with their responses."""
        try:
            records = await self.item_store.list_records()
            items = await asyncio.gather(*(self._hydrate(record) for record in records))
        except StoreError as e:
            logger.error("Error fetching exam items: %s", e)
            return OperationResult([], [e])
        return OperationResult(list(items))

    async def get_result(self, id: str) -> OperationResult[Optional[ExamItem]]:
        """Get a single exam item; ``value`` is None when it does not exist."""
        try:
            record = await self.item_store.get(id)
            if record is None:
                return OperationResult(None)
            item = await self._hydrate(record)
        except StoreError as e:
            logger.error("Error fetching exam item with ID %s: %s", id, e)
            return OperationResult(None, [e])
        return OperationResult(item)

    async def create_result(self, item: ExamItem) -> OperationResult[Optional[ExamItem]]:
        """Create an exam item and its responses.

        Ids on the input are ignored. If the item itself cannot be created no
        response is attempted. Responses that fail are left out of the
        returned item and reported in ``errors``; nothing is rolled back.
        """
        errors: list[StoreError] = []
        try:
            record = await self.item_store.create({
                "questionId": item.question_id,
                "stem": item.stem,
                "lastSaved": self._timestamp(),
            })
        except StoreError as e:
            logger.error("Error creating exam item: %s", e)
            return OperationResult(None, [e])

        responses = await self._create_responses(record["id"], item.responses, errors)
        logger.info(
            "Created exam item %s with %d/%d responses",
            record["id"], len(responses), len(item.responses),
        )
        return OperationResult(ExamItem.from_record(record, responses), errors)

    async def update_result(
        self, id: str, changes: ExamItemChanges
    ) -> OperationResult[Optional[ExamItem]]:
        """Update an exam item.

        Empty or missing ``question_id``/``stem`` are left unchanged and
        ``lastSaved`` is always overwritten. When ``changes.responses`` is
        given, the existing responses are deleted and the new ones created.
        """
        fields = {}
        if changes.question_id:
            fields["questionId"] = changes.question_id
        if changes.stem:
            fields["stem"] = changes.stem
        fields["lastSaved"] = self._timestamp()

        errors: list[StoreError] = []
        try:
            record = await self.item_store.update(id, fields)

            if changes.responses is None:
                return OperationResult(await self._hydrate(record))

            await self._delete_responses(id)
        except StoreError as e:
            logger.error("Error updating exam item with ID %s: %s", id, e)
            return OperationResult(None, [e])

        responses = await self._create_responses(id, changes.responses, errors)
        logger.info("Replaced responses on exam item %s (%d)", id, len(responses))
        return OperationResult(ExamItem.from_record(record, responses), errors)

    async def delete_result(self, id: str) -> OperationResult[bool]:
        """Delete an exam item and all of its responses."""
        try:
            await self._delete_responses(id)
            await self.item_store.delete(id)
        except StoreError as e:
            logger.error("Error deleting exam item with ID %s: %s", id, e)
            return OperationResult(False, [e])
        logger.info("Deleted exam item %s", id)
        return OperationResult(True)

    async def save_result(self, item: ExamItem) -> OperationResult[Optional[ExamItem]]:
        """Create an unsaved item, or fully replace a persisted one."""
        if item.is_persisted:
            return await self.update_result(item.id, ExamItemChanges.from_item(item))
        return await self.create_result(item)

    async def list_items(self) -> list[ExamItem]:
        return (await self.list_result()).value

    async def get_item(self, id: str) -> Optional[ExamItem]:
        return (await self.get_result(id)).value

    async def create_item(self, item: ExamItem) -> Optional[ExamItem]:
        return (await self.create_result(item)).value

    async def update_item(self, id: str, changes: ExamItemChanges) -> Optional[ExamItem]:
        return (await self.update_result(id, changes)).value

    async def delete_item(self, id: str) -> bool:
        return (await self.delete_result(id)).value

    async def save_item(self, item: ExamItem) -> Optional[ExamItem]:
        return (await self.save_result(item)).value
