import asyncio

import pytest

from exam_items.errors import RecordNotFoundError, StoreError
from exam_items.models import ExamItem, ExamItemChanges, Response
from exam_items.repository import ExamItemRepository
from exam_items.store.local import LocalRecordStore


@pytest.fixture
def store(tmp_path):
    return LocalRecordStore(str(tmp_path), "responses.json", "Response")


async def test_empty_store_lists_nothing(store):
    assert await store.list_records() == []
    assert await store.get("missing") is None


async def test_create_assigns_id(store):
    record = await store.create({"text": "a", "examItemId": "i1"})

    assert record["id"]
    assert record["createdAt"]
    assert await store.get(record["id"]) == record


async def test_list_filters_by_equality(store):
    await store.create({"text": "a", "examItemId": "i1"})
    await store.create({"text": "b", "examItemId": "i2"})

    rows = await store.list_records({"examItemId": "i1"})

    assert [row["text"] for row in rows] == ["a"]


async def test_update_and_delete(store):
    record = await store.create({"text": "a"})

    updated = await store.update(record["id"], {"text": "b", "id": "ignored"})
    assert updated["text"] == "b"
    assert updated["id"] == record["id"]

    await store.delete(record["id"])
    assert await store.get(record["id"]) is None


async def test_missing_records_raise_not_found(store):
    with pytest.raises(RecordNotFoundError):
        await store.update("missing", {"text": "x"})
    with pytest.raises(RecordNotFoundError):
        await store.delete("missing")


async def test_concurrent_creates_are_not_lost(store):
    await asyncio.gather(*(store.create({"text": str(i)}) for i in range(10)))

    assert len(await store.list_records()) == 10


async def test_corrupt_file_raises_store_error(store):
    store.file_path.write_text("{not json")

    with pytest.raises(StoreError):
        await store.list_records()


async def test_repository_over_local_files(tmp_path):
    repository = ExamItemRepository(
        LocalRecordStore(str(tmp_path), "exam_items.json", "ExamItem"),
        LocalRecordStore(str(tmp_path), "responses.json", "Response"),
    )
    item = ExamItem.blank()
    item.question_id = "Q1"
    item.responses[1].is_correct = True

    created = await repository.create_item(item)
    assert (await repository.get_item(created.id)).correct_answers() == "2"

    updated = await repository.update_item(created.id, ExamItemChanges(responses=[Response(text="only")]))
    assert [r.text for r in updated.responses] == ["only"]

    assert await repository.delete_item(created.id)
    assert await repository.list_items() == []
    assert (tmp_path / "responses.json").read_text().strip() == "[]"


async def test_reads_during_writes_see_every_record(store):
    for i in range(200):
        await store.create({"text": str(i)})

    for i in range(50):
        _, rows = await asyncio.gather(store.create({"text": f"extra {i}"}), store.list_records())
        assert len(rows) >= 200 + i
    assert not store.file_path.with_name("responses.json.tmp").exists()
