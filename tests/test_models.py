import pytest

from exam_items.errors import StoreError
from exam_items.models import ExamItem, ExamItemChanges, OperationResult, Response


def test_blank_item_has_four_blank_responses():
    item = ExamItem.blank()

    assert not item.is_persisted
    assert len(item.responses) == 4
    assert all(r.text == "" and not r.is_correct for r in item.responses)


def test_is_persisted():
    assert ExamItem(id="abc").is_persisted
    assert not ExamItem(id="").is_persisted


def test_correct_answers_uses_one_based_positions():
    item = ExamItem(id="i", responses=[
        Response(is_correct=True), Response(), Response(is_correct=True),
    ])

    assert item.correct_answers() == "1, 3"
    assert ExamItem(id="i").correct_answers() == ""


def test_stem_preview_truncates():
    item = ExamItem(id="i", stem="x" * 120)

    assert item.stem_preview() == "x" * 100 + "..."
    assert item.stem_preview(200) == item.stem


def test_response_record_conversion():
    record = Response(text="4", rationale="r", is_correct=True).to_record("item-1", 2)

    assert record == {
        "text": "4", "rationale": "r", "isCorrect": True, "examItemId": "item-1", "position": 2,
    }

    response = Response.from_record({**record, "id": "resp-1"})
    assert response == Response(id="resp-1", text="4", rationale="r", is_correct=True, exam_item_id="item-1")


def test_item_from_record_tolerates_null_fields():
    item = ExamItem.from_record({"id": "i", "questionId": None, "stem": None}, [])

    assert item.question_id == ""
    assert item.stem == ""
    assert item.last_saved is None


def test_item_dict_round_trip():
    item = ExamItem(
        id="i", question_id="Q", stem="S", last_saved="now",
        responses=[Response(id="r", text="a", exam_item_id="i")],
    )

    assert ExamItem.from_dict(item.to_dict()).to_dict()["responses"][0]["text"] == "a"
    assert item.to_dict()["responses"][0]["examItemId"] == "i"


def test_changes_from_dict_distinguishes_missing_and_empty_responses():
    assert ExamItemChanges.from_dict({"stem": "s"}).responses is None
    assert ExamItemChanges.from_dict({"responses": []}).responses == []


def test_changes_from_item_replaces_everything():
    item = ExamItem(id="i", question_id="Q", stem="S", responses=[Response(text="a")])

    changes = ExamItemChanges.from_item(item)

    assert changes == ExamItemChanges(question_id="Q", stem="S", responses=[Response(text="a")])
    assert changes.responses is not item.responses


def test_operation_result_reason():
    assert OperationResult(None).reason is None

    result = OperationResult(None, [StoreError("boom", "create", "Response"), StoreError("down")])

    assert not result.ok
    assert result.reason == "Response.create: boom; down"


@pytest.mark.parametrize("data", [
    {"stem": 5},
    {"questionId": ["Q"]},
    {"responses": "x"},
    {"responses": ["x"]},
    {"responses": [{"isCorrect": 1}]},
])
def test_item_from_dict_rejects_wrong_types(data):
    with pytest.raises(ValueError):
        ExamItem.from_dict(data)


def test_changes_from_dict_treats_empty_strings_as_unchanged():
    changes = ExamItemChanges.from_dict({"questionId": "", "stem": None})

    assert changes.question_id is None
    assert changes.stem is None
