"""Domain models for Exam Items."""

import uuid
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from .errors import StoreError

PLACEHOLDER_PREFIX = "new-"

T = TypeVar("T")


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string")
    return value


def _responses(value: object) -> list["Response"]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(r, dict) for r in value):
        raise ValueError("'responses' must be a list of objects")
    responses = []
    for r in value:
        is_correct = r.get("isCorrect", False)
        if not isinstance(is_correct, bool):
            raise ValueError("'isCorrect' must be a boolean")
        responses.append(Response(
            id=_text(r, "id"),
            text=_text(r, "text"),
            rationale=_text(r, "rationale"),
            is_correct=is_correct,
        ))
    return responses


@dataclass
class Response:
    """One candidate answer belonging to an exam item."""
    id: str = ""
    text: str = ""
    rationale: str = ""
    is_correct: bool = False
    exam_item_id: Optional[str] = None  # None until persisted

    @classmethod
    def from_record(cls, data: dict) -> "Response":
        """Convert a store record to a Response."""
        return cls(
            id=data["id"],
            text=data.get("text") or "",
            rationale=data.get("rationale") or "",
            is_correct=bool(data.get("isCorrect", False)),
            exam_item_id=data.get("examItemId"),
        )

    def to_record(self, exam_item_id: str, position: Optional[int] = None) -> dict:
        """Fields for creating this response under the given item."""
        record = {
            "text": self.text,
            "rationale": self.rationale,
            "isCorrect": self.is_correct,
            "examItemId": exam_item_id,
        }
        if position is not None:
            record["position"] = position
        return record

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "rationale": self.rationale,
            "isCorrect": self.is_correct,
            "examItemId": self.exam_item_id,
        }


@dataclass
class ExamItem:
    """An exam question with its ordered candidate responses."""
    id: str
    question_id: str = ""
    stem: str = ""
    responses: list[Response] = field(default_factory=list)
    last_saved: Optional[str] = None

    @classmethod
    def blank(cls, response_count: int = 4) -> "ExamItem":
        """A new, unsaved item with blank responses for the editor."""
        return cls(
            id=f"{PLACEHOLDER_PREFIX}{uuid.uuid4()}",
            responses=[Response() for _ in range(response_count)],
        )

    @classmethod
    def from_record(cls, data: dict, responses: list[Response]) -> "ExamItem":
        """Convert a store record plus its response rows to an ExamItem."""
        return cls(
            id=data["id"],
            question_id=data.get("questionId") or "",
            stem=data.get("stem") or "",
            responses=responses,
            last_saved=data.get("lastSaved"),
        )

    @property
    def is_persisted(self) -> bool:
        return bool(self.id) and not self.id.startswith(PLACEHOLDER_PREFIX)

    def correct_answers(self) -> str:
        """1-based positions of the correct responses, e.g. "1, 3"."""
        return ", ".join(
            str(index) for index, response in enumerate(self.responses, start=1)
            if response.is_correct
        )

    def stem_preview(self, limit: int = 100) -> str:
        if len(self.stem) > limit:
            return f"{self.stem[:limit]}..."
        return self.stem

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "questionId": self.question_id,
            "stem": self.stem,
            "responses": [response.to_dict() for response in self.responses],
            "lastSaved": self.last_saved,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExamItem":
        """Build an item from caller input; ids may be missing.

        Raises ValueError when a field has the wrong type.
        """
        return cls(
            id=_text(data, "id"),
            question_id=_text(data, "questionId"),
            stem=_text(data, "stem"),
            responses=_responses(data.get("responses")),
            last_saved=_text(data, "lastSaved") or None,
        )


@dataclass
class ExamItemChanges:
    """Partial update for an exam item.

    Empty ``question_id``/``stem`` leave the stored value unchanged.
    ``responses=None`` keeps the existing responses; any list (including an
    empty one) replaces them wholesale.
    """
    question_id: Optional[str] = None
    stem: Optional[str] = None
    responses: Optional[list[Response]] = None

    @classmethod
    def from_item(cls, item: ExamItem) -> "ExamItemChanges":
        """Full replacement taken from an edited item."""
        return cls(
            question_id=item.question_id,
            stem=item.stem,
            responses=list(item.responses),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "ExamItemChanges":
        responses = None
        if data.get("responses") is not None:
            responses = _responses(data["responses"])
        return cls(
            question_id=_text(data, "questionId") or None,
            stem=_text(data, "stem") or None,
            responses=responses,
        )


@dataclass
class OperationResult(Generic[T]):
    """Outcome of a facade operation with the failures that occurred.

    ``value`` holds what the compatibility method would return. ``errors``
    lists every store failure, including dropped child records.
    """
    value: T
    errors: list[StoreError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def reason(self) -> Optional[str]:
        if not self.errors:
            return None
        return "; ".join(str(error) for error in self.errors)
