"""List view state for browsing exam items."""

import math
from dataclasses import dataclass, field

from .models import ExamItem
from .repository import ExamItemRepository


@dataclass
class ItemListing:
    """Loaded items plus filter, pagination and selection state."""
    page_size: int = 20
    stem_preview_length: int = 100
    items: list[ExamItem] = field(default_factory=list)
    filter_text: str = ""
    page: int = 1
    selected: set[str] = field(default_factory=set)

    async def load(self, repository: ExamItemRepository) -> None:
        """Reload items and drop selections that no longer exist."""
        self.items = await repository.list_items()
        ids = {item.id for item in self.items}
        self.selected &= ids
        self.page = min(self.page, self.page_count)

    def set_filter(self, text: str) -> None:
        self.filter_text = text.strip()
        self.page = 1

    @property
    def filtered(self) -> list[ExamItem]:
        needle = self.filter_text.lower()
        if not needle:
            return list(self.items)
        return [
            item for item in self.items
            if needle in item.question_id.lower() or needle in item.stem.lower()
        ]

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(len(self.filtered) / self.page_size))

    def go_to(self, page: int) -> None:
        self.page = min(max(1, page), self.page_count)

    @property
    def visible(self) -> list[ExamItem]:
        start = (self.page - 1) * self.page_size
        return self.filtered[start:start + self.page_size]

    def toggle(self, id: str) -> None:
        if id in self.selected:
            self.selected.discard(id)
        else:
            self.selected.add(id)

    def select_page(self) -> None:
        self.selected.update(item.id for item in self.visible)

    def clear_selection(self) -> None:
        self.selected.clear()

    def summary_rows(self) -> list[dict]:
        """One row per visible item, as shown in the item table."""
        return [
            {
                "id": item.id,
                "questionId": item.question_id,
                "stem": item.stem_preview(self.stem_preview_length),
                "responseCount": len(item.responses),
                "correctAnswers": item.correct_answers(),
                "lastSaved": item.last_saved or "N/A",
            }
            for item in self.visible
        ]

    async def delete_selected(self, repository: ExamItemRepository) -> list[str]:
        """Delete each selected item and reload; returns the ids that failed."""
        failed = []
        for id in sorted(self.selected):
            if not await repository.delete_item(id):
                failed.append(id)
        self.selected = set(failed)
        await self.load(repository)
        return failed
