"""Session-scoped cache of questions the client created before the store confirmed them."""
from __future__ import annotations

from typing import Iterable, Optional, Tuple

from ..domain.question import Question, utcnow
from ..errors import NotFound


class DraftCache:
    """Holds an immutable snapshot that every mutation replaces.

    Newest drafts come first. One cache belongs to one client session and is
    written only by that session.
    """

    def __init__(self, initial: Iterable[Question] = ()) -> None:
        self._items: Tuple[Question, ...] = tuple(initial)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, question_id: object) -> bool:
        return any(q.id == question_id for q in self._items)

    def snapshot(self) -> Tuple[Question, ...]:
        return self._items

    def get(self, question_id: str) -> Optional[Question]:
        for question in self._items:
            if question.id == question_id:
                return question
        return None

    def add(self, question: Question) -> Tuple[Question, ...]:
        rest = tuple(q for q in self._items if q.id != question.id)
        self._items = (question,) + rest
        return self._items

    def update(self, question_id: str, **fields) -> Tuple[Question, ...]:
        if question_id not in self:
            raise NotFound(f"draft {question_id} not found")
        fields.setdefault("updated_at", utcnow())
        self._items = tuple(
            q.with_changes(**fields) if q.id == question_id else q for q in self._items
        )
        return self._items

    def delete(self, question_id: str) -> Tuple[Question, ...]:
        self._items = tuple(q for q in self._items if q.id != question_id)
        return self._items
