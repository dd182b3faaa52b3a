"""Union of persisted and draft questions keyed on id."""
from __future__ import annotations

from typing import Iterable, List, Set

from ..domain.question import Question


def merge_questions(persisted: Iterable[Question], drafts: Iterable[Question]) -> List[Question]:
    """Persisted records first, in store order, then drafts whose id the store does not know.

    A persisted record always wins over a draft with the same id. Repeated
    ids inside one source keep their first occurrence.
    """
    merged: List[Question] = []
    seen: Set[str] = set()
    for source in (persisted, drafts):
        for question in source:
            if question.id in seen:
                continue
            seen.add(question.id)
            merged.append(question)
    return merged
