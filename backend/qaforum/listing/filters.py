"""Tag and free-text filtering of listed questions."""
from __future__ import annotations

from typing import Iterable, List, Optional

from ..domain.question import Question


def matches_tag(question: Question, tag: str) -> bool:
    return tag in question.tags


def matches_search(question: Question, search_text: str) -> bool:
    needle = search_text.lower()
    if needle in question.title.lower() or needle in question.content.lower():
        return True
    return any(needle in tag.lower() for tag in question.tags)


def filter_questions(
    questions: Iterable[Question],
    tag: Optional[str] = None,
    search_text: Optional[str] = None,
) -> List[Question]:
    result = list(questions)
    if tag:
        result = [q for q in result if matches_tag(q, tag)]
    if search_text:
        result = [q for q in result if matches_search(q, search_text)]
    return result
