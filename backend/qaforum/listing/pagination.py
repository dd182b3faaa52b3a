"""Fixed-size page slicing over a ranked listing."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from ..domain.question import Question
from ..errors import InvalidQueryParameter

PAGE_SIZE = 10


@dataclass(frozen=True, slots=True)
class Page:
    items: Tuple[Question, ...]
    number: int
    has_more: bool
    total: int


def paginate(ranked: Sequence[Question], page: int, page_size: int = PAGE_SIZE) -> Page:
    if page < 1:
        raise InvalidQueryParameter(f"page must be >= 1, got {page}")
    if page_size < 1:
        raise InvalidQueryParameter(f"page size must be >= 1, got {page_size}")
    total = len(ranked)
    start = (page - 1) * page_size
    end = page * page_size
    return Page(
        items=tuple(ranked[start:end]),
        number=page,
        has_more=end < total,
        total=total,
    )
