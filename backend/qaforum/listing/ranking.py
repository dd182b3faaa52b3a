"""Ordering strategies for the question listing.

Every strategy relies on :func:`sorted` being stable, so records that compare
equal keep their relative input order and repeated runs give the same
sequence.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List

from ..domain.question import Question, epoch_ms
from .query import SortBy

# One vote is worth one hour of recency.
VOTE_WEIGHT_MS = 3_600_000


def trending_score(question: Question) -> int:
    return epoch_ms(question.created_at) + question.vote_score * VOTE_WEIGHT_MS


def _newest(questions: Iterable[Question]) -> List[Question]:
    return sorted(questions, key=lambda q: epoch_ms(q.created_at), reverse=True)


def _unanswered(questions: Iterable[Question]) -> List[Question]:
    return _newest(q for q in questions if q.answer_count == 0)


def _popular(questions: Iterable[Question]) -> List[Question]:
    return sorted(questions, key=lambda q: (q.vote_score, q.answer_count), reverse=True)


def _trending(questions: Iterable[Question]) -> List[Question]:
    return sorted(questions, key=trending_score, reverse=True)


_STRATEGIES: Dict[SortBy, Callable[[Iterable[Question]], List[Question]]] = {
    SortBy.NEWEST: _newest,
    SortBy.UNANSWERED: _unanswered,
    SortBy.POPULAR: _popular,
    SortBy.TRENDING: _trending,
}


def rank_questions(questions: Iterable[Question], sort_by: "SortBy | str") -> List[Question]:
    return _STRATEGIES[SortBy.parse(sort_by)](questions)
