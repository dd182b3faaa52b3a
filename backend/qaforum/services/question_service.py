"""Question service: ask, edit and delete with draft fallback."""
from __future__ import annotations

import uuid
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from ..db.repositories.base import FetchRange, QuestionFilters, RecordStoreAdapter
from ..domain.question import Question, slugify_tag, utcnow
from ..errors import NotFound, PermissionDenied, StoreUnavailable, ValidationFailed
from ..listing.drafts import DraftCache
from ..listing.engine import DEFAULT_FETCH_LIMIT
from ..listing.merge import merge_questions
from ..listing.query import SortBy
from ..listing.ranking import rank_questions


def normalize_tags(labels: Iterable[str]) -> Tuple[str, ...]:
    slugs = (slugify_tag(label) for label in labels if label and label.strip())
    return tuple(dict.fromkeys(slugs))


def _required(value: str, name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationFailed(f"{name} is required")
    return value


class QuestionService:
    def __init__(
        self,
        store: RecordStoreAdapter,
        drafts: DraftCache,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
    ) -> None:
        self.store = store
        self.drafts = drafts
        self.fetch_limit = fetch_limit

    def ask_question(self, *, author_id: str, title: str, content: str, tags: Iterable[str] = ()) -> Question:
        now = utcnow()
        question = Question(
            id=str(uuid.uuid4()),
            title=_required(title, "title"),
            content=_required(content, "content"),
            author_id=author_id,
            created_at=now,
            updated_at=now,
            tags=normalize_tags(tags),
        )
        try:
            created = self.store.create_question(question)
        except StoreUnavailable as exc:
            draft = question.with_changes(id=f"draft-{uuid.uuid4().hex}")
            self.drafts.add(draft)
            logger.info("store unavailable ({}); question kept as draft {}", exc, draft.id)
            return draft
        # mirrored so the session sees it before the next store snapshot
        self.drafts.add(created)
        logger.info("question {} created by {}", created.id, author_id)
        return created

    def get_question(self, question_id: str) -> Question:
        question, _ = self._locate(question_id)
        return question

    def edit_question(
        self,
        question_id: str,
        *,
        user_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Question:
        question, persisted = self._locate(question_id)
        self._ensure_author(question, user_id)
        fields = {}
        if title is not None:
            fields["title"] = _required(title, "title")
        if content is not None:
            fields["content"] = _required(content, "content")
        if tags is not None:
            fields["tags"] = normalize_tags(tags)
        if not fields:
            return question
        fields["updated_at"] = utcnow()

        updated = question.with_changes(**fields)
        if persisted:
            updated = self.store.update_question(question_id, **fields) or updated
        if question_id in self.drafts:
            self.drafts.update(question_id, **fields)
        return updated

    def delete_question(self, question_id: str, *, user_id: str) -> bool:
        question, persisted = self._locate(question_id)
        self._ensure_author(question, user_id)
        if persisted:
            self.store.delete_question(question_id)
        self.drafts.delete(question_id)
        logger.info("question {} deleted by {}", question_id, user_id)
        return True

    def my_questions(self, author_id: str) -> List[Question]:
        result = self.store.list_questions(
            QuestionFilters(sort_hint=SortBy.NEWEST.value),
            FetchRange(offset=0, limit=self.fetch_limit),
        )
        merged = merge_questions(result.records, self.drafts.snapshot())
        return rank_questions((q for q in merged if q.author_id == author_id), SortBy.NEWEST)

    def _locate(self, question_id: str) -> Tuple[Question, bool]:
        try:
            stored = self.store.get_question(question_id)
        except StoreUnavailable as exc:
            logger.warning("store lookup of {} failed: {}", question_id, exc)
            stored = None
        if stored is not None:
            return stored, True
        draft = self.drafts.get(question_id)
        if draft is None:
            raise NotFound(f"question {question_id} not found")
        return draft, False

    @staticmethod
    def _ensure_author(question: Question, user_id: str) -> None:
        if question.author_id != user_id:
            raise PermissionDenied("only the author may change this question")
