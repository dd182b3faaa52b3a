"""Answer service: submit, vote, accept."""
from __future__ import annotations

import uuid
from typing import List

from loguru import logger

from ..db.repositories.base import RecordStoreAdapter
from ..domain.question import Answer, epoch_ms, utcnow
from ..errors import NotFound, PermissionDenied, ValidationFailed
from .notification_service import NotificationService


def display_order(answers: List[Answer]) -> List[Answer]:
    """Accepted answer first, then by votes, then oldest first."""
    return sorted(answers, key=lambda a: (not a.is_accepted, -a.vote_score, epoch_ms(a.created_at)))


class AnswerService:
    def __init__(self, store: RecordStoreAdapter, notifications: NotificationService) -> None:
        self.store = store
        self.notifications = notifications

    def list_answers(self, question_id: str) -> List[Answer]:
        return display_order(self.store.list_answers(question_id))

    def submit_answer(self, question_id: str, *, author_id: str, content: str) -> Answer:
        content = (content or "").strip()
        if not content:
            raise ValidationFailed("content is required")
        question = self.store.get_question(question_id)
        if question is None:
            raise NotFound(f"question {question_id} not found")

        now = utcnow()
        answer = self.store.create_answer(
            Answer(
                id=str(uuid.uuid4()),
                question_id=question_id,
                content=content,
                author_id=author_id,
                created_at=now,
                updated_at=now,
            )
        )
        self.store.update_question(question_id, answer_count=question.answer_count + 1)
        if question.author_id != author_id:
            self.notifications.notify(
                question.author_id,
                type="answer",
                message=f'New answer on your question "{question.title}"',
                link=f"/question/{question_id}",
            )
        return answer

    def vote(self, answer_id: str, *, user_id: str, vote_type: str) -> int:
        return self.store.cast_vote(answer_id, user_id, vote_type)

    def accept(self, answer_id: str, *, user_id: str) -> Answer:
        answer, question = self._answer_and_question(answer_id, user_id)
        self.store.clear_accepted(question.id)
        accepted = self.store.update_answer(answer_id, is_accepted=True) or answer.with_changes(is_accepted=True)
        logger.info("answer {} accepted on question {}", answer_id, question.id)
        if answer.author_id != user_id:
            self.notifications.notify(
                answer.author_id,
                type="accepted",
                message=f'Your answer to "{question.title}" was accepted',
                link=f"/question/{question.id}",
            )
        return accepted

    def unaccept(self, answer_id: str, *, user_id: str) -> Answer:
        answer, question = self._answer_and_question(answer_id, user_id)
        logger.info("answer {} unaccepted on question {}", answer_id, question.id)
        return self.store.update_answer(answer_id, is_accepted=False) or answer.with_changes(is_accepted=False)

    def _answer_and_question(self, answer_id: str, user_id: str):
        answer = self.store.get_answer(answer_id)
        if answer is None:
            raise NotFound(f"answer {answer_id} not found")
        question = self.store.get_question(answer.question_id)
        if question is None:
            raise NotFound(f"question {answer.question_id} not found")
        if question.author_id != user_id:
            raise PermissionDenied("only the question author may accept answers")
        return answer, question
