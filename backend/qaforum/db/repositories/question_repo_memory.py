"""In-memory record store: the fallback variant used without a database."""
from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from ...domain.question import VOTE_TYPES, Answer, Notification, Question, Vote, epoch_ms, utcnow
from ...errors import NotFound, ValidationFailed
from .base import FetchRange, ListResult, QuestionFilters, sort_columns

QUESTION_FIELDS = {"title", "content", "tags", "answer_count", "vote_score", "updated_at"}
ANSWER_FIELDS = {"content", "vote_score", "is_accepted", "updated_at"}


class InMemoryRecordStore:
    def __init__(
        self,
        questions: Iterable[Question] = (),
        answers: Iterable[Answer] = (),
        notifications: Iterable[Notification] = (),
    ) -> None:
        self._questions: Dict[str, Question] = {q.id: q for q in questions}
        self._answers: Dict[str, Answer] = {a.id: a for a in answers}
        self._votes: Dict[Tuple[str, str], Vote] = {}
        self._notifications: Dict[str, Notification] = {n.id: n for n in notifications}

    # --- questions ---
    def list_questions(self, filters: QuestionFilters, window: FetchRange) -> ListResult:
        records = list(self._questions.values())
        if filters.tag:
            records = [q for q in records if filters.tag in q.tags]
        if filters.sort_hint == "unanswered":
            records = [q for q in records if q.answer_count == 0]
        for column in reversed(sort_columns(filters.sort_hint)):
            if column == "created_at":
                records.sort(key=lambda q: epoch_ms(q.created_at), reverse=True)
            else:
                records.sort(key=lambda q, c=column: getattr(q, c), reverse=True)
        return ListResult(records=tuple(records[window.offset : window.offset + window.limit]))

    def get_question(self, question_id: str) -> Optional[Question]:
        return self._questions.get(question_id)

    def create_question(self, question: Question) -> Question:
        self._questions[question.id] = question
        return question

    def update_question(self, question_id: str, **fields) -> Optional[Question]:
        current = self._questions.get(question_id)
        if current is None:
            return None
        body = {k: v for k, v in fields.items() if k in QUESTION_FIELDS}
        body.setdefault("updated_at", utcnow())
        updated = current.with_changes(**body)
        self._questions[question_id] = updated
        return updated

    def delete_question(self, question_id: str) -> bool:
        if self._questions.pop(question_id, None) is None:
            return False
        for answer_id in [a.id for a in self._answers.values() if a.question_id == question_id]:
            del self._answers[answer_id]
        return True

    # --- answers ---
    def list_answers(self, question_id: str) -> List[Answer]:
        return [a for a in self._answers.values() if a.question_id == question_id]

    def get_answer(self, answer_id: str) -> Optional[Answer]:
        return self._answers.get(answer_id)

    def create_answer(self, answer: Answer) -> Answer:
        self._answers[answer.id] = answer
        return answer

    def update_answer(self, answer_id: str, **fields) -> Optional[Answer]:
        current = self._answers.get(answer_id)
        if current is None:
            return None
        body = {k: v for k, v in fields.items() if k in ANSWER_FIELDS}
        body.setdefault("updated_at", utcnow())
        updated = current.with_changes(**body)
        self._answers[answer_id] = updated
        return updated

    def clear_accepted(self, question_id: str) -> None:
        for answer in self.list_answers(question_id):
            if answer.is_accepted:
                self._answers[answer.id] = answer.with_changes(is_accepted=False)

    def cast_vote(self, answer_id: str, user_id: str, vote_type: str) -> int:
        if vote_type not in VOTE_TYPES:
            raise ValidationFailed(f"unknown vote type: {vote_type!r}")
        if answer_id not in self._answers:
            raise NotFound(f"answer {answer_id} not found")
        self._votes[(answer_id, user_id)] = Vote(answer_id=answer_id, user_id=user_id, vote_type=vote_type)
        score = sum(v.weight for (aid, _), v in self._votes.items() if aid == answer_id)
        self.update_answer(answer_id, vote_score=score)
        return score

    # --- notifications ---
    def list_notifications(self, recipient_id: str, limit: int = 20) -> List[Notification]:
        mine = [n for n in self._notifications.values() if n.recipient_id == recipient_id]
        mine.sort(key=lambda n: epoch_ms(n.created_at), reverse=True)
        return mine[:limit]

    def create_notification(self, notification: Notification) -> Notification:
        self._notifications[notification.id] = notification
        return notification

    def mark_notification_read(self, notification_id: str) -> bool:
        current = self._notifications.get(notification_id)
        if current is None:
            return False
        self._notifications[notification_id] = _read(current)
        return True

    def mark_all_notifications_read(self, recipient_id: str) -> int:
        unread = [n for n in self._notifications.values() if n.recipient_id == recipient_id and not n.is_read]
        for n in unread:
            self._notifications[n.id] = _read(n)
        return len(unread)


def _read(notification: Notification) -> Notification:
    return replace(notification, is_read=True)
