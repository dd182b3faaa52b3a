"""SQLAlchemy-backed record store returning domain dataclasses."""
from __future__ import annotations

import json
from typing import Callable, List, Optional

from loguru import logger
from sqlalchemy import Select, String, cast, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.question import AnswerModel, AnswerVoteModel, NotificationModel, QuestionModel
from ...domain.question import VOTE_TYPES, Answer, Notification, Question, parse_timestamp, utcnow
from ...errors import NotFound, StoreUnavailable, ValidationFailed
from .base import FetchRange, ListResult, QuestionFilters, sort_columns, store_call

QUESTION_FIELDS = {"title", "content", "tags", "answer_count", "vote_score", "updated_at"}
ANSWER_FIELDS = {"content", "vote_score", "is_accepted", "updated_at"}


def _to_question(m: QuestionModel) -> Question:
    return Question(
        id=m.id,
        title=m.title,
        content=m.content,
        author_id=m.author_id,
        created_at=parse_timestamp(m.created_at),
        updated_at=parse_timestamp(m.updated_at),
        tags=tuple(m.tags or ()),
        answer_count=m.answer_count or 0,
        vote_score=m.vote_score or 0,
    )


def _to_answer(m: AnswerModel) -> Answer:
    return Answer(
        id=m.id,
        question_id=m.question_id,
        content=m.content,
        author_id=m.author_id,
        created_at=parse_timestamp(m.created_at),
        updated_at=parse_timestamp(m.updated_at),
        vote_score=m.vote_score or 0,
        is_accepted=bool(m.is_accepted),
    )


def _to_notification(m: NotificationModel) -> Notification:
    return Notification(
        id=m.id,
        recipient_id=m.recipient_id,
        message=m.message,
        type=m.type,
        link=m.link,
        created_at=parse_timestamp(m.created_at),
        is_read=bool(m.is_read),
    )


def _apply(m, fields: dict, allowed: set) -> None:
    for k, v in fields.items():
        if k in allowed:
            setattr(m, k, list(v) if k == "tags" else v)
    if "updated_at" not in fields:
        m.updated_at = utcnow()


def _count_votes(session: Session, answer_id: str, vote_type: str) -> int:
    stmt = (
        select(func.count())
        .select_from(AnswerVoteModel)
        .where(AnswerVoteModel.answer_id == answer_id, AnswerVoteModel.vote_type == vote_type)
    )
    return session.scalar(stmt) or 0


class SQLAlchemyRecordStore:
    """Opens one short-lived session per call so calls may run on worker threads."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self.session_factory = session_factory

    # --- questions ---
    def list_questions(self, filters: QuestionFilters, window: FetchRange) -> ListResult:
        try:
            records = self._select_questions(filters, window)
        except StoreUnavailable as exc:
            logger.warning("question listing failed: {}", exc)
            return ListResult.unavailable()
        return ListResult(records=tuple(records))

    @store_call(SQLAlchemyError)
    def _select_questions(self, filters: QuestionFilters, window: FetchRange) -> List[Question]:
        stmt: Select = select(QuestionModel)
        if filters.tag:
            # tags are stored as JSON text; the quoted slug only matches a whole element
            stmt = stmt.where(cast(QuestionModel.tags, String).contains(json.dumps(filters.tag), autoescape=True))
        if filters.sort_hint == "unanswered":
            stmt = stmt.where(QuestionModel.answer_count == 0)
        for column in sort_columns(filters.sort_hint):
            stmt = stmt.order_by(getattr(QuestionModel, column).desc())
        stmt = stmt.order_by(QuestionModel.id).offset(window.offset).limit(window.limit)
        with self.session_factory() as session:
            return [_to_question(m) for m in session.scalars(stmt).all()]

    @store_call(SQLAlchemyError)
    def get_question(self, question_id: str) -> Optional[Question]:
        with self.session_factory() as session:
            m = session.get(QuestionModel, question_id)
            return _to_question(m) if m else None

    @store_call(SQLAlchemyError)
    def create_question(self, question: Question) -> Question:
        m = QuestionModel(
            id=question.id,
            title=question.title,
            content=question.content,
            tags=list(question.tags),
            author_id=question.author_id,
            answer_count=question.answer_count,
            vote_score=question.vote_score,
            created_at=question.created_at,
            updated_at=question.updated_at,
        )
        with self.session_factory() as session:
            session.add(m)
            session.commit()
            session.refresh(m)
            return _to_question(m)

    @store_call(SQLAlchemyError)
    def update_question(self, question_id: str, **fields) -> Optional[Question]:
        with self.session_factory() as session:
            m = session.get(QuestionModel, question_id)
            if not m:
                return None
            _apply(m, fields, QUESTION_FIELDS)
            session.commit()
            session.refresh(m)
            return _to_question(m)

    @store_call(SQLAlchemyError)
    def delete_question(self, question_id: str) -> bool:
        with self.session_factory() as session:
            m = session.get(QuestionModel, question_id)
            if not m:
                return False
            answer_ids = select(AnswerModel.id).where(AnswerModel.question_id == question_id)
            session.execute(delete(AnswerVoteModel).where(AnswerVoteModel.answer_id.in_(answer_ids)))
            session.execute(delete(AnswerModel).where(AnswerModel.question_id == question_id))
            session.delete(m)
            session.commit()
            return True

    # --- answers ---
    @store_call(SQLAlchemyError)
    def list_answers(self, question_id: str) -> List[Answer]:
        stmt = select(AnswerModel).where(AnswerModel.question_id == question_id).order_by(AnswerModel.created_at)
        with self.session_factory() as session:
            return [_to_answer(m) for m in session.scalars(stmt).all()]

    @store_call(SQLAlchemyError)
    def get_answer(self, answer_id: str) -> Optional[Answer]:
        with self.session_factory() as session:
            m = session.get(AnswerModel, answer_id)
            return _to_answer(m) if m else None

    @store_call(SQLAlchemyError)
    def create_answer(self, answer: Answer) -> Answer:
        m = AnswerModel(
            id=answer.id,
            question_id=answer.question_id,
            content=answer.content,
            author_id=answer.author_id,
            vote_score=answer.vote_score,
            is_accepted=answer.is_accepted,
            created_at=answer.created_at,
            updated_at=answer.updated_at,
        )
        with self.session_factory() as session:
            session.add(m)
            session.commit()
            session.refresh(m)
            return _to_answer(m)

    @store_call(SQLAlchemyError)
    def update_answer(self, answer_id: str, **fields) -> Optional[Answer]:
        with self.session_factory() as session:
            m = session.get(AnswerModel, answer_id)
            if not m:
                return None
            _apply(m, fields, ANSWER_FIELDS)
            session.commit()
            session.refresh(m)
            return _to_answer(m)

    @store_call(SQLAlchemyError)
    def clear_accepted(self, question_id: str) -> None:
        with self.session_factory() as session:
            session.execute(
                update(AnswerModel)
                .where(AnswerModel.question_id == question_id, AnswerModel.is_accepted.is_(True))
                .values(is_accepted=False)
            )
            session.commit()

    @store_call(SQLAlchemyError)
    def cast_vote(self, answer_id: str, user_id: str, vote_type: str) -> int:
        if vote_type not in VOTE_TYPES:
            raise ValidationFailed(f"unknown vote type: {vote_type!r}")
        with self.session_factory() as session:
            answer = session.get(AnswerModel, answer_id)
            if not answer:
                raise NotFound(f"answer {answer_id} not found")
            existing = session.scalars(
                select(AnswerVoteModel).where(
                    AnswerVoteModel.answer_id == answer_id, AnswerVoteModel.user_id == user_id
                )
            ).first()
            if existing:
                existing.vote_type = vote_type
            else:
                session.add(AnswerVoteModel(answer_id=answer_id, user_id=user_id, vote_type=vote_type))
            session.flush()
            answer.vote_score = _count_votes(session, answer_id, "up") - _count_votes(session, answer_id, "down")
            session.commit()
            return answer.vote_score

    # --- notifications ---
    @store_call(SQLAlchemyError)
    def list_notifications(self, recipient_id: str, limit: int = 20) -> List[Notification]:
        stmt = (
            select(NotificationModel)
            .where(NotificationModel.recipient_id == recipient_id)
            .order_by(NotificationModel.created_at.desc())
            .limit(limit)
        )
        with self.session_factory() as session:
            return [_to_notification(m) for m in session.scalars(stmt).all()]

    @store_call(SQLAlchemyError)
    def create_notification(self, notification: Notification) -> Notification:
        m = NotificationModel(
            id=notification.id,
            recipient_id=notification.recipient_id,
            message=notification.message,
            type=notification.type,
            link=notification.link,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )
        with self.session_factory() as session:
            session.add(m)
            session.commit()
            session.refresh(m)
            return _to_notification(m)

    @store_call(SQLAlchemyError)
    def mark_notification_read(self, notification_id: str) -> bool:
        with self.session_factory() as session:
            m = session.get(NotificationModel, notification_id)
            if not m:
                return False
            m.is_read = True
            session.commit()
            return True

    @store_call(SQLAlchemyError)
    def mark_all_notifications_read(self, recipient_id: str) -> int:
        with self.session_factory() as session:
            result = session.execute(
                update(NotificationModel)
                .where(NotificationModel.recipient_id == recipient_id, NotificationModel.is_read.is_(False))
                .values(is_read=True)
            )
            session.commit()
            return result.rowcount or 0
