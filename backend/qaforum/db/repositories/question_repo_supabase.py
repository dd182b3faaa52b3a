"""Supabase-backed record store using supabase-py v2."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger
from postgrest.exceptions import APIError
from supabase import Client

from ...domain.question import VOTE_TYPES, Answer, Notification, Question, parse_timestamp, utcnow
from ...errors import NotFound, StoreUnavailable, ValidationFailed
from .base import FetchRange, ListResult, QuestionFilters, sort_columns, store_call

FAULTS = (APIError, httpx.HTTPError)

QUESTION_FIELDS = {"title", "content", "tags", "answer_count", "vote_score", "updated_at"}
ANSWER_FIELDS = {"content", "vote_score", "is_accepted", "updated_at"}


def _row_to_question(row: Dict[str, Any]) -> Question:
    return Question(
        id=str(row.get("id")),
        title=row.get("title", ""),
        content=row.get("content", ""),
        author_id=str(row.get("author_id", "")),
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row.get("updated_at") or row["created_at"]),
        tags=tuple(row.get("tags") or ()),
        answer_count=int(row.get("answer_count") or 0),
        vote_score=int(row.get("vote_score") or 0),
    )


def _row_to_answer(row: Dict[str, Any]) -> Answer:
    return Answer(
        id=str(row.get("id")),
        question_id=str(row.get("question_id")),
        content=row.get("content", ""),
        author_id=str(row.get("author_id", "")),
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row.get("updated_at") or row["created_at"]),
        vote_score=int(row.get("vote_score") or 0),
        is_accepted=bool(row.get("is_accepted")),
    )


def _row_to_notification(row: Dict[str, Any]) -> Notification:
    return Notification(
        id=str(row.get("id")),
        recipient_id=str(row.get("recipient_id")),
        message=row.get("message", ""),
        type=row.get("type", ""),
        link=row.get("link", ""),
        created_at=parse_timestamp(row["created_at"]),
        is_read=bool(row.get("is_read")),
    )


def _body(fields: Dict[str, Any], allowed: set) -> Dict[str, Any]:
    body = {k: v for k, v in fields.items() if k in allowed}
    if "tags" in body:
        body["tags"] = list(body["tags"])
    body["updated_at"] = (body.get("updated_at") or utcnow()).isoformat()
    return body


class SupabaseRecordStore:
    def __init__(self, client: Client) -> None:
        self.client = client
        self.questions = client.table("questions")
        self.answers = client.table("answers")
        self.votes = client.table("answer_votes")
        self.notifications = client.table("notifications")

    # --- questions ---
    def list_questions(self, filters: QuestionFilters, window: FetchRange) -> ListResult:
        try:
            records = self._select_questions(filters, window)
        except StoreUnavailable as exc:
            logger.warning("question listing failed: {}", exc)
            return ListResult.unavailable()
        return ListResult(records=tuple(records))

    @store_call(*FAULTS)
    def _select_questions(self, filters: QuestionFilters, window: FetchRange) -> List[Question]:
        q = self.questions.select("*")
        if filters.tag:
            q = q.contains("tags", [filters.tag])
        if filters.sort_hint == "unanswered":
            q = q.eq("answer_count", 0)
        for column in sort_columns(filters.sort_hint):
            q = q.order(column, desc=True)
        # unique tiebreak so consecutive ranges neither skip nor repeat rows
        q = q.order("id")
        res = q.range(window.offset, window.end).execute()
        return [_row_to_question(r) for r in res.data or []]

    @store_call(*FAULTS)
    def get_question(self, question_id: str) -> Optional[Question]:
        res = self.questions.select("*").eq("id", question_id).limit(1).execute()
        rows = res.data or []
        return _row_to_question(rows[0]) if rows else None

    @store_call(*FAULTS)
    def create_question(self, question: Question) -> Question:
        row = {
            "id": question.id,
            "title": question.title,
            "content": question.content,
            "tags": list(question.tags),
            "author_id": question.author_id,
            "answer_count": question.answer_count,
            "vote_score": question.vote_score,
            "created_at": question.created_at.isoformat(),
            "updated_at": question.updated_at.isoformat(),
        }
        res = self.questions.insert(row).execute()
        created = (res.data or [row])[0]
        return _row_to_question(created)

    @store_call(*FAULTS)
    def update_question(self, question_id: str, **fields) -> Optional[Question]:
        res = self.questions.update(_body(fields, QUESTION_FIELDS)).eq("id", question_id).execute()
        rows = res.data or []
        return _row_to_question(rows[0]) if rows else None

    @store_call(*FAULTS)
    def delete_question(self, question_id: str) -> bool:
        res = self.questions.delete().eq("id", question_id).execute()
        return bool(res.data)

    # --- answers ---
    @store_call(*FAULTS)
    def list_answers(self, question_id: str) -> List[Answer]:
        res = self.answers.select("*").eq("question_id", question_id).order("created_at").execute()
        return [_row_to_answer(r) for r in res.data or []]

    @store_call(*FAULTS)
    def get_answer(self, answer_id: str) -> Optional[Answer]:
        res = self.answers.select("*").eq("id", answer_id).limit(1).execute()
        rows = res.data or []
        return _row_to_answer(rows[0]) if rows else None

    @store_call(*FAULTS)
    def create_answer(self, answer: Answer) -> Answer:
        row = {
            "id": answer.id,
            "question_id": answer.question_id,
            "content": answer.content,
            "author_id": answer.author_id,
            "vote_score": answer.vote_score,
            "is_accepted": answer.is_accepted,
            "created_at": answer.created_at.isoformat(),
            "updated_at": answer.updated_at.isoformat(),
        }
        res = self.answers.insert(row).execute()
        return _row_to_answer((res.data or [row])[0])

    @store_call(*FAULTS)
    def update_answer(self, answer_id: str, **fields) -> Optional[Answer]:
        res = self.answers.update(_body(fields, ANSWER_FIELDS)).eq("id", answer_id).execute()
        rows = res.data or []
        return _row_to_answer(rows[0]) if rows else None

    @store_call(*FAULTS)
    def clear_accepted(self, question_id: str) -> None:
        self.answers.update({"is_accepted": False}).eq("question_id", question_id).eq("is_accepted", True).execute()

    @store_call(*FAULTS)
    def cast_vote(self, answer_id: str, user_id: str, vote_type: str) -> int:
        if vote_type not in VOTE_TYPES:
            raise ValidationFailed(f"unknown vote type: {vote_type!r}")
        if self.get_answer(answer_id) is None:
            raise NotFound(f"answer {answer_id} not found")
        self.votes.upsert(
            {"answer_id": answer_id, "user_id": user_id, "vote_type": vote_type},
            on_conflict="user_id,answer_id",
        ).execute()
        res = self.votes.select("vote_type").eq("answer_id", answer_id).execute()
        score = sum(1 if r.get("vote_type") == "up" else -1 for r in res.data or [])
        self.answers.update({"vote_score": score}).eq("id", answer_id).execute()
        return score

    # --- notifications ---
    @store_call(*FAULTS)
    def list_notifications(self, recipient_id: str, limit: int = 20) -> List[Notification]:
        res = (
            self.notifications.select("*")
            .eq("recipient_id", recipient_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_row_to_notification(r) for r in res.data or []]

    @store_call(*FAULTS)
    def create_notification(self, notification: Notification) -> Notification:
        row = {
            "id": notification.id,
            "recipient_id": notification.recipient_id,
            "message": notification.message,
            "type": notification.type,
            "link": notification.link,
            "is_read": notification.is_read,
            "created_at": notification.created_at.isoformat(),
        }
        res = self.notifications.insert(row).execute()
        return _row_to_notification((res.data or [row])[0])

    @store_call(*FAULTS)
    def mark_notification_read(self, notification_id: str) -> bool:
        res = self.notifications.update({"is_read": True}).eq("id", notification_id).execute()
        return bool(res.data)

    @store_call(*FAULTS)
    def mark_all_notifications_read(self, recipient_id: str) -> int:
        res = (
            self.notifications.update({"is_read": True})
            .eq("recipient_id", recipient_id)
            .eq("is_read", False)
            .execute()
        )
        return len(res.data or [])
