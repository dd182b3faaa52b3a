"""Answers blueprint: list, submit, vote and accept."""
from __future__ import annotations

from flask import Blueprint, request

from ...auth.jwt import current_user_id, require_bearer
from ...errors import ok
from ...integrations.forum import forum_ext
from ...services.answer_service import AnswerService
from ...services.notification_service import NotificationService
from .schemas import AnswerCreateIn, AnswerOut, VoteIn


bp = Blueprint("answers", __name__)


def _service() -> AnswerService:
    return AnswerService(forum_ext.store, NotificationService(forum_ext.store))


@bp.get("/questions/<question_id>/answers")
def list_answers(question_id: str):
    items = [AnswerOut.from_domain(a).model_dump(mode="json") for a in _service().list_answers(question_id)]
    return ok(items)


@bp.post("/questions/<question_id>/answers")
@require_bearer
def submit_answer(question_id: str):
    payload = AnswerCreateIn.model_validate_json(request.data)
    a = _service().submit_answer(question_id, author_id=current_user_id(), content=payload.content)
    return ok(AnswerOut.from_domain(a).model_dump(mode="json"), 201)


@bp.post("/answers/<answer_id>/vote")
@require_bearer
def vote(answer_id: str):
    payload = VoteIn.model_validate_json(request.data)
    score = _service().vote(answer_id, user_id=current_user_id(), vote_type=payload.vote_type)
    return ok({"answer_id": answer_id, "vote_score": score})


@bp.post("/answers/<answer_id>/accept")
@require_bearer
def accept(answer_id: str):
    a = _service().accept(answer_id, user_id=current_user_id())
    return ok(AnswerOut.from_domain(a).model_dump(mode="json"))


@bp.delete("/answers/<answer_id>/accept")
@require_bearer
def unaccept(answer_id: str):
    a = _service().unaccept(answer_id, user_id=current_user_id())
    return ok(AnswerOut.from_domain(a).model_dump(mode="json"))
