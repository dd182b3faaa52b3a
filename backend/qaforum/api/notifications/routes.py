"""Notifications blueprint."""
from __future__ import annotations

from flask import Blueprint

from ...auth.jwt import current_user_id, require_bearer
from ...errors import ok
from ...integrations.forum import forum_ext
from ...services.notification_service import NotificationService
from .schemas import NotificationFeedOut, NotificationOut


bp = Blueprint("notifications", __name__)


def _service() -> NotificationService:
    return NotificationService(forum_ext.store)


@bp.get("/")
@require_bearer
def feed():
    items, unread = _service().feed(current_user_id())
    out = NotificationFeedOut(items=[NotificationOut.from_domain(n) for n in items], unread_count=unread)
    return ok(out.model_dump(mode="json"))


@bp.post("/<notification_id>/read")
@require_bearer
def mark_read(notification_id: str):
    return ok({"read": _service().mark_read(notification_id)})


@bp.post("/read-all")
@require_bearer
def mark_all_read():
    return ok({"updated": _service().mark_all_read(current_user_id())})
