"""Pydantic response schemas for the notification feed."""
from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel

from ...domain.question import Notification


class NotificationOut(BaseModel):
    id: str
    recipient_id: str
    message: str
    type: str
    link: str
    is_read: bool
    created_at: datetime

    @classmethod
    def from_domain(cls, n: Notification) -> "NotificationOut":
        return cls(
            id=n.id,
            recipient_id=n.recipient_id,
            message=n.message,
            type=n.type,
            link=n.link,
            is_read=n.is_read,
            created_at=n.created_at,
        )


class NotificationFeedOut(BaseModel):
    items: List[NotificationOut]
    unread_count: int
