"""Notification feed service."""
from __future__ import annotations

import uuid
from typing import List, Tuple

from ..db.repositories.base import RecordStoreAdapter
from ..domain.question import NOTIFICATION_TYPES, Notification
from ..errors import NotFound, ValidationFailed

FEED_LIMIT = 20


class NotificationService:
    def __init__(self, store: RecordStoreAdapter) -> None:
        self.store = store

    def feed(self, recipient_id: str, limit: int = FEED_LIMIT) -> Tuple[List[Notification], int]:
        items = self.store.list_notifications(recipient_id, limit=limit)
        return items, sum(1 for n in items if not n.is_read)

    def notify(self, recipient_id: str, *, type: str, message: str, link: str) -> Notification:
        if type not in NOTIFICATION_TYPES:
            raise ValidationFailed(f"unknown notification type: {type!r}")
        return self.store.create_notification(
            Notification(id=str(uuid.uuid4()), recipient_id=recipient_id, message=message, type=type, link=link)
        )

    def mark_read(self, notification_id: str) -> bool:
        if not self.store.mark_notification_read(notification_id):
            raise NotFound(f"notification {notification_id} not found")
        return True

    def mark_all_read(self, recipient_id: str) -> int:
        return self.store.mark_all_notifications_read(recipient_id)
