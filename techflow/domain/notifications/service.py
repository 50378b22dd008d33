"""Notification service - Reading and acknowledging notifications"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


class NotificationService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository()

    def list_notifications(
        self,
        limit: Optional[int] = None,
        employee_id: Optional[int] = None,
        include_read: bool = False,
    ) -> list[Notification]:
        """Newest first; unread only unless include_read is set"""
        limit = limit if limit and limit > 0 else DEFAULT_LIMIT
        return self.repo.list_notifications(
            self.db, min(limit, MAX_LIMIT), employee_id, include_read
        )

    def unread_count(self, employee_id: Optional[int] = None) -> int:
        return self.repo.count_unread(self.db, employee_id)

    def mark_read(self, notification_id: int) -> Notification:
        notification = self.repo.get_by_id(self.db, notification_id)
        if not notification:
            raise HTTPException(status_code=404, detail="Notification not found")

        if not notification.read:
            notification.read = True
            self.db.commit()
            self.db.refresh(notification)
        return notification

    def mark_all_read(self, employee_id: Optional[int] = None) -> int:
        updated = self.repo.mark_all_read(self.db, employee_id)
        logger.info(f"📭 Marked {updated} notification(s) as read")
        return updated
