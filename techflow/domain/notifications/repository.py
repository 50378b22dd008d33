"""Notification repository - Database operations for notifications"""

from typing import Optional

from sqlalchemy.orm import Query, Session

from ...models import Notification


class NotificationRepository:
    """Repository for notification database operations"""

    @staticmethod
    def _scoped(db: Session, employee_id: Optional[int]) -> Query:
        query = db.query(Notification)
        if employee_id is not None:
            query = query.filter(Notification.employee_id == employee_id)
        return query

    @staticmethod
    def list_notifications(
        db: Session, limit: int, employee_id: Optional[int] = None, include_read: bool = False
    ) -> list[Notification]:
        query = NotificationRepository._scoped(db, employee_id)
        if not include_read:
            query = query.filter(Notification.read.is_(False))
        return (
            query.order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def count_unread(db: Session, employee_id: Optional[int] = None) -> int:
        return (
            NotificationRepository._scoped(db, employee_id)
            .filter(Notification.read.is_(False))
            .count()
        )

    @staticmethod
    def get_by_id(db: Session, notification_id: int) -> Optional[Notification]:
        return db.query(Notification).filter(Notification.id == notification_id).first()

    @staticmethod
    def mark_all_read(db: Session, employee_id: Optional[int] = None) -> int:
        updated = (
            NotificationRepository._scoped(db, employee_id)
            .filter(Notification.read.is_(False))
            .update({Notification.read: True}, synchronize_session=False)
        )
        db.commit()
        return updated
