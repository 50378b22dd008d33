"""
Overdue service order detection
Runs daily from the worker and on demand from the API
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Notification, ServiceOrder
from ...services.notification_service import notify_overdue
from .repository import ServiceOrderRepository

logger = logging.getLogger(__name__)


def list_overdue_orders(db: Session, now: Optional[datetime] = None) -> list[ServiceOrder]:
    return ServiceOrderRepository.get_overdue(db, now or datetime.utcnow())


def _already_notified(
    db: Session, order_id: int, employee_id: Optional[int], day_start: datetime
) -> bool:
    query = db.query(Notification).filter(
        Notification.type == "overdue",
        Notification.service_order_id == order_id,
        Notification.created_at >= day_start,
        Notification.created_at < day_start + timedelta(days=1),
    )
    if employee_id is None:
        query = query.filter(Notification.employee_id.is_(None))
    else:
        query = query.filter(Notification.employee_id == employee_id)
    return db.query(query.exists()).scalar()


def check_overdue_orders(db: Session, now: Optional[datetime] = None) -> dict:
    """
    Notify every active assignee of each overdue order, or the back office
    when nobody is assigned. At most one notification per order, recipient and day.
    """
    now = now or datetime.utcnow()
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

    orders = list_overdue_orders(db, now)
    created = 0

    try:
        for order in orders:
            recipients = list(
                dict.fromkeys(a.employee_id for a in order.assignments if a.unassigned_at is None)
            )
            for employee_id in recipients or [None]:
                if _already_notified(db, order.id, employee_id, day_start):
                    continue
                if notify_overdue(db, order.id, employee_id, commit=False, created_at=now):
                    created += 1
                    db.flush()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Overdue check failed: {e}")
        raise

    logger.info(f"⏰ Overdue check: {len(orders)} overdue order(s), {created} notification(s)")
    return {"overdue_orders": len(orders), "notifications_created": created}
