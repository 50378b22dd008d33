"""
Back-office Notification Service
Records in-app notifications for service-order workflow events
(new orders, assignments, completions, overdue orders)
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import NOTIFICATION_TYPES, Notification

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    notification_type: str,
    message: str,
    service_order_id: Optional[int] = None,
    employee_id: Optional[int] = None,
    commit: bool = True,
    created_at: Optional[datetime] = None,
) -> Optional[Notification]:
    """
    Record a notification without ever failing the calling operation.

    Args:
        db: Database session
        notification_type: new_order, assigned, completed or overdue
        message: Human readable message shown in the notification center
        service_order_id: Related service order, if any
        employee_id: Recipient employee, None for back-office wide notifications
        commit: Commit immediately; pass False when the caller commits its own transaction
        created_at: Override the creation time (scheduled jobs pass their run time)

    Returns:
        The notification, or None if it could not be recorded
    """
    if notification_type not in NOTIFICATION_TYPES:
        logger.error(f"❌ Unknown notification type: {notification_type}")
        return None

    notification = Notification(
        service_order_id=service_order_id,
        employee_id=employee_id,
        type=notification_type,
        message=message,
        read=False,
        created_at=created_at or datetime.utcnow(),
    )
    db.add(notification)
    if not commit:
        return notification

    # Callers commit their own work first, so a rollback here only drops the notification
    try:
        db.commit()
        logger.info(f"🔔 {notification_type} notification recorded for order {service_order_id}")
        return notification
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Notification creation failed ({notification_type}): {e}")
        return None


def notify_new_order(db: Session, order_id: int, commit: bool = True) -> Optional[Notification]:
    return create_notification(
        db, "new_order", f"New service order created: #{order_id}", service_order_id=order_id,
        commit=commit,
    )


def notify_assigned(
    db: Session, order_id: int, employee_id: int, employee_name: str, commit: bool = True
) -> Optional[Notification]:
    return create_notification(
        db,
        "assigned",
        f"{employee_name} assigned to service order #{order_id}",
        service_order_id=order_id,
        employee_id=employee_id,
        commit=commit,
    )


def notify_completed(
    db: Session, order_id: int, employee_id: Optional[int] = None, commit: bool = True
) -> Optional[Notification]:
    return create_notification(
        db,
        "completed",
        f"Service order #{order_id} completed",
        service_order_id=order_id,
        employee_id=employee_id,
        commit=commit,
    )


def notify_overdue(
    db: Session,
    order_id: int,
    employee_id: Optional[int] = None,
    commit: bool = True,
    created_at: Optional[datetime] = None,
) -> Optional[Notification]:
    return create_notification(
        db,
        "overdue",
        f"Service order #{order_id} is overdue",
        service_order_id=order_id,
        employee_id=employee_id,
        commit=commit,
        created_at=created_at,
    )
