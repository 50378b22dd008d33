"""
Service order status lifecycle

    new → assigned → in_progress → completed → closed

Orders may step back one stage (unassign, pause, reopen) and may be closed
straight from new or assigned. Closed is terminal.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ServiceOrder, ServiceOrderStatusHistory

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    "new": ["assigned", "closed"],
    "assigned": ["in_progress", "new", "closed"],
    "in_progress": ["completed", "assigned"],
    "completed": ["closed", "in_progress"],
    "closed": [],
}

# Timestamp stamped the first time an order enters a status
STATUS_TIMESTAMPS = {
    "assigned": "assigned_at",
    "in_progress": "started_at",
    "completed": "completed_at",
    "closed": "closed_at",
}

STATUSES_REQUIRING_ASSIGNEE = {"assigned", "in_progress", "completed"}


def has_active_assignment(order: ServiceOrder) -> bool:
    return any(a.unassigned_at is None for a in order.assignments)


def validate_transition(order: ServiceOrder, new_status: str) -> None:
    """Raise 400 unless the order may move to new_status"""
    if new_status not in ALLOWED_TRANSITIONS:
        raise HTTPException(status_code=400, detail=f"Invalid status: {new_status}")

    allowed = ALLOWED_TRANSITIONS[order.status]
    if new_status not in allowed:
        targets = ", ".join(allowed) if allowed else "none"
        raise HTTPException(
            status_code=400,
            detail=(
                f"Cannot change status from '{order.status}' to '{new_status}'. "
                f"Allowed: {targets}"
            ),
        )

    if new_status in STATUSES_REQUIRING_ASSIGNEE and not has_active_assignment(order):
        raise HTTPException(
            status_code=400,
            detail=f"Service order must have an assigned employee to become '{new_status}'",
        )


def apply_transition(
    db: Session,
    order: ServiceOrder,
    new_status: str,
    changed_by: Optional[int] = None,
    comment: Optional[str] = None,
    now: Optional[datetime] = None,
) -> bool:
    """
    Move an order to new_status and record the change in its history.

    Does not commit; the caller owns the transaction.

    Returns:
        False when the order already has new_status (no-op), True otherwise
    """
    if order.status == new_status:
        return False

    validate_transition(order, new_status)

    now = now or datetime.utcnow()
    old_status = order.status

    timestamp_field = STATUS_TIMESTAMPS.get(new_status)
    if timestamp_field and getattr(order, timestamp_field) is None:
        setattr(order, timestamp_field, now)

    order.status = new_status
    order.updated_at = now
    db.add(
        ServiceOrderStatusHistory(
            order_id=order.id,
            old_status=old_status,
            new_status=new_status,
            changed_at=now,
            changed_by=changed_by,
            comment=comment,
        )
    )

    logger.info(f"🔄 Service order {order.id}: {old_status} → {new_status}")
    return True
