"""
Recurring service orders
Copies template orders on a daily, weekly or monthly schedule
"""

import logging
from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...cache import invalidate_analytics_cache
from ...models import RecurringOrder, ServiceOrder, ServiceOrderItem
from ...services.notification_service import notify_new_order
from .repository import ServiceOrderRepository

logger = logging.getLogger(__name__)

RECURRENCE_STEPS = {
    "daily": relativedelta(days=1),
    "weekly": relativedelta(weeks=1),
    "monthly": relativedelta(months=1),
}


def advance_due_date(
    due_date: datetime,
    recurrence_type: str,
    now: datetime,
    anchor: Optional[datetime] = None,
) -> datetime:
    """
    Next occurrence after both due_date and now.

    Occurrences are counted in whole steps from the anchor (the schedule's
    first due date), so a month-end clamp does not carry over: an anchor of
    Jan 31 gives Feb 28, then Mar 31.
    """
    step = RECURRENCE_STEPS[recurrence_type]
    anchor = anchor or due_date
    count = 1
    next_date = anchor + step
    while next_date <= due_date or next_date <= now:
        count += 1
        next_date = anchor + step * count
    return next_date


def copy_template_order(db: Session, template: ServiceOrder, due_date: datetime) -> ServiceOrder:
    order = ServiceOrder(
        customer_id=template.customer_id,
        service_type_id=template.service_type_id,
        description=template.description,
        priority=template.priority,
        status="new",
        due_date=due_date,
    )
    for item in template.items:
        order.items.append(
            ServiceOrderItem(
                service_type_id=item.service_type_id,
                unit_price=item.unit_price,
                quantity=item.quantity,
                total_price=item.total_price,
            )
        )
    db.add(order)
    db.flush()
    return order


def generate_due_recurring_orders(db: Session, now: Optional[datetime] = None) -> list[ServiceOrder]:
    """
    Create the next occurrence of every schedule that has come due.

    Missed occurrences are not back-filled: one copy is made per schedule and
    run, then next_due_date jumps past now. Schedules whose end date has
    passed, or whose next date lies beyond it, are deactivated without a copy.

    Returns:
        The newly created service orders
    """
    now = now or datetime.utcnow()
    created: list[ServiceOrder] = []

    try:
        schedules = ServiceOrderRepository.get_due_schedules(db, now)
        for schedule in schedules:
            if schedule.end_date and (
                schedule.end_date < now or schedule.next_due_date > schedule.end_date
            ):
                schedule.is_active = False
                logger.info(f"🏁 Recurring schedule {schedule.id} ended on {schedule.end_date}")
                continue

            order = copy_template_order(db, schedule.order, schedule.next_due_date)
            notify_new_order(db, order.id, commit=False)
            created.append(order)

            schedule.last_generated_at = now
            schedule.next_due_date = advance_due_date(
                schedule.next_due_date, schedule.recurrence_type, now, schedule.start_date
            )
            if schedule.end_date and schedule.next_due_date > schedule.end_date:
                schedule.is_active = False
                logger.info(f"🏁 Recurring schedule {schedule.id} reached its end date")

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Recurring order generation failed: {e}")
        raise

    if created:
        invalidate_analytics_cache()
    logger.info(f"🔁 Generated {len(created)} recurring service order(s)")
    return created


def set_recurrence(
    db: Session,
    order: ServiceOrder,
    recurrence_type: str,
    next_due_date: datetime,
    end_date: Optional[datetime] = None,
) -> RecurringOrder:
    """Replace the order's schedule. Does not commit"""
    for existing in list(order.recurring_schedules):
        order.recurring_schedules.remove(existing)

    schedule = RecurringOrder(
        recurrence_type=recurrence_type,
        start_date=next_due_date,
        next_due_date=next_due_date,
        end_date=end_date,
        is_active=True,
    )
    order.recurring_schedules.append(schedule)
    return schedule
