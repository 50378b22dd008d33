"""Service order repository - Database operations for service orders"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Query, Session, selectinload

from ...models import (
    RecurringOrder,
    ServiceOrder,
    ServiceOrderAssignment,
    ServiceOrderItem,
)
from ...shared.pagination import Pagination, build_search_condition, paginate

SORT_COLUMNS = {
    "id": ServiceOrder.id,
    "status": ServiceOrder.status,
    "priority": ServiceOrder.priority,
    "created_at": ServiceOrder.created_at,
    "due_date": ServiceOrder.due_date,
}

OPEN_STATUSES = ["new", "assigned", "in_progress"]


def overdue_filter(query: Query, now: datetime) -> Query:
    """Past due and not yet completed or closed"""
    return query.filter(
        ServiceOrder.due_date.isnot(None),
        ServiceOrder.due_date < now,
        ServiceOrder.status.notin_(["completed", "closed"]),
    )


class ServiceOrderRepository:
    """Repository for service order database operations"""

    @staticmethod
    def with_relations(query: Query) -> Query:
        return query.options(
            selectinload(ServiceOrder.customer),
            selectinload(ServiceOrder.service_type),
            selectinload(ServiceOrder.assignments).selectinload(ServiceOrderAssignment.employee),
            selectinload(ServiceOrder.attachments),
        )

    @staticmethod
    def list_orders(
        db: Session,
        pagination: Pagination,
        search: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        customer_id: Optional[int] = None,
        service_type_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        overdue: bool = False,
        now: Optional[datetime] = None,
    ) -> tuple[list[ServiceOrder], int]:
        query = db.query(ServiceOrder)

        condition = build_search_condition(
            search, [ServiceOrder.description, ServiceOrder.status]
        )
        if condition is not None:
            query = query.filter(condition)
        if status:
            query = query.filter(ServiceOrder.status == status)
        if priority:
            query = query.filter(ServiceOrder.priority == priority)
        if customer_id:
            query = query.filter(ServiceOrder.customer_id == customer_id)
        if service_type_id:
            query = query.filter(ServiceOrder.service_type_id == service_type_id)
        if employee_id:
            active = (
                db.query(ServiceOrderAssignment.order_id)
                .filter(
                    ServiceOrderAssignment.employee_id == employee_id,
                    ServiceOrderAssignment.unassigned_at.is_(None),
                )
            )
            query = query.filter(ServiceOrder.id.in_(active))
        if overdue:
            query = overdue_filter(query, now or datetime.utcnow())

        query = ServiceOrderRepository.with_relations(query)
        return paginate(query, pagination, SORT_COLUMNS)

    @staticmethod
    def get_by_id(db: Session, order_id: int) -> Optional[ServiceOrder]:
        return db.query(ServiceOrder).filter(ServiceOrder.id == order_id).first()

    @staticmethod
    def get_overdue(db: Session, now: datetime) -> list[ServiceOrder]:
        query = overdue_filter(db.query(ServiceOrder), now)
        return (
            ServiceOrderRepository.with_relations(query)
            .order_by(ServiceOrder.due_date.asc(), ServiceOrder.id.asc())
            .all()
        )

    @staticmethod
    def get_active_assignment(
        db: Session, order_id: int, employee_id: int
    ) -> Optional[ServiceOrderAssignment]:
        return (
            db.query(ServiceOrderAssignment)
            .filter(
                ServiceOrderAssignment.order_id == order_id,
                ServiceOrderAssignment.employee_id == employee_id,
                ServiceOrderAssignment.unassigned_at.is_(None),
            )
            .first()
        )

    @staticmethod
    def get_item(db: Session, order_id: int, item_id: int) -> Optional[ServiceOrderItem]:
        return (
            db.query(ServiceOrderItem)
            .filter(ServiceOrderItem.id == item_id, ServiceOrderItem.order_id == order_id)
            .first()
        )

    @staticmethod
    def get_due_schedules(db: Session, now: datetime) -> list[RecurringOrder]:
        return (
            db.query(RecurringOrder)
            .filter(RecurringOrder.is_active.is_(True), RecurringOrder.next_due_date <= now)
            .order_by(RecurringOrder.next_due_date.asc(), RecurringOrder.id.asc())
            .all()
        )
