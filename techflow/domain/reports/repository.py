"""Reporting repository - Aggregate queries over service orders"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, selectinload

from ...models import (
    Employee,
    Notification,
    ServiceOrder,
    ServiceOrderAssignment,
    ServiceType,
)
from ...models_invoice import Invoice
from ...shared.pagination import build_search_condition
from ...shared.validators import to_naive_utc
from ..service_orders.repository import OPEN_STATUSES, ServiceOrderRepository, overdue_filter


class ReportRepository:
    """Read-only queries behind the dashboard and analytics"""

    @staticmethod
    def count_orders(db: Session, status: Optional[str] = None) -> int:
        query = db.query(ServiceOrder)
        if status:
            query = query.filter(ServiceOrder.status == status)
        return query.count()

    @staticmethod
    def count_completed_since(db: Session, since: datetime) -> int:
        return (
            db.query(ServiceOrder)
            .filter(ServiceOrder.completed_at.isnot(None), ServiceOrder.completed_at >= since)
            .count()
        )

    @staticmethod
    def count_active_technicians(db: Session) -> int:
        """Distinct employees actively assigned to open orders"""
        return (
            db.query(func.count(func.distinct(ServiceOrderAssignment.employee_id)))
            .join(ServiceOrder, ServiceOrder.id == ServiceOrderAssignment.order_id)
            .filter(
                ServiceOrderAssignment.unassigned_at.is_(None),
                ServiceOrder.status.in_(OPEN_STATUSES),
            )
            .scalar()
            or 0
        )

    @staticmethod
    def count_overdue(db: Session, now: datetime) -> int:
        return overdue_filter(db.query(ServiceOrder), now).count()

    @staticmethod
    def count_unread_notifications(db: Session) -> int:
        return db.query(Notification).filter(Notification.read.is_(False)).count()

    @staticmethod
    def recent_orders(db: Session, since: datetime, limit: int = 10) -> list[ServiceOrder]:
        query = db.query(ServiceOrder).filter(ServiceOrder.created_at >= since)
        return (
            ServiceOrderRepository.with_relations(query)
            .order_by(ServiceOrder.created_at.desc(), ServiceOrder.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def status_counts(db: Session) -> dict[str, int]:
        rows = (
            db.query(ServiceOrder.status, func.count(ServiceOrder.id))
            .group_by(ServiceOrder.status)
            .all()
        )
        return {status: count for status, count in rows}

    @staticmethod
    def completion_durations(db: Session) -> list[tuple[datetime, datetime]]:
        return (
            db.query(ServiceOrder.created_at, ServiceOrder.completed_at)
            .filter(ServiceOrder.status == "completed", ServiceOrder.completed_at.isnot(None))
            .all()
        )

    @staticmethod
    def technician_rows(db: Session) -> list[tuple]:
        """(employee_id, name, order_id, order status) for every assignment"""
        return (
            db.query(
                Employee.id,
                Employee.name,
                ServiceOrderAssignment.order_id,
                ServiceOrder.status,
            )
            .join(ServiceOrderAssignment, ServiceOrderAssignment.employee_id == Employee.id)
            .join(ServiceOrder, ServiceOrder.id == ServiceOrderAssignment.order_id)
            .order_by(Employee.id)
            .all()
        )

    @staticmethod
    def counts_by_service_type(db: Session) -> list[tuple]:
        return (
            db.query(ServiceType.id, ServiceType.name, func.count(ServiceOrder.id))
            .outerjoin(ServiceOrder, ServiceOrder.service_type_id == ServiceType.id)
            .group_by(ServiceType.id, ServiceType.name)
            .order_by(ServiceType.id)
            .all()
        )

    @staticmethod
    def orders_created_since(db: Session, since: datetime) -> list[tuple[datetime, str]]:
        return (
            db.query(ServiceOrder.created_at, ServiceOrder.status)
            .filter(ServiceOrder.created_at >= since)
            .all()
        )

    @staticmethod
    def invoice_totals(db: Session) -> list[tuple]:
        """(currency, status, total_cents) summed per currency and status"""
        return (
            db.query(Invoice.currency, Invoice.status, func.sum(Invoice.total_cents))
            .group_by(Invoice.currency, Invoice.status)
            .all()
        )

    @staticmethod
    def report_query(
        db: Session,
        search: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        customer_id: Optional[int] = None,
        service_type_id: Optional[int] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
    ) -> Query:
        query = db.query(ServiceOrder).options(
            selectinload(ServiceOrder.customer), selectinload(ServiceOrder.service_type)
        )
        condition = build_search_condition(
            search, [ServiceOrder.description, ServiceOrder.status, ServiceOrder.priority]
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
        if created_from:
            query = query.filter(ServiceOrder.created_at >= to_naive_utc(created_from))
        if created_to:
            query = query.filter(ServiceOrder.created_at <= to_naive_utc(created_to))
        return query
