"""Build service order response payloads from ORM objects"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from ...models import ServiceOrder, ServiceOrderAssignment, ServiceOrderItem
from .schemas import (
    AssignedEmployeeSummary,
    AssignmentResponse,
    AttachmentSummary,
    RecurringOrderResponse,
    ServiceOrderDetail,
    ServiceOrderItemResponse,
    ServiceOrderSummary,
    StatusHistoryResponse,
)

CLOSED_STATUSES = ("completed", "closed")


def is_overdue(order: ServiceOrder, now: Optional[datetime] = None) -> bool:
    if order.due_date is None or order.status in CLOSED_STATUSES:
        return False
    return order.due_date < (now or datetime.utcnow())


def item_response(item: ServiceOrderItem) -> ServiceOrderItemResponse:
    return ServiceOrderItemResponse(
        id=item.id,
        order_id=item.order_id,
        service_type_id=item.service_type_id,
        service_type_name=item.service_type.name if item.service_type else None,
        unit_price=item.unit_price,
        quantity=item.quantity,
        total_price=item.total_price,
    )


def items_total(items: list[ServiceOrderItem]) -> Decimal:
    return sum((Decimal(item.total_price) for item in items), Decimal("0.00"))


def assignment_response(
    assignment: ServiceOrderAssignment, lead_employee_id: Optional[int] = None
) -> AssignmentResponse:
    employee = assignment.employee
    return AssignmentResponse(
        id=assignment.id,
        order_id=assignment.order_id,
        employee_id=assignment.employee_id,
        employee_name=employee.name if employee else None,
        employee_email=employee.email if employee else None,
        role_in_order=assignment.role_in_order,
        is_lead=lead_employee_id is not None and assignment.employee_id == lead_employee_id,
        is_active=assignment.unassigned_at is None,
        assigned_at=assignment.assigned_at,
        unassigned_at=assignment.unassigned_at,
        notes=assignment.notes,
    )


def order_summary(order: ServiceOrder) -> ServiceOrderSummary:
    """List row: the order with customer, service type, assignees and attachments"""
    return ServiceOrderSummary(
        id=order.id,
        customer_id=order.customer_id,
        customer_name=order.customer.name if order.customer else None,
        customer_email=order.customer.email if order.customer else None,
        service_type_id=order.service_type_id,
        service_type_name=order.service_type.name if order.service_type else None,
        description=order.description,
        status=order.status,
        priority=order.priority,
        lead_employee_id=order.lead_employee_id,
        due_date=order.due_date,
        is_overdue=is_overdue(order),
        created_at=order.created_at,
        updated_at=order.updated_at,
        assigned_employees=[
            AssignedEmployeeSummary(id=a.employee.id, name=a.employee.name, email=a.employee.email)
            for a in order.assignments
            if a.unassigned_at is None and a.employee is not None
        ],
        attachments=[
            AttachmentSummary(
                id=att.id,
                file_path=att.file_path,
                file_type=att.file_type,
                original_filename=att.original_filename,
            )
            for att in order.attachments
        ],
    )


def order_detail(order: ServiceOrder) -> ServiceOrderDetail:
    schedule = next((s for s in order.recurring_schedules if s.is_active), None)
    if schedule is None and order.recurring_schedules:
        schedule = order.recurring_schedules[-1]

    return ServiceOrderDetail(
        **order_summary(order).model_dump(),
        assigned_at=order.assigned_at,
        started_at=order.started_at,
        completed_at=order.completed_at,
        closed_at=order.closed_at,
        items=[item_response(i) for i in order.items],
        items_total=items_total(order.items),
        assignments=[assignment_response(a, order.lead_employee_id) for a in order.assignments],
        status_history=[StatusHistoryResponse.model_validate(h) for h in order.status_history],
        recurring_schedule=RecurringOrderResponse.model_validate(schedule) if schedule else None,
    )
