"""Service order service - Business logic for service orders"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...cache import invalidate_analytics_cache
from ...models import (
    Customer,
    Employee,
    ServiceOrder,
    ServiceOrderAssignment,
    ServiceOrderItem,
    ServiceOrderStatusHistory,
    ServiceType,
)
from ...models_invoice import Invoice
from ...services import storage
from ...services.notification_service import (
    notify_assigned,
    notify_completed,
    notify_new_order,
)
from ...shared.pagination import Pagination, pagination_meta
from .lifecycle import apply_transition
from .recurrence import set_recurrence
from .repository import ServiceOrderRepository
from .schemas import (
    AssignmentCreate,
    RecurrenceSet,
    ServiceOrderCreate,
    ServiceOrderItemCreate,
    ServiceOrderUpdate,
    StatusChangeRequest,
)
from .serializers import (
    assignment_response,
    item_response,
    items_total,
    order_detail,
    order_summary,
)

logger = logging.getLogger(__name__)

LEAD_ROLE = "lead"


class ServiceOrderService:
    """Service layer for service order business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceOrderRepository()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_order(self, order_id: int) -> ServiceOrder:
        order = self.repo.get_by_id(self.db, order_id)
        if not order:
            raise HTTPException(status_code=404, detail="Service order not found")
        return order

    def _require_customer(self, customer_id: int) -> Customer:
        customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
        return customer

    def _require_service_type(self, service_type_id: int) -> ServiceType:
        service_type = self.db.query(ServiceType).filter(ServiceType.id == service_type_id).first()
        if not service_type:
            raise HTTPException(status_code=404, detail="Service type not found")
        return service_type

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self.db.query(Employee).filter(Employee.id == employee_id).first()
        if not employee:
            raise HTTPException(status_code=404, detail="Employee not found")
        return employee

    def _require_changed_by(self, changed_by: Optional[int]) -> Optional[int]:
        if changed_by is not None:
            self._require_employee(changed_by)
        return changed_by

    @staticmethod
    def _check_recurrence_window(recurrence: RecurrenceSet):
        if recurrence.end_date and recurrence.end_date < recurrence.next_due_date:
            raise HTTPException(
                status_code=400, detail="end_date must not be before next_due_date"
            )

    def _commit(self, action: str):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to {action}: {e}")
            raise
        invalidate_analytics_cache()

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def list_orders(self, pagination: Pagination, **filters) -> dict:
        orders, total = self.repo.list_orders(self.db, pagination, **filters)
        return {
            "data": [order_summary(o) for o in orders],
            "pagination": pagination_meta(total, pagination),
        }

    def get_order_detail(self, order_id: int):
        return order_detail(self.get_order(order_id))

    def create_order(self, data: ServiceOrderCreate):
        """
        Create an order with optional items, assignees and recurrence in a
        single transaction. Initial assignees move the order to 'assigned'.
        """
        self._require_customer(data.customer_id)
        self._require_service_type(data.service_type_id)
        for item in data.items:
            self._require_service_type(item.service_type_id)
        if data.recurrence:
            self._check_recurrence_window(data.recurrence)

        assignees = []
        for employee_id in dict.fromkeys(data.assignee_ids):
            employee = self._require_employee(employee_id)
            if employee.status != "active":
                raise HTTPException(
                    status_code=400, detail=f"Employee {employee.name} is not active"
                )
            assignees.append(employee)

        order = ServiceOrder(
            customer_id=data.customer_id,
            service_type_id=data.service_type_id,
            description=data.description,
            priority=data.priority,
            due_date=data.due_date,
            status="new",
        )
        for item in data.items:
            order.items.append(self._build_item(item))

        try:
            self.db.add(order)
            self.db.flush()

            self.db.add(
                ServiceOrderStatusHistory(
                    order_id=order.id, old_status=None, new_status="new", comment="Order created"
                )
            )

            for employee in assignees:
                order.assignments.append(
                    ServiceOrderAssignment(employee_id=employee.id, assigned_at=datetime.utcnow())
                )
            if assignees:
                order.lead_employee_id = assignees[0].id
                apply_transition(self.db, order, "assigned", comment="Assigned on creation")

            if data.recurrence:
                set_recurrence(
                    self.db,
                    order,
                    data.recurrence.recurrence_type,
                    data.recurrence.next_due_date,
                    data.recurrence.end_date,
                )

            notify_new_order(self.db, order.id, commit=False)
            for employee in assignees:
                notify_assigned(self.db, order.id, employee.id, employee.name, commit=False)

            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create service order: {e}")
            raise

        invalidate_analytics_cache()
        logger.info(f"🆕 Service order created: {order.id} for customer {order.customer_id}")
        self.db.refresh(order)
        return order_detail(order)

    def update_order(self, order_id: int, data: ServiceOrderUpdate):
        order = self.get_order(order_id)
        updates = data.model_dump(exclude_unset=True)
        new_status = updates.pop("status", None)
        comment = updates.pop("comment", None)
        changed_by = self._require_changed_by(updates.pop("changed_by", None))

        if "customer_id" in updates:
            if updates["customer_id"] is None:
                raise HTTPException(status_code=400, detail="customer_id cannot be empty")
            self._require_customer(updates["customer_id"])
        if "service_type_id" in updates:
            if updates["service_type_id"] is None:
                raise HTTPException(status_code=400, detail="service_type_id cannot be empty")
            self._require_service_type(updates["service_type_id"])
        if "priority" in updates and updates["priority"] is None:
            raise HTTPException(status_code=400, detail="priority cannot be empty")

        for key, value in updates.items():
            setattr(order, key, value)

        completed = False
        if new_status:
            changed = apply_transition(self.db, order, new_status, changed_by, comment)
            completed = changed and new_status == "completed"

        order.updated_at = datetime.utcnow()
        self._commit("update service order")

        if completed:
            notify_completed(self.db, order.id, order.lead_employee_id)

        self.db.refresh(order)
        return order_detail(order)

    def change_status(self, order_id: int, data: StatusChangeRequest):
        order = self.get_order(order_id)
        changed_by = self._require_changed_by(data.changed_by)

        changed = apply_transition(self.db, order, data.status, changed_by, data.comment)
        if not changed:
            return order_detail(order)

        self._commit("change service order status")
        if data.status == "completed":
            notify_completed(self.db, order.id, order.lead_employee_id)

        self.db.refresh(order)
        return order_detail(order)

    def delete_order(self, order_id: int) -> dict:
        order = self.get_order(order_id)

        if self.db.query(Invoice).filter(Invoice.service_order_id == order_id).count():
            raise HTTPException(
                status_code=409, detail="Service order has invoices and cannot be deleted"
            )

        keys = [a.file_path for a in order.attachments]
        self.db.delete(order)
        self._commit("delete service order")

        for key in keys:
            storage.delete_file(key)

        logger.info(f"🗑️ Service order deleted: {order_id}")
        return {"message": "Service order deleted successfully"}

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    def list_assignments(self, order_id: int, active_only: bool = False):
        order = self.get_order(order_id)
        return [
            assignment_response(a, order.lead_employee_id)
            for a in order.assignments
            if not active_only or a.unassigned_at is None
        ]

    def assign_employee(self, order_id: int, data: AssignmentCreate):
        order = self.get_order(order_id)
        employee = self._require_employee(data.employee_id)

        if employee.status != "active":
            raise HTTPException(status_code=400, detail="Employee is not active")
        if order.status in ("completed", "closed"):
            raise HTTPException(
                status_code=400, detail=f"Cannot assign employees to a {order.status} order"
            )
        if self.repo.get_active_assignment(self.db, order_id, employee.id):
            raise HTTPException(
                status_code=409, detail="Employee is already assigned to this service order"
            )

        assignment = ServiceOrderAssignment(
            employee_id=employee.id,
            role_in_order=data.role_in_order,
            notes=data.notes,
            assigned_at=datetime.utcnow(),
        )
        order.assignments.append(assignment)

        is_lead = data.is_lead or (data.role_in_order or "").lower() == LEAD_ROLE
        if is_lead or order.lead_employee_id is None:
            order.lead_employee_id = employee.id

        if order.status == "new":
            apply_transition(
                self.db, order, "assigned", comment=f"Assigned to {employee.name}"
            )
        order.updated_at = datetime.utcnow()

        notify_assigned(self.db, order.id, employee.id, employee.name, commit=False)
        self._commit("assign employee")

        logger.info(f"👷 Employee {employee.id} assigned to service order {order.id}")
        self.db.refresh(assignment)
        return assignment_response(assignment, order.lead_employee_id)

    def unassign_employee(self, order_id: int, employee_id: int, comment: Optional[str] = None):
        order = self.get_order(order_id)
        assignment = self.repo.get_active_assignment(self.db, order_id, employee_id)
        if not assignment:
            raise HTTPException(
                status_code=404, detail="Employee is not assigned to this service order"
            )

        assignment.unassigned_at = datetime.utcnow()
        if order.lead_employee_id == employee_id:
            remaining = [
                a for a in order.assignments if a.unassigned_at is None and a.id != assignment.id
            ]
            order.lead_employee_id = remaining[0].employee_id if remaining else None

        still_assigned = any(a.unassigned_at is None for a in order.assignments)
        if not still_assigned and order.status == "assigned":
            apply_transition(
                self.db, order, "new", comment=comment or "Last employee unassigned"
            )
        order.updated_at = datetime.utcnow()

        self._commit("unassign employee")
        logger.info(f"👋 Employee {employee_id} unassigned from service order {order_id}")
        self.db.refresh(assignment)
        return assignment_response(assignment, order.lead_employee_id)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    @staticmethod
    def _build_item(data: ServiceOrderItemCreate) -> ServiceOrderItem:
        unit_price = Decimal(data.unit_price).quantize(Decimal("0.01"))
        return ServiceOrderItem(
            service_type_id=data.service_type_id,
            unit_price=unit_price,
            quantity=data.quantity,
            total_price=(unit_price * data.quantity).quantize(Decimal("0.01")),
        )

    def list_items(self, order_id: int) -> dict:
        order = self.get_order(order_id)
        return {
            "items": [item_response(i) for i in order.items],
            "items_total": items_total(order.items),
        }

    def add_item(self, order_id: int, data: ServiceOrderItemCreate) -> dict:
        order = self.get_order(order_id)
        self._require_service_type(data.service_type_id)
        if order.status == "closed":
            raise HTTPException(status_code=400, detail="Cannot add items to a closed order")

        order.items.append(self._build_item(data))
        order.updated_at = datetime.utcnow()
        self._commit("add service order item")
        self.db.refresh(order)
        return self.list_items(order_id)

    def delete_item(self, order_id: int, item_id: int) -> dict:
        order = self.get_order(order_id)
        item = self.repo.get_item(self.db, order_id, item_id)
        if not item:
            raise HTTPException(status_code=404, detail="Service order item not found")

        order.items.remove(item)
        order.updated_at = datetime.utcnow()
        self._commit("delete service order item")
        self.db.refresh(order)
        return self.list_items(order_id)

    # ------------------------------------------------------------------
    # History and recurrence
    # ------------------------------------------------------------------

    def get_history(self, order_id: int) -> list[ServiceOrderStatusHistory]:
        return list(self.get_order(order_id).status_history)

    def set_recurrence(self, order_id: int, data: RecurrenceSet):
        order = self.get_order(order_id)
        self._check_recurrence_window(data)

        schedule = set_recurrence(
            self.db, order, data.recurrence_type, data.next_due_date, data.end_date
        )
        self._commit("set recurrence")
        logger.info(f"🔁 Service order {order_id} recurs {data.recurrence_type}")
        self.db.refresh(schedule)
        return schedule

    def remove_recurrence(self, order_id: int) -> dict:
        order = self.get_order(order_id)
        if not order.recurring_schedules:
            raise HTTPException(status_code=404, detail="Service order has no recurring schedule")

        for schedule in list(order.recurring_schedules):
            order.recurring_schedules.remove(schedule)
        self._commit("remove recurrence")
        return {"message": "Recurring schedule removed"}
