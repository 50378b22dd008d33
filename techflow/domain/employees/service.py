"""Employee service - Business logic for employee operations"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ORDER_STATUSES, Employee, ServiceOrder, ServiceType
from ...shared.pagination import Pagination, pagination_meta
from ...shared.validators import validate_phone
from .repository import EmployeeRepository
from .schemas import (
    AssignedEmployeeResponse,
    EmployeeCreate,
    EmployeeResponse,
    EmployeeUpdate,
)

logger = logging.getLogger(__name__)


class EmployeeService:
    """Service layer for employee business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EmployeeRepository()

    def list_employees(
        self,
        pagination: Pagination,
        search: Optional[str] = None,
        status: Optional[str] = None,
        specification: Optional[str] = None,
    ) -> dict:
        employees, total = self.repo.list_employees(
            self.db, pagination, search, status, specification
        )
        return {
            "data": [EmployeeResponse.model_validate(e) for e in employees],
            "pagination": pagination_meta(total, pagination),
        }

    def get_employee(self, employee_id: int) -> Employee:
        employee = self.repo.get_by_id(self.db, employee_id)
        if not employee:
            raise HTTPException(status_code=404, detail="Employee not found")
        return employee

    def create_employee(self, data: EmployeeCreate) -> Employee:
        if self.repo.get_by_email(self.db, data.email):
            raise HTTPException(
                status_code=409, detail="An employee with this email already exists"
            )

        employee = self.repo.create(self.db, **data.model_dump())
        logger.info(f"🆕 Employee created: {employee.id} ({employee.email})")
        return employee

    def update_employee(self, employee_id: int, data: EmployeeUpdate) -> Employee:
        employee = self.get_employee(employee_id)
        updates = data.model_dump(exclude_unset=True)

        if updates.get("email") and updates["email"] != employee.email:
            existing = self.repo.get_by_email(self.db, updates["email"])
            if existing and existing.id != employee.id:
                raise HTTPException(
                    status_code=409, detail="An employee with this email already exists"
                )

        for field in ("name", "email", "specification", "status"):
            if field in updates and updates[field] is None:
                raise HTTPException(status_code=400, detail=f"{field} cannot be empty")

        return self.repo.update(self.db, employee, **updates)

    def delete_employee(self, employee_id: int) -> dict:
        employee = self.get_employee(employee_id)
        active = self.repo.get_active_assignments(self.db, employee_id)
        if active:
            raise HTTPException(
                status_code=409,
                detail=(
                    f"Employee is actively assigned to {len(active)} service order(s). "
                    "Unassign them first or set the employee inactive."
                ),
            )

        self.repo.delete(self.db, employee)
        logger.info(f"🗑️ Employee deleted: {employee_id}")
        return {"message": "Employee deleted successfully"}

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_by_email(self, email: str) -> Employee:
        employee = self.repo.get_by_email(self.db, email.strip().lower())
        if not employee:
            raise HTTPException(status_code=404, detail="No employee found with this email")
        return employee

    def get_by_phone(self, phone: str) -> Employee:
        try:
            phone = validate_phone(phone)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        employee = self.repo.get_by_phone(self.db, phone)
        if not employee:
            raise HTTPException(status_code=404, detail="No employee found with this phone")
        return employee

    def search_by_name(self, name: str) -> list[Employee]:
        if not name or not name.strip():
            raise HTTPException(status_code=400, detail="Name is required")
        employees = self.repo.search_by_name(self.db, name)
        if not employees:
            raise HTTPException(status_code=404, detail="No employees found with this name")
        return employees

    def get_by_service_type(self, service_type_id: int) -> list[Employee]:
        service_type = self.db.query(ServiceType).filter(ServiceType.id == service_type_id).first()
        if not service_type:
            raise HTTPException(status_code=404, detail="Service type not found")
        return self.repo.get_by_service_type(self.db, service_type_id)

    def get_by_service_order(self, order_id: int) -> list[AssignedEmployeeResponse]:
        """Employees actively assigned to a service order"""
        order = self.db.query(ServiceOrder).filter(ServiceOrder.id == order_id).first()
        if not order:
            raise HTTPException(status_code=404, detail="Service order not found")

        return [
            AssignedEmployeeResponse(
                **EmployeeResponse.model_validate(a.employee).model_dump(),
                role_in_order=a.role_in_order,
                assigned_at=a.assigned_at,
                is_lead=a.employee_id == order.lead_employee_id,
            )
            for a in order.assignments
            if a.unassigned_at is None
        ]

    def get_workload(self, employee_id: int) -> dict:
        """Active assignments and the status breakdown of the orders behind them"""
        employee = self.get_employee(employee_id)
        assignments = self.repo.get_active_assignments(self.db, employee_id)
        counts = self.repo.count_orders_by_status(self.db, employee_id)

        return {
            "employee": EmployeeResponse.model_validate(employee),
            "active_assignments": len(assignments),
            "orders_by_status": {status: counts.get(status, 0) for status in ORDER_STATUSES},
            "active_order_ids": sorted({a.order_id for a in assignments}),
        }
