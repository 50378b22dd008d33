"""Employee repository - Database operations for employees"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import (
    Employee,
    ServiceOrder,
    ServiceOrderAssignment,
    TechnicianServiceType,
)
from ...shared.pagination import Pagination, build_search_condition, paginate

SORT_COLUMNS = {
    "id": Employee.id,
    "name": Employee.name,
    "email": Employee.email,
    "specification": Employee.specification,
    "status": Employee.status,
    "created_at": Employee.created_at,
}


class EmployeeRepository:
    """Repository for employee database operations"""

    @staticmethod
    def list_employees(
        db: Session,
        pagination: Pagination,
        search: Optional[str] = None,
        status: Optional[str] = None,
        specification: Optional[str] = None,
    ) -> tuple[list[Employee], int]:
        query = db.query(Employee)
        condition = build_search_condition(
            search, [Employee.name, Employee.email, Employee.phone, Employee.specification]
        )
        if condition is not None:
            query = query.filter(condition)
        if status:
            query = query.filter(Employee.status == status)
        if specification:
            query = query.filter(Employee.specification == specification)
        return paginate(query, pagination, SORT_COLUMNS)

    @staticmethod
    def get_by_id(db: Session, employee_id: int) -> Optional[Employee]:
        return db.query(Employee).filter(Employee.id == employee_id).first()

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[Employee]:
        return db.query(Employee).filter(Employee.email == email).first()

    @staticmethod
    def get_by_phone(db: Session, phone: str) -> Optional[Employee]:
        return db.query(Employee).filter(Employee.phone == phone).first()

    @staticmethod
    def search_by_name(db: Session, name: str) -> list[Employee]:
        return (
            db.query(Employee)
            .filter(Employee.name.ilike(f"%{name.strip()}%"))
            .order_by(Employee.name)
            .all()
        )

    @staticmethod
    def get_by_service_type(db: Session, service_type_id: int) -> list[Employee]:
        return (
            db.query(Employee)
            .join(TechnicianServiceType, TechnicianServiceType.employee_id == Employee.id)
            .filter(TechnicianServiceType.service_type_id == service_type_id)
            .order_by(Employee.name)
            .all()
        )

    @staticmethod
    def get_active_assignments(db: Session, employee_id: int) -> list[ServiceOrderAssignment]:
        return (
            db.query(ServiceOrderAssignment)
            .filter(
                ServiceOrderAssignment.employee_id == employee_id,
                ServiceOrderAssignment.unassigned_at.is_(None),
            )
            .all()
        )

    @staticmethod
    def count_orders_by_status(db: Session, employee_id: int) -> dict[str, int]:
        """Distinct orders per status among the employee's active assignments"""
        rows = (
            db.query(ServiceOrder.status, func.count(func.distinct(ServiceOrder.id)))
            .join(ServiceOrderAssignment, ServiceOrderAssignment.order_id == ServiceOrder.id)
            .filter(
                ServiceOrderAssignment.employee_id == employee_id,
                ServiceOrderAssignment.unassigned_at.is_(None),
            )
            .group_by(ServiceOrder.status)
            .all()
        )
        return {status: count for status, count in rows}

    @staticmethod
    def create(db: Session, **employee_data) -> Employee:
        employee = Employee(**employee_data)
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee

    @staticmethod
    def update(db: Session, employee: Employee, **updates) -> Employee:
        for key, value in updates.items():
            if hasattr(employee, key):
                setattr(employee, key, value)
        db.commit()
        db.refresh(employee)
        return employee

    @staticmethod
    def delete(db: Session, employee: Employee) -> None:
        db.delete(employee)
        db.commit()
