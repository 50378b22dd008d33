"""Employee router - FastAPI endpoints for employee operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from ...shared.pagination import parse_pagination
from .repository import SORT_COLUMNS
from .schemas import (
    AssignedEmployeeResponse,
    EmployeeCreate,
    EmployeeListResponse,
    EmployeeResponse,
    EmployeeUpdate,
    WorkloadResponse,
)
from .service import EmployeeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["Employees"])


def get_employee_service(db: Session = Depends(get_db)) -> EmployeeService:
    """Dependency injection for EmployeeService"""
    return EmployeeService(db)


@router.get("", response_model=EmployeeListResponse)
async def list_employees(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sortBy: Optional[str] = Query(None),
    sortOrder: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    specification: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    """List employees, optionally filtered by status and specification"""
    pagination = parse_pagination(
        page, limit, sortBy, sortOrder, valid_sort_fields=list(SORT_COLUMNS)
    )
    return service.list_employees(pagination, search, status, specification)


# ============================================================================
# LOOKUPS (declared before /{employee_id})
# ============================================================================


@router.get("/by-email", response_model=EmployeeResponse)
async def get_employee_by_email(
    email: str = Query(...),
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.get_by_email(email)


@router.get("/by-phone", response_model=EmployeeResponse)
async def get_employee_by_phone(
    phone: str = Query(...),
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.get_by_phone(phone)


@router.get("/by-name", response_model=list[EmployeeResponse])
async def search_employees_by_name(
    name: str = Query(...),
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.search_by_name(name)


@router.get("/by-service-type/{service_type_id}", response_model=list[EmployeeResponse])
async def get_employees_by_service_type(
    service_type_id: int,
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    """Employees skilled in a service type"""
    return service.get_by_service_type(service_type_id)


@router.get("/by-service-order/{order_id}", response_model=list[AssignedEmployeeResponse])
async def get_employees_by_service_order(
    order_id: int,
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    """Employees actively assigned to a service order"""
    return service.get_by_service_order(order_id)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: int,
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.get_employee(employee_id)


@router.get("/{employee_id}/workload", response_model=WorkloadResponse)
async def get_employee_workload(
    employee_id: int,
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.get_workload(employee_id)


@router.post("", response_model=EmployeeResponse, status_code=201)
async def create_employee(
    data: EmployeeCreate,
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.create_employee(data)


@router.put("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: int,
    data: EmployeeUpdate,
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.update_employee(employee_id, data)


@router.delete("/{employee_id}")
async def delete_employee(
    employee_id: int,
    _admin: User = Depends(require_admin),
    service: EmployeeService = Depends(get_employee_service),
):
    """Delete an employee (admin only). Assignments and skills go with it"""
    return service.delete_employee(employee_id)
