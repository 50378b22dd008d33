"""Service type router - FastAPI endpoints for service type operations"""

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
    ServiceTypeCreate,
    ServiceTypeItemResponse,
    ServiceTypeListResponse,
    ServiceTypeResponse,
    ServiceTypeUpdate,
)
from .service import ServiceTypeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/service-types", tags=["Service Types"])


def get_service_type_service(db: Session = Depends(get_db)) -> ServiceTypeService:
    """Dependency injection for ServiceTypeService"""
    return ServiceTypeService(db)


@router.get("", response_model=ServiceTypeListResponse)
async def list_service_types(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sortBy: Optional[str] = Query(None),
    sortOrder: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    pagination = parse_pagination(
        page, limit, sortBy, sortOrder, valid_sort_fields=list(SORT_COLUMNS)
    )
    return service.list_service_types(pagination, search)


@router.get("/slug/{slug}", response_model=ServiceTypeResponse)
async def get_service_type_by_slug(
    slug: str,
    current_user: User = Depends(get_current_user),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    return service.get_by_slug(slug)


@router.get("/by-employee/{employee_id}", response_model=list[ServiceTypeResponse])
async def get_service_types_by_employee(
    employee_id: int,
    current_user: User = Depends(get_current_user),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    """Service types the employee is skilled in"""
    return service.get_by_employee(employee_id)


@router.get("/by-customer/{customer_id}", response_model=list[ServiceTypeResponse])
async def get_service_types_by_customer(
    customer_id: int,
    current_user: User = Depends(get_current_user),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    """Distinct service types the customer has ordered"""
    return service.get_by_customer(customer_id)


@router.get("/{service_type_id}", response_model=ServiceTypeResponse)
async def get_service_type(
    service_type_id: int,
    current_user: User = Depends(get_current_user),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    return service.get_service_type(service_type_id)


@router.get("/{service_type_id}/items", response_model=list[ServiceTypeItemResponse])
async def get_service_type_items(
    service_type_id: int,
    current_user: User = Depends(get_current_user),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    return service.get_items(service_type_id)


@router.post("", response_model=ServiceTypeResponse, status_code=201)
async def create_service_type(
    data: ServiceTypeCreate,
    current_user: User = Depends(get_current_user),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    return service.create_service_type(data)


@router.put("/{service_type_id}", response_model=ServiceTypeResponse)
async def update_service_type(
    service_type_id: int,
    data: ServiceTypeUpdate,
    current_user: User = Depends(get_current_user),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    return service.update_service_type(service_type_id, data)


@router.delete("/{service_type_id}")
async def delete_service_type(
    service_type_id: int,
    _admin: User = Depends(require_admin),
    service: ServiceTypeService = Depends(get_service_type_service),
):
    """Delete an unused service type (admin only)"""
    return service.delete_service_type(service_type_id)
