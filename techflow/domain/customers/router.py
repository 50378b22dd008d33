"""Customer router - FastAPI endpoints for customer operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import ServiceOrder, User
from ...shared.pagination import parse_pagination
from ..service_orders.serializers import order_summary
from .repository import SORT_COLUMNS
from .schemas import CustomerCreate, CustomerListResponse, CustomerResponse, CustomerUpdate
from .service import CustomerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Customers"])


def get_customer_service(db: Session = Depends(get_db)) -> CustomerService:
    """Dependency injection for CustomerService"""
    return CustomerService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=CustomerListResponse)
async def list_customers(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sortBy: Optional[str] = Query(None),
    sortOrder: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    """List customers with pagination and free-text search"""
    pagination = parse_pagination(
        page, limit, sortBy, sortOrder, valid_sort_fields=list(SORT_COLUMNS)
    )
    return service.list_customers(pagination, search)


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: int,
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    return service.get_customer(customer_id)


@router.post("", response_model=CustomerResponse, status_code=201)
async def create_customer(
    data: CustomerCreate,
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    return service.create_customer(data)


@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
):
    return service.update_customer(customer_id, data)


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: int,
    _admin: User = Depends(require_admin),
    service: CustomerService = Depends(get_customer_service),
):
    """Delete a customer that has no service orders (admin only)"""
    return service.delete_customer(customer_id)


# ============================================================================
# RELATED RECORDS
# ============================================================================


@router.get("/{customer_id}/service-orders")
async def get_customer_service_orders(
    customer_id: int,
    current_user: User = Depends(get_current_user),
    service: CustomerService = Depends(get_customer_service),
    db: Session = Depends(get_db),
):
    """Service orders placed by a customer, newest first"""
    customer = service.get_customer(customer_id)
    orders = (
        db.query(ServiceOrder)
        .filter(ServiceOrder.customer_id == customer.id)
        .order_by(ServiceOrder.created_at.desc(), ServiceOrder.id.desc())
        .all()
    )
    return [order_summary(o) for o in orders]
