"""Service order router - FastAPI endpoints for service orders"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.pagination import parse_pagination
from .overdue import check_overdue_orders, list_overdue_orders
from .recurrence import generate_due_recurring_orders
from .repository import SORT_COLUMNS
from .schemas import (
    AssignmentCreate,
    AssignmentResponse,
    ItemsResponse,
    OverdueCheckResponse,
    RecurrenceSet,
    RecurringOrderResponse,
    RecurringRunResponse,
    ServiceOrderCreate,
    ServiceOrderDetail,
    ServiceOrderItemCreate,
    ServiceOrderListResponse,
    ServiceOrderSummary,
    ServiceOrderUpdate,
    StatusChangeRequest,
    StatusHistoryResponse,
)
from .serializers import order_summary
from .service import ServiceOrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/service-orders", tags=["Service Orders"])


def get_service_order_service(db: Session = Depends(get_db)) -> ServiceOrderService:
    """Dependency injection for ServiceOrderService"""
    return ServiceOrderService(db)


@router.get("", response_model=ServiceOrderListResponse)
async def list_service_orders(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sortBy: Optional[str] = Query(None),
    sortOrder: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    customer_id: Optional[int] = Query(None),
    service_type_id: Optional[int] = Query(None),
    employee_id: Optional[int] = Query(None),
    overdue: bool = Query(False),
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    """List service orders. An empty page is returned as an empty list"""
    pagination = parse_pagination(
        page, limit, sortBy, sortOrder, valid_sort_fields=list(SORT_COLUMNS)
    )
    return service.list_orders(
        pagination,
        search=search,
        status=status,
        priority=priority,
        customer_id=customer_id,
        service_type_id=service_type_id,
        employee_id=employee_id,
        overdue=overdue,
    )


# ============================================================================
# SCHEDULED JOBS (manual triggers, declared before /{order_id})
# ============================================================================


@router.get("/overdue", response_model=list[ServiceOrderSummary])
async def get_overdue_service_orders(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Orders past their due date that are not completed or closed"""
    return [order_summary(o) for o in list_overdue_orders(db)]


@router.post("/overdue/check", response_model=OverdueCheckResponse)
async def run_overdue_check(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    logger.info(f"⏰ Overdue check triggered by {current_user.email}")
    return check_overdue_orders(db)


@router.post("/recurring/run", response_model=RecurringRunResponse)
async def run_recurring_orders(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    logger.info(f"🔁 Recurring order generation triggered by {current_user.email}")
    orders = generate_due_recurring_orders(db)
    return {"created": len(orders), "order_ids": [o.id for o in orders]}


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("/{order_id}", response_model=ServiceOrderDetail)
async def get_service_order(
    order_id: int,
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    return service.get_order_detail(order_id)


@router.post("", response_model=ServiceOrderDetail, status_code=201)
async def create_service_order(
    data: ServiceOrderCreate,
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    return service.create_order(data)


@router.put("/{order_id}", response_model=ServiceOrderDetail)
async def update_service_order(
    order_id: int,
    data: ServiceOrderUpdate,
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    return service.update_order(order_id, data)


@router.post("/{order_id}/status", response_model=ServiceOrderDetail)
async def change_service_order_status(
    order_id: int,
    data: StatusChangeRequest,
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    """Move the order through its lifecycle"""
    return service.change_status(order_id, data)


@router.delete("/{order_id}")
async def delete_service_order(
    order_id: int,
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    return service.delete_order(order_id)


# ============================================================================
# ASSIGNMENTS
# ============================================================================


@router.get("/{order_id}/assignments", response_model=list[AssignmentResponse])
async def list_assignments(
    order_id: int,
    active_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    return service.list_assignments(order_id, active_only)


@router.post("/{order_id}/assignments", response_model=AssignmentResponse, status_code=201)
async def assign_employee(
    order_id: int,
    data: AssignmentCreate,
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    return service.assign_employee(order_id, data)


@router.delete("/{order_id}/assignments/{employee_id}", response_model=AssignmentResponse)
async def unassign_employee(
    order_id: int,
    employee_id: int,
    comment: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    return service.unassign_employee(order_id, employee_id, comment)


# ============================================================================
# ITEMS, HISTORY, RECURRENCE
# ============================================================================


@router.get("/{order_id}/items", response_model=ItemsResponse)
async def list_items(
    order_id: int,
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    return service.list_items(order_id)


@router.post("/{order_id}/items", response_model=ItemsResponse, status_code=201)
async def add_item(
    order_id: int,
    data: ServiceOrderItemCreate,
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    return service.add_item(order_id, data)


@router.delete("/{order_id}/items/{item_id}", response_model=ItemsResponse)
async def delete_item(
    order_id: int,
    item_id: int,
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    return service.delete_item(order_id, item_id)


@router.get("/{order_id}/history", response_model=list[StatusHistoryResponse])
async def get_status_history(
    order_id: int,
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    return service.get_history(order_id)


@router.put("/{order_id}/recurrence", response_model=RecurringOrderResponse)
async def set_recurrence(
    order_id: int,
    data: RecurrenceSet,
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    return service.set_recurrence(order_id, data)


@router.delete("/{order_id}/recurrence")
async def remove_recurrence(
    order_id: int,
    current_user: User = Depends(get_current_user),
    service: ServiceOrderService = Depends(get_service_order_service),
):
    return service.remove_recurrence(order_id)
