"""Reporting router - dashboard, analytics and service order reports"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.pagination import parse_pagination
from ..service_orders.repository import SORT_COLUMNS
from .schemas import AnalyticsResponse, DashboardResponse, ServiceOrderReportResponse
from .service import ReportService

router = APIRouter(tags=["Reports"])


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    return ReportService(db)


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    days: Optional[int] = Query(None, description="Window for recent orders"),
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.get_dashboard(days)


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    return service.get_analytics()


@router.get("/reports/service-orders", response_model=ServiceOrderReportResponse)
async def service_order_report(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sortBy: Optional[str] = Query(None),
    sortOrder: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    customer_id: Optional[int] = Query(None),
    service_type_id: Optional[int] = Query(None),
    created_from: Optional[datetime] = Query(None),
    created_to: Optional[datetime] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    pagination = parse_pagination(
        page, limit, sortBy, sortOrder, valid_sort_fields=list(SORT_COLUMNS)
    )
    return service.service_order_report(
        pagination,
        search=search,
        status=status,
        priority=priority,
        customer_id=customer_id,
        service_type_id=service_type_id,
        created_from=created_from,
        created_to=created_to,
    )


@router.get("/reports/service-orders/export")
async def export_service_order_report(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    customer_id: Optional[int] = Query(None),
    service_type_id: Optional[int] = Query(None),
    created_from: Optional[datetime] = Query(None),
    created_to: Optional[datetime] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ReportService = Depends(get_report_service),
):
    """Download the service order report as CSV"""
    return service.export_service_orders_csv(
        search=search,
        status=status,
        priority=priority,
        customer_id=customer_id,
        service_type_id=service_type_id,
        created_from=created_from,
        created_to=created_to,
    )
