"""Reporting schemas - dashboard, analytics and service order report"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ..service_orders.schemas import ServiceOrderSummary


class DashboardResponse(BaseModel):
    total_orders: int
    in_progress: int
    completed_today: int
    active_technicians: int
    overdue_orders: int
    unread_notifications: int
    recent_orders: list[ServiceOrderSummary]


class TechnicianEfficiency(BaseModel):
    employee_id: int
    employee_name: str
    assigned_orders: int
    completed_orders: int
    efficiency_percentage: float


class TopPerformer(BaseModel):
    employee_id: Optional[int] = None
    employee_name: Optional[str] = None
    efficiency_percentage: float = 0


class ServiceTypeCount(BaseModel):
    id: int
    name: str
    count: int


class MonthlyTrend(BaseModel):
    month: str  # YYYY-MM
    total: int
    completed: int
    completion_rate: float


class CurrencyRevenue(BaseModel):
    invoiced_cents: int
    paid_cents: int
    outstanding_cents: int


class AnalyticsResponse(BaseModel):
    total_orders: int
    completed_orders: int
    completion_rate: float
    avg_completion_time_days: float
    technician_efficiency: list[TechnicianEfficiency]
    top_performer: TopPerformer
    counts_by_service_type: list[ServiceTypeCount]
    status_percentages: dict[str, float]
    monthly_trends: list[MonthlyTrend]
    revenue: dict[str, CurrencyRevenue]


class ServiceOrderReportRow(BaseModel):
    id: int
    description: Optional[str] = None
    status: str
    priority: str
    customer_name: Optional[str] = None
    service_type_name: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class ServiceOrderReportResponse(BaseModel):
    data: list[ServiceOrderReportRow]
    pagination: dict
