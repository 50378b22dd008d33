"""Service order domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import to_naive_utc

Priority = Literal["low", "medium", "high"]
OrderStatus = Literal["new", "assigned", "in_progress", "completed", "closed"]
RecurrenceType = Literal["daily", "weekly", "monthly"]


# ============================================================================
# REQUESTS
# ============================================================================


class ServiceOrderItemCreate(BaseModel):
    service_type_id: int
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class AssignmentCreate(BaseModel):
    employee_id: int
    role_in_order: Optional[str] = Field(None, max_length=50)
    is_lead: bool = False
    notes: Optional[str] = None


class RecurrenceSet(BaseModel):
    recurrence_type: RecurrenceType
    next_due_date: datetime
    end_date: Optional[datetime] = None

    @field_validator("next_due_date", "end_date")
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)


class ServiceOrderCreate(BaseModel):
    """Schema for creating a new service order"""

    customer_id: int
    service_type_id: int
    description: Optional[str] = None
    priority: Priority = "medium"
    due_date: Optional[datetime] = None
    items: list[ServiceOrderItemCreate] = []
    assignee_ids: list[int] = []
    recurrence: Optional[RecurrenceSet] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v):
        return to_naive_utc(v)


class ServiceOrderUpdate(BaseModel):
    """Partial update; a status change goes through the lifecycle"""

    customer_id: Optional[int] = None
    service_type_id: Optional[int] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    due_date: Optional[datetime] = None
    status: Optional[OrderStatus] = None
    comment: Optional[str] = None
    changed_by: Optional[int] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v):
        return to_naive_utc(v)


class StatusChangeRequest(BaseModel):
    status: OrderStatus
    comment: Optional[str] = None
    changed_by: Optional[int] = None


# ============================================================================
# RESPONSES
# ============================================================================


class AssignedEmployeeSummary(BaseModel):
    id: int
    name: str
    email: str


class AttachmentSummary(BaseModel):
    id: int
    file_path: str
    file_type: str
    original_filename: Optional[str] = None


class ServiceOrderSummary(BaseModel):
    id: int
    customer_id: int
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    service_type_id: int
    service_type_name: Optional[str] = None
    description: Optional[str] = None
    status: str
    priority: str
    lead_employee_id: Optional[int] = None
    due_date: Optional[datetime] = None
    is_overdue: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    assigned_employees: list[AssignedEmployeeSummary] = []
    attachments: list[AttachmentSummary] = []


class ServiceOrderListResponse(BaseModel):
    data: list[ServiceOrderSummary]
    pagination: dict


class ServiceOrderItemResponse(BaseModel):
    id: int
    order_id: int
    service_type_id: int
    service_type_name: Optional[str] = None
    unit_price: Decimal
    quantity: int
    total_price: Decimal


class ItemsResponse(BaseModel):
    items: list[ServiceOrderItemResponse]
    items_total: Decimal


class AssignmentResponse(BaseModel):
    id: int
    order_id: int
    employee_id: Optional[int] = None
    employee_name: Optional[str] = None
    employee_email: Optional[str] = None
    role_in_order: Optional[str] = None
    is_lead: bool = False
    is_active: bool
    assigned_at: Optional[datetime] = None
    unassigned_at: Optional[datetime] = None
    notes: Optional[str] = None


class StatusHistoryResponse(BaseModel):
    id: int
    order_id: int
    old_status: Optional[str] = None
    new_status: str
    changed_at: Optional[datetime] = None
    changed_by: Optional[int] = None
    comment: Optional[str] = None

    class Config:
        from_attributes = True


class RecurringOrderResponse(BaseModel):
    id: int
    order_id: int
    recurrence_type: str
    start_date: Optional[datetime] = None
    next_due_date: datetime
    end_date: Optional[datetime] = None
    is_active: bool
    last_generated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ServiceOrderDetail(ServiceOrderSummary):
    assigned_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    items: list[ServiceOrderItemResponse] = []
    items_total: Decimal = Decimal("0.00")
    assignments: list[AssignmentResponse] = []
    status_history: list[StatusHistoryResponse] = []
    recurring_schedule: Optional[RecurringOrderResponse] = None


class OverdueCheckResponse(BaseModel):
    overdue_orders: int
    notifications_created: int


class RecurringRunResponse(BaseModel):
    created: int
    order_ids: list[int]
