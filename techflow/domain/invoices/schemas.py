"""Invoice domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...config import DEFAULT_CURRENCY, DEFAULT_TAX_RATE
from ...shared.validators import to_naive_utc

InvoiceStatus = Literal["draft", "sent", "paid", "void"]


class InvoiceItemCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., gt=0)
    unit_price_cents: int = Field(..., ge=0)


class InvoiceCreate(BaseModel):
    """Items default to the service order's line items when omitted"""

    service_order_id: int
    items: Optional[list[InvoiceItemCreate]] = None
    currency: str = Field(DEFAULT_CURRENCY, min_length=3, max_length=10)
    tax_rate: float = Field(DEFAULT_TAX_RATE, ge=0, le=100)
    discount_rate: float = Field(0, ge=0, le=100)
    notes: Optional[str] = None
    issued_at: Optional[datetime] = None
    due_at: Optional[datetime] = None

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v):
        return v.strip().upper()

    @field_validator("issued_at", "due_at")
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)


class InvoiceUpdate(BaseModel):
    items: Optional[list[InvoiceItemCreate]] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=10)
    tax_rate: Optional[float] = Field(None, ge=0, le=100)
    discount_rate: Optional[float] = Field(None, ge=0, le=100)
    notes: Optional[str] = None
    due_at: Optional[datetime] = None

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v):
        return v.strip().upper() if v else v

    @field_validator("due_at")
    @classmethod
    def normalize_due_at(cls, v):
        return to_naive_utc(v)


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class InvoiceItemResponse(BaseModel):
    id: int
    description: str
    quantity: int
    unit_price_cents: int
    total_cents: int

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    id: int
    public_id: str
    invoice_number: str
    service_order_id: int
    customer_id: int
    customer_name: Optional[str] = None
    currency: str
    status: str
    subtotal_cents: int
    discount_cents: int
    tax_cents: int
    total_cents: int
    tax_rate: float
    discount_rate: float
    notes: Optional[str] = None
    issued_at: Optional[datetime] = None
    due_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    is_overdue: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: list[InvoiceItemResponse] = []


class InvoiceListResponse(BaseModel):
    data: list[InvoiceResponse]
    pagination: dict
