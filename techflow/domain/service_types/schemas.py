"""Service type domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import slugify


class ServiceTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("slug")
    @classmethod
    def normalize_slug(cls, v):
        if v is None:
            return v
        slug = slugify(v)
        if not slug:
            raise ValueError("Slug must contain letters or digits")
        return slug


class ServiceTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None

    @field_validator("slug")
    @classmethod
    def normalize_slug(cls, v):
        if v is None:
            return v
        slug = slugify(v)
        if not slug:
            raise ValueError("Slug must contain letters or digits")
        return slug


class ServiceTypeResponse(BaseModel):
    id: int
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ServiceTypeListResponse(BaseModel):
    data: list[ServiceTypeResponse]
    pagination: dict


class ServiceTypeItemResponse(BaseModel):
    """Service order line item that uses a service type"""

    id: int
    order_id: int
    service_type_id: int
    unit_price: Decimal
    quantity: int
    total_price: Decimal

    class Config:
        from_attributes = True


# ============================================================================
# TECHNICIAN SKILLS
# ============================================================================


class TechnicianServiceTypeCreate(BaseModel):
    employee_id: int
    service_type_id: int


class TechnicianServiceTypeUpdate(BaseModel):
    """Move a mapping to another employee and/or service type"""

    employee_id: Optional[int] = None
    service_type_id: Optional[int] = None


class TechnicianServiceTypeResponse(BaseModel):
    employee_id: int
    service_type_id: int
    employee_name: Optional[str] = None
    service_type_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
