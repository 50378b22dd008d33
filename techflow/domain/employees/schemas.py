"""Employee domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email, validate_phone

Specification = Literal["technician", "supervisor", "manager"]
EmployeeStatus = Literal["active", "inactive"]


class EmployeeCreate(BaseModel):
    """Schema for creating a new employee"""

    name: str = Field(..., min_length=1, max_length=100)
    email: str
    phone: Optional[str] = None
    specification: Specification = "technician"
    status: EmployeeStatus = "active"

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) if v else v


class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = None
    specification: Optional[Specification] = None
    status: Optional[EmployeeStatus] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v) if v else v

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) if v else v


class EmployeeResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    specification: str
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmployeeListResponse(BaseModel):
    data: list[EmployeeResponse]
    pagination: dict


class AssignedEmployeeResponse(EmployeeResponse):
    """Employee as seen from a service order assignment"""

    role_in_order: Optional[str] = None
    assigned_at: Optional[datetime] = None
    is_lead: bool = False


class WorkloadResponse(BaseModel):
    employee: EmployeeResponse
    active_assignments: int
    orders_by_status: dict[str, int]
    active_order_ids: list[int]
