"""Customer domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email, validate_phone


class CustomerCreate(BaseModel):
    """Schema for creating a new customer"""

    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None
    tin_number: Optional[str] = Field(None, max_length=50)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v) if v else v

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) if v else v


class CustomerUpdate(BaseModel):
    """Schema for updating an existing customer (all fields optional)"""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None
    tin_number: Optional[str] = Field(None, max_length=50)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v) if v else v

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v) if v else v


class CustomerResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None
    tin_number: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CustomerListResponse(BaseModel):
    data: list[CustomerResponse]
    pagination: dict
