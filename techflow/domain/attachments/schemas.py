"""Attachment domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AttachmentUpdate(BaseModel):
    """file_type and filename are checked by the service so bad values give 400"""

    file_type: Optional[str] = None
    original_filename: Optional[str] = Field(None, max_length=255)


class AttachmentResponse(BaseModel):
    id: int
    order_id: int
    file_path: str
    original_filename: Optional[str] = None
    content_type: Optional[str] = None
    size_bytes: Optional[int] = None
    file_type: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AttachmentListResponse(BaseModel):
    data: list[AttachmentResponse]
    pagination: dict
