"""Attachment router - files nested under a service order"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.pagination import parse_pagination
from .repository import SORT_COLUMNS
from .schemas import AttachmentListResponse, AttachmentResponse, AttachmentUpdate
from .service import AttachmentService

router = APIRouter(prefix="/service-orders/{order_id}/attachments", tags=["Attachments"])


def get_attachment_service(db: Session = Depends(get_db)) -> AttachmentService:
    return AttachmentService(db)


@router.post("", response_model=AttachmentResponse, status_code=201)
async def upload_attachment(
    order_id: int,
    file: UploadFile = File(...),
    file_type: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    service: AttachmentService = Depends(get_attachment_service),
):
    """Upload a photo, document or voice note to a service order"""
    return await service.upload(order_id, file, file_type)


@router.get("", response_model=AttachmentListResponse)
async def list_attachments(
    order_id: int,
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sortBy: Optional[str] = Query(None),
    sortOrder: Optional[str] = Query(None),
    file_type: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: AttachmentService = Depends(get_attachment_service),
):
    pagination = parse_pagination(
        page, limit, sortBy, sortOrder, valid_sort_fields=list(SORT_COLUMNS)
    )
    return service.list_attachments(order_id, pagination, file_type, search)


@router.get("/{attachment_id}", response_model=AttachmentResponse)
async def get_attachment(
    order_id: int,
    attachment_id: int,
    current_user: User = Depends(get_current_user),
    service: AttachmentService = Depends(get_attachment_service),
):
    return service.get_attachment(order_id, attachment_id)


@router.get("/{attachment_id}/download")
async def download_attachment(
    order_id: int,
    attachment_id: int,
    current_user: User = Depends(get_current_user),
    service: AttachmentService = Depends(get_attachment_service),
):
    return service.download(order_id, attachment_id)


@router.put("/{attachment_id}", response_model=AttachmentResponse)
async def update_attachment(
    order_id: int,
    attachment_id: int,
    data: AttachmentUpdate,
    current_user: User = Depends(get_current_user),
    service: AttachmentService = Depends(get_attachment_service),
):
    return service.update(order_id, attachment_id, data)


@router.delete("/{attachment_id}")
async def delete_attachment(
    order_id: int,
    attachment_id: int,
    current_user: User = Depends(get_current_user),
    service: AttachmentService = Depends(get_attachment_service),
):
    return service.delete(order_id, attachment_id)
