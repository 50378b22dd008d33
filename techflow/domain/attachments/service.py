"""Attachment service - Upload, download and manage service order files"""

import logging
from typing import Optional

from fastapi import HTTPException, UploadFile
from fastapi.responses import FileResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import STORAGE_BACKEND
from ...models import ATTACHMENT_TYPES, Attachment, ServiceOrder
from ...services import storage
from ...shared.pagination import Pagination, pagination_meta
from .repository import AttachmentRepository
from .schemas import AttachmentResponse, AttachmentUpdate

logger = logging.getLogger(__name__)


def _check_file_type(file_type: Optional[str]) -> Optional[str]:
    if file_type is not None and file_type not in ATTACHMENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file_type '{file_type}'. Valid types: {', '.join(ATTACHMENT_TYPES)}",
        )
    return file_type


class AttachmentService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AttachmentRepository()

    def _require_order(self, order_id: int) -> ServiceOrder:
        order = self.db.query(ServiceOrder).filter(ServiceOrder.id == order_id).first()
        if not order:
            raise HTTPException(status_code=404, detail="Service order not found")
        return order

    def get_attachment(self, order_id: int, attachment_id: int) -> Attachment:
        self._require_order(order_id)
        attachment = self.repo.get_for_order(self.db, order_id, attachment_id)
        if not attachment:
            raise HTTPException(
                status_code=404, detail="Attachment not found for this service order"
            )
        return attachment

    def list_attachments(
        self,
        order_id: int,
        pagination: Pagination,
        file_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> dict:
        self._require_order(order_id)
        _check_file_type(file_type)
        attachments, total = self.repo.list_for_order(
            self.db, order_id, pagination, file_type, search
        )
        return {
            "data": [AttachmentResponse.model_validate(a) for a in attachments],
            "pagination": pagination_meta(total, pagination),
        }

    async def upload(
        self, order_id: int, file: UploadFile, file_type: Optional[str] = None
    ) -> Attachment:
        self._require_order(order_id)
        _check_file_type(file_type)

        contents = await file.read()
        filename = storage.validate_upload(file.filename, file.content_type, len(contents))
        key = storage.build_key(order_id, filename)
        storage.save_file(key, contents, file.content_type)

        try:
            attachment = self.repo.create(
                self.db,
                order_id=order_id,
                file_path=key,
                original_filename=filename,
                content_type=file.content_type,
                size_bytes=len(contents),
                file_type=file_type or storage.file_type_for(file.content_type),
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            storage.delete_file(key)
            logger.error(f"❌ Failed to record attachment for order {order_id}: {e}")
            raise

        logger.info(f"📎 Attachment {attachment.id} uploaded to service order {order_id}")
        return attachment

    def download(self, order_id: int, attachment_id: int):
        """Stream a local file, or redirect to a short-lived R2 URL"""
        attachment = self.get_attachment(order_id, attachment_id)

        if STORAGE_BACKEND == "r2":
            return RedirectResponse(storage.generate_presigned_url(attachment.file_path))

        path = storage.local_path(attachment.file_path)
        if not path.exists():
            logger.error(f"❌ Stored file missing for attachment {attachment.id}: {path}")
            raise HTTPException(status_code=404, detail="Stored file not found")

        return FileResponse(
            path,
            media_type=attachment.content_type or "application/octet-stream",
            filename=attachment.original_filename or path.name,
        )

    def update(self, order_id: int, attachment_id: int, data: AttachmentUpdate) -> Attachment:
        attachment = self.get_attachment(order_id, attachment_id)
        updates = data.model_dump(exclude_unset=True)

        if "file_type" in updates:
            if updates["file_type"] is None:
                raise HTTPException(status_code=400, detail="file_type cannot be empty")
            attachment.file_type = _check_file_type(updates["file_type"])
        if "original_filename" in updates:
            attachment.original_filename = storage.validate_filename(updates["original_filename"])

        self.db.commit()
        self.db.refresh(attachment)
        return attachment

    def delete(self, order_id: int, attachment_id: int) -> dict:
        attachment = self.get_attachment(order_id, attachment_id)
        key = attachment.file_path
        self.repo.delete(self.db, attachment)
        storage.delete_file(key)
        logger.info(f"🗑️ Attachment {attachment_id} deleted from service order {order_id}")
        return {"message": "Attachment deleted successfully"}
