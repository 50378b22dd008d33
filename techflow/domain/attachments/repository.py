"""Attachment repository - Database operations for service order attachments"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Attachment
from ...shared.pagination import Pagination, build_search_condition, paginate

SORT_COLUMNS = {
    "id": Attachment.id,
    "file_type": Attachment.file_type,
    "original_filename": Attachment.original_filename,
    "size_bytes": Attachment.size_bytes,
    "created_at": Attachment.created_at,
}


class AttachmentRepository:
    @staticmethod
    def list_for_order(
        db: Session,
        order_id: int,
        pagination: Pagination,
        file_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Attachment], int]:
        query = db.query(Attachment).filter(Attachment.order_id == order_id)
        if file_type:
            query = query.filter(Attachment.file_type == file_type)
        condition = build_search_condition(search, [Attachment.original_filename])
        if condition is not None:
            query = query.filter(condition)
        return paginate(query, pagination, SORT_COLUMNS)

    @staticmethod
    def get_for_order(db: Session, order_id: int, attachment_id: int) -> Optional[Attachment]:
        return (
            db.query(Attachment)
            .filter(Attachment.id == attachment_id, Attachment.order_id == order_id)
            .first()
        )

    @staticmethod
    def create(db: Session, **data) -> Attachment:
        attachment = Attachment(**data)
        db.add(attachment)
        db.commit()
        db.refresh(attachment)
        return attachment

    @staticmethod
    def delete(db: Session, attachment: Attachment) -> None:
        db.delete(attachment)
        db.commit()
