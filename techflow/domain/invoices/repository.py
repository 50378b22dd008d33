"""Invoice repository - Database operations for invoices"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models_invoice import Invoice
from ...shared.pagination import Pagination, build_search_condition, paginate

SORT_COLUMNS = {
    "id": Invoice.id,
    "invoice_number": Invoice.invoice_number,
    "status": Invoice.status,
    "total_cents": Invoice.total_cents,
    "due_at": Invoice.due_at,
    "created_at": Invoice.created_at,
}


class InvoiceRepository:
    @staticmethod
    def list_invoices(
        db: Session,
        pagination: Pagination,
        search: Optional[str] = None,
        status: Optional[str] = None,
        customer_id: Optional[int] = None,
        service_order_id: Optional[int] = None,
    ) -> tuple[list[Invoice], int]:
        query = db.query(Invoice).options(
            selectinload(Invoice.items), selectinload(Invoice.customer)
        )
        condition = build_search_condition(search, [Invoice.invoice_number, Invoice.notes])
        if condition is not None:
            query = query.filter(condition)
        if status:
            query = query.filter(Invoice.status == status)
        if customer_id:
            query = query.filter(Invoice.customer_id == customer_id)
        if service_order_id:
            query = query.filter(Invoice.service_order_id == service_order_id)
        return paginate(query, pagination, SORT_COLUMNS)

    @staticmethod
    def get_by_id(db: Session, invoice_id: int) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.id == invoice_id).first()

    @staticmethod
    def numbers_for_year(db: Session, year: int) -> list[str]:
        rows = (
            db.query(Invoice.invoice_number)
            .filter(Invoice.invoice_number.like(f"INV-{year}-%"))
            .all()
        )
        return [row[0] for row in rows]
