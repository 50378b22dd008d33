"""Invoice service - Billing for completed service orders"""

import logging
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...cache import invalidate_analytics_cache
from ...config import INVOICE_DUE_DAYS
from ...models import ServiceOrder
from ...models_invoice import Invoice, InvoiceItem
from ...services.invoice_pdf import render_invoice_pdf
from ...shared.pagination import Pagination, pagination_meta
from .repository import InvoiceRepository
from .schemas import (
    InvoiceCreate,
    InvoiceItemCreate,
    InvoiceItemResponse,
    InvoiceResponse,
    InvoiceStatusUpdate,
    InvoiceUpdate,
)

logger = logging.getLogger(__name__)

INVOICE_TRANSITIONS = {
    "draft": ["sent", "void"],
    "sent": ["paid", "void"],
    "paid": [],
    "void": [],
}


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_totals(items: list, tax_rate: float, discount_rate: float) -> dict:
    """
    Invoice totals in cents.

    The discount applies to the subtotal and tax to the discounted amount,
    each rounded half up to a whole cent.
    """
    subtotal = sum(item.quantity * item.unit_price_cents for item in items)
    discount = _round_half_up(Decimal(subtotal) * Decimal(str(discount_rate)) / 100)
    taxable = max(0, subtotal - discount)
    tax = _round_half_up(Decimal(taxable) * Decimal(str(tax_rate)) / 100)
    return {
        "subtotal_cents": subtotal,
        "discount_cents": discount,
        "tax_cents": tax,
        "total_cents": subtotal - discount + tax,
    }


def is_invoice_overdue(invoice: Invoice, now: Optional[datetime] = None) -> bool:
    return (
        invoice.status == "sent"
        and invoice.due_at is not None
        and invoice.due_at < (now or datetime.utcnow())
    )


def invoice_response(invoice: Invoice) -> InvoiceResponse:
    return InvoiceResponse(
        id=invoice.id,
        public_id=invoice.public_id,
        invoice_number=invoice.invoice_number,
        service_order_id=invoice.service_order_id,
        customer_id=invoice.customer_id,
        customer_name=invoice.customer.name if invoice.customer else None,
        currency=invoice.currency,
        status=invoice.status,
        subtotal_cents=invoice.subtotal_cents,
        discount_cents=invoice.discount_cents,
        tax_cents=invoice.tax_cents,
        total_cents=invoice.total_cents,
        tax_rate=invoice.tax_rate,
        discount_rate=invoice.discount_rate,
        notes=invoice.notes,
        issued_at=invoice.issued_at,
        due_at=invoice.due_at,
        paid_at=invoice.paid_at,
        is_overdue=is_invoice_overdue(invoice),
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
        items=[InvoiceItemResponse.model_validate(i) for i in invoice.items],
    )


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = InvoiceRepository()

    def get_invoice(self, invoice_id: int) -> Invoice:
        invoice = self.repo.get_by_id(self.db, invoice_id)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return invoice

    def list_invoices(self, pagination: Pagination, **filters) -> dict:
        invoices, total = self.repo.list_invoices(self.db, pagination, **filters)
        return {
            "data": [invoice_response(i) for i in invoices],
            "pagination": pagination_meta(total, pagination),
        }

    def next_invoice_number(self, now: Optional[datetime] = None) -> str:
        """INV-{year}-{sequence:04d}, sequence restarting every year"""
        year = (now or datetime.utcnow()).year
        sequences = []
        for number in self.repo.numbers_for_year(self.db, year):
            try:
                sequences.append(int(number.rsplit("-", 1)[1]))
            except (IndexError, ValueError):
                continue
        return f"INV-{year}-{max(sequences, default=0) + 1:04d}"

    @staticmethod
    def _items_from_order(order: ServiceOrder) -> list[InvoiceItemCreate]:
        return [
            InvoiceItemCreate(
                description=item.service_type.name if item.service_type else "Service",
                quantity=item.quantity,
                unit_price_cents=_round_half_up(Decimal(item.unit_price) * 100),
            )
            for item in order.items
        ]

    @staticmethod
    def _apply_items(invoice: Invoice, items: list[InvoiceItemCreate]):
        invoice.items.clear()
        for item in items:
            invoice.items.append(
                InvoiceItem(
                    description=item.description,
                    quantity=item.quantity,
                    unit_price_cents=item.unit_price_cents,
                    total_cents=item.quantity * item.unit_price_cents,
                )
            )

    @staticmethod
    def _apply_totals(invoice: Invoice):
        totals = calculate_totals(invoice.items, invoice.tax_rate, invoice.discount_rate)
        for key, value in totals.items():
            setattr(invoice, key, value)

    def _commit(self, action: str):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to {action}: {e}")
            raise
        invalidate_analytics_cache()

    def create_invoice(self, data: InvoiceCreate) -> InvoiceResponse:
        order = self.db.query(ServiceOrder).filter(ServiceOrder.id == data.service_order_id).first()
        if not order:
            raise HTTPException(status_code=404, detail="Service order not found")

        items = data.items if data.items is not None else self._items_from_order(order)
        if not items:
            raise HTTPException(status_code=400, detail="Invoice must have at least one item")

        now = datetime.utcnow()
        invoice = Invoice(
            invoice_number=self.next_invoice_number(now),
            service_order_id=order.id,
            customer_id=order.customer_id,
            currency=data.currency,
            tax_rate=data.tax_rate,
            discount_rate=data.discount_rate,
            status="draft",
            notes=data.notes,
            issued_at=data.issued_at,
            due_at=data.due_at or (data.issued_at or now) + timedelta(days=INVOICE_DUE_DAYS),
        )
        self._apply_items(invoice, items)
        self._apply_totals(invoice)

        self.db.add(invoice)
        self._commit("create invoice")
        self.db.refresh(invoice)

        logger.info(
            f"🧾 Invoice {invoice.invoice_number} created for service order {order.id} "
            f"({invoice.total_cents} {invoice.currency} cents)"
        )
        return invoice_response(invoice)

    def update_invoice(self, invoice_id: int, data: InvoiceUpdate) -> InvoiceResponse:
        invoice = self.get_invoice(invoice_id)
        if invoice.status != "draft":
            raise HTTPException(status_code=400, detail="Only draft invoices can be edited")

        updates = data.model_dump(exclude_unset=True)
        if "items" in updates:
            if not data.items:
                raise HTTPException(status_code=400, detail="Invoice must have at least one item")
            self._apply_items(invoice, data.items)
        for field in ("currency", "tax_rate", "discount_rate"):
            if field in updates:
                if updates[field] is None:
                    raise HTTPException(status_code=400, detail=f"{field} cannot be empty")
                setattr(invoice, field, updates[field])
        if "notes" in updates:
            invoice.notes = updates["notes"]
        if "due_at" in updates:
            invoice.due_at = updates["due_at"]

        self._apply_totals(invoice)
        self._commit("update invoice")
        self.db.refresh(invoice)
        return invoice_response(invoice)

    def change_status(self, invoice_id: int, data: InvoiceStatusUpdate) -> InvoiceResponse:
        invoice = self.get_invoice(invoice_id)
        new_status = data.status
        if invoice.status == new_status:
            return invoice_response(invoice)

        allowed = INVOICE_TRANSITIONS[invoice.status]
        if new_status not in allowed:
            raise HTTPException(
                status_code=400,
                detail=(
                    f"Cannot change invoice status from '{invoice.status}' to '{new_status}'. "
                    f"Allowed: {', '.join(allowed) or 'none'}"
                ),
            )

        now = datetime.utcnow()
        if new_status == "sent" and invoice.issued_at is None:
            invoice.issued_at = now
        if new_status == "paid":
            invoice.paid_at = now

        old_status = invoice.status
        invoice.status = new_status
        self._commit("change invoice status")
        self.db.refresh(invoice)

        logger.info(f"🧾 Invoice {invoice.invoice_number}: {old_status} → {new_status}")
        return invoice_response(invoice)

    def delete_invoice(self, invoice_id: int) -> dict:
        invoice = self.get_invoice(invoice_id)
        if invoice.status == "paid":
            raise HTTPException(status_code=409, detail="Paid invoices cannot be deleted")

        self.db.delete(invoice)
        self._commit("delete invoice")
        logger.info(f"🗑️ Invoice {invoice.invoice_number} deleted")
        return {"message": "Invoice deleted successfully"}

    def get_pdf(self, invoice_id: int) -> Response:
        invoice = self.get_invoice(invoice_id)
        pdf_bytes = render_invoice_pdf(invoice)
        return Response(
            content=pdf_bytes,
            media_type="application/pdf",
            headers={
                "Content-Disposition": f'inline; filename="{invoice.invoice_number}.pdf"'
            },
        )
