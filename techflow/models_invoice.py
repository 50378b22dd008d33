"""
Invoice Models for Service Order Billing
"""

import uuid

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

INVOICE_STATUSES = ["draft", "sent", "paid", "void"]


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class Invoice(Base):
    """Invoice issued to a customer for a service order"""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    # Public UUID for sharing links (prevents enumeration)
    public_id = Column(
        String(36), unique=True, nullable=False, index=True, default=generate_public_id
    )
    invoice_number = Column(String(50), unique=True, nullable=False, index=True)
    service_order_id = Column(
        Integer, ForeignKey("service_orders.id"), nullable=False, index=True
    )
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)

    # Amounts are stored in minor units (cents) to avoid float rounding
    currency = Column(String(10), default="ETB", nullable=False)
    subtotal_cents = Column(Integer, default=0, nullable=False)
    discount_cents = Column(Integer, default=0, nullable=False)
    tax_cents = Column(Integer, default=0, nullable=False)
    total_cents = Column(Integer, default=0, nullable=False)
    tax_rate = Column(Float, default=0, nullable=False)  # Percentage
    discount_rate = Column(Float, default=0, nullable=False)  # Percentage

    # Status: draft → sent → paid, or void
    status = Column(String(20), default="draft", nullable=False, index=True)
    notes = Column(Text, nullable=True)

    # Dates
    issued_at = Column(DateTime, nullable=True)
    due_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    service_order = relationship("ServiceOrder")
    customer = relationship("Customer")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
    )


class InvoiceItem(Base):
    """Line item on an invoice"""

    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(
        Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price_cents = Column(Integer, nullable=False)
    total_cents = Column(Integer, nullable=False)

    invoice = relationship("Invoice", back_populates="items")
