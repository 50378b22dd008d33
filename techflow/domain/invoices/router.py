"""Invoice router - FastAPI endpoints for invoices"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.pagination import parse_pagination
from .repository import SORT_COLUMNS
from .schemas import (
    InvoiceCreate,
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceStatusUpdate,
    InvoiceUpdate,
)
from .service import InvoiceService, invoice_response

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(db)


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    sortBy: Optional[str] = Query(None),
    sortOrder: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    customer_id: Optional[int] = Query(None),
    service_order_id: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    pagination = parse_pagination(
        page, limit, sortBy, sortOrder, valid_sort_fields=list(SORT_COLUMNS)
    )
    return service.list_invoices(
        pagination,
        search=search,
        status=status,
        customer_id=customer_id,
        service_order_id=service_order_id,
    )


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return invoice_response(service.get_invoice(invoice_id))


@router.get("/{invoice_id}/pdf")
async def get_invoice_pdf(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Download the invoice as a PDF"""
    return service.get_pdf(invoice_id)


@router.post("", response_model=InvoiceResponse, status_code=201)
async def create_invoice(
    data: InvoiceCreate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Create a draft invoice for a service order"""
    return service.create_invoice(data)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: int,
    data: InvoiceUpdate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.update_invoice(invoice_id, data)


@router.post("/{invoice_id}/status", response_model=InvoiceResponse)
async def change_invoice_status(
    invoice_id: int,
    data: InvoiceStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.change_status(invoice_id, data)


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.delete_invoice(invoice_id)
