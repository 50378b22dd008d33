"""Customer service - Business logic for customer operations"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Customer
from ...shared.pagination import Pagination, pagination_meta
from .repository import CustomerRepository
from .schemas import CustomerCreate, CustomerResponse, CustomerUpdate

logger = logging.getLogger(__name__)


class CustomerService:
    """Service layer for customer business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerRepository()

    def list_customers(self, pagination: Pagination, search: Optional[str] = None) -> dict:
        customers, total = self.repo.list_customers(self.db, pagination, search)
        return {
            "data": [CustomerResponse.model_validate(c) for c in customers],
            "pagination": pagination_meta(total, pagination),
        }

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.repo.get_by_id(self.db, customer_id)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
        return customer

    def create_customer(self, data: CustomerCreate) -> Customer:
        customer = self.repo.create(self.db, **data.model_dump())
        logger.info(f"🆕 Customer created: {customer.id} ({customer.name})")
        return customer

    def update_customer(self, customer_id: int, data: CustomerUpdate) -> Customer:
        customer = self.get_customer(customer_id)
        updates = data.model_dump(exclude_unset=True)
        if "name" in updates and not (updates["name"] or "").strip():
            raise HTTPException(status_code=400, detail="Name is required")
        return self.repo.update(self.db, customer, **updates)

    def delete_customer(self, customer_id: int) -> dict:
        customer = self.get_customer(customer_id)

        order_count = self.repo.count_orders(self.db, customer_id)
        if order_count:
            raise HTTPException(
                status_code=409,
                detail=f"Customer has {order_count} service order(s) and cannot be deleted",
            )

        self.repo.delete(self.db, customer)
        logger.info(f"🗑️ Customer deleted: {customer_id}")
        return {"message": "Customer deleted successfully"}
