"""Customer repository - Database operations for customers"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Customer, ServiceOrder
from ...shared.pagination import Pagination, build_search_condition, paginate

SORT_COLUMNS = {
    "id": Customer.id,
    "name": Customer.name,
    "email": Customer.email,
    "company": Customer.company,
    "created_at": Customer.created_at,
}


class CustomerRepository:
    """Repository for customer database operations"""

    @staticmethod
    def list_customers(
        db: Session, pagination: Pagination, search: Optional[str] = None
    ) -> tuple[list[Customer], int]:
        query = db.query(Customer)
        condition = build_search_condition(
            search, [Customer.name, Customer.email, Customer.company, Customer.phone]
        )
        if condition is not None:
            query = query.filter(condition)
        return paginate(query, pagination, SORT_COLUMNS)

    @staticmethod
    def get_by_id(db: Session, customer_id: int) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.id == customer_id).first()

    @staticmethod
    def create(db: Session, **customer_data) -> Customer:
        customer = Customer(**customer_data)
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def update(db: Session, customer: Customer, **updates) -> Customer:
        for key, value in updates.items():
            if hasattr(customer, key):
                setattr(customer, key, value)
        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def delete(db: Session, customer: Customer) -> None:
        db.delete(customer)
        db.commit()

    @staticmethod
    def count_orders(db: Session, customer_id: int) -> int:
        return db.query(ServiceOrder).filter(ServiceOrder.customer_id == customer_id).count()
