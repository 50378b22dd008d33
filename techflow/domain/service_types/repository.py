"""Service type repository - Database operations for service types and skills"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import (
    ServiceOrder,
    ServiceOrderItem,
    ServiceType,
    TechnicianServiceType,
)
from ...shared.pagination import Pagination, build_search_condition, paginate

SORT_COLUMNS = {
    "id": ServiceType.id,
    "name": ServiceType.name,
    "slug": ServiceType.slug,
    "created_at": ServiceType.created_at,
}


class ServiceTypeRepository:
    """Repository for service type database operations"""

    @staticmethod
    def list_service_types(
        db: Session, pagination: Pagination, search: Optional[str] = None
    ) -> tuple[list[ServiceType], int]:
        query = db.query(ServiceType)
        condition = build_search_condition(
            search, [ServiceType.name, ServiceType.slug, ServiceType.description]
        )
        if condition is not None:
            query = query.filter(condition)
        return paginate(query, pagination, SORT_COLUMNS)

    @staticmethod
    def get_by_id(db: Session, service_type_id: int) -> Optional[ServiceType]:
        return db.query(ServiceType).filter(ServiceType.id == service_type_id).first()

    @staticmethod
    def get_by_slug(db: Session, slug: str) -> Optional[ServiceType]:
        return db.query(ServiceType).filter(ServiceType.slug == slug).first()

    @staticmethod
    def get_by_name(db: Session, name: str) -> Optional[ServiceType]:
        return db.query(ServiceType).filter(ServiceType.name == name).first()

    @staticmethod
    def get_by_employee(db: Session, employee_id: int) -> list[ServiceType]:
        return (
            db.query(ServiceType)
            .join(TechnicianServiceType, TechnicianServiceType.service_type_id == ServiceType.id)
            .filter(TechnicianServiceType.employee_id == employee_id)
            .order_by(ServiceType.name)
            .all()
        )

    @staticmethod
    def get_by_customer(db: Session, customer_id: int) -> list[ServiceType]:
        return (
            db.query(ServiceType)
            .join(ServiceOrder, ServiceOrder.service_type_id == ServiceType.id)
            .filter(ServiceOrder.customer_id == customer_id)
            .distinct()
            .order_by(ServiceType.name)
            .all()
        )

    @staticmethod
    def get_items(db: Session, service_type_id: int) -> list[ServiceOrderItem]:
        return (
            db.query(ServiceOrderItem)
            .filter(ServiceOrderItem.service_type_id == service_type_id)
            .order_by(ServiceOrderItem.id)
            .all()
        )

    @staticmethod
    def count_references(db: Session, service_type_id: int) -> int:
        """Service orders and order items that point at the service type"""
        orders = db.query(ServiceOrder).filter(ServiceOrder.service_type_id == service_type_id).count()
        items = (
            db.query(ServiceOrderItem)
            .filter(ServiceOrderItem.service_type_id == service_type_id)
            .count()
        )
        return orders + items

    @staticmethod
    def create(db: Session, **data) -> ServiceType:
        service_type = ServiceType(**data)
        db.add(service_type)
        db.commit()
        db.refresh(service_type)
        return service_type

    @staticmethod
    def update(db: Session, service_type: ServiceType, **updates) -> ServiceType:
        for key, value in updates.items():
            if hasattr(service_type, key):
                setattr(service_type, key, value)
        db.commit()
        db.refresh(service_type)
        return service_type

    @staticmethod
    def delete(db: Session, service_type: ServiceType) -> None:
        db.delete(service_type)
        db.commit()


class TechnicianServiceTypeRepository:
    """Repository for the employee to service type skill mapping"""

    @staticmethod
    def list_all(db: Session) -> list[TechnicianServiceType]:
        return (
            db.query(TechnicianServiceType)
            .order_by(TechnicianServiceType.employee_id, TechnicianServiceType.service_type_id)
            .all()
        )

    @staticmethod
    def get(db: Session, employee_id: int, service_type_id: int) -> Optional[TechnicianServiceType]:
        return (
            db.query(TechnicianServiceType)
            .filter(
                TechnicianServiceType.employee_id == employee_id,
                TechnicianServiceType.service_type_id == service_type_id,
            )
            .first()
        )
