"""Service type service - Business logic for service types and technician skills"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Customer, Employee, ServiceType, TechnicianServiceType
from ...shared.pagination import Pagination, pagination_meta
from ...shared.validators import slugify
from .repository import ServiceTypeRepository, TechnicianServiceTypeRepository
from .schemas import (
    ServiceTypeCreate,
    ServiceTypeResponse,
    ServiceTypeUpdate,
    TechnicianServiceTypeCreate,
    TechnicianServiceTypeResponse,
    TechnicianServiceTypeUpdate,
)

logger = logging.getLogger(__name__)


class ServiceTypeService:
    """Service layer for service type business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceTypeRepository()

    def list_service_types(self, pagination: Pagination, search: Optional[str] = None) -> dict:
        service_types, total = self.repo.list_service_types(self.db, pagination, search)
        return {
            "data": [ServiceTypeResponse.model_validate(s) for s in service_types],
            "pagination": pagination_meta(total, pagination),
        }

    def get_service_type(self, service_type_id: int) -> ServiceType:
        service_type = self.repo.get_by_id(self.db, service_type_id)
        if not service_type:
            raise HTTPException(status_code=404, detail="Service type not found")
        return service_type

    def get_by_slug(self, slug: str) -> ServiceType:
        service_type = self.repo.get_by_slug(self.db, slug)
        if not service_type:
            raise HTTPException(status_code=404, detail="Service type not found")
        return service_type

    def _check_unique(self, name: Optional[str], slug: Optional[str], exclude_id: Optional[int] = None):
        if name:
            existing = self.repo.get_by_name(self.db, name)
            if existing and existing.id != exclude_id:
                raise HTTPException(
                    status_code=409, detail="A service type with this name already exists"
                )
        if slug:
            existing = self.repo.get_by_slug(self.db, slug)
            if existing and existing.id != exclude_id:
                raise HTTPException(
                    status_code=409, detail="A service type with this slug already exists"
                )

    def create_service_type(self, data: ServiceTypeCreate) -> ServiceType:
        slug = data.slug or slugify(data.name)
        self._check_unique(data.name, slug)

        service_type = self.repo.create(
            self.db, name=data.name, slug=slug or None, description=data.description
        )
        logger.info(f"🆕 Service type created: {service_type.id} ({service_type.slug})")
        return service_type

    def update_service_type(self, service_type_id: int, data: ServiceTypeUpdate) -> ServiceType:
        service_type = self.get_service_type(service_type_id)
        updates = data.model_dump(exclude_unset=True)

        if "name" in updates:
            name = (updates["name"] or "").strip()
            if not name:
                raise HTTPException(status_code=400, detail="Name is required")
            updates["name"] = name
            if name != service_type.name and not updates.get("slug"):
                updates["slug"] = slugify(name) or None

        self._check_unique(updates.get("name"), updates.get("slug"), exclude_id=service_type.id)
        return self.repo.update(self.db, service_type, **updates)

    def delete_service_type(self, service_type_id: int) -> dict:
        service_type = self.get_service_type(service_type_id)

        references = self.repo.count_references(self.db, service_type_id)
        if references:
            raise HTTPException(
                status_code=409,
                detail="Service type is used by service orders and cannot be deleted",
            )

        self.repo.delete(self.db, service_type)
        logger.info(f"🗑️ Service type deleted: {service_type_id}")
        return {"message": "Service type deleted successfully"}

    def get_by_employee(self, employee_id: int) -> list[ServiceType]:
        if not self.db.query(Employee).filter(Employee.id == employee_id).first():
            raise HTTPException(status_code=404, detail="Employee not found")
        return self.repo.get_by_employee(self.db, employee_id)

    def get_by_customer(self, customer_id: int) -> list[ServiceType]:
        if not self.db.query(Customer).filter(Customer.id == customer_id).first():
            raise HTTPException(status_code=404, detail="Customer not found")
        return self.repo.get_by_customer(self.db, customer_id)

    def get_items(self, service_type_id: int):
        self.get_service_type(service_type_id)
        return self.repo.get_items(self.db, service_type_id)


def _skill_response(mapping: TechnicianServiceType) -> TechnicianServiceTypeResponse:
    return TechnicianServiceTypeResponse(
        employee_id=mapping.employee_id,
        service_type_id=mapping.service_type_id,
        employee_name=mapping.employee.name if mapping.employee else None,
        service_type_name=mapping.service_type.name if mapping.service_type else None,
        created_at=mapping.created_at,
        updated_at=mapping.updated_at,
    )


class TechnicianServiceTypeService:
    """Which service types each technician is qualified to perform"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TechnicianServiceTypeRepository()

    def _ensure_targets_exist(self, employee_id: int, service_type_id: int):
        if not self.db.query(Employee).filter(Employee.id == employee_id).first():
            raise HTTPException(status_code=404, detail="Employee not found")
        if not self.db.query(ServiceType).filter(ServiceType.id == service_type_id).first():
            raise HTTPException(status_code=404, detail="Service type not found")

    def _get_mapping(self, employee_id: int, service_type_id: int) -> TechnicianServiceType:
        mapping = self.repo.get(self.db, employee_id, service_type_id)
        if not mapping:
            raise HTTPException(status_code=404, detail="Technician service type not found")
        return mapping

    def list_mappings(self) -> list[TechnicianServiceTypeResponse]:
        return [_skill_response(m) for m in self.repo.list_all(self.db)]

    def get_mapping(self, employee_id: int, service_type_id: int) -> TechnicianServiceTypeResponse:
        return _skill_response(self._get_mapping(employee_id, service_type_id))

    def create_mapping(self, data: TechnicianServiceTypeCreate) -> TechnicianServiceTypeResponse:
        self._ensure_targets_exist(data.employee_id, data.service_type_id)
        if self.repo.get(self.db, data.employee_id, data.service_type_id):
            raise HTTPException(
                status_code=409, detail="Employee already has this service type"
            )

        mapping = TechnicianServiceType(
            employee_id=data.employee_id, service_type_id=data.service_type_id
        )
        self.db.add(mapping)
        self.db.commit()
        self.db.refresh(mapping)
        logger.info(
            f"🛠️ Employee {data.employee_id} qualified for service type {data.service_type_id}"
        )
        return _skill_response(mapping)

    def update_mapping(
        self, employee_id: int, service_type_id: int, data: TechnicianServiceTypeUpdate
    ) -> TechnicianServiceTypeResponse:
        """Move a mapping; the old row is replaced in a single transaction"""
        mapping = self._get_mapping(employee_id, service_type_id)
        new_employee_id = data.employee_id or employee_id
        new_service_type_id = data.service_type_id or service_type_id

        if (new_employee_id, new_service_type_id) == (employee_id, service_type_id):
            return _skill_response(mapping)

        self._ensure_targets_exist(new_employee_id, new_service_type_id)
        if self.repo.get(self.db, new_employee_id, new_service_type_id):
            raise HTTPException(
                status_code=409, detail="Employee already has this service type"
            )

        try:
            self.db.delete(mapping)
            self.db.flush()
            replacement = TechnicianServiceType(
                employee_id=new_employee_id, service_type_id=new_service_type_id
            )
            self.db.add(replacement)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update technician service type: {e}")
            raise

        self.db.refresh(replacement)
        return _skill_response(replacement)

    def delete_mapping(self, employee_id: int, service_type_id: int) -> dict:
        mapping = self._get_mapping(employee_id, service_type_id)
        self.db.delete(mapping)
        self.db.commit()
        return {"message": "Technician service type deleted successfully"}
