"""Technician skills router - which employees can perform which service types"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    TechnicianServiceTypeCreate,
    TechnicianServiceTypeResponse,
    TechnicianServiceTypeUpdate,
)
from .service import TechnicianServiceTypeService

router = APIRouter(prefix="/technician-service-types", tags=["Technician Skills"])


def get_skill_service(db: Session = Depends(get_db)) -> TechnicianServiceTypeService:
    return TechnicianServiceTypeService(db)


@router.get("", response_model=list[TechnicianServiceTypeResponse])
async def list_technician_service_types(
    current_user: User = Depends(get_current_user),
    service: TechnicianServiceTypeService = Depends(get_skill_service),
):
    return service.list_mappings()


@router.get("/{employee_id}/{service_type_id}", response_model=TechnicianServiceTypeResponse)
async def get_technician_service_type(
    employee_id: int,
    service_type_id: int,
    current_user: User = Depends(get_current_user),
    service: TechnicianServiceTypeService = Depends(get_skill_service),
):
    return service.get_mapping(employee_id, service_type_id)


@router.post("", response_model=TechnicianServiceTypeResponse, status_code=201)
async def create_technician_service_type(
    data: TechnicianServiceTypeCreate,
    current_user: User = Depends(get_current_user),
    service: TechnicianServiceTypeService = Depends(get_skill_service),
):
    return service.create_mapping(data)


@router.put("/{employee_id}/{service_type_id}", response_model=TechnicianServiceTypeResponse)
async def update_technician_service_type(
    employee_id: int,
    service_type_id: int,
    data: TechnicianServiceTypeUpdate,
    current_user: User = Depends(get_current_user),
    service: TechnicianServiceTypeService = Depends(get_skill_service),
):
    return service.update_mapping(employee_id, service_type_id, data)


@router.delete("/{employee_id}/{service_type_id}")
async def delete_technician_service_type(
    employee_id: int,
    service_type_id: int,
    current_user: User = Depends(get_current_user),
    service: TechnicianServiceTypeService = Depends(get_skill_service),
):
    return service.delete_mapping(employee_id, service_type_id)
