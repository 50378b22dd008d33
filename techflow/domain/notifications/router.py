"""Notification router - in-app notification center endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import MarkAllReadResponse, NotificationResponse, UnreadCountResponse
from .service import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    limit: Optional[int] = Query(None),
    employee_id: Optional[int] = Query(None),
    include_read: bool = Query(False),
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    """Unread notifications, newest first"""
    return service.list_notifications(limit, employee_id, include_read)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    employee_id: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return {"unread": service.unread_count(employee_id)}


@router.put("/read-all", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(
    employee_id: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return {"updated": service.mark_all_read(employee_id)}


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    return service.mark_read(notification_id)
