from fastapi import APIRouter, Depends
from app.config.settings import settings
from app.database.resource_store import ResourceStore, get_resource_store
from app.modules.notifications.schemas import NotificationCreate, NotificationResponse
from app.modules.notifications.service import NotificationService
from app.core.dependencies import get_current_user_id
from typing import List, Dict

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(store: ResourceStore = Depends(get_resource_store)) -> NotificationService:
    return NotificationService(store)


@router.get("", response_model=List[NotificationResponse])
def list_notifications(
    user_data: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    """Get the caller's latest notifications"""
    return service.list_notifications(user_data["id"], limit=settings.default_page_size)


@router.post("", response_model=NotificationResponse, status_code=201)
def create_notification(
    notification_data: NotificationCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    """Create a notification; the caller is recorded as sender"""
    return service.create_notification(notification_data, user_data["id"])


@router.get("/unread-count")
def unread_count(
    user_data: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    """Number of unread notifications, for the bell badge"""
    return {"unread": service.unread_count(user_data["id"])}


@router.post("/read-all")
def mark_all_read(
    user_data: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    """Mark all of the caller's notifications as read"""
    updated = service.mark_all_read(user_data["id"])
    return {"success": True, "updated": updated}


@router.post("/{notification_id}/read")
def mark_read(
    notification_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service)
):
    """Mark a single notification as read"""
    service.mark_read(notification_id, user_data["id"])
    return {"success": True}
