from fastapi import APIRouter, Depends, HTTPException, status
import logging

from venered.db.client import get_supabase
from venered.schemas.auth_schema import AuthContext
from venered.schemas.notification_schema import NotificationListResponse, UnreadCountResponse
from venered.services.auth_service import get_auth_context
from venered.services.notification_service import NotificationService
from venered.services.unread_service import UnreadMessagesCounter, UnreadNotificationsCounter
from venered.utils.errors import to_http

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=NotificationListResponse)
async def get_notifications(
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Get the newest notifications with their unread count"""
    try:
        service = NotificationService(client, auth)
        notifications = await service.load()
        unread_count = await service.counter.seed()
        return NotificationListResponse(notifications=notifications, unread_count=unread_count)
    except Exception as e:
        logger.error(f"Error getting notifications: {e}")
        raise to_http(e, "Failed to get notifications")

@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_notifications_count(
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Unread notifications, message notifications excluded"""
    counter = UnreadNotificationsCounter(client, auth)
    return UnreadCountResponse(kind=counter.kind, count=await counter.seed())

@router.get("/unread-messages", response_model=UnreadCountResponse)
async def get_unread_messages_count(
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Unread direct messages"""
    counter = UnreadMessagesCounter(client, auth)
    return UnreadCountResponse(kind=counter.kind, count=await counter.seed())

@router.put("/read-all")
async def mark_all_notifications_as_read(
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Mark all notifications as read"""
    service = NotificationService(client, auth)
    if not await service.mark_all_as_read():
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to mark all notifications as read"
        )
    return {"message": "All notifications marked as read"}

@router.put("/{notification_id}/read")
async def mark_notification_as_read(
    notification_id: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Mark a notification as read"""
    service = NotificationService(client, auth)
    if not await service.mark_as_read(notification_id):
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to mark notification as read"
        )
    return {"message": "Notification marked as read"}
