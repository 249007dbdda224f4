from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
import logging

from venered.schemas.admin_schema import AdminGrant, AdminStats, BanCreate, BannedUser, UserMessages
from venered.schemas.profile_schema import Profile
from venered.services.admin_service import AdminService, require_admin
from venered.utils.errors import to_http

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/stats", response_model=AdminStats)
async def get_stats(service: AdminService = Depends(require_admin)):
    """Dashboard totals"""
    try:
        return await service.get_stats()
    except Exception as e:
        raise to_http(e, "Failed to load stats")

@router.get("/users", response_model=List[Profile])
async def list_users(service: AdminService = Depends(require_admin)):
    try:
        return await service.list_users()
    except Exception as e:
        raise to_http(e, "Failed to load users")

@router.get("/users/{username}/messages", response_model=UserMessages)
async def get_user_messages(username: str, service: AdminService = Depends(require_admin)):
    """Every message a user sent or received"""
    try:
        result = await service.get_user_messages(username)
    except Exception as e:
        raise to_http(e, "Failed to load messages")

    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No user with that username"
        )
    return result

@router.get("/bans", response_model=List[BannedUser])
async def list_banned_users(service: AdminService = Depends(require_admin)):
    try:
        return await service.list_banned_users()
    except Exception as e:
        raise to_http(e, "Failed to load banned users")

@router.post("/bans", response_model=BannedUser, status_code=status.HTTP_201_CREATED)
async def ban_user(ban: BanCreate, service: AdminService = Depends(require_admin)):
    """Ban a user, permanently unless a duration is given"""
    try:
        return await service.ban_user(ban)
    except Exception as e:
        raise to_http(e, "Could not ban the user")

@router.delete("/bans/{ban_id}")
async def unban_user(ban_id: str, service: AdminService = Depends(require_admin)):
    try:
        await service.unban_user(ban_id)
        return {"message": "User unbanned"}
    except Exception as e:
        raise to_http(e, "Could not unban the user")

@router.post("/admins", status_code=status.HTTP_201_CREATED)
async def grant_admin(grant: AdminGrant, service: AdminService = Depends(require_admin)):
    """Grant the admin role by username"""
    try:
        user_id = await service.grant_admin(grant.username)
    except Exception as e:
        raise to_http(e, "Could not add the administrator")

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No user with that username"
        )
    return {"user_id": user_id, "role": "admin"}
