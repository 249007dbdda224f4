from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List
import logging

from venered.db.client import get_supabase
from venered.schemas.auth_schema import AuthContext
from venered.schemas.profile_schema import (
    PrivacySettings,
    PrivacySettingsUpdate,
    Profile,
    ProfileUpdate,
    UsernameAvailability
)
from venered.services.auth_service import get_auth_context
from venered.services.profile_service import ProfileService
from venered.utils.errors import to_http

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/me", response_model=Profile)
async def get_my_profile(
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    profile = await ProfileService(client, auth).get_profile()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile

@router.patch("/me", response_model=Profile)
async def update_my_profile(
    updates: ProfileUpdate,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Update the caller's profile"""
    try:
        return await ProfileService(client, auth).update_profile(updates)
    except Exception as e:
        raise to_http(e, "Failed to update profile")

@router.get("/me/privacy", response_model=PrivacySettings)
async def get_privacy_settings(
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    try:
        return await ProfileService(client, auth).get_own_privacy_settings()
    except Exception as e:
        raise to_http(e, "Could not load privacy settings")

@router.patch("/me/privacy", response_model=PrivacySettings)
async def update_privacy_settings(
    updates: PrivacySettingsUpdate,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    try:
        return await ProfileService(client, auth).update_privacy_settings(updates)
    except Exception as e:
        raise to_http(e, "Could not update privacy settings")

@router.get("/search", response_model=List[Profile])
async def search_users(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=50),
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    try:
        return await ProfileService(client, auth).search_users(q, limit=limit)
    except Exception as e:
        raise to_http(e, "Search failed")

@router.get("/username-availability", response_model=UsernameAvailability)
async def check_username_availability(
    username: str = Query(..., min_length=1),
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    try:
        available = await ProfileService(client, auth).check_username_availability(username)
        return UsernameAvailability(username=username, available=available)
    except Exception as e:
        raise to_http(e, "Could not check username")

@router.get("/by-username/{username}", response_model=Profile)
async def get_profile_by_username(
    username: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Profile with the owner's privacy settings applied"""
    profile = await ProfileService(client, auth).get_by_username(username)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile

@router.get("/{user_id}", response_model=Profile)
async def get_profile(
    user_id: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    profile = await ProfileService(client, auth).get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile
