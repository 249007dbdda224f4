from fastapi import APIRouter, Depends, status
from typing import List
import logging

from venered.db.client import get_supabase
from venered.schemas.auth_schema import AuthContext
from venered.schemas.follow_schema import Follow, Friend, UserRelationship
from venered.services.auth_service import get_auth_context
from venered.services.follow_service import FollowService
from venered.utils.errors import to_http

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/users/{user_id}/follow", response_model=Follow, status_code=status.HTTP_201_CREATED)
async def follow_user(
    user_id: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Follow a user"""
    try:
        return await FollowService(client, auth).follow_user(user_id)
    except Exception as e:
        raise to_http(e, "Failed to follow user")

@router.delete("/users/{user_id}/follow")
async def unfollow_user(
    user_id: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Unfollow a user"""
    try:
        await FollowService(client, auth).unfollow_user(user_id)
        return {"message": "You no longer follow this user"}
    except Exception as e:
        raise to_http(e, "Failed to unfollow user")

@router.get("/users/{user_id}/relationship", response_model=UserRelationship)
async def get_relationship(
    user_id: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    try:
        return await FollowService(client, auth).get_relationship(user_id)
    except Exception as e:
        raise to_http(e, "Failed to load relationship")

@router.get("/users/{user_id}/followers", response_model=List[Friend])
async def get_followers(
    user_id: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    try:
        return await FollowService(client, auth).get_followers(user_id)
    except Exception as e:
        raise to_http(e, "Failed to load followers")

@router.get("/users/{user_id}/following", response_model=List[Friend])
async def get_following(
    user_id: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    try:
        return await FollowService(client, auth).get_following(user_id)
    except Exception as e:
        raise to_http(e, "Failed to load following")

@router.get("/friends", response_model=List[Friend])
async def get_friends(
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Mutual follows of the caller"""
    try:
        return await FollowService(client, auth).get_friends()
    except Exception as e:
        raise to_http(e, "Failed to load friends")
