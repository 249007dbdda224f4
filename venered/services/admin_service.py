from datetime import datetime, timedelta, timezone
from typing import List, Optional
from fastapi import Depends, HTTPException, status
import asyncio
import logging

from venered.db.client import get_supabase
from venered.schemas.admin_schema import AdminMessage, AdminStats, BanCreate, BannedUser, UserMessages
from venered.schemas.auth_schema import AuthContext
from venered.schemas.profile_schema import Profile
from venered.services.auth_service import get_auth_context

logger = logging.getLogger(__name__)

MODERATION_MESSAGE_SELECT = (
    "id, content, sender_id, receiver_id, created_at, image_url, "
    "sender_profile:profiles!messages_sender_id_fkey(username, full_name, avatar_url), "
    "receiver_profile:profiles!messages_receiver_id_fkey(username, full_name, avatar_url)"
)

class AdminService:
    def __init__(self, client, auth: AuthContext):
        self.client = client
        self.auth = auth

    async def is_admin(self, user_id: Optional[str] = None) -> bool:
        try:
            response = await self.client.rpc(
                "is_admin", {"user_id": user_id or self.auth.user_id}
            ).execute()
        except Exception as e:
            logger.error(f"Error checking admin status: {e}")
            return False
        return bool(response.data)

    async def _count(self, table: str, **filters) -> int:
        query = self.client.table(table).select("*", count="exact", head=True)
        for column, value in filters.items():
            query = query.eq(column, value)
        response = await query.execute()
        return response.count or 0

    async def get_stats(self) -> AdminStats:
        try:
            users, posts, messages, banned = await asyncio.gather(
                self._count("profiles"),
                self._count("posts"),
                self._count("messages"),
                self._count("banned_users", is_active=True)
            )
        except Exception as e:
            logger.error(f"Error loading stats: {e}")
            raise

        return AdminStats(
            total_users=users,
            total_posts=posts,
            total_messages=messages,
            banned_users=banned
        )

    async def list_users(self, limit: int = 50) -> List[Profile]:
        response = await (
            self.client.table("profiles")
            .select("*")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [Profile.model_validate(row) for row in response.data or []]

    async def list_banned_users(self) -> List[BannedUser]:
        response = await (
            self.client.table("banned_users")
            .select(
                "id, user_id, reason, banned_at, expires_at, is_active, banned_by, "
                "profiles!banned_users_user_id_fkey(id, username, full_name, avatar_url)"
            )
            .eq("is_active", True)
            .order("banned_at", desc=True)
            .execute()
        )
        return [BannedUser.model_validate(row) for row in response.data or []]

    async def ban_user(self, ban: BanCreate) -> BannedUser:
        expires_at = None
        if ban.duration_days:
            expires_at = (datetime.now(timezone.utc) + timedelta(days=ban.duration_days)).isoformat()

        try:
            response = await self.client.table("banned_users").insert({
                "user_id": ban.user_id,
                "banned_by": self.auth.user_id,
                "reason": ban.reason,
                "expires_at": expires_at,
                "is_active": True
            }).execute()
            logger.info(f"User {ban.user_id} banned by {self.auth.user_id}")
            return BannedUser.model_validate(response.data[0])
        except Exception as e:
            logger.error(f"Error banning user {ban.user_id}: {e}")
            raise

    async def unban_user(self, banned_user_id: str) -> None:
        try:
            await (
                self.client.table("banned_users")
                .update({"is_active": False})
                .eq("id", banned_user_id)
                .execute()
            )
            logger.info(f"Ban {banned_user_id} lifted by {self.auth.user_id}")
        except Exception as e:
            logger.error(f"Error unbanning {banned_user_id}: {e}")
            raise

    async def grant_admin(self, username: str) -> Optional[str]:
        """Give the admin role to a user by username; returns their id, None if unknown"""
        response = await (
            self.client.table("profiles")
            .select("id")
            .eq("username", username.strip())
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            return None

        user_id = response.data["id"]
        try:
            await self.client.table("admin_roles").insert({
                "user_id": user_id,
                "role": "admin",
                "created_by": self.auth.user_id
            }).execute()
            logger.info(f"Admin role granted to {user_id} by {self.auth.user_id}")
            return user_id
        except Exception as e:
            logger.error(f"Error granting admin role to {username}: {e}")
            raise

    async def get_user_messages(self, username: str) -> Optional[UserMessages]:
        """Every message a user sent or received, oldest first; None if the username is unknown"""
        response = await (
            self.client.table("profiles")
            .select("*")
            .eq("username", username.strip())
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            return None

        user = Profile.model_validate(response.data)
        try:
            response = await (
                self.client.table("messages")
                .select(MODERATION_MESSAGE_SELECT)
                .or_(f"sender_id.eq.{user.id},receiver_id.eq.{user.id}")
                .order("created_at")
                .execute()
            )
        except Exception as e:
            logger.error(f"Error loading messages of {username}: {e}")
            raise

        logger.info(f"Messages of {user.id} viewed by admin {self.auth.user_id}")
        return UserMessages(
            user=user,
            messages=[AdminMessage.model_validate(row) for row in response.data or []]
        )

async def require_admin(
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
) -> AdminService:
    """Dependency that only lets administrators through"""
    service = AdminService(client, auth)
    if not await service.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required"
        )
    return service
