from typing import List, Optional
import logging

from venered.schemas.auth_schema import AuthContext
from venered.schemas.profile_schema import (
    PrivacySettings,
    PrivacySettingsUpdate,
    Profile,
    ProfileUpdate
)

logger = logging.getLogger(__name__)

class ProfileService:
    def __init__(self, client, auth: AuthContext):
        self.client = client
        self.auth = auth

    async def get_profile(self, user_id: Optional[str] = None) -> Optional[Profile]:
        """Get a profile, hiding what the owner's privacy settings hide from others"""
        user_id = user_id or self.auth.user_id

        response = await (
            self.client.table("profiles")
            .select("*")
            .eq("id", user_id)
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            return None

        profile = Profile.model_validate(response.data)
        if user_id == self.auth.user_id:
            return profile

        privacy = await self.get_privacy_settings(user_id)
        if privacy is None:
            return profile

        return apply_privacy(profile, privacy)

    async def get_by_username(self, username: str) -> Optional[Profile]:
        response = await (
            self.client.table("profiles")
            .select("id")
            .eq("username", username)
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            return None
        return await self.get_profile(response.data["id"])

    async def search_users(self, term: str, limit: int = 20) -> List[Profile]:
        """Search profiles by username or full name"""
        term = term.strip()
        if not term:
            return []

        response = await (
            self.client.table("profiles")
            .select("*")
            .or_(f"username.ilike.%{term}%,full_name.ilike.%{term}%")
            .limit(limit)
            .execute()
        )
        return [Profile.model_validate(row) for row in response.data or []]

    async def update_profile(self, updates: ProfileUpdate) -> Profile:
        """Update the caller's own profile"""
        values = updates.model_dump(exclude_unset=True)
        try:
            response = await (
                self.client.table("profiles")
                .update(values)
                .eq("id", self.auth.user_id)
                .execute()
            )
            logger.info(f"Updated profile {self.auth.user_id}: {sorted(values)}")
            return Profile.model_validate(response.data[0])
        except Exception as e:
            logger.error(f"Error updating profile: {e}")
            raise

    async def check_username_availability(self, username: str) -> bool:
        response = await self.client.rpc(
            "check_username_availability", {"username_to_check": username}
        ).execute()
        return bool(response.data)

    async def get_privacy_settings(self, user_id: str) -> Optional[PrivacySettings]:
        try:
            response = await (
                self.client.table("privacy_settings")
                .select("*")
                .eq("user_id", user_id)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            logger.error(f"Error loading privacy settings for {user_id}: {e}")
            return None

        if not response or not response.data:
            return None
        return PrivacySettings.model_validate(response.data)

    async def get_own_privacy_settings(self) -> PrivacySettings:
        """Load the caller's privacy settings, creating the defaults on first use"""
        settings = await self.get_privacy_settings(self.auth.user_id)
        if settings is not None:
            return settings

        defaults = PrivacySettings(user_id=self.auth.user_id).model_dump(exclude={"id"})
        try:
            response = await self.client.table("privacy_settings").insert(defaults).execute()
            logger.info(f"Created default privacy settings for {self.auth.user_id}")
            return PrivacySettings.model_validate(response.data[0])
        except Exception as e:
            logger.error(f"Error creating default privacy settings: {e}")
            raise

    async def update_privacy_settings(self, updates: PrivacySettingsUpdate) -> PrivacySettings:
        await self.get_own_privacy_settings()

        try:
            response = await (
                self.client.table("privacy_settings")
                .update(updates.model_dump(exclude_unset=True))
                .eq("user_id", self.auth.user_id)
                .execute()
            )
            return PrivacySettings.model_validate(response.data[0])
        except Exception as e:
            logger.error(f"Error updating privacy settings: {e}")
            raise

def apply_privacy(profile: Profile, privacy: PrivacySettings) -> Profile:
    """Profile as seen by someone other than its owner"""
    hidden = {}
    if privacy.hide_location:
        hidden["location"] = None
    if privacy.hide_website:
        hidden["website"] = None
    if privacy.hide_followers_count:
        hidden["followers_count"] = 0
    if privacy.hide_following_count:
        hidden["following_count"] = 0
    if privacy.hide_posts_count:
        hidden["posts_count"] = 0
    return profile.model_copy(update=hidden)
