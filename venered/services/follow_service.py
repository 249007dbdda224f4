from typing import List, Optional
import logging

from venered.schemas.auth_schema import AuthContext
from venered.schemas.follow_schema import Follow, Friend, RelationshipStatus, UserRelationship
from venered.utils.errors import AlreadyFollowing, VeneredError

logger = logging.getLogger(__name__)

ACCEPTED = "accepted"
PROFILE_COLUMNS = "id, username, full_name, avatar_url"

class FollowService:
    """Follows, and friendships derived from mutual follows"""

    def __init__(self, client, auth: AuthContext):
        self.client = client
        self.auth = auth

    async def follow_user(self, user_id: str) -> Follow:
        """Follow a user"""
        if user_id == self.auth.user_id:
            raise VeneredError("You cannot follow yourself")

        if await self.is_following(user_id):
            raise AlreadyFollowing("You already follow this user")

        try:
            response = await self.client.table("follows").insert({
                "follower_id": self.auth.user_id,
                "following_id": user_id,
                "status": ACCEPTED
            }).execute()

            logger.info(f"Created follow: {self.auth.user_id} -> {user_id}")
            return Follow.model_validate(response.data[0])
        except Exception as e:
            logger.error(f"Error following user {user_id}: {e}")
            raise

    async def unfollow_user(self, user_id: str) -> None:
        """Remove the follow relationship, if any"""
        try:
            await (
                self.client.table("follows")
                .delete()
                .eq("follower_id", self.auth.user_id)
                .eq("following_id", user_id)
                .execute()
            )
            logger.info(f"Deleted follow: {self.auth.user_id} -> {user_id}")
        except Exception as e:
            logger.error(f"Error unfollowing user {user_id}: {e}")
            raise

    async def is_following(self, user_id: str, follower_id: Optional[str] = None) -> bool:
        """Whether follower_id (default: caller) follows user_id"""
        response = await (
            self.client.table("follows")
            .select("id")
            .eq("follower_id", follower_id or self.auth.user_id)
            .eq("following_id", user_id)
            .maybe_single()
            .execute()
        )
        return bool(response and response.data)

    async def check_mutual_follow(self, user_id: str) -> bool:
        """Friendship: both users follow each other"""
        pair = [self.auth.user_id, user_id]
        try:
            response = await (
                self.client.table("follows")
                .select("*")
                .in_("follower_id", pair)
                .in_("following_id", pair)
                .eq("status", ACCEPTED)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error checking mutual follow with {user_id}: {e}")
            return False

        edges = {
            (row["follower_id"], row["following_id"])
            for row in response.data or []
            if row["follower_id"] != row["following_id"]
        }
        return len(edges) == 2

    async def get_relationship(self, user_id: str) -> UserRelationship:
        if user_id == self.auth.user_id:
            return UserRelationship(
                viewer_id=self.auth.user_id,
                target_id=user_id,
                status=RelationshipStatus.SELF,
                you_follow=False,
                follows_you=False
            )

        you_follow = await self.is_following(user_id)
        follows_you = await self.is_following(self.auth.user_id, follower_id=user_id)

        if you_follow and follows_you:
            relationship = RelationshipStatus.MUTUAL
        elif you_follow:
            relationship = RelationshipStatus.FOLLOWING
        elif follows_you:
            relationship = RelationshipStatus.FOLLOWED_BY
        else:
            relationship = RelationshipStatus.NONE

        return UserRelationship(
            viewer_id=self.auth.user_id,
            target_id=user_id,
            status=relationship,
            you_follow=you_follow,
            follows_you=follows_you
        )

    async def get_friends(self) -> List[Friend]:
        """Profiles the caller follows that follow the caller back"""
        try:
            following = await (
                self.client.table("follows")
                .select(f"following_id, profiles:profiles!follows_following_id_fkey({PROFILE_COLUMNS})")
                .eq("follower_id", self.auth.user_id)
                .eq("status", ACCEPTED)
                .execute()
            )
            followers = await (
                self.client.table("follows")
                .select("follower_id")
                .eq("following_id", self.auth.user_id)
                .eq("status", ACCEPTED)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error getting friends: {e}")
            raise

        follower_ids = {row["follower_id"] for row in followers.data or []}
        return [
            Friend.model_validate(row["profiles"])
            for row in following.data or []
            if row["following_id"] in follower_ids and row.get("profiles")
        ]

    async def get_followers(self, user_id: str) -> List[Friend]:
        response = await (
            self.client.table("follows")
            .select(f"follower_id, profiles:profiles!follows_follower_id_fkey({PROFILE_COLUMNS})")
            .eq("following_id", user_id)
            .eq("status", ACCEPTED)
            .execute()
        )
        return [Friend.model_validate(row["profiles"]) for row in response.data or [] if row.get("profiles")]

    async def get_following(self, user_id: str) -> List[Friend]:
        response = await (
            self.client.table("follows")
            .select(f"following_id, profiles:profiles!follows_following_id_fkey({PROFILE_COLUMNS})")
            .eq("follower_id", user_id)
            .eq("status", ACCEPTED)
            .execute()
        )
        return [Friend.model_validate(row["profiles"]) for row in response.data or [] if row.get("profiles")]
