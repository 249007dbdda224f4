from typing import List, Set
import logging

from venered.schemas.auth_schema import AuthContext

logger = logging.getLogger(__name__)

class LikeService:
    def __init__(self, client, auth: AuthContext):
        self.client = client
        self.auth = auth

    async def is_liked(self, post_id: str) -> bool:
        try:
            response = await (
                self.client.table("likes")
                .select("id")
                .eq("post_id", post_id)
                .eq("user_id", self.auth.user_id)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            logger.error(f"Error checking like status: {e}")
            return False
        return bool(response and response.data)

    async def liked_post_ids(self, post_ids: List[str]) -> Set[str]:
        if not post_ids:
            return set()

        try:
            response = await (
                self.client.table("likes")
                .select("post_id")
                .eq("user_id", self.auth.user_id)
                .in_("post_id", post_ids)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error loading liked posts: {e}")
            return set()
        return {row["post_id"] for row in response.data or []}

    async def toggle_like(self, post_id: str) -> bool:
        """Like the post, or unlike it if already liked; returns the new state"""
        try:
            if await self.is_liked(post_id):
                await (
                    self.client.table("likes")
                    .delete()
                    .eq("post_id", post_id)
                    .eq("user_id", self.auth.user_id)
                    .execute()
                )
                return False

            await self.client.table("likes").insert({
                "post_id": post_id,
                "user_id": self.auth.user_id
            }).execute()
            return True
        except Exception as e:
            logger.error(f"Error toggling like on {post_id}: {e}")
            raise
