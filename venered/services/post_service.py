from typing import List, Optional
import logging

from venered.schemas.auth_schema import AuthContext
from venered.schemas.post_schema import FeedPost, Post, PostCreate
from venered.services.like_service import LikeService
from venered.utils.errors import VeneredError

logger = logging.getLogger(__name__)

AUTHOR_SELECT = "*, profiles(username, full_name, avatar_url)"

class PostService:
    def __init__(self, client, auth: AuthContext):
        self.client = client
        self.auth = auth

    async def get_feed(self, limit: Optional[int] = None) -> List[FeedPost]:
        """Posts newest first with their author and whether the caller liked them"""
        query = (
            self.client.table("posts")
            .select(AUTHOR_SELECT)
            .order("created_at", desc=True)
        )
        if limit:
            query = query.limit(limit)

        try:
            response = await query.execute()
        except Exception as e:
            logger.error(f"Error loading posts: {e}")
            raise

        return await self._with_likes(response.data or [])

    async def get_user_posts(self, user_id: str) -> List[FeedPost]:
        """One user's posts newest first; other people only see the public ones"""
        query = (
            self.client.table("posts")
            .select(AUTHOR_SELECT)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
        )
        if user_id != self.auth.user_id:
            query = query.eq("is_private", False)

        try:
            response = await query.execute()
        except Exception as e:
            logger.error(f"Error loading posts of user {user_id}: {e}")
            raise

        return await self._with_likes(response.data or [])

    async def _with_likes(self, rows) -> List[FeedPost]:
        liked = await LikeService(self.client, self.auth).liked_post_ids([row["id"] for row in rows])
        return [FeedPost.model_validate({**row, "liked": row["id"] in liked}) for row in rows]

    async def get_post(self, post_id: str) -> Optional[FeedPost]:
        response = await (
            self.client.table("posts")
            .select(AUTHOR_SELECT)
            .eq("id", post_id)
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            return None

        liked = await LikeService(self.client, self.auth).is_liked(post_id)
        return FeedPost.model_validate({**response.data, "liked": liked})

    async def create_post(self, post_data: PostCreate) -> Post:
        """Create a post"""
        content = (post_data.content or "").strip()
        if not content and not post_data.image_urls:
            raise VeneredError("A post needs text or an image")

        try:
            response = await self.client.table("posts").insert({
                "user_id": self.auth.user_id,
                "content": content or None,
                "image_urls": post_data.image_urls or None,
                "is_private": post_data.is_private
            }).execute()

            post = Post.model_validate(response.data[0])
            logger.info(f"Created post: {post.id} by user: {self.auth.user_id}")
            return post
        except Exception as e:
            logger.error(f"Error creating post: {e}")
            raise

    async def set_privacy(self, post_id: str, is_private: bool) -> Optional[Post]:
        """Only the author's own post is updated"""
        response = await (
            self.client.table("posts")
            .update({"is_private": is_private})
            .eq("id", post_id)
            .eq("user_id", self.auth.user_id)
            .execute()
        )
        if not response.data:
            return None
        return Post.model_validate(response.data[0])

    async def delete_post(self, post_id: str) -> bool:
        """Delete one of the caller's posts; False when there is no such post of theirs"""
        try:
            response = await (
                self.client.table("posts")
                .delete()
                .eq("id", post_id)
                .eq("user_id", self.auth.user_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error deleting post {post_id}: {e}")
            raise

        if not response.data:
            return False
        logger.info(f"Deleted post: {post_id} by user: {self.auth.user_id}")
        return True
