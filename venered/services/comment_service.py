from typing import List
import logging

from venered.schemas.auth_schema import AuthContext
from venered.schemas.post_schema import Comment
from venered.utils.errors import VeneredError

logger = logging.getLogger(__name__)

class CommentService:
    def __init__(self, client, auth: AuthContext):
        self.client = client
        self.auth = auth

    async def get_comments(self, post_id: str) -> List[Comment]:
        """Comments oldest first with their author"""
        response = await (
            self.client.table("comments")
            .select("*, profiles(username, full_name, avatar_url)")
            .eq("post_id", post_id)
            .order("created_at")
            .execute()
        )
        return [Comment.model_validate(row) for row in response.data or []]

    async def add_comment(self, post_id: str, content: str) -> Comment:
        content = content.strip()
        if not content:
            raise VeneredError("Comment is empty")

        try:
            response = await self.client.table("comments").insert({
                "content": content,
                "post_id": post_id,
                "user_id": self.auth.user_id
            }).execute()
            return Comment.model_validate(response.data[0])
        except Exception as e:
            logger.error(f"Error adding comment to {post_id}: {e}")
            raise
