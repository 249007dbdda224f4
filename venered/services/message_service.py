from datetime import datetime, timezone
from typing import List, Optional, Tuple
import logging

from venered.schemas.auth_schema import AuthContext
from venered.schemas.message_schema import REACTION_EMOJIS, Conversation, Message, MessageSent
from venered.schemas.profile_schema import Profile
from venered.services.follow_service import FollowService
from venered.utils.errors import MessagingNotAllowed, VeneredError

logger = logging.getLogger(__name__)

class MessageService:
    def __init__(self, client, auth: AuthContext):
        self.client = client
        self.auth = auth
        self.follows = FollowService(client, auth)

    async def get_conversations(self) -> List[Conversation]:
        """Conversation list with the last message of each, via RPC"""
        try:
            response = await self.client.rpc(
                "get_conversations", {"p_user_id": self.auth.user_id}
            ).execute()
            return [Conversation.model_validate(row) for row in response.data or []]
        except Exception as e:
            logger.error(f"Error loading conversations: {e}")
            raise

    async def load_conversation(self, username: str) -> Tuple[Profile, List[Message]]:
        """Messages exchanged with a user, oldest first; incoming ones become read"""
        response = await (
            self.client.table("profiles")
            .select("*")
            .eq("username", username)
            .single()
            .execute()
        )
        recipient = Profile.model_validate(response.data)

        pair = [self.auth.user_id, recipient.id]
        response = await (
            self.client.table("messages")
            .select("*, reactions:message_reactions(id, emoji, user_id)")
            .in_("sender_id", pair)
            .in_("receiver_id", pair)
            .order("created_at")
            .execute()
        )
        messages = [
            Message.model_validate(row)
            for row in response.data or []
            if row["sender_id"] != row["receiver_id"] or recipient.id == self.auth.user_id
        ]

        await self.mark_conversation_read(recipient.id)
        return recipient, messages

    async def mark_conversation_read(self, sender_id: str) -> None:
        try:
            await (
                self.client.table("messages")
                .update({"read": True})
                .eq("sender_id", sender_id)
                .eq("receiver_id", self.auth.user_id)
                .eq("read", False)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error marking conversation with {sender_id} as read: {e}")

    async def can_message(self, recipient_id: str) -> Tuple[bool, bool]:
        """(allowed, is_following): strangers may write unless the recipient opted out"""
        is_following = False
        try:
            is_following = await self.follows.is_following(recipient_id)
        except Exception as e:
            logger.error(f"Error checking follow status: {e}")

        if is_following:
            return True, True

        try:
            response = await (
                self.client.table("privacy_settings")
                .select("allow_message_from_strangers")
                .eq("user_id", recipient_id)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            logger.error(f"Error checking privacy settings: {e}")
            return True, False

        if response and response.data and response.data.get("allow_message_from_strangers") is False:
            return False, False
        return True, False

    async def send_message(
        self,
        recipient_id: str,
        content: str = "",
        image_url: Optional[str] = None
    ) -> MessageSent:
        """Send a text and/or image message"""
        content = (content or "").strip()
        if not content and not image_url:
            raise VeneredError("Message is empty")

        allowed, is_following = await self.can_message(recipient_id)
        if not allowed:
            raise MessagingNotAllowed("This user does not accept messages from strangers")

        row = {
            "sender_id": self.auth.user_id,
            "receiver_id": recipient_id,
            "content": content
        }
        if image_url:
            row["image_url"] = image_url

        try:
            response = await self.client.table("messages").insert(row).execute()
        except Exception as e:
            logger.error(f"Error sending message to {recipient_id}: {e}")
            raise

        await self.set_typing(recipient_id, False)
        return MessageSent(message=Message.model_validate(response.data[0]), is_request=not is_following)

    async def set_typing(self, recipient_id: str, is_typing: bool) -> None:
        try:
            await self.client.table("message_typing").upsert({
                "sender_id": self.auth.user_id,
                "receiver_id": recipient_id,
                "is_typing": is_typing,
                "updated_at": datetime.now(timezone.utc).isoformat()
            }).execute()
        except Exception as e:
            logger.error(f"Error updating typing status: {e}")

    async def toggle_reaction(self, message_id: str, emoji: str) -> bool:
        """Add the caller's reaction, or remove it if present; returns True if added"""
        if emoji not in REACTION_EMOJIS:
            raise VeneredError("Unsupported reaction")

        response = await (
            self.client.table("message_reactions")
            .select("id")
            .eq("message_id", message_id)
            .eq("user_id", self.auth.user_id)
            .eq("emoji", emoji)
            .execute()
        )

        if response.data:
            await (
                self.client.table("message_reactions")
                .delete()
                .eq("message_id", message_id)
                .eq("user_id", self.auth.user_id)
                .eq("emoji", emoji)
                .execute()
            )
            return False

        await self.client.table("message_reactions").insert({
            "message_id": message_id,
            "user_id": self.auth.user_id,
            "emoji": emoji
        }).execute()
        return True
