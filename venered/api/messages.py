from fastapi import APIRouter, Depends
from typing import List
import logging

from venered.db.client import get_supabase
from venered.schemas.auth_schema import AuthContext
from venered.schemas.message_schema import (
    Conversation,
    Message,
    MessageCreate,
    MessageSent,
    ReactionToggle,
    TypingStatus
)
from venered.services.auth_service import get_auth_context
from venered.services.message_service import MessageService
from venered.services.unread_service import UnreadMessagesCounter
from venered.utils.errors import to_http

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/conversations", response_model=List[Conversation])
async def get_conversations(
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """List conversations"""
    try:
        return await MessageService(client, auth).get_conversations()
    except Exception as e:
        raise to_http(e, "Failed to load conversations")

@router.get("/with/{username}", response_model=List[Message])
async def get_conversation(
    username: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Messages exchanged with a user; incoming ones are marked read"""
    try:
        _, messages = await MessageService(client, auth).load_conversation(username)
        return messages
    except Exception as e:
        logger.error(f"Error loading conversation with {username}: {e}")
        raise to_http(e, "Could not load the conversation")

@router.post("/to/{user_id}", response_model=MessageSent)
async def send_message(
    user_id: str,
    message: MessageCreate,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Send a message"""
    try:
        return await MessageService(client, auth).send_message(
            user_id,
            content=message.content,
            image_url=message.image_url
        )
    except Exception as e:
        raise to_http(e, "Failed to send message")

@router.put("/to/{user_id}/typing")
async def set_typing(
    user_id: str,
    typing: TypingStatus,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    await MessageService(client, auth).set_typing(user_id, typing.is_typing)
    return {"is_typing": typing.is_typing}

@router.post("/{message_id}/reactions")
async def toggle_reaction(
    message_id: str,
    reaction: ReactionToggle,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Add or remove a reaction"""
    try:
        added = await MessageService(client, auth).toggle_reaction(message_id, reaction.emoji)
        return {"emoji": reaction.emoji, "added": added}
    except Exception as e:
        raise to_http(e, "Failed to update reaction")

@router.put("/read-all")
async def mark_all_messages_as_read(
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Mark every incoming message as read"""
    await UnreadMessagesCounter(client, auth).mark_all_as_read()
    return {"message": "All messages marked as read"}
