from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime

REACTION_EMOJIS = ["❤️", "😂", "😮", "😢", "🙌"]

class MessageReaction(BaseModel):
    model_config = ConfigDict(extra="ignore")
    
    id: Optional[str] = None
    emoji: str
    user_id: str

class Message(BaseModel):
    model_config = ConfigDict(extra="ignore")
    
    id: str
    sender_id: str
    receiver_id: str
    content: str = ""
    image_url: Optional[str] = None
    read: bool = False
    created_at: Optional[datetime] = None
    reactions: List[MessageReaction] = []
    
    @field_validator("read", mode="before")
    @classmethod
    def null_read_is_unread(cls, value):
        return bool(value)

class MessageCreate(BaseModel):
    content: str = ""
    image_url: Optional[str] = None

class MessageSent(BaseModel):
    message: Message
    is_request: bool

class Conversation(BaseModel):
    """Row returned by the get_conversations RPC"""
    model_config = ConfigDict(extra="allow")
    
    user_id: Optional[str] = None
    username: str = ""
    full_name: str = ""
    avatar_url: Optional[str] = None
    last_message: Optional[str] = None
    last_message_time: Optional[datetime] = None
    unread_count: int = 0

class TypingStatus(BaseModel):
    is_typing: bool

class ReactionToggle(BaseModel):
    emoji: str
