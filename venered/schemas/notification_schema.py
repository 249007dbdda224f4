from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

class NotificationType(str, Enum):
    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"
    MESSAGE = "message"

class RelatedUser(BaseModel):
    model_config = ConfigDict(extra="ignore")
    
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

class RelatedPost(BaseModel):
    model_config = ConfigDict(extra="ignore")
    
    id: str
    content: Optional[str] = None
    image_urls: Optional[List[str]] = None

class Notification(BaseModel):
    model_config = ConfigDict(extra="ignore")
    
    id: str
    user_id: str
    type: str  # like, comment, follow, message, ...
    title: str = ""
    message: str = ""
    read: bool = False
    related_user_id: Optional[str] = None
    related_post_id: Optional[str] = None
    created_at: Optional[datetime] = None
    
    @field_validator("read", mode="before")
    @classmethod
    def null_read_is_unread(cls, value):
        return bool(value)

class NotificationItem(Notification):
    """Notification joined with the display data of the feed"""
    related_user: Optional[RelatedUser] = None
    related_post: Optional[RelatedPost] = None

class NotificationListResponse(BaseModel):
    notifications: List[NotificationItem]
    unread_count: int

class UnreadCountResponse(BaseModel):
    kind: str
    count: int
