from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

class Profile(BaseModel):
    model_config = ConfigDict(extra="ignore")
    
    id: str
    username: str
    full_name: str = ""
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    is_private: Optional[bool] = None
    verified: Optional[bool] = None
    posts_count: int = 0
    followers_count: int = 0
    following_count: int = 0
    created_at: Optional[datetime] = None
    
    @field_validator("posts_count", "followers_count", "following_count", mode="before")
    @classmethod
    def null_count_is_zero(cls, value):
        return value or 0

class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    full_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    is_private: Optional[bool] = None

class PrivacySettings(BaseModel):
    model_config = ConfigDict(extra="ignore")
    
    id: Optional[str] = None
    user_id: str
    hide_email: bool = True
    hide_location: bool = False
    hide_website: bool = False
    hide_followers_count: bool = False
    hide_following_count: bool = False
    hide_posts_count: bool = False
    private_posts: bool = False
    allow_message_from_strangers: bool = True
    show_online_status: bool = True

class PrivacySettingsUpdate(BaseModel):
    hide_email: Optional[bool] = None
    hide_location: Optional[bool] = None
    hide_website: Optional[bool] = None
    hide_followers_count: Optional[bool] = None
    hide_following_count: Optional[bool] = None
    hide_posts_count: Optional[bool] = None
    private_posts: Optional[bool] = None
    allow_message_from_strangers: Optional[bool] = None
    show_online_status: Optional[bool] = None

class UsernameAvailability(BaseModel):
    username: str
    available: bool
