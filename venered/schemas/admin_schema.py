from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

from venered.schemas.follow_schema import Friend
from venered.schemas.profile_schema import Profile

class BannedUser(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    
    id: str
    user_id: str
    banned_by: str
    reason: Optional[str] = None
    banned_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_active: Optional[bool] = True
    profile: Optional[Friend] = Field(default=None, validation_alias="profiles")

class BanCreate(BaseModel):
    user_id: str
    reason: str = ""
    duration_days: Optional[int] = Field(default=None, gt=0)  # None = permanent

class AdminGrant(BaseModel):
    username: str

class AdminStats(BaseModel):
    total_users: int = 0
    total_posts: int = 0
    total_messages: int = 0
    banned_users: int = 0
    active_users_today: int = 0

class MessageParty(BaseModel):
    model_config = ConfigDict(extra="ignore")
    
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

class AdminMessage(BaseModel):
    """A message as moderators see it, with both ends joined"""
    model_config = ConfigDict(extra="ignore")
    
    id: str
    sender_id: str
    receiver_id: str
    content: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    sender_profile: Optional[MessageParty] = None
    receiver_profile: Optional[MessageParty] = None

class UserMessages(BaseModel):
    user: Profile
    messages: List[AdminMessage] = []
