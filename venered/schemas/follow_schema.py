from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime
from enum import Enum

class RelationshipStatus(str, Enum):
    NONE = "none"
    FOLLOWING = "following"
    FOLLOWED_BY = "followed_by"
    MUTUAL = "mutual"
    SELF = "self"

class Follow(BaseModel):
    model_config = ConfigDict(extra="ignore")
    
    id: Optional[str] = None
    follower_id: str
    following_id: str
    status: Optional[str] = None
    created_at: Optional[datetime] = None

class Friend(BaseModel):
    model_config = ConfigDict(extra="ignore")
    
    id: str
    username: str
    full_name: str = ""
    avatar_url: Optional[str] = None

class UserRelationship(BaseModel):
    viewer_id: str
    target_id: str
    status: RelationshipStatus
    you_follow: bool
    follows_you: bool
