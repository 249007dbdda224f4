from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

class PostAuthor(BaseModel):
    model_config = ConfigDict(extra="ignore")
    
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

class Post(BaseModel):
    model_config = ConfigDict(extra="ignore")
    
    id: str
    user_id: str
    content: Optional[str] = None
    image_urls: Optional[List[str]] = None
    video_url: Optional[str] = None
    is_private: Optional[bool] = None
    likes_count: Optional[int] = 0
    comments_count: Optional[int] = 0
    shares_count: Optional[int] = 0
    created_at: Optional[datetime] = None

class FeedPost(Post):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    
    author: Optional[PostAuthor] = Field(default=None, validation_alias="profiles")
    liked: bool = False

class PostCreate(BaseModel):
    content: Optional[str] = None
    image_urls: List[str] = []
    is_private: bool = False

class PostPrivacyUpdate(BaseModel):
    is_private: bool

class Comment(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    
    id: str
    post_id: str
    user_id: str
    content: str
    created_at: Optional[datetime] = None
    author: Optional[PostAuthor] = Field(default=None, validation_alias="profiles")

class CommentCreate(BaseModel):
    content: str

class LikeToggleResponse(BaseModel):
    post_id: str
    liked: bool
