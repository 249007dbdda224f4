from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
import logging

from venered.db.client import get_supabase
from venered.schemas.auth_schema import AuthContext
from venered.schemas.post_schema import (
    Comment,
    CommentCreate,
    FeedPost,
    LikeToggleResponse,
    Post,
    PostCreate,
    PostPrivacyUpdate
)
from venered.services.auth_service import get_auth_context
from venered.services.comment_service import CommentService
from venered.services.like_service import LikeService
from venered.services.post_service import PostService
from venered.utils.errors import to_http

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=List[FeedPost])
async def get_feed(
    limit: Optional[int] = Query(None, ge=1, le=100),
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Posts newest first"""
    try:
        return await PostService(client, auth).get_feed(limit=limit)
    except Exception as e:
        raise to_http(e, "Failed to load posts")

@router.post("/", response_model=Post, status_code=status.HTTP_201_CREATED)
async def create_post(
    post: PostCreate,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Create a new post"""
    try:
        return await PostService(client, auth).create_post(post)
    except Exception as e:
        raise to_http(e, "Failed to create post")

@router.get("/users/{user_id}", response_model=List[FeedPost])
async def get_user_posts(
    user_id: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """A user's posts newest first, private ones only for their author"""
    try:
        return await PostService(client, auth).get_user_posts(user_id)
    except Exception as e:
        raise to_http(e, "Failed to load posts")

@router.get("/{post_id}", response_model=FeedPost)
async def get_post(
    post_id: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    post = await PostService(client, auth).get_post(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post

@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Delete one of the caller's posts"""
    try:
        deleted = await PostService(client, auth).delete_post(post_id)
    except Exception as e:
        raise to_http(e, "Could not delete the post")

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return {"message": "Post deleted"}

@router.patch("/{post_id}/privacy", response_model=Post)
async def set_post_privacy(
    post_id: str,
    update: PostPrivacyUpdate,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Make one of the caller's posts private or public"""
    try:
        post = await PostService(client, auth).set_privacy(post_id, update.is_private)
    except Exception as e:
        raise to_http(e, "Failed to update post")

    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post

@router.post("/{post_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    post_id: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    """Like or unlike a post"""
    try:
        liked = await LikeService(client, auth).toggle_like(post_id)
        return LikeToggleResponse(post_id=post_id, liked=liked)
    except Exception as e:
        raise to_http(e, "Failed to update like")

@router.get("/{post_id}/comments", response_model=List[Comment])
async def get_comments(
    post_id: str,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    try:
        return await CommentService(client, auth).get_comments(post_id)
    except Exception as e:
        raise to_http(e, "Failed to load comments")

@router.post("/{post_id}/comments", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: str,
    comment: CommentCreate,
    auth: AuthContext = Depends(get_auth_context),
    client=Depends(get_supabase)
):
    try:
        return await CommentService(client, auth).add_comment(post_id, comment.content)
    except Exception as e:
        raise to_http(e, "Failed to add comment")
