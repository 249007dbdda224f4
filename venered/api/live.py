from typing import AsyncGenerator, Optional
from fastapi import APIRouter, Depends, WebSocket
import logging

from venered.db.client import close_supabase_client, create_supabase_client
from venered.schemas.auth_schema import AuthContext
from venered.services.auth_service import get_ws_auth_context
from venered.websocket.manager import LiveSession, live_manager

logger = logging.getLogger(__name__)

router = APIRouter()

async def get_live_client(
    auth: Optional[AuthContext] = Depends(get_ws_auth_context)
) -> AsyncGenerator:
    """Backend client for a live session, None when the token was rejected"""
    if auth is None:
        yield None
        return

    client = await create_supabase_client(auth)
    try:
        yield client
    finally:
        await close_supabase_client(client)

@router.websocket("/ws")
async def live_updates(
    websocket: WebSocket,
    auth: Optional[AuthContext] = Depends(get_ws_auth_context),
    client=Depends(get_live_client)
):
    """Unread badges and notification feed, pushed as they change"""
    if auth is None or client is None:
        await websocket.close(code=1008)  # Policy violation
        return

    await websocket.accept()

    session = LiveSession(client, auth, websocket)
    try:
        async with session:
            await live_manager.connect(session)
            try:
                await session.run()
            finally:
                await live_manager.disconnect(session)
    except Exception as e:
        logger.error(f"Live session error for user {auth.user_id}: {e}")
        try:
            await websocket.close(code=1011)  # Internal error
        except RuntimeError:
            pass
