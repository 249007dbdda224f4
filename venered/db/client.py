from typing import AsyncGenerator, Optional
from fastapi import Depends
from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions
import logging

from venered.config import settings
from venered.schemas.auth_schema import AuthContext
from venered.services.auth_service import get_auth_context

logger = logging.getLogger(__name__)

async def create_supabase_client(auth: Optional[AuthContext] = None) -> AsyncClient:
    """Create a Supabase client acting as the given user.
    
    Requests carry the user's access token so row-level security applies
    to every query, mutation and realtime channel.
    """
    options = AsyncClientOptions()
    if auth is not None:
        options = AsyncClientOptions(headers={"Authorization": f"Bearer {auth.access_token}"})
    
    client = await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY, options=options)
    
    if auth is not None:
        try:
            await client.realtime.set_auth(auth.access_token)
        except Exception as e:
            logger.error(f"Error authorising realtime for user {auth.user_id}: {e}")
    
    return client

async def close_supabase_client(client) -> None:
    """Release the realtime channels and HTTP sessions held by a client"""
    try:
        await client.remove_all_channels()
    except Exception as e:
        logger.error(f"Error releasing realtime channels: {e}")
    
    try:
        await client.postgrest.aclose()
        await client.auth.close()
    except Exception as e:
        logger.error(f"Error closing backend sessions: {e}")

async def get_supabase(
    auth: AuthContext = Depends(get_auth_context)
) -> AsyncGenerator[AsyncClient, None]:
    """Dependency to get a backend client scoped to the caller"""
    client = await create_supabase_client(auth)
    try:
        yield client
    finally:
        await close_supabase_client(client)
