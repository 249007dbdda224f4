from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
import logging

from venered.config import settings
from venered.schemas.auth_schema import AuthContext

logger = logging.getLogger(__name__)

# Tokens are issued by Supabase auth; this service only verifies them
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.SUPABASE_URL}/auth/v1/token?grant_type=password"
)

class AuthService:
    def decode_token(self, token: str) -> Optional[AuthContext]:
        """Verify a Supabase access token and build the caller's context"""
        try:
            payload = jwt.decode(
                token,
                settings.jwt_secret,
                algorithms=[settings.JWT_ALGORITHM],
                audience=settings.JWT_AUDIENCE
            )
        except JWTError as e:
            logger.debug(f"Rejected access token: {e}")
            return None
        
        user_id: str = payload.get("sub")
        if not user_id:
            return None
        
        return AuthContext(
            user_id=user_id,
            access_token=token,
            email=payload.get("email"),
            role=payload.get("role")
        )

async def get_auth_context(token: str = Depends(oauth2_scheme)) -> AuthContext:
    """Dependency to get the authenticated caller"""
    auth = AuthService().decode_token(token)
    
    if auth is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    return auth

async def get_ws_auth_context(token: str = Query(...)) -> Optional[AuthContext]:
    """WebSocket variant: the token comes as a query parameter, None if invalid"""
    return AuthService().decode_token(token)
