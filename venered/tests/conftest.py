import pytest
from datetime import datetime, timedelta, timezone
from jose import jwt
from fastapi.testclient import TestClient
from venered.config import settings

# Set testing mode
settings.TESTING = True

from venered.main import app
from venered.api.live import get_live_client
from venered.db.client import get_supabase
from venered.schemas.auth_schema import AuthContext
from venered.services.auth_service import get_auth_context
from venered.tests.fakes import FakeSupabase

USER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_ID = "22222222-2222-2222-2222-222222222222"
THIRD_ID = "33333333-3333-3333-3333-333333333333"

def make_token(user_id: str = USER_ID, expires_in: int = 3600, **claims) -> str:
    """Access token shaped like the ones Supabase auth issues"""
    payload = {
        "sub": user_id,
        "aud": settings.JWT_AUDIENCE,
        "role": "authenticated",
        "email": "test@example.com",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        **claims
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.JWT_ALGORITHM)

def notification_row(
    notification_id: str,
    user_id: str = USER_ID,
    read: bool = False,
    type: str = "like",
    created_at: str = "2024-01-01T00:00:00+00:00",
    **extra
):
    return {
        "id": notification_id,
        "user_id": user_id,
        "type": type,
        "title": f"New {type}",
        "message": "Someone interacted with you",
        "read": read,
        "related_user_id": OTHER_ID,
        "related_post_id": None,
        "created_at": created_at,
        **extra
    }

def message_row(message_id: str, sender_id: str = OTHER_ID, receiver_id: str = USER_ID, read: bool = False, **extra):
    return {
        "id": message_id,
        "sender_id": sender_id,
        "receiver_id": receiver_id,
        "content": f"message {message_id}",
        "read": read,
        "created_at": "2024-01-01T00:00:00+00:00",
        **extra
    }

def profile_row(user_id: str, username: str, **extra):
    return {
        "id": user_id,
        "username": username,
        "full_name": username.title(),
        "avatar_url": None,
        "location": "Lisbon",
        "website": "https://example.com",
        "posts_count": 3,
        "followers_count": 10,
        "following_count": 7,
        **extra
    }

@pytest.fixture
def auth() -> AuthContext:
    return AuthContext(user_id=USER_ID, access_token=make_token(), email="test@example.com")

@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()

@pytest.fixture
def test_client(fake_supabase: FakeSupabase, auth: AuthContext):
    """Test client whose routes act as USER_ID against the in-memory backend"""
    async def override_get_supabase():
        yield fake_supabase

    async def override_get_auth_context():
        return auth

    async def override_get_live_client():
        return fake_supabase

    app.dependency_overrides[get_supabase] = override_get_supabase
    app.dependency_overrides[get_auth_context] = override_get_auth_context
    app.dependency_overrides[get_live_client] = override_get_live_client

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
