import pytest
from venered.api import live
from venered.db import client as db_client
from venered.db.client import close_supabase_client, get_supabase
from venered.tests.fakes import FakeSupabase

@pytest.fixture
def backend(monkeypatch):
    fake = FakeSupabase()

    async def create(auth=None):
        return fake

    monkeypatch.setattr(db_client, "create_supabase_client", create)
    monkeypatch.setattr(live, "create_supabase_client", create)
    return fake

async def run_dependency(generator):
    value = await generator.__anext__()
    with pytest.raises(StopAsyncIteration):
        await generator.__anext__()
    return value

@pytest.mark.asyncio
async def test_request_client_is_closed_after_teardown(auth, backend):
    client = await run_dependency(get_supabase(auth))

    assert client is backend
    assert backend.postgrest.closed
    assert backend.auth.closed

@pytest.mark.asyncio
async def test_request_teardown_releases_channels(auth, backend):
    generator = get_supabase(auth)
    client = await generator.__anext__()
    await client.channel("left-open").subscribe()

    with pytest.raises(StopAsyncIteration):
        await generator.__anext__()

    assert backend.live_channels == {}
    assert backend.removed_channels == ["left-open"]

@pytest.mark.asyncio
async def test_live_client_is_closed_after_teardown(auth, backend):
    client = await run_dependency(live.get_live_client(auth))

    assert client is backend
    assert backend.postgrest.closed
    assert backend.auth.closed

@pytest.mark.asyncio
async def test_live_client_without_auth_is_none(backend):
    assert await run_dependency(live.get_live_client(None)) is None
    assert not backend.postgrest.closed

@pytest.mark.asyncio
async def test_close_errors_are_logged(backend, caplog):
    async def broken():
        raise RuntimeError("socket already gone")

    backend.remove_all_channels = broken
    backend.postgrest.aclose = broken

    await close_supabase_client(backend)

    assert "Error releasing realtime channels" in caplog.text
    assert "Error closing backend sessions" in caplog.text
