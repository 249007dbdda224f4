import logging

import pytest
from venered.realtime import EventSelector, RowFilter, SubscriptionManager
from venered.schemas.realtime_schema import ChangeEvent, ChangeEventType
from venered.tests.conftest import OTHER_ID, USER_ID
from venered.tests.fakes import FakeSupabase

def make_manager(client, received, **kwargs):
    return SubscriptionManager(
        client,
        channel_name=kwargs.pop("channel_name", f"test:{USER_ID}"),
        table="notifications",
        callback=received.append,
        **kwargs
    )

def test_change_event_from_wire_payload():
    event = ChangeEvent.from_payload({
        "data": {
            "type": "UPDATE",
            "table": "notifications",
            "record": {"id": "n1", "read": True},
            "old_record": {"id": "n1"},
            "commit_timestamp": "2024-01-01T00:00:00Z"
        }
    })

    assert event.event_type is ChangeEventType.UPDATE
    assert event.row == {"id": "n1", "read": True}
    assert event.event_id == ("UPDATE", "n1", "2024-01-01T00:00:00Z")

def test_change_event_from_client_payload():
    event = ChangeEvent.from_payload({"eventType": "delete", "new": {}, "old": {"id": "n2"}})

    assert event.event_type is ChangeEventType.DELETE
    assert event.row_id == "n2"
    assert event.event_id is None

def test_change_event_without_type_is_rejected():
    with pytest.raises(ValueError):
        ChangeEvent.from_payload({"data": {"record": {"id": "n1"}}})

def test_row_filter():
    row_filter = RowFilter("user_id", USER_ID)

    assert row_filter.to_postgres() == f"user_id=eq.{USER_ID}"
    assert row_filter.matches({"user_id": USER_ID})
    assert not row_filter.matches({"user_id": OTHER_ID})
    assert row_filter.matches({"id": "n1"})

@pytest.mark.asyncio
async def test_open_delivers_matching_events():
    client = FakeSupabase()
    received = []
    manager = make_manager(client, received, row_filter=RowFilter("user_id", USER_ID))

    assert await manager.open()
    assert manager.is_active

    client.emit("notifications", "INSERT", {"id": "n1", "user_id": USER_ID})
    client.emit("notifications", "INSERT", {"id": "n2", "user_id": OTHER_ID})
    client.emit("messages", "INSERT", {"id": "m1", "receiver_id": USER_ID})

    assert [event.row_id for event in received] == ["n1"]

@pytest.mark.asyncio
async def test_event_selector_limits_event_types():
    client = FakeSupabase()
    received = []
    manager = make_manager(client, received, events=EventSelector.INSERT)
    await manager.open()

    client.emit("notifications", "INSERT", {"id": "n1", "user_id": USER_ID})
    client.emit("notifications", "UPDATE", {"id": "n1", "user_id": USER_ID, "read": True})

    assert [event.event_type for event in received] == [ChangeEventType.INSERT]

@pytest.mark.asyncio
async def test_repeated_delivery_is_dropped():
    client = FakeSupabase()
    received = []
    manager = make_manager(client, received)
    await manager.open()

    row = {"id": "n1", "user_id": USER_ID}
    client.emit("notifications", "INSERT", row, commit_timestamp="2024-01-01T00:00:01Z")
    client.emit("notifications", "INSERT", row, commit_timestamp="2024-01-01T00:00:01Z")
    client.emit("notifications", "UPDATE", {**row, "read": True}, commit_timestamp="2024-01-01T00:00:01Z")

    assert [event.event_type for event in received] == [ChangeEventType.INSERT, ChangeEventType.UPDATE]

@pytest.mark.asyncio
async def test_dedup_window_is_bounded():
    client = FakeSupabase()
    received = []
    manager = make_manager(client, received, dedup_window=2)
    await manager.open()

    for row_id in ("n1", "n2", "n3"):
        client.emit("notifications", "INSERT", {"id": row_id}, commit_timestamp="t")
    # n1 fell out of the window, so it is delivered again
    client.emit("notifications", "INSERT", {"id": "n1"}, commit_timestamp="t")

    assert [event.row_id for event in received] == ["n1", "n2", "n3", "n1"]

@pytest.mark.asyncio
async def test_events_without_identity_are_never_deduplicated():
    client = FakeSupabase()
    received = []
    manager = make_manager(client, received)
    await manager.open()

    event = ChangeEvent(event_type=ChangeEventType.INSERT, new={"user_id": USER_ID})
    assert manager.deliver(event)
    assert manager.deliver(event)
    assert len(received) == 2

@pytest.mark.asyncio
async def test_close_is_idempotent():
    client = FakeSupabase()
    manager = make_manager(client, [])
    await manager.open()

    await manager.close()
    await manager.close()

    assert not manager.is_active
    assert client.live_channels == {}
    assert client.removed_channels == [manager.channel_name]

@pytest.mark.asyncio
async def test_no_delivery_after_close():
    client = FakeSupabase()
    received = []
    manager = make_manager(client, received)
    await manager.open()
    channel = client.live_channels[manager.channel_name]
    await manager.close()

    # A late frame on the removed channel is ignored
    channel.bindings[0]["callback"]({"data": {"type": "INSERT", "record": {"id": "n1"}}})

    assert received == []

@pytest.mark.asyncio
async def test_same_channel_name_can_be_reused_after_teardown():
    client = FakeSupabase()

    async with make_manager(client, []) as first:
        assert first.is_active

    async with make_manager(client, []) as second:
        assert second.is_active

    assert client.live_channels == {}

@pytest.mark.asyncio
async def test_channel_name_clash_while_live_is_reported(caplog):
    client = FakeSupabase()
    first = make_manager(client, [])
    await first.open()

    second = make_manager(client, [])
    with caplog.at_level(logging.ERROR):
        assert not await second.open()

    assert "Error subscribing" in caplog.text
    assert not second.is_active
    assert first.is_active

@pytest.mark.asyncio
async def test_subscribe_failure_is_logged_not_raised(caplog):
    client = FakeSupabase()
    client.fail_subscribe = True
    manager = make_manager(client, [])

    with caplog.at_level(logging.ERROR):
        assert not await manager.open()

    assert "Realtime connection refused" in caplog.text
    assert not manager.is_active

@pytest.mark.asyncio
async def test_coroutine_callbacks_are_tracked_and_drained():
    client = FakeSupabase()
    handled = []

    async def handler(event):
        handled.append(event.row_id)

    manager = SubscriptionManager(client, "async-test", "notifications", handler)
    await manager.open()

    client.emit("notifications", "INSERT", {"id": "n1"})
    await manager.drain()

    assert handled == ["n1"]

@pytest.mark.asyncio
async def test_callback_errors_do_not_break_the_subscription(caplog):
    client = FakeSupabase()
    calls = []

    def handler(event):
        calls.append(event.row_id)
        raise RuntimeError("handler failed")

    manager = SubscriptionManager(client, "failing", "notifications", handler)
    await manager.open()

    with caplog.at_level(logging.ERROR):
        client.emit("notifications", "INSERT", {"id": "n1"})
        client.emit("notifications", "INSERT", {"id": "n2"})

    assert calls == ["n1", "n2"]
    assert "handler failed" in caplog.text
