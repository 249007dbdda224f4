import pytest
from venered.services.notification_service import NotificationService
from venered.services.unread_service import UnreadNotificationsCounter
from venered.tests.conftest import OTHER_ID, USER_ID, notification_row
from venered.tests.fakes import FakeSupabase

RELATED_USER = {"username": "bob", "full_name": "Bob", "avatar_url": None}

def timestamp(second: int) -> str:
    return f"2024-01-01T00:{second // 60:02d}:{second % 60:02d}+00:00"

def feed_client(count: int = 3) -> FakeSupabase:
    rows = [
        notification_row(f"n{i}", created_at=timestamp(i), related_user=RELATED_USER)
        for i in range(count)
    ]
    rows.append(notification_row("msg", type="message", created_at=timestamp(500)))
    rows.append(notification_row("theirs", user_id=OTHER_ID, created_at=timestamp(501)))
    return FakeSupabase({"notifications": rows})

async def insert_and_emit(client: FakeSupabase, service: NotificationService, row):
    client.tables["notifications"].append(row)
    client.emit("notifications", "INSERT", row)
    await service.subscription.drain()

@pytest.mark.asyncio
async def test_load_lists_newest_first_without_messages(auth):
    service = NotificationService(feed_client(3), auth)

    items = await service.load()

    assert [item.id for item in items] == ["n2", "n1", "n0"]
    assert items[0].related_user.username == "bob"

@pytest.mark.asyncio
async def test_load_failure_is_raised_and_start_recovers(auth):
    client = feed_client(2)
    client.fail("notifications", "select")
    service = NotificationService(client, auth)

    with pytest.raises(Exception):
        await service.load()

    assert await service.start() == []
    assert service.subscription.is_active
    await service.stop()

@pytest.mark.asyncio
async def test_insert_refetches_and_prepends(auth):
    client = feed_client(2)
    events = []
    service = NotificationService(client, auth, on_change=lambda action, item: events.append((action, item.id)))
    await service.start()

    await insert_and_emit(
        client, service,
        notification_row("n9", created_at=timestamp(9), related_user=RELATED_USER)
    )

    assert [item.id for item in service.items] == ["n9", "n1", "n0"]
    # Joined fields come from the refetch, not the change payload
    assert service.items[0].related_user.username == "bob"
    assert events == [("new", "n9")]
    await service.stop()

@pytest.mark.asyncio
async def test_insert_falls_back_to_event_row_when_refetch_misses(auth):
    client = feed_client(1)
    service = NotificationService(client, auth)
    await service.start()

    client.emit("notifications", "INSERT", notification_row("ghost"))
    await service.subscription.drain()

    assert service.items[0].id == "ghost"
    assert service.items[0].related_user is None
    await service.stop()

@pytest.mark.asyncio
async def test_message_inserts_are_ignored(auth):
    client = feed_client(1)
    service = NotificationService(client, auth)
    await service.start()

    await insert_and_emit(client, service, notification_row("msg2", type="message"))

    assert [item.id for item in service.items] == ["n0"]
    await service.stop()

@pytest.mark.asyncio
async def test_repeated_insert_does_not_duplicate(auth):
    client = feed_client(1)
    service = NotificationService(client, auth)
    await service.start()

    row = notification_row("n5")
    client.tables["notifications"].append(row)
    client.emit("notifications", "INSERT", row, commit_timestamp="2024-01-02T00:00:00Z")
    client.emit("notifications", "INSERT", row, commit_timestamp="2024-01-02T00:00:00Z")
    # Replayed with a different commit timestamp: patched in place
    client.emit("notifications", "INSERT", row, commit_timestamp="2024-01-02T00:00:01Z")
    await service.subscription.drain()

    assert [item.id for item in service.items] == ["n5", "n0"]
    await service.stop()

@pytest.mark.asyncio
async def test_feed_is_truncated_to_limit_after_insert(auth):
    client = feed_client(50)
    service = NotificationService(client, auth)
    await service.start()
    assert len(service.items) == 50

    await insert_and_emit(client, service, notification_row("n51", created_at=timestamp(900)))

    assert len(service.items) == 50
    assert service.items[0].id == "n51"
    # The oldest row dropped off the end
    assert "n0" not in [item.id for item in service.items]
    assert service.items[-1].id == "n1"
    await service.stop()

@pytest.mark.asyncio
async def test_update_patches_row_and_keeps_joins(auth):
    client = feed_client(2)
    events = []
    service = NotificationService(client, auth, on_change=lambda action, item: events.append((action, item.read)))
    await service.start()

    client.emit(
        "notifications", "UPDATE",
        notification_row("n1", read=True),
        old_record={"id": "n1", "read": False}
    )

    item = service.items[0]
    assert item.id == "n1" and item.read
    assert item.related_user.username == "bob"
    assert events == [("update", True)]

    # Rows outside the list are ignored
    client.emit("notifications", "UPDATE", notification_row("unknown", read=True))
    assert len(service.items) == 2
    await service.stop()

@pytest.mark.asyncio
async def test_delete_removes_row(auth):
    client = feed_client(2)
    events = []
    service = NotificationService(client, auth, on_change=lambda action, item: events.append((action, item.id)))
    await service.start()

    client.emit("notifications", "DELETE", old_record={"id": "n0"})

    assert [item.id for item in service.items] == ["n1"]
    assert events == [("delete", "n0")]
    await service.stop()

@pytest.mark.asyncio
async def test_mark_as_read_is_optimistic(auth):
    client = feed_client(2)
    service = NotificationService(client, auth)
    await service.load()
    client.fail("notifications", "update")

    assert await service.mark_as_read("n0") is False
    assert [item.read for item in service.items] == [False, True]

@pytest.mark.asyncio
async def test_mark_as_read_is_scoped_to_the_user(auth):
    client = feed_client(1)
    service = NotificationService(client, auth)

    assert await service.mark_as_read("theirs")

    query = client.queries("notifications", "update")[-1]
    assert ("eq", "user_id", USER_ID) in query.filters
    theirs = next(row for row in client.tables["notifications"] if row["id"] == "theirs")
    assert theirs["read"] is False

@pytest.mark.asyncio
async def test_mark_all_as_read_clears_counter_and_list(auth):
    client = feed_client(3)
    events = []
    counter = UnreadNotificationsCounter(client, auth)
    service = NotificationService(client, auth, counter=counter, on_change=lambda action, item: events.append(action))
    await counter.seed()
    await service.load()

    assert await service.mark_all_as_read()

    assert counter.count == 0
    assert all(item.read for item in service.items)
    assert events == ["read_all"]

@pytest.mark.asyncio
async def test_counter_and_feed_converge_after_same_event(auth):
    client = feed_client(0)
    counter = UnreadNotificationsCounter(client, auth)
    service = NotificationService(client, auth, counter=counter)
    await counter.start()
    await service.start()

    row = notification_row("n7")
    client.tables["notifications"].append(row)
    client.emit("notifications", "INSERT", row)

    # The counter is synchronous; the feed is still refetching the row
    assert counter.count == 1
    assert service.items == []

    await service.subscription.drain()
    unread_in_feed = sum(1 for item in service.items if not item.read)
    assert unread_in_feed == counter.count == 1

    client.emit("notifications", "UPDATE", notification_row("n7", read=True), old_record={"id": "n7", "read": False})
    await service.subscription.drain()
    assert counter.count == 0
    assert not any(not item.read for item in service.items)

    await service.stop()
    await counter.stop()

@pytest.mark.asyncio
async def test_counter_and_feed_converge_after_delete(auth):
    client = feed_client(2)
    counter = UnreadNotificationsCounter(client, auth)
    service = NotificationService(client, auth, counter=counter)
    await counter.start()
    await service.start()
    assert counter.count == 2

    client.tables["notifications"] = [row for row in client.tables["notifications"] if row["id"] != "n1"]
    client.emit("notifications", "DELETE", old_record={"id": "n1"})
    await counter.subscription.drain()
    await service.subscription.drain()

    unread_in_feed = sum(1 for item in service.items if not item.read)
    assert [item.id for item in service.items] == ["n0"]
    assert unread_in_feed == counter.count == 1

    await service.stop()
    await counter.stop()

@pytest.mark.asyncio
async def test_stop_cancels_inflight_refetch(auth):
    client = feed_client(0)
    service = NotificationService(client, auth)
    await service.start()

    client.emit("notifications", "INSERT", notification_row("late"))
    await service.stop()

    assert service.items == []
    assert client.live_channels == {}
