from typing import Any, Callable, Dict, List, Optional
import logging

from venered.config import settings
from venered.realtime.subscription import EventSelector, RowFilter, SubscriptionManager
from venered.schemas.auth_schema import AuthContext
from venered.schemas.notification_schema import NotificationItem, NotificationType
from venered.schemas.realtime_schema import ChangeEvent, ChangeEventType
from venered.services.unread_service import UnreadNotificationsCounter

logger = logging.getLogger(__name__)

NOTIFICATION_SELECT = (
    "*, "
    "related_user:profiles!notifications_related_user_id_fkey(username, full_name, avatar_url), "
    "related_post:posts!notifications_related_post_id_fkey(id, content, image_urls)"
)

FeedListener = Callable[[str, Optional[NotificationItem]], Any]

class NotificationService:
    """Newest-first list of the user's notifications, reconciled from the change feed.

    Message notifications are left out; they are listed with the messages.
    The list is capped at ``NOTIFICATION_FEED_LIMIT`` rows and inserts are
    prepended, so order is arrival order rather than strict creation order.
    """

    def __init__(
        self,
        client,
        auth: Optional[AuthContext],
        counter: Optional[UnreadNotificationsCounter] = None,
        on_change: Optional[FeedListener] = None,
        limit: Optional[int] = None
    ):
        self.client = client
        self.auth = auth
        self.counter = counter or UnreadNotificationsCounter(client, auth)
        self.on_change = on_change
        self.limit = limit or settings.NOTIFICATION_FEED_LIMIT
        self.items: List[NotificationItem] = []
        self.subscription: Optional[SubscriptionManager] = None

    @property
    def channel_name(self) -> str:
        return f"notifications-list:{self.auth.user_id}"

    def _notify(self, action: str, item: Optional[NotificationItem] = None) -> None:
        if self.on_change is not None:
            self.on_change(action, item)

    def _index_of(self, notification_id: Any) -> Optional[int]:
        for index, item in enumerate(self.items):
            if item.id == str(notification_id):
                return index
        return None

    async def load(self) -> List[NotificationItem]:
        """Fetch the newest notifications with their related user and post"""
        if self.auth is None:
            return self.items

        try:
            response = await (
                self.client.table("notifications")
                .select(NOTIFICATION_SELECT)
                .eq("user_id", self.auth.user_id)
                .neq("type", NotificationType.MESSAGE.value)
                .order("created_at", desc=True)
                .limit(self.limit)
                .execute()
            )
            self.items = [NotificationItem.model_validate(row) for row in response.data or []]
        except Exception as e:
            logger.error(f"Error loading notifications: {e}")
            raise

        return self.items

    async def fetch_one(self, notification_id: Any) -> Optional[NotificationItem]:
        """Re-read a single notification with its joins"""
        response = await (
            self.client.table("notifications")
            .select(NOTIFICATION_SELECT)
            .eq("id", notification_id)
            .maybe_single()
            .execute()
        )
        if not response or not response.data:
            return None
        return NotificationItem.model_validate(response.data)

    async def on_insert(self, row: Dict[str, Any]) -> Optional[NotificationItem]:
        if row.get("type") == NotificationType.MESSAGE.value or "id" not in row:
            return None

        try:
            item = await self.fetch_one(row["id"])
        except Exception as e:
            logger.error(f"Error fetching notification {row['id']}: {e}")
            item = None
        if item is None:
            item = NotificationItem.model_validate(row)

        index = self._index_of(item.id)
        if index is not None:
            self.items[index] = item
            self._notify("update", item)
            return item

        self.items.insert(0, item)
        del self.items[self.limit:]
        self._notify("new", item)
        return item

    def on_update(self, row: Dict[str, Any]) -> Optional[NotificationItem]:
        index = self._index_of(row.get("id"))
        if index is None:
            return None

        # Joined display data is not part of the change, keep it
        changes = {
            key: value for key, value in row.items()
            if key in NotificationItem.model_fields and key not in ("related_user", "related_post")
        }
        patched = NotificationItem.model_validate({**self.items[index].model_dump(), **changes})
        self.items[index] = patched
        self._notify("update", patched)
        return patched

    def on_delete(self, row: Dict[str, Any]) -> None:
        index = self._index_of(row.get("id"))
        if index is not None:
            removed = self.items.pop(index)
            self._notify("delete", removed)

    def handle_event(self, event: ChangeEvent):
        if event.event_type is ChangeEventType.INSERT:
            return self.on_insert(event.new)
        if event.event_type is ChangeEventType.UPDATE:
            return self.on_update(event.new)
        return self.on_delete(event.row)

    async def mark_as_read(self, notification_id: Any) -> bool:
        """Mark one notification read locally, then tell the backend"""
        if self.auth is None:
            return False

        index = self._index_of(notification_id)
        if index is not None and not self.items[index].read:
            self.items[index] = self.items[index].model_copy(update={"read": True})
            self._notify("update", self.items[index])

        try:
            await (
                self.client.table("notifications")
                .update({"read": True})
                .eq("id", notification_id)
                .eq("user_id", self.auth.user_id)
                .execute()
            )
            return True
        except Exception as e:
            logger.error(f"Error marking notification {notification_id} as read: {e}")
            return False

    async def mark_all_as_read(self) -> bool:
        """Bulk mark through the counter, then mark every loaded row read"""
        if self.auth is None:
            return False

        result = await self.counter.mark_all_as_read()
        self.items = [item.model_copy(update={"read": True}) for item in self.items]
        self._notify("read_all")
        return result

    async def start(self) -> List[NotificationItem]:
        """Load the list and open the change-feed subscription"""
        if self.auth is None:
            return self.items

        try:
            await self.load()
        except Exception:
            self.items = []

        if self.subscription is None:
            self.subscription = SubscriptionManager(
                self.client,
                channel_name=self.channel_name,
                table="notifications",
                callback=self.handle_event,
                events=EventSelector.ALL,
                row_filter=RowFilter("user_id", self.auth.user_id)
            )
        await self.subscription.open()
        return self.items

    async def stop(self) -> None:
        if self.subscription is not None:
            await self.subscription.close()

    async def __aenter__(self) -> "NotificationService":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
