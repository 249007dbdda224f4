from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from venered.config import settings
from venered.realtime.subscription import EventSelector, RowFilter, SubscriptionManager
from venered.schemas.auth_schema import AuthContext
from venered.schemas.realtime_schema import ChangeEvent, ChangeEventType

logger = logging.getLogger(__name__)

CountListener = Callable[[int], Any]
CueListener = Callable[[str], Any]

class UnreadCounter:
    """Local count of unread rows owned by the current user.

    Seeded by a count-only query, then kept in sync from the change feed:
    +1 for each unread insert, -1 for each unread -> read transition, a
    recount after each delete, and never below zero. Subclasses pick the
    table, owner column and any excluded notification types.
    """
    kind: str = ""
    table: str = ""
    owner_column: str = ""
    excluded_types: Tuple[str, ...] = ()
    cue: Optional[str] = None

    def __init__(
        self,
        client,
        auth: Optional[AuthContext],
        on_change: Optional[CountListener] = None,
        on_cue: Optional[CueListener] = None
    ):
        self.client = client
        self.auth = auth
        self.on_change = on_change
        self.on_cue = on_cue
        self.count = 0
        self.subscription: Optional[SubscriptionManager] = None

    @property
    def channel_name(self) -> str:
        return f"unread-{self.kind}:{self.auth.user_id}"

    def _apply_filters(self, query):
        query = query.eq(self.owner_column, self.auth.user_id).eq("read", False)
        for excluded in self.excluded_types:
            query = query.neq("type", excluded)
        return query

    def _is_counted(self, row: Dict[str, Any]) -> bool:
        if self.auth is None:
            return False
        if str(row.get(self.owner_column, self.auth.user_id)) != str(self.auth.user_id):
            return False
        return row.get("type") not in self.excluded_types

    def _set_count(self, value: int) -> None:
        value = max(0, value)
        if value == self.count:
            return
        self.count = value
        if self.on_change is not None:
            self.on_change(value)

    async def seed(self) -> int:
        """Load the unread count from the backend; safe to call again after reconnect"""
        if self.auth is None:
            return self.count

        try:
            query = self.client.table(self.table).select("*", count="exact", head=True)
            response = await self._apply_filters(query).execute()
            self._set_count(response.count or 0)
        except Exception as e:
            logger.error(f"Error loading unread {self.kind} count: {e}")

        return self.count

    def on_insert(self, row: Dict[str, Any]) -> None:
        """Count a newly inserted row if it is unread and ours"""
        if not self._is_counted(row) or row.get("read"):
            return

        self._set_count(self.count + 1)

        if self.cue and self.on_cue is not None and settings.NOTIFICATION_CUES_ENABLED:
            self.on_cue(self.cue)

    def on_update(self, old: Dict[str, Any], new: Dict[str, Any]) -> None:
        """Uncount a row whose read flag went from false to true"""
        if not self._is_counted(new):
            return

        # A missing old image means the flag was not replicated: treat as unread
        if new.get("read") and not old.get("read", False):
            self._set_count(self.count - 1)

    def handle_event(self, event: ChangeEvent):
        if event.event_type is ChangeEventType.INSERT:
            self.on_insert(event.new)
        elif event.event_type is ChangeEventType.UPDATE:
            self.on_update(event.old, event.new)
        elif event.event_type is ChangeEventType.DELETE:
            # Old images carry only the key, so the read flag is unknown: recount
            return self.seed()

    async def mark_all_as_read(self) -> bool:
        """Mark every unread row as read; the local count drops to zero immediately"""
        if self.auth is None:
            return False

        self._set_count(0)

        try:
            query = self.client.table(self.table).update({"read": True})
            await self._apply_filters(query).execute()
            logger.info(f"Marked all {self.kind} as read for user {self.auth.user_id}")
            return True
        except Exception as e:
            logger.error(f"Error marking {self.kind} as read: {e}")
            return False

    async def start(self) -> int:
        """Seed the count and open the change-feed subscription"""
        if self.auth is None:
            return self.count

        await self.seed()

        if self.subscription is None:
            self.subscription = SubscriptionManager(
                self.client,
                channel_name=self.channel_name,
                table=self.table,
                callback=self.handle_event,
                events=EventSelector.ALL,
                row_filter=RowFilter(self.owner_column, self.auth.user_id)
            )
        await self.subscription.open()
        return self.count

    async def stop(self) -> None:
        if self.subscription is not None:
            await self.subscription.close()

    async def __aenter__(self) -> "UnreadCounter":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

class UnreadMessagesCounter(UnreadCounter):
    kind = "messages"
    table = "messages"
    owner_column = "receiver_id"
    cue = "message"

class UnreadNotificationsCounter(UnreadCounter):
    kind = "notifications"
    table = "notifications"
    owner_column = "user_id"
    # Messages have their own counter
    excluded_types = ("message",)
    cue = "notification"

def counters_for(
    client,
    auth: Optional[AuthContext],
    on_change: Optional[Callable[[str, int], Any]] = None,
    on_cue: Optional[CueListener] = None
) -> List[UnreadCounter]:
    """Build both badge counters, tagging count changes with the counter kind"""
    counters = []
    for counter_class in (UnreadMessagesCounter, UnreadNotificationsCounter):
        listener = partial(on_change, counter_class.kind) if on_change is not None else None
        counters.append(counter_class(client, auth, on_change=listener, on_cue=on_cue))
    return counters
