import asyncio
import inspect
import logging
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Set

from venered.config import settings
from venered.schemas.realtime_schema import ChangeEvent

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[ChangeEvent], Any]

class EventSelector(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    ALL = "*"

@dataclass(frozen=True)
class RowFilter:
    """Equality filter on one column, e.g. receiver_id = current user"""
    column: str
    value: Any

    def to_postgres(self) -> str:
        return f"{self.column}=eq.{self.value}"

    def matches(self, row: Dict[str, Any]) -> bool:
        # Old images usually carry only the primary key
        if self.column not in row:
            return True
        return str(row[self.column]) == str(self.value)

class SubscriptionManager:
    """Watch one table for change events and hand each matching event to a callback.

    One manager owns exactly one realtime channel between ``open()`` and
    ``close()``. Close is idempotent, and the manager is an async context
    manager so teardown also runs when the owner fails. Repeated deliveries of
    the same change are dropped, and coroutine callbacks run as tasks that are
    cancelled on close.
    """

    def __init__(
        self,
        client,
        channel_name: str,
        table: str,
        callback: ChangeCallback,
        events: EventSelector = EventSelector.ALL,
        row_filter: Optional[RowFilter] = None,
        schema: str = "public",
        dedup_window: Optional[int] = None
    ):
        self.client = client
        self.channel_name = channel_name
        self.table = table
        self.callback = callback
        self.events = EventSelector(events)
        self.row_filter = row_filter
        self.schema = schema
        self.dedup_window = settings.REALTIME_DEDUP_WINDOW if dedup_window is None else dedup_window

        self._channel = None
        self._closed = False
        self._seen: "OrderedDict[Any, None]" = OrderedDict()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def is_active(self) -> bool:
        return self._channel is not None and not self._closed

    async def open(self) -> bool:
        """Open the channel; returns False (and logs) if subscribing fails"""
        if self._channel is not None:
            return not self._closed

        self._closed = False
        try:
            channel = self.client.channel(self.channel_name)
            self._channel = channel

            kwargs = {"table": self.table, "schema": self.schema}
            if self.row_filter is not None:
                kwargs["filter"] = self.row_filter.to_postgres()
            channel.on_postgres_changes(self.events.value, callback=self._on_payload, **kwargs)

            await channel.subscribe(self._on_status)
            logger.info(f"Subscribed to {self.table} on channel {self.channel_name}")
            return True
        except Exception as e:
            logger.error(f"Error subscribing to {self.table} on channel {self.channel_name}: {e}")
            await self.close()
            return False

    async def close(self) -> None:
        """Release the channel; safe to call any number of times"""
        if self._closed:
            return
        self._closed = True

        pending = list(self._tasks)
        self._tasks.clear()
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        channel, self._channel = self._channel, None
        if channel is None:
            return

        try:
            await self.client.remove_channel(channel)
            logger.info(f"Closed channel {self.channel_name}")
        except Exception as e:
            logger.error(f"Error closing channel {self.channel_name}: {e}")

    async def drain(self) -> None:
        """Wait for handler tasks that are still in flight"""
        while self._tasks:
            pending = list(self._tasks)
            await asyncio.gather(*pending, return_exceptions=True)
            self._tasks.difference_update(pending)

    async def __aenter__(self) -> "SubscriptionManager":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _on_status(self, status, error: Optional[Exception] = None) -> None:
        status = getattr(status, "value", status)
        if status == "SUBSCRIBED":
            logger.debug(f"Channel {self.channel_name} subscribed")
        elif error is not None:
            logger.error(f"Channel {self.channel_name} reported {status}: {error}")
        else:
            logger.warning(f"Channel {self.channel_name} reported {status}")

    def _on_payload(self, payload: Dict[str, Any], *args) -> None:
        if self._closed:
            return

        try:
            event = ChangeEvent.from_payload(payload)
        except ValueError as e:
            logger.warning(f"Ignoring malformed change on {self.table}: {e}")
            return

        self.deliver(event)

    def deliver(self, event: ChangeEvent) -> bool:
        """Hand an event to the callback unless it is filtered out or a repeat"""
        if self._closed:
            return False

        if self.events is not EventSelector.ALL and event.event_type.value != self.events.value:
            return False

        if self.row_filter is not None and not self.row_filter.matches(event.row):
            return False

        if self._is_duplicate(event):
            logger.debug(f"Dropping repeated {event.event_type.value} for {self.table} row {event.row_id}")
            return False

        try:
            result = self.callback(event)
        except Exception as e:
            logger.error(f"Error handling {event.event_type.value} on {self.table}: {e}")
            return False

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

        return True

    def _is_duplicate(self, event: ChangeEvent) -> bool:
        event_id = event.event_id
        if event_id is None or self.dedup_window <= 0:
            return False

        if event_id in self._seen:
            return True

        self._seen[event_id] = None
        while len(self._seen) > self.dedup_window:
            self._seen.popitem(last=False)
        return False

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Error handling change on {self.table}: {exc}")
