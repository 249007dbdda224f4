import asyncio
import json
import logging
from typing import Any, Dict, Optional, Set
from fastapi import WebSocket, WebSocketDisconnect
from collections import defaultdict

from venered.schemas.auth_schema import AuthContext
from venered.schemas.notification_schema import NotificationItem
from venered.services.notification_service import NotificationService
from venered.services.unread_service import counters_for

logger = logging.getLogger(__name__)

class LiveSession:
    """Live badge counts and notification feed for one connected socket.

    Mounting seeds both unread counters, loads the feed and opens their
    subscriptions; unmounting closes every subscription, also when the
    socket fails. Outgoing frames go through a queue drained by one writer.
    """

    def __init__(self, client, auth: AuthContext, websocket: WebSocket):
        self.client = client
        self.auth = auth
        self.websocket = websocket
        self.queue: asyncio.Queue = asyncio.Queue()
        self._ready = False

        self.messages, self.notifications = counters_for(
            client,
            auth,
            on_change=self._on_count,
            on_cue=self._on_cue
        )
        self.feed = NotificationService(
            client,
            auth,
            counter=self.notifications,
            on_change=self._on_feed
        )

    def push(self, frame_type: str, data: Any = None, action: Optional[str] = None):
        frame: Dict[str, Any] = {"type": frame_type, "data": data}
        if action is not None:
            frame["action"] = action
        self.queue.put_nowait(frame)

    def _on_count(self, kind: str, count: int):
        if self._ready:
            self.push("unread_count", {"kind": kind, "count": count})

    def _on_cue(self, sound: str):
        if self._ready:
            self.push("cue", {"sound": sound})

    def _on_feed(self, action: str, item: Optional[NotificationItem]):
        if not self._ready:
            return
        if item is None:
            self.push("notifications", None, action=action)
        else:
            self.push("notification", item.model_dump(mode="json"), action=action)

    async def start(self):
        """Seed, load and subscribe, then send the initial state"""
        await self.messages.start()
        await self.notifications.start()
        await self.feed.start()

        self.push("init", {
            "unread_messages": self.messages.count,
            "unread_notifications": self.notifications.count,
            "notifications": [item.model_dump(mode="json") for item in self.feed.items]
        })
        self._ready = True
        logger.info(f"Live session started for user {self.auth.user_id}")

    async def stop(self):
        self._ready = False
        for consumer in (self.feed, self.notifications, self.messages):
            try:
                await consumer.stop()
            except Exception as e:
                logger.error(f"Error stopping live consumer for user {self.auth.user_id}: {e}")
        logger.info(f"Live session stopped for user {self.auth.user_id}")

    async def __aenter__(self) -> "LiveSession":
        try:
            await self.start()
        except BaseException:
            await self.stop()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    async def handle(self, message: Dict[str, Any]):
        """Handle one frame sent by the client"""
        message_type = message.get("type")

        if message_type == "ping":
            self.push("pong", {"timestamp": message.get("timestamp")})

        elif message_type == "mark_as_read":
            notification_id = message.get("notification_id")
            if notification_id:
                await self.feed.mark_as_read(notification_id)

        elif message_type == "mark_all_as_read":
            if message.get("kind") == "messages":
                await self.messages.mark_all_as_read()
            else:
                await self.feed.mark_all_as_read()

        else:
            logger.debug(f"Ignoring live frame of type {message_type}")

    async def _send_loop(self):
        while True:
            frame = await self.queue.get()
            await self.websocket.send_text(json.dumps(frame))

    async def _receive_loop(self):
        while True:
            try:
                data = await self.websocket.receive_text()
            except WebSocketDisconnect:
                logger.info(f"WebSocket disconnected for user {self.auth.user_id}")
                return

            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning(f"Ignoring malformed frame from user {self.auth.user_id}")
                continue

            if isinstance(message, dict):
                await self.handle(message)

    async def run(self):
        """Serve the socket until the client goes away"""
        sender = asyncio.create_task(self._send_loop())
        try:
            await self._receive_loop()
        finally:
            sender.cancel()
            await asyncio.gather(sender, return_exceptions=True)

class LiveSessionManager:
    def __init__(self):
        self.active_sessions: Dict[str, Set[LiveSession]] = defaultdict(set)
        self.lock = asyncio.Lock()

    async def connect(self, session: LiveSession):
        """Register a mounted session"""
        user_id = session.auth.user_id
        async with self.lock:
            self.active_sessions[user_id].add(session)

        logger.info(f"User {user_id} connected. Total sessions: {len(self.active_sessions[user_id])}")

    async def disconnect(self, session: LiveSession):
        """Forget a session"""
        user_id = session.auth.user_id
        async with self.lock:
            if user_id in self.active_sessions:
                self.active_sessions[user_id].discard(session)
                if not self.active_sessions[user_id]:
                    del self.active_sessions[user_id]

        logger.info(f"User {user_id} disconnected")

    async def get_connected_users_count(self) -> int:
        """Get count of connected users"""
        async with self.lock:
            return len(self.active_sessions)

    async def get_total_connections_count(self) -> int:
        """Get total count of live sessions"""
        async with self.lock:
            return sum(len(sessions) for sessions in self.active_sessions.values())

live_manager = LiveSessionManager()
