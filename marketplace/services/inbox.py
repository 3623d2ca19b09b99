"""
Optimistic message thread for one user.

Sent messages appear immediately with status ``sending`` and a temporary id.
They are confirmed either by the send result or by a realtime INSERT for the
same sender, receiver and content created within five seconds. A failed send
leaves the entry ``failed`` until ``retry`` is called. ``fetch`` merges the
server inbox with entries still awaiting confirmation. ``threads`` keeps one
live thread per signed-in user for the message endpoints.
"""

from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any, Callable

from django.db import DatabaseError
from django.utils import timezone

from .. import realtime
from ..exceptions import MessageDeliveryError
from ..models import Message
from .messaging import MessagingService

logger = logging.getLogger(__name__)

REALTIME_MATCH_WINDOW = timedelta(seconds=5)
FETCH_MATCH_WINDOW = timedelta(seconds=10)


def temporary_id(now: datetime) -> str:
    return f"temp_{int(now.timestamp() * 1000)}_{secrets.token_hex(5)}"


@dataclass(frozen=True)
class ThreadMessage:
    id: Any
    sender_id: int
    receiver_id: int
    content: str
    created_at: datetime
    read: bool = False
    status: str = "delivered"
    temp_id: str | None = None
    is_optimistic: bool = False
    property_id: int | None = None
    attachment_url: str = ""
    attachment_type: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any], status: str | None = None) -> "ThreadMessage":
        return cls(
            id=row["id"],
            sender_id=row["sender_id"],
            receiver_id=row["receiver_id"],
            content=row.get("content") or "",
            created_at=row["created_at"],
            read=bool(row.get("read")),
            status=status or ("read" if row.get("read") else "delivered"),
            property_id=row.get("property_id"),
            attachment_url=row.get("attachment_url") or "",
            attachment_type=row.get("attachment_type") or "",
        )

    @classmethod
    def from_message(cls, message: Message, status: str | None = None) -> "ThreadMessage":
        return cls.from_row(realtime.serialize_row(message), status=status)


def _within(first: datetime, second: datetime, window: timedelta) -> bool:
    return abs(first - second) < window


class MessageThread:
    """In-memory, newest-first message list kept in sync with the change feed."""

    def __init__(
        self,
        user,
        *,
        service: MessagingService | None = None,
        change_feed: realtime.ChangeFeed | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.user = user
        self.service = service or MessagingService(user)
        self.feed = change_feed or realtime.feed
        self.clock = clock
        self.messages: list[ThreadMessage] = []
        self.error: str | None = None
        self._lock = threading.RLock()
        self._subscriptions: list[realtime.Subscription] = []
        self._pending_data: dict[str, dict[str, Any]] = {}

    # Realtime
    def start(self) -> None:
        if self._subscriptions:
            return
        for column in ("sender_id", "receiver_id"):
            self._subscriptions.append(
                self.feed.subscribe("messages", self.handle_change, filters={column: self.user.pk})
            )

    def stop(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions = []

    def _index(self, predicate) -> int | None:
        for index, message in enumerate(self.messages):
            if predicate(message):
                return index
        return None

    def handle_change(self, event: realtime.ChangeEvent) -> None:
        with self._lock:
            if event.event_type == "INSERT":
                self._apply_insert(event.new)
            elif event.event_type == "UPDATE":
                index = self._index(lambda m: m.id == event.new["id"])
                if index is not None:
                    current = self.messages[index]
                    self.messages[index] = replace(ThreadMessage.from_row(event.new), temp_id=current.temp_id)
            elif event.event_type == "DELETE":
                self.messages = [m for m in self.messages if m.id != event.old.get("id")]

    def _apply_insert(self, row: dict[str, Any]) -> None:
        if self._index(lambda m: m.id == row["id"]) is not None:
            return
        created_at = row["created_at"]
        index = self._index(
            lambda m: m.is_optimistic
            and m.sender_id == row["sender_id"]
            and m.receiver_id == row["receiver_id"]
            and m.content == (row.get("content") or "")
            and _within(m.created_at, created_at, REALTIME_MATCH_WINDOW)
        )
        if index is not None:
            optimistic = self.messages[index]
            self.messages[index] = replace(ThreadMessage.from_row(row, status="sent"), temp_id=optimistic.temp_id)
            self._pending_data.pop(optimistic.temp_id, None)
            return
        self.messages.insert(0, ThreadMessage.from_row(row, status="delivered"))

    # Server round trips
    def fetch(self) -> list[ThreadMessage]:
        server = [ThreadMessage.from_message(message) for message in self.service.inbox()]
        with self._lock:
            optimistic = [m for m in self.messages if m.is_optimistic]
            kept = [
                message
                for message in server
                if not any(
                    pending.content == message.content
                    and pending.sender_id == message.sender_id
                    and _within(pending.created_at, message.created_at, FETCH_MATCH_WINDOW)
                    for pending in optimistic
                )
            ]
            self.messages = optimistic + kept
            self.error = None
            return list(self.messages)

    def send(self, data: dict[str, Any]) -> ThreadMessage:
        now = self.clock()
        temp_id = temporary_id(now)
        optimistic = ThreadMessage(
            id=temp_id,
            sender_id=self.user.pk,
            receiver_id=int(data["receiver"]),
            content=(data.get("content") or "").strip(),
            created_at=now,
            status="sending",
            temp_id=temp_id,
            is_optimistic=True,
            property_id=data.get("property") or None,
            attachment_url=data.get("attachment_url") or "",
            attachment_type=data.get("attachment_type") or "",
        )
        with self._lock:
            self.messages.insert(0, optimistic)
            self._pending_data[temp_id] = dict(data)
        return self._deliver(temp_id)

    def retry(self, temp_id: str) -> ThreadMessage | None:
        with self._lock:
            index = self._index(lambda m: m.temp_id == temp_id and m.status == "failed")
            if index is None:
                return None
            self.messages[index] = replace(self.messages[index], status="sending")
        return self._deliver(temp_id)

    def _deliver(self, temp_id: str) -> ThreadMessage:
        data = self._pending_data.get(temp_id)
        try:
            ok, form, message = self.service.send(data)
        except DatabaseError as exc:
            self._mark_failed(temp_id, str(exc))
            raise MessageDeliveryError() from exc
        if not ok:
            error = "; ".join(str(e) for errors in form.errors.values() for e in errors)
            self._mark_failed(temp_id, error)
            raise MessageDeliveryError(error or None)

        confirmed = ThreadMessage.from_message(message, status="sent")
        with self._lock:
            self._pending_data.pop(temp_id, None)
            index = self._index(lambda m: m.temp_id == temp_id)
            if index is None:
                index = self._index(lambda m: m.id == message.pk)
            if index is None:
                self.messages.insert(0, replace(confirmed, temp_id=temp_id))
            else:
                self.messages[index] = replace(confirmed, temp_id=temp_id)
            return replace(confirmed, temp_id=temp_id)

    def _mark_failed(self, temp_id: str, error: str) -> None:
        logger.warning("Message %s from user %s failed: %s", temp_id, self.user.pk, error)
        with self._lock:
            self.error = error
            index = self._index(lambda m: m.temp_id == temp_id)
            if index is not None:
                self.messages[index] = replace(self.messages[index], status="failed")

    # Reads
    def mark_conversation_read(self, counterpart) -> int:
        updated = self.service.mark_conversation_read(counterpart)
        with self._lock:
            self.messages = [
                replace(m, read=True, status="read")
                if m.receiver_id == self.user.pk and m.sender_id == counterpart.pk and not m.read
                else m
                for m in self.messages
            ]
        return updated


class ThreadRegistry:
    """Live ``MessageThread`` per signed-in user, subscribed to the change feed while open."""

    def __init__(self, factory: Callable[..., MessageThread] = MessageThread):
        self.factory = factory
        self._threads: dict[int, MessageThread] = {}
        self._lock = threading.Lock()

    def get(self, user) -> MessageThread:
        with self._lock:
            thread = self._threads.get(user.pk)
            if thread is None:
                thread = self.factory(user)
                thread.start()
                self._threads[user.pk] = thread
                thread.fetch()
            return thread

    def close(self, user) -> None:
        with self._lock:
            thread = self._threads.pop(user.pk, None)
        if thread is not None:
            thread.stop()


threads = ThreadRegistry()
