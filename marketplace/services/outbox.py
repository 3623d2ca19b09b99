"""
Persisted outgoing message queue.

Every outgoing message is first recorded as an ``OutboxMessage`` with status
``sending``. When the sender is online the message is delivered right away;
otherwise, or when delivery fails, it stays queued for the next sync pass.

A sync pass never overlaps another one and runs at most once every two
seconds. It first links queued entries to server messages that already
carry the same sender, receiver and content within ten seconds, so an entry whose
delivery succeeded but was never acknowledged is not delivered again. The
remaining entries are then delivered; failures become ``failed`` and must be
retried explicitly.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable

from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from ..exceptions import MessageDeliveryError
from ..models import Message, OutboxMessage

logger = logging.getLogger(__name__)

MIN_SYNC_INTERVAL = 2
SYNC_PERIOD = 30
RECONCILE_WINDOW = timedelta(seconds=10)


def deliver_to_server(entry: OutboxMessage) -> Message:
    """Create the server-side message for an outbox entry."""
    if entry.sender_id == entry.receiver_id:
        raise MessageDeliveryError("You cannot send a message to yourself.")
    if not entry.content and not entry.attachment_url:
        raise MessageDeliveryError("A message needs text or an attachment.")
    try:
        return Message.objects.create(
            sender_id=entry.sender_id,
            receiver_id=entry.receiver_id,
            property_id=entry.property_id,
            content=entry.content,
            attachment_url=entry.attachment_url,
            attachment_type=entry.attachment_type,
            created_at=entry.created_at,
        )
    except DatabaseError as exc:
        raise MessageDeliveryError() from exc


@dataclass(frozen=True)
class SyncReport:
    ran: bool
    reconciled: int = 0
    sent: int = 0
    failed: int = 0


class OutboxService:
    """Queue and synchronize outgoing messages."""

    def __init__(
        self,
        *,
        sender: Callable[[OutboxMessage], Message] = deliver_to_server,
        is_online: Callable[[], bool] = lambda: True,
        clock: Callable[[], float] = time.monotonic,
        min_interval: float = MIN_SYNC_INTERVAL,
    ):
        self.sender = sender
        self.is_online = is_online
        self.clock = clock
        self.min_interval = min_interval
        self._lock = threading.Lock()
        self._last_sync: float | None = None

    def enqueue(self, user, data: dict[str, Any]) -> OutboxMessage:
        entry = OutboxMessage.objects.create(
            sender=user,
            receiver_id=data["receiver"],
            property_id=data.get("property") or None,
            content=(data.get("content") or "").strip(),
            attachment_url=data.get("attachment_url") or "",
            attachment_type=data.get("attachment_type") or "",
        )
        if self.is_online():
            with self._lock:
                self._deliver(entry, count_failure=False)
        else:
            logger.info("Offline: message %s queued", entry.pk)
        return entry

    def pending(self, user=None) -> list[OutboxMessage]:
        queryset = OutboxMessage.objects.filter(status="sending", server_message__isnull=True)
        if user is not None:
            queryset = queryset.filter(sender=user)
        return list(queryset.order_by("created_at"))

    def sync(self) -> SyncReport:
        """Reconcile then deliver queued entries; skipped while another pass runs or too soon."""
        if not self._lock.acquire(blocking=False):
            logger.debug("Outbox sync already running")
            return SyncReport(ran=False)
        try:
            now = self.clock()
            if self._last_sync is not None and now - self._last_sync < self.min_interval:
                return SyncReport(ran=False)
            self._last_sync = now
            if not self.is_online():
                return SyncReport(ran=False)

            queued = self.pending()
            reconciled = 0
            remaining = []
            for entry in queued:
                if self._reconcile(entry):
                    reconciled += 1
                else:
                    remaining.append(entry)

            sent = failed = 0
            for entry in remaining:
                if self._deliver(entry):
                    sent += 1
                else:
                    failed += 1
            if queued:
                logger.info("Outbox sync: %s reconciled, %s sent, %s failed", reconciled, sent, failed)
            return SyncReport(ran=True, reconciled=reconciled, sent=sent, failed=failed)
        finally:
            self._lock.release()

    def retry(self, entry: OutboxMessage) -> bool:
        if entry.status != "failed":
            return False
        with self._lock:
            entry.refresh_from_db()
            if entry.status != "failed":
                return False
            if self._reconcile(entry):
                return True
            return self._deliver(entry)

    def _reconcile(self, entry: OutboxMessage) -> bool:
        match = (
            Message.objects.filter(
                sender_id=entry.sender_id,
                receiver_id=entry.receiver_id,
                content=entry.content,
                created_at__gte=entry.created_at - RECONCILE_WINDOW,
                created_at__lte=entry.created_at + RECONCILE_WINDOW,
                outbox_entry__isnull=True,
            )
            .order_by("created_at", "id")
            .first()
        )
        if match is None:
            return False
        self._mark_sent(entry, match)
        logger.info("Outbox entry %s matched server message %s", entry.pk, match.pk)
        return True

    def _mark_sent(self, entry: OutboxMessage, message: Message) -> None:
        entry.server_message = message
        entry.status = "sent"
        entry.is_local = False
        entry.save(update_fields=["server_message", "status", "is_local", "updated_at"])

    def _deliver(self, entry: OutboxMessage, count_failure: bool = True) -> bool:
        try:
            with transaction.atomic():
                message = self.sender(entry)
                self._mark_sent(entry, message)
        except MessageDeliveryError as exc:
            logger.warning("Outbox entry %s not delivered: %s", entry.pk, exc.message)
            if count_failure:
                OutboxMessage.objects.filter(pk=entry.pk).update(
                    status="failed",
                    sync_attempts=F("sync_attempts") + 1,
                    updated_at=timezone.now(),
                )
                entry.refresh_from_db(fields=["status", "sync_attempts"])
            return False
        return True


outbox = OutboxService()
