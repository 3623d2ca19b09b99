from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from django.conf import settings
from django.core.mail import send_mail

from ..models import Message, Notification, Reservation

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50


@dataclass(frozen=True)
class BadgeCounts:
    unread_messages: int
    unread_notifications: int
    pending_reservations: int


def notify(user, title: str, body: str, type: str = "system", data: dict[str, Any] | None = None) -> Notification:
    """Store a notification for ``user`` and optionally email it."""
    notification = Notification.objects.create(user=user, title=title, body=body, type=type, data=data or {})
    if settings.NOTIFICATIONS_EMAIL and user.email:
        try:
            send_mail(title, body, None, [user.email])
        except Exception:
            logger.exception("Could not email notification %s to user %s", notification.pk, user.pk)
    return notification


class NotificationService:
    """Per-user notification inbox."""

    def __init__(self, user):
        self.user = user

    def notifications(self, unread_only: bool = False, limit: int = DEFAULT_LIST_LIMIT) -> list[Notification]:
        queryset = Notification.objects.filter(user=self.user)
        if unread_only:
            queryset = queryset.filter(read=False)
        return list(queryset.order_by("-created_at", "-id")[:limit])

    def mark_read(self, notification_id) -> bool:
        return bool(Notification.objects.filter(pk=notification_id, user=self.user, read=False).update(read=True))

    def mark_all_read(self) -> int:
        return Notification.objects.filter(user=self.user, read=False).update(read=True)

    def badge_counts(self) -> BadgeCounts:
        pending_reservations = 0
        if self.user.is_agent:
            pending_reservations = Reservation.objects.filter(property__owner=self.user, status="pending").count()
        return BadgeCounts(
            unread_messages=Message.objects.filter(receiver=self.user, read=False).count(),
            unread_notifications=Notification.objects.filter(user=self.user, read=False).count(),
            pending_reservations=pending_reservations,
        )
