from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from django.db.models import Q

from ..forms import MessageForm
from ..models import Message, Profile

logger = logging.getLogger(__name__)

INBOX_LIMIT = 100


@dataclass(frozen=True)
class ConversationSummary:
    counterpart: Profile
    last_message: Message
    unread: bool
    unread_count: int


class MessagingService:
    """Messages exchanged by one user."""

    def __init__(self, user):
        self.user = user

    def _involving_user(self):
        return Message.objects.filter(Q(sender=self.user) | Q(receiver=self.user))

    def form(self, data: Any = None) -> MessageForm:
        return MessageForm(data, sender=self.user)

    def send(self, data: Any) -> tuple[bool, MessageForm, Message | None]:
        form = self.form(data)
        if not form.is_valid():
            return False, form, None
        cleaned = form.cleaned_data
        message = Message.objects.create(
            sender=self.user,
            receiver=cleaned["receiver"],
            content=cleaned.get("content") or "",
            property=cleaned.get("property"),
            attachment_url=cleaned.get("attachment_url") or "",
            attachment_type=cleaned.get("attachment_type") or "",
            reply_to=cleaned.get("reply_to"),
        )
        logger.debug("Message %s sent from %s to %s", message.pk, self.user.pk, message.receiver_id)
        return True, form, message

    def inbox(self, limit: int = INBOX_LIMIT) -> list[Message]:
        """Newest messages sent or received, newest first."""
        return list(
            self._involving_user()
            .select_related("sender", "receiver", "property")
            .order_by("-created_at", "-id")[:limit]
        )

    def conversation(self, counterpart) -> list[Message]:
        return list(
            Message.objects.filter(
                Q(sender=self.user, receiver=counterpart) | Q(sender=counterpart, receiver=self.user)
            )
            .select_related("sender", "receiver", "property", "reply_to")
            .order_by("created_at", "id")
        )

    def chat_list(self) -> list[ConversationSummary]:
        latest: dict[int, Message] = {}
        unread_counts: dict[int, int] = {}
        for message in self._involving_user().order_by("-created_at", "-id"):
            counterpart_id = message.receiver_id if message.sender_id == self.user.id else message.sender_id
            latest.setdefault(counterpart_id, message)
            if message.receiver_id == self.user.id and not message.read:
                unread_counts[counterpart_id] = unread_counts.get(counterpart_id, 0) + 1

        profiles = Profile.objects.in_bulk(latest.keys())
        summaries = [
            ConversationSummary(
                counterpart=profiles[counterpart_id],
                last_message=message,
                unread=message.receiver_id == self.user.id and not message.read,
                unread_count=unread_counts.get(counterpart_id, 0),
            )
            for counterpart_id, message in latest.items()
            if counterpart_id in profiles
        ]
        summaries.sort(key=lambda summary: (summary.last_message.created_at, summary.last_message.id), reverse=True)
        return summaries

    def mark_read(self, message_id) -> bool:
        return bool(Message.objects.filter(pk=message_id, receiver=self.user, read=False).update(read=True))

    def mark_conversation_read(self, counterpart) -> int:
        return Message.objects.filter(receiver=self.user, sender=counterpart, read=False).update(read=True)

    def delete(self, message: Message) -> None:
        if message.sender_id != self.user.id:
            raise PermissionError("Cannot delete messages sent by another user.")
        message.delete()
