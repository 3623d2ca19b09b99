import uuid

from django.db import models
from django.utils import timezone

from .profile import Profile
from .property import Property


class Message(models.Model):
    sender = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="sent_messages")
    receiver = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="received_messages")
    property = models.ForeignKey(
        Property,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="messages",
    )
    content = models.TextField(blank=True)
    attachment_url = models.CharField(max_length=500, blank=True)
    attachment_type = models.CharField(max_length=50, blank=True)
    voice_url = models.CharField(max_length=500, blank=True)
    reply_to = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="replies",
    )
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "messages"
        ordering = ["created_at", "id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Message from {self.sender_id} to {self.receiver_id}"


class OutboxMessage(models.Model):
    """A locally recorded message waiting to be (or already) delivered to the server."""

    STATUS_CHOICES = (
        ("sending", "Sending"),
        ("sent", "Sent"),
        ("delivered", "Delivered"),
        ("read", "Read"),
        ("failed", "Failed"),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    sender = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="outbox_messages")
    receiver = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="+")
    property = models.ForeignKey(Property, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    content = models.TextField(blank=True)
    attachment_url = models.CharField(max_length=500, blank=True)
    attachment_type = models.CharField(max_length=50, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="sending")
    is_local = models.BooleanField(default=True)
    server_message = models.OneToOneField(
        Message,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="outbox_entry",
    )
    sync_attempts = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "outbox_messages"
        ordering = ["created_at"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Outbox {self.id} ({self.status})"
