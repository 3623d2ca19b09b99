from django.db import models

from .profile import Profile


class Notification(models.Model):
    TYPE_CHOICES = (
        ("system", "System"),
        ("message", "Message"),
        ("reservation", "Reservation"),
        ("payment", "Payment"),
        ("withdrawal", "Withdrawal"),
        ("commission", "Commission"),
        ("verification", "Verification"),
    )

    user = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="notifications")
    title = models.CharField(max_length=255)
    body = models.TextField()
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="system")
    data = models.JSONField(default=dict, blank=True)
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"{self.title} for {self.user}"
