from decimal import Decimal

from django.db import models
from django.utils import timezone

from .profile import Profile
from .property import Property


class Reservation(models.Model):
    STATUS_CHOICES = (
        ("pending", "Pending"),
        ("confirmed", "Confirmed"),
        ("cancelled", "Cancelled"),
        ("completed", "Completed"),
    )
    PAYMENT_STATUS_CHOICES = (
        ("unpaid", "Unpaid"),
        ("pending", "Pending"),
        ("paid", "Paid"),
        ("failed", "Failed"),
        ("refunded", "Refunded"),
    )
    REFUND_STATUS_CHOICES = (
        ("requested", "Requested"),
        ("processed", "Processed"),
        ("failed", "Failed"),
    )
    ACTIVE_STATUSES = ("pending", "confirmed")

    user = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="reservations")
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="reservations")
    reservation_date = models.DateField()
    reservation_time = models.TimeField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="pending")
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    reservation_fee = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    transaction_id = models.CharField(max_length=100, blank=True)
    payment_status = models.CharField(max_length=10, choices=PAYMENT_STATUS_CHOICES, default="unpaid")
    paid_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)
    cancellation_reason = models.TextField(blank=True)
    refund_requested = models.BooleanField(default=False)
    refund_status = models.CharField(max_length=10, choices=REFUND_STATUS_CHOICES, blank=True)
    refund_number = models.CharField(max_length=20, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "reservations"
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Reservation of {self.property} by {self.user}"

    def is_active(self) -> bool:
        return self.status in self.ACTIVE_STATUSES

    def mark_confirmed(self) -> None:
        if self.status == "cancelled":
            return
        self.status = "confirmed"
        self.save(update_fields=["status", "updated_at"])

    def mark_paid(self, transaction_id: str) -> None:
        self.payment_status = "paid"
        self.transaction_id = transaction_id
        self.paid_at = timezone.now()
        if self.status == "pending":
            self.status = "confirmed"
        self.save(update_fields=["payment_status", "transaction_id", "paid_at", "status", "updated_at"])

    def mark_cancelled(self, reason: str = "") -> None:
        self.status = "cancelled"
        if reason:
            self.cancellation_reason = reason
        self.save(update_fields=["status", "cancellation_reason", "updated_at"])

    def mark_completed(self) -> None:
        if self.status != "confirmed":
            return
        self.status = "completed"
        self.save(update_fields=["status", "updated_at"])
