from decimal import Decimal

from django.db import models

from .profile import Profile
from .property import Property


class Wallet(models.Model):
    user = models.OneToOneField(Profile, on_delete=models.CASCADE, related_name="wallet")
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0"))
    currency = models.CharField(max_length=3, default="XAF")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "wallets"
        constraints = [
            models.CheckConstraint(condition=models.Q(balance__gte=0), name="wallet_balance_non_negative"),
        ]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Wallet of {self.user} ({self.balance} {self.currency})"


class Transaction(models.Model):
    TYPE_CHOICES = (
        ("deposit", "Deposit"),
        ("withdrawal", "Withdrawal"),
        ("payment", "Payment"),
        ("refund", "Refund"),
        ("commission", "Commission"),
    )
    STATUS_CHOICES = (
        ("pending", "Pending"),
        ("completed", "Completed"),
        ("failed", "Failed"),
    )

    user = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="transactions")
    property = models.ForeignKey(
        Property,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
    )
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    type = models.CharField(max_length=12, choices=TYPE_CHOICES)
    reference = models.CharField(max_length=100, unique=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="pending")
    description = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "transactions"
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"{self.get_type_display()} {self.amount} ({self.reference})"


class WithdrawalRequest(models.Model):
    STATUS_CHOICES = (
        ("pending", "Pending"),
        ("processing", "Processing"),
        ("completed", "Completed"),
        ("failed", "Failed"),
    )
    SERVICE_CHOICES = (
        ("MTN", "MTN Mobile Money"),
        ("ORANGE", "Orange Money"),
    )
    IN_FLIGHT_STATUSES = ("pending", "processing")

    user = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="withdrawal_requests")
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    phone = models.CharField(max_length=20)
    service = models.CharField(max_length=10, choices=SERVICE_CHOICES, default="MTN")
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="pending")
    gateway_reference = models.CharField(max_length=100, blank=True, db_index=True)
    failure_reason = models.TextField(blank=True)
    requested_at = models.DateTimeField(auto_now_add=True)
    processed_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "withdrawal_requests"
        ordering = ["-requested_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Withdrawal {self.amount} by {self.user} ({self.status})"
