from django.db import models

from .profile import Profile
from .property import Property
from .reservation import Reservation


class CommissionPayment(models.Model):
    STATUS_CHOICES = (
        ("pending", "Pending"),
        ("paid", "Paid"),
        ("released", "Released"),
        ("refunded", "Refunded"),
        ("cancelled", "Cancelled"),
    )
    ESCROW_CHOICES = (
        ("holding", "Holding"),
        ("released", "Released"),
        ("refunded", "Refunded"),
    )

    user = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="commission_payments")
    agent = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="agent_commissions")
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="commission_payments")
    reservation = models.ForeignKey(Reservation, on_delete=models.CASCADE, related_name="commission_payments")
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    platform_fee = models.DecimalField(max_digits=14, decimal_places=2)
    agent_amount = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="pending")
    escrow_status = models.CharField(max_length=10, choices=ESCROW_CHOICES, default="holding")
    payment_method = models.CharField(max_length=20, blank=True)
    payment_reference = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    dispute_reason = models.TextField(blank=True)
    release_conditions = models.TextField(blank=True)
    release_date = models.DateField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    released_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "commission_payments"
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Commission {self.amount} for {self.property} ({self.status})"


class CommissionDispute(models.Model):
    TYPE_CHOICES = (
        ("service_not_provided", "Service not provided"),
        ("poor_service", "Poor service"),
        ("overcharge", "Overcharge"),
        ("other", "Other"),
    )
    STATUS_CHOICES = (
        ("open", "Open"),
        ("resolved", "Resolved"),
        ("rejected", "Rejected"),
    )

    commission_payment = models.ForeignKey(CommissionPayment, on_delete=models.CASCADE, related_name="disputes")
    reported_by = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="reported_disputes")
    dispute_type = models.CharField(max_length=25, choices=TYPE_CHOICES)
    description = models.TextField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="open")
    resolution = models.TextField(blank=True)
    resolved_by = models.ForeignKey(
        Profile,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="resolved_disputes",
    )
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "commission_disputes"
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"{self.get_dispute_type_display()} on commission {self.commission_payment_id}"
