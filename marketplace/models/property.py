from django.db import models

from .profile import Profile


class Property(models.Model):
    TYPE_CHOICES = (
        ("rent", "For Rent"),
        ("sale", "For Sale"),
    )
    CATEGORY_CHOICES = (
        ("budget", "Budget"),
        ("standard", "Standard"),
        ("premium", "Premium"),
        ("luxury", "Luxury"),
    )
    STATUS_CHOICES = (
        ("available", "Available"),
        ("reserved", "Reserved"),
        ("sold", "Sold"),
    )
    RENT_PERIOD_CHOICES = (
        ("monthly", "Monthly"),
        ("yearly", "Yearly"),
    )
    VERIFICATION_CHOICES = (
        ("unverified", "Unverified"),
        ("pending", "Pending Review"),
        ("verified", "Verified"),
        ("rejected", "Rejected"),
    )
    FEATURED_CATEGORIES = ("premium", "luxury")
    PLACEHOLDER_IMAGE = "https://via.placeholder.com/400x300?text=No+Image"

    owner = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="properties")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    location = models.CharField(max_length=255)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    type = models.CharField(max_length=4, choices=TYPE_CHOICES, default="rent")
    property_type = models.CharField(max_length=50, blank=True, help_text="e.g., apartment, studio, villa")
    category = models.CharField(max_length=10, choices=CATEGORY_CHOICES, default="standard")
    bedrooms = models.PositiveIntegerField(null=True, blank=True)
    bathrooms = models.PositiveIntegerField(null=True, blank=True)
    area = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, help_text="Square metres")
    amenities = models.JSONField(default=list, blank=True)
    images = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default="available")
    reservation_fee = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    rent_period = models.CharField(max_length=10, choices=RENT_PERIOD_CHOICES, blank=True)
    advance_months_min = models.PositiveIntegerField(null=True, blank=True)
    advance_months_max = models.PositiveIntegerField(null=True, blank=True)
    is_featured = models.BooleanField(default=False)
    verification_status = models.CharField(max_length=12, choices=VERIFICATION_CHOICES, default="unverified")
    view_count = models.PositiveIntegerField(default=0)
    last_viewed_at = models.DateTimeField(null=True, blank=True)
    average_rating = models.DecimalField(max_digits=3, decimal_places=2, null=True, blank=True)
    total_reviews = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "properties"
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return self.title

    @property
    def primary_image(self) -> str:
        return self.images[0] if self.images else self.PLACEHOLDER_IMAGE

    @property
    def owner_is_verified(self) -> bool:
        return self.owner.is_agent
