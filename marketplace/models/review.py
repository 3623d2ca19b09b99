from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from .profile import Profile
from .property import Property
from .reservation import Reservation


class PropertyReview(models.Model):
    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="reviews")
    user = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="property_reviews")
    reservation = models.OneToOneField(Reservation, on_delete=models.CASCADE, related_name="review")
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "property_reviews"
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Review for {self.property} by {self.user}"


class PropertyView(models.Model):
    SOURCE_CHOICES = (
        ("direct", "Direct"),
        ("home", "Home feed"),
        ("search", "Search"),
        ("explore", "Explore"),
        ("map", "Map"),
        ("similar", "Similar listings"),
        ("share", "Shared link"),
        ("agent_profile", "Agent profile"),
    )
    DEVICE_CHOICES = (
        ("mobile", "Mobile"),
        ("tablet", "Tablet"),
        ("desktop", "Desktop"),
    )
    PLATFORM_CHOICES = (
        ("ios", "iOS"),
        ("android", "Android"),
        ("web", "Web"),
    )

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="views")
    viewer = models.ForeignKey(
        Profile,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="property_views",
    )
    session_id = models.CharField(max_length=64, blank=True)
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default="direct")
    device_type = models.CharField(max_length=10, choices=DEVICE_CHOICES, blank=True)
    platform = models.CharField(max_length=10, choices=PLATFORM_CHOICES, default="web")
    view_duration_seconds = models.PositiveIntegerField(null=True, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "property_views"
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"View of {self.property} ({self.source})"
