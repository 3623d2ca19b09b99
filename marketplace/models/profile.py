from django.contrib.auth.models import AbstractUser
from django.db import models


class Profile(AbstractUser):
    ROLE_CHOICES = (
        ("normal", "User"),
        ("agent", "Agent"),
        ("landlord", "Landlord"),
        ("admin", "Admin"),
    )
    BADGE_CHOICES = (
        ("none", "None"),
        ("bronze", "Bronze"),
        ("silver", "Silver"),
        ("gold", "Gold"),
        ("platinum", "Platinum"),
    )
    AGENT_ROLES = frozenset({"agent", "landlord"})

    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default="normal")
    phone = models.CharField(max_length=20, blank=True)
    avatar = models.ImageField(upload_to="avatars/", null=True, blank=True)
    bio = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    email_verified = models.BooleanField(default=False)
    verified = models.BooleanField(default=False)
    is_verified_agent = models.BooleanField(default=False)
    verification_badge = models.CharField(max_length=10, choices=BADGE_CHOICES, default="none")
    badge_earned_at = models.DateTimeField(null=True, blank=True)
    average_rating = models.DecimalField(max_digits=3, decimal_places=2, null=True, blank=True)
    total_reviews = models.PositiveIntegerField(default=0)
    last_seen = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "profiles"

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return self.full_name or self.email or self.username

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def is_agent(self) -> bool:
        return self.role in self.AGENT_ROLES

    @property
    def avatar_url(self) -> str | None:
        return self.avatar.url if self.avatar else None
