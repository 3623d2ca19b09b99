from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from django.db import transaction
from django.db.models import Avg, Count

from ..forms import ReviewForm
from ..models import Profile, Property, PropertyReview, Reservation

REVIEWABLE_STATUSES = ("confirmed", "completed")


@dataclass(frozen=True)
class ReviewEligibility:
    can_review: bool
    reason: str | None = None
    reservation: Reservation | None = None


def _rounded(value) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class ReviewService:
    """Handle review creation and eligibility around reservations."""

    def __init__(self, user):
        self.user = user

    def eligibility(self, listing: Property) -> ReviewEligibility:
        if not getattr(self.user, "is_authenticated", False):
            return ReviewEligibility(False, "You must be logged in to review this property.")
        if listing.owner_id == self.user.id:
            return ReviewEligibility(False, "You cannot review your own property.")
        reservation = (
            Reservation.objects.filter(user=self.user, property=listing, status__in=REVIEWABLE_STATUSES)
            .filter(review__isnull=True)
            .order_by("-created_at")
            .first()
        )
        if reservation is None:
            if PropertyReview.objects.filter(user=self.user, property=listing).exists():
                return ReviewEligibility(False, "You have already reviewed this reservation.")
            return ReviewEligibility(False, "You can review only after a confirmed reservation.")
        return ReviewEligibility(True, None, reservation)

    def save(self, listing: Property, data: dict[str, Any]) -> tuple[bool, ReviewForm, PropertyReview | None, ReviewEligibility]:
        eligibility = self.eligibility(listing)
        form = ReviewForm(data=data)
        if not eligibility.can_review or not form.is_valid():
            return False, form, None, eligibility
        with transaction.atomic():
            review = form.save(commit=False)
            review.property = listing
            review.user = self.user
            review.reservation = eligibility.reservation
            review.save()
            refresh_rating_summary(listing)
        return True, form, review, eligibility

    @staticmethod
    def reviews(listing: Property):
        return listing.reviews.select_related("user").order_by("-created_at")


def refresh_rating_summary(listing: Property) -> None:
    """Recompute the rating summary of a listing and of its owner."""
    summary = PropertyReview.objects.filter(property=listing).aggregate(average=Avg("rating"), total=Count("id"))
    Property.objects.filter(pk=listing.pk).update(
        average_rating=_rounded(summary["average"]),
        total_reviews=summary["total"],
    )
    owner_summary = PropertyReview.objects.filter(property__owner_id=listing.owner_id).aggregate(
        average=Avg("rating"), total=Count("id")
    )
    owner = Profile.objects.get(pk=listing.owner_id)
    owner.average_rating = _rounded(owner_summary["average"])
    owner.total_reviews = owner_summary["total"]
    owner.save(update_fields=["average_rating", "total_reviews", "updated_at"])
