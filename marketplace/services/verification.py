from __future__ import annotations

import logging
import os
import uuid
from decimal import Decimal
from typing import Any

from django.db import transaction
from django.utils import timezone

from ..exceptions import MarketplaceError
from ..forms import DocumentUploadForm, VerificationDetailsForm
from ..models import AgentVerification, Profile, Reservation
from .notification import notify

logger = logging.getLogger(__name__)

# (badge, minimum reviews, minimum average rating, minimum completed rentals)
BADGE_THRESHOLDS = (
    ("platinum", 50, Decimal("4.80"), 30),
    ("gold", 25, Decimal("4.50"), 15),
    ("silver", 10, Decimal("4.00"), 5),
    ("bronze", 0, Decimal("0"), 0),
)


def completed_rentals(agent) -> int:
    return Reservation.objects.filter(property__owner=agent, status="completed").count()


def determine_badge(total_reviews: int, average_rating, rentals: int) -> str:
    """Highest badge whose review, rating and rental thresholds are all met."""
    rating = Decimal(str(average_rating or 0))
    for badge, min_reviews, min_rating, min_rentals in BADGE_THRESHOLDS:
        if total_reviews >= min_reviews and rating >= min_rating and rentals >= min_rentals:
            return badge
    return "none"


class VerificationService:
    """An agent's own verification file."""

    def __init__(self, agent):
        self.agent = agent

    def _ensure_agent(self) -> None:
        if not self.agent.is_agent:
            raise PermissionError("Only agents and landlords can request verification.")

    def current(self) -> AgentVerification | None:
        return AgentVerification.objects.filter(agent=self.agent).first()

    def initialize(self, data: Any = None) -> tuple[bool, VerificationDetailsForm, AgentVerification | None]:
        self._ensure_agent()
        verification, _ = AgentVerification.objects.get_or_create(agent=self.agent)
        form = VerificationDetailsForm(data or None, instance=verification)
        if data is None:
            return True, form, verification
        if not form.is_valid():
            return False, form, None
        verification = form.save()
        return True, form, verification

    def upload_document(self, data: Any, files: Any) -> tuple[bool, DocumentUploadForm, AgentVerification | None]:
        self._ensure_agent()
        verification = self.current()
        if verification is None:
            raise MarketplaceError("Start a verification before uploading documents.", status_code=409)
        if verification.verification_status == "approved":
            raise MarketplaceError("This verification is already approved.", status_code=409)
        form = DocumentUploadForm(data, files)
        if not form.is_valid():
            return False, form, None

        document_type = form.cleaned_data["document_type"]
        upload = form.cleaned_data["file"]
        _, extension = os.path.splitext(upload.name)
        field = getattr(verification, document_type)
        if field:
            field.delete(save=False)
        field.save(f"{document_type}-{uuid.uuid4().hex}{extension.lower()}", upload, save=False)
        verification.save(update_fields=[document_type, "updated_at"])
        logger.info("Agent %s uploaded %s", self.agent.pk, document_type)
        return True, form, verification

    def mark_fee_paid(self, amount, reference: str) -> AgentVerification:
        self._ensure_agent()
        verification = self.current()
        if verification is None:
            raise MarketplaceError("Start a verification before paying the fee.", status_code=409)
        verification.verification_fee_amount = Decimal(str(amount))
        verification.verification_fee_paid = True
        verification.payment_reference = reference
        verification.paid_at = timezone.now()
        verification.save(
            update_fields=[
                "verification_fee_amount",
                "verification_fee_paid",
                "payment_reference",
                "paid_at",
                "updated_at",
            ]
        )
        return verification

    def submit_for_review(self) -> AgentVerification:
        self._ensure_agent()
        verification = self.current()
        if verification is None:
            raise MarketplaceError("Start a verification before submitting it.", status_code=409)
        if verification.verification_status not in ("pending", "rejected"):
            raise MarketplaceError("This verification was already submitted.", status_code=409)
        missing = verification.missing_documents()
        if missing:
            labels = ", ".join(name.replace("_", " ") for name in missing)
            raise MarketplaceError(f"Missing required documents: {labels}.", status_code=400)
        verification.verification_status = "documents_review"
        verification.rejection_reason = ""
        verification.save(update_fields=["verification_status", "rejection_reason", "updated_at"])
        logger.info("Verification %s submitted for review", verification.pk)
        return verification


def approve_verification(verification: AgentVerification, reviewer, notes: str = "") -> AgentVerification:
    now = timezone.now()
    with transaction.atomic():
        agent = Profile.objects.select_for_update().get(pk=verification.agent_id)
        badge = determine_badge(agent.total_reviews, agent.average_rating, completed_rentals(agent))
        agent.is_verified_agent = True
        agent.verified = True
        agent.verification_badge = badge
        agent.badge_earned_at = now
        agent.save(update_fields=["is_verified_agent", "verified", "verification_badge", "badge_earned_at", "updated_at"])

        verification.verification_status = "approved"
        verification.admin_notes = notes
        verification.rejection_reason = ""
        verification.verified_at = now
        verification.verified_by = reviewer
        verification.save()

    logger.info("Verification %s approved with badge %s", verification.pk, badge)
    notify(
        agent,
        "Verification approved",
        f"Your agent verification was approved. Badge: {badge}.",
        type="verification",
        data={"verification_id": verification.pk, "badge": badge},
    )
    return verification


def reject_verification(verification: AgentVerification, reviewer, reason: str, notes: str = "") -> AgentVerification:
    if not reason:
        raise ValueError("A rejection reason is required")
    verification.verification_status = "rejected"
    verification.rejection_reason = reason
    verification.admin_notes = notes
    verification.verified_by = reviewer
    verification.verified_at = None
    verification.save()
    Profile.objects.filter(pk=verification.agent_id).update(is_verified_agent=False, verification_badge="none")
    notify(
        verification.agent,
        "Verification rejected",
        f"Your agent verification was rejected: {reason}",
        type="verification",
        data={"verification_id": verification.pk},
    )
    return verification
