from django.db import models
from django.utils import timezone

from .profile import Profile


def verification_document_path(instance, filename):
    return f"agent-verification/{instance.agent_id}/{filename}"


class AgentVerification(models.Model):
    STATUS_CHOICES = (
        ("pending", "Pending"),
        ("documents_review", "Documents under review"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
    )
    DOCUMENT_FIELDS = (
        "business_license",
        "professional_certificate",
        "id_document_front",
        "id_document_back",
        "proof_of_address",
    )
    REQUIRED_DOCUMENTS = ("id_document_front", "id_document_back")

    agent = models.OneToOneField(Profile, on_delete=models.CASCADE, related_name="agent_verification")
    business_name = models.CharField(max_length=255, blank=True)
    business_address = models.TextField(blank=True)
    years_of_experience = models.PositiveIntegerField(null=True, blank=True)
    specializations = models.JSONField(default=list, blank=True)
    business_license = models.FileField(upload_to=verification_document_path, blank=True)
    professional_certificate = models.FileField(upload_to=verification_document_path, blank=True)
    id_document_front = models.FileField(upload_to=verification_document_path, blank=True)
    id_document_back = models.FileField(upload_to=verification_document_path, blank=True)
    proof_of_address = models.FileField(upload_to=verification_document_path, blank=True)
    verification_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    verification_fee_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    verification_fee_paid = models.BooleanField(default=False)
    payment_reference = models.CharField(max_length=100, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    admin_notes = models.TextField(blank=True)
    rejection_reason = models.TextField(blank=True)
    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(
        Profile,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="verifications_reviewed",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "agent_verifications"

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Verification for {self.agent} ({self.verification_status})"

    def missing_documents(self) -> list[str]:
        return [name for name in self.REQUIRED_DOCUMENTS if not getattr(self, name)]


class VerificationCode(models.Model):
    PURPOSE_CHOICES = (
        ("signup", "Sign-up confirmation"),
        ("recovery", "Password recovery"),
    )

    user = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="verification_codes")
    code = models.CharField(max_length=6)
    purpose = models.CharField(max_length=10, choices=PURPOSE_CHOICES)
    expires_at = models.DateTimeField()
    consumed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "verification_codes"
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"{self.get_purpose_display()} code for {self.user}"

    def is_usable(self, now=None) -> bool:
        now = now or timezone.now()
        return self.consumed_at is None and self.expires_at > now
