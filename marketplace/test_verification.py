import shutil
import tempfile
from datetime import date
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, TestCase, override_settings

from .exceptions import MarketplaceError
from .models import Notification, Profile, Property, Reservation
from .services.verification import VerificationService, approve_verification, determine_badge, reject_verification

MEDIA_ROOT = tempfile.mkdtemp()


class DetermineBadgeTest(SimpleTestCase):
    def test_all_thresholds_must_be_met(self):
        self.assertEqual(determine_badge(60, Decimal("4.9"), 40), "platinum")
        self.assertEqual(determine_badge(60, Decimal("4.9"), 20), "gold")
        self.assertEqual(determine_badge(12, Decimal("4.2"), 5), "silver")
        self.assertEqual(determine_badge(12, Decimal("3.9"), 5), "bronze")
        self.assertEqual(determine_badge(0, None, 0), "bronze")


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class VerificationServiceTest(TestCase):
    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.agent = Profile.objects.create_user(
            username="agent@example.com", email="agent@example.com", password="secret-pass", role="agent"
        )
        self.reviewer = Profile.objects.create_user(
            username="ops@example.com", email="ops@example.com", password="secret-pass", role="admin"
        )
        self.service = VerificationService(self.agent)

    def upload(self, document_type):
        document = SimpleUploadedFile(f"{document_type}.pdf", b"%PDF-1.4 test", content_type="application/pdf")
        return self.service.upload_document({"document_type": document_type}, {"file": document})

    def start(self):
        ok, form, verification = self.service.initialize({"business_name": "Akwa Homes", "specializations": ["rentals"]})
        self.assertTrue(ok, form.errors)
        return verification

    def test_normal_users_cannot_start(self):
        user = Profile.objects.create_user(username="u@example.com", email="u@example.com", password="secret-pass")

        with self.assertRaises(PermissionError):
            VerificationService(user).initialize()

    def test_initialize_without_data_returns_current_file(self):
        ok, form, verification = self.service.initialize()

        self.assertTrue(ok)
        self.assertFalse(form.is_bound)
        self.assertEqual(verification.verification_status, "pending")
        self.assertEqual(self.service.current(), verification)

    def test_upload_requires_started_verification(self):
        with self.assertRaises(MarketplaceError):
            self.upload("id_document_front")

    def test_submit_lists_missing_documents(self):
        self.start()
        self.upload("id_document_front")

        with self.assertRaises(MarketplaceError) as ctx:
            self.service.submit_for_review()

        self.assertEqual(ctx.exception.message, "Missing required documents: id document back.")

    def test_uploaded_documents_are_renamed(self):
        self.start()

        ok, _, verification = self.upload("id_document_back")

        self.assertTrue(ok)
        self.assertRegex(
            verification.id_document_back.name,
            rf"^agent-verification/{self.agent.pk}/id_document_back-[0-9a-f]{{32}}\.pdf$",
        )

    def test_unsupported_document_types_are_rejected(self):
        self.start()
        script = SimpleUploadedFile("notes.exe", b"MZ", content_type="application/octet-stream")

        ok, form, _ = self.service.upload_document({"document_type": "id_document_front"}, {"file": script})

        self.assertFalse(ok)
        self.assertIn("file", form.errors)

    def test_submit_then_approve_awards_badge(self):
        self.start()
        self.upload("id_document_front")
        self.upload("id_document_back")
        self.service.mark_fee_paid("5000", "VER-1")

        verification = self.service.submit_for_review()
        self.assertEqual(verification.verification_status, "documents_review")
        with self.assertRaises(MarketplaceError):
            self.service.submit_for_review()

        approve_verification(verification, self.reviewer, "Looks good")

        self.agent.refresh_from_db()
        self.assertTrue(self.agent.is_verified_agent)
        self.assertEqual(self.agent.verification_badge, "bronze")
        self.assertIsNotNone(self.agent.badge_earned_at)
        self.assertEqual(verification.verified_by, self.reviewer)
        self.assertTrue(Notification.objects.filter(user=self.agent, title="Verification approved").exists())

    def test_badge_counts_completed_rentals(self):
        guest = Profile.objects.create_user(username="g@example.com", email="g@example.com", password="secret-pass")
        listing = Property.objects.create(owner=self.agent, title="Flat", price=Decimal("1000"), location="Limbe")
        for _ in range(5):
            Reservation.objects.create(user=guest, property=listing, reservation_date=date.today(), status="completed")
        Profile.objects.filter(pk=self.agent.pk).update(total_reviews=10, average_rating=Decimal("4.20"))

        approve_verification(self.start(), self.reviewer)

        self.agent.refresh_from_db()
        self.assertEqual(self.agent.verification_badge, "silver")

    def test_reject_requires_reason_and_clears_badge(self):
        verification = self.start()
        approve_verification(verification, self.reviewer)

        with self.assertRaises(ValueError):
            reject_verification(verification, self.reviewer, "")

        reject_verification(verification, self.reviewer, "Blurry ID photo")

        self.agent.refresh_from_db()
        self.assertFalse(self.agent.is_verified_agent)
        self.assertEqual(self.agent.verification_badge, "none")
        self.assertEqual(verification.rejection_reason, "Blurry ID photo")
