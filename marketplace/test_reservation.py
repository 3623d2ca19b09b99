from datetime import date
from decimal import Decimal
from unittest import mock

from django.core.cache import cache
from django.test import TestCase

from .exceptions import GatewayError, ListingUnavailable, MarketplaceError
from .gateway import GatewayTransaction, MobileMoneyClient, PaymentStatus
from .models import Notification, Profile, Property, Reservation, Transaction
from .services.reservation import AgentReservationService, ReservationService


class ReservationTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.agent = Profile.objects.create_user(
            username="agent@example.com",
            email="agent@example.com",
            password="secret-pass",
            role="agent",
        )
        self.guest = Profile.objects.create_user(
            username="guest@example.com",
            email="guest@example.com",
            password="secret-pass",
            full_name="Guest User",
        )
        self.listing = Property.objects.create(
            owner=self.agent,
            title="Bonapriso studio",
            price=Decimal("80000"),
            location="Douala",
            reservation_fee=Decimal("5000"),
        )
        self.client = mock.Mock(spec=MobileMoneyClient)
        self.client.initiate_payment.return_value = GatewayTransaction(trans_id="PAY-1")
        self.sleeps = []

    def service(self, user=None):
        return ReservationService(
            user or self.guest,
            client=self.client,
            clock=lambda: 0.0,
            sleep=self.sleeps.append,
        )

    def reserve(self):
        ok, form, reservation = self.service().create(self.listing, {"reservation_date": date.today().isoformat()})
        self.assertTrue(ok, form.errors)
        return reservation


class ReservationCreateTest(ReservationTestCase):
    def test_create_reserves_the_listing_and_notifies_owner(self):
        reservation = self.reserve()

        self.listing.refresh_from_db()
        self.assertEqual(self.listing.status, "reserved")
        self.assertEqual(reservation.status, "pending")
        self.assertEqual(reservation.reservation_fee, Decimal("5000"))
        self.assertTrue(Notification.objects.filter(user=self.agent, title="New reservation").exists())

    def test_second_reservation_is_refused(self):
        self.reserve()
        other = Profile.objects.create_user(username="o@example.com", email="o@example.com", password="secret-pass")

        with self.assertRaises(ListingUnavailable):
            self.service(other).create(self.listing, {"reservation_date": date.today().isoformat()})
        self.assertEqual(Reservation.objects.count(), 1)

    def test_owner_cannot_reserve_own_listing(self):
        with self.assertRaises(ListingUnavailable):
            self.service(self.agent).create(self.listing, {"reservation_date": date.today().isoformat()})

    def test_past_dates_are_rejected(self):
        ok, form, _ = self.service().create(self.listing, {"reservation_date": "2000-01-01"})

        self.assertFalse(ok)
        self.assertIn("reservation_date", form.errors)

    def test_cancel_puts_listing_back_on_market(self):
        reservation = self.reserve()

        outcome = self.service().cancel(reservation, "Changed plans")

        self.listing.refresh_from_db()
        self.assertEqual(outcome.level, "success")
        self.assertEqual(self.listing.status, "available")
        self.assertEqual(self.service().cancel(reservation).level, "info")


class ReservationPaymentTest(ReservationTestCase):
    def test_successful_payment_confirms_reservation(self):
        self.client.payment_status.side_effect = [PaymentStatus("PENDING"), PaymentStatus("SUCCESSFUL")]
        reservation = self.reserve()

        ok, _, status = self.service().pay(reservation, {"phone": "677000000", "service": "MTN"})

        self.assertTrue(ok)
        self.assertTrue(status.is_successful)
        reservation.refresh_from_db()
        self.assertEqual(reservation.payment_status, "paid")
        self.assertEqual(reservation.status, "confirmed")
        self.assertEqual(Transaction.objects.get(reference="PAY-1").amount, Decimal("5000"))
        self.assertEqual(self.sleeps, [3.0])
        _, kwargs = self.client.initiate_payment.call_args
        self.assertEqual(kwargs["external_id"], f"RES-{reservation.pk}")

    def test_failed_payment_is_recorded(self):
        self.client.payment_status.return_value = PaymentStatus("FAILED")
        reservation = self.reserve()

        _, _, status = self.service().pay(reservation, {"phone": "677000000", "service": "ORANGE"})

        reservation.refresh_from_db()
        self.assertEqual(status.status, "FAILED")
        self.assertEqual(reservation.payment_status, "failed")
        self.assertFalse(Transaction.objects.exists())

    def test_unresolved_payment_stays_pending(self):
        self.client.payment_status.return_value = PaymentStatus("PENDING")
        reservation = self.reserve()

        ok, _, status = self.service().pay(reservation, {"phone": "677000000", "service": "MTN"})

        self.assertTrue(ok)
        self.assertIsNone(status)
        reservation.refresh_from_db()
        self.assertEqual(reservation.payment_status, "pending")
        self.assertEqual(len(self.sleeps), 20)

    def test_invalid_phone_never_reaches_gateway(self):
        reservation = self.reserve()

        ok, form, _ = self.service().pay(reservation, {"phone": "call me", "service": "MTN"})

        self.assertFalse(ok)
        self.assertIn("phone", form.errors)
        self.client.initiate_payment.assert_not_called()

    def test_only_the_guest_can_pay(self):
        reservation = self.reserve()

        with self.assertRaises(PermissionError):
            self.service(self.agent).pay(reservation, {"phone": "677000000", "service": "MTN"})


class ReservationRefundTest(ReservationTestCase):
    def setUp(self):
        super().setUp()
        self.reservation = self.reserve()
        self.reservation.mark_paid("PAY-1")

    def test_refund_cancels_and_records_transaction(self):
        self.client.process_refund.return_value = {"success": True}

        self.service().request_refund(self.reservation)

        self.reservation.refresh_from_db()
        self.listing.refresh_from_db()
        self.assertEqual(self.reservation.status, "cancelled")
        self.assertEqual(self.reservation.refund_status, "processed")
        self.assertEqual(self.reservation.payment_status, "refunded")
        self.assertTrue(self.reservation.refund_number.startswith("RF-"))
        self.assertEqual(self.listing.status, "available")
        self.assertTrue(Transaction.objects.filter(type="refund", amount=Decimal("5000")).exists())

    def test_gateway_failure_marks_refund_failed(self):
        self.client.process_refund.side_effect = GatewayError("Refund failed")

        with self.assertRaises(GatewayError):
            self.service().request_refund(self.reservation)

        self.reservation.refresh_from_db()
        self.assertEqual(self.reservation.refund_status, "failed")

    def test_failed_refund_can_be_retried(self):
        self.client.process_refund.side_effect = GatewayError("Refund failed")
        with self.assertRaises(GatewayError):
            self.service().request_refund(self.reservation)
        self.reservation.refresh_from_db()
        refund_number = self.reservation.refund_number

        self.client.process_refund.side_effect = None
        self.client.process_refund.return_value = {"success": True}
        self.service().request_refund(self.reservation)

        self.reservation.refresh_from_db()
        self.assertEqual(self.reservation.refund_status, "processed")
        self.assertEqual(self.reservation.payment_status, "refunded")
        self.assertEqual(self.reservation.refund_number, refund_number)
        self.assertEqual(Transaction.objects.filter(type="refund").count(), 1)
        self.assertEqual(self.client.process_refund.call_count, 2)

    def test_refund_is_requested_once(self):
        self.client.process_refund.return_value = {"success": True}
        self.service().request_refund(self.reservation)

        with self.assertRaises(MarketplaceError) as ctx:
            self.service().request_refund(self.reservation)
        self.assertEqual(ctx.exception.status_code, 409)


class AgentReservationTest(ReservationTestCase):
    def test_owner_confirms_then_completes(self):
        reservation = self.reserve()
        service = AgentReservationService(self.agent)

        self.assertEqual(service.confirm(reservation).level, "success")
        self.assertEqual(service.complete(reservation).level, "success")
        reservation.refresh_from_db()
        self.assertEqual(reservation.status, "completed")
        self.assertTrue(Notification.objects.filter(user=self.guest, title="Reservation confirmed").exists())

    def test_complete_requires_confirmation(self):
        reservation = self.reserve()

        outcome = AgentReservationService(self.agent).complete(reservation)

        self.assertEqual(outcome.level, "info")

    def test_other_owners_cannot_act(self):
        reservation = self.reserve()
        stranger = Profile.objects.create_user(
            username="s@example.com", email="s@example.com", password="secret-pass", role="agent"
        )

        with self.assertRaises(PermissionError):
            AgentReservationService(stranger).cancel(reservation)
