from datetime import date
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from rest_framework.test import APIClient

from .models import Profile, Property, Reservation
from .permissions import IsAgent
from .services.auth import INVALID_CREDENTIALS


class APITestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.agent = Profile.objects.create_user(
            username="agent@example.com",
            email="agent@example.com",
            password="secret-pass",
            role="agent",
            email_verified=True,
        )
        self.guest = Profile.objects.create_user(
            username="guest@example.com",
            email="guest@example.com",
            password="secret-pass",
            email_verified=True,
        )
        self.listing = Property.objects.create(
            owner=self.agent,
            title="Bastos villa",
            price=Decimal("450000"),
            location="Yaounde",
            category="luxury",
            images=["https://cdn.example.com/villa.jpg"],
        )


class AuthEndpointsTest(APITestCase):
    def test_sign_in_starts_a_session(self):
        response = self.client.post(
            "/api/auth/sign-in/", {"email": "guest@example.com", "password": "secret-pass"}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["redirect_to"], "/user")
        self.assertEqual(self.client.get("/api/auth/me/").json()["email"], "guest@example.com")

        self.assertEqual(self.client.post("/api/auth/sign-out/").status_code, 204)
        self.assertEqual(self.client.get("/api/auth/me/").status_code, 403)

    def test_errors_use_a_single_message_field(self):
        response = self.client.post(
            "/api/auth/sign-in/", {"email": "guest@example.com", "password": "wrong"}, format="json"
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": INVALID_CREDENTIALS})

    def test_form_errors_are_grouped_by_field(self):
        response = self.client.post(
            "/api/auth/sign-up/", {"email": "new@example.com", "password": "short"}, format="json"
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"]["password"], ["Password must be at least 8 characters long."])

    def test_anonymous_requests_are_refused(self):
        response = self.client.get("/api/wallet/")

        self.assertEqual(response.status_code, 403)
        self.assertIn("error", response.json())


class CatalogEndpointsTest(APITestCase):
    def test_catalog_is_public(self):
        response = self.client.get("/api/properties/", {"category": "luxury"})

        self.assertEqual(response.status_code, 200)
        [listing] = response.json()
        self.assertEqual(listing["image"], "https://cdn.example.com/villa.jpg")
        self.assertEqual(listing["owner"]["id"], self.agent.pk)

    def test_missing_listing_is_not_found(self):
        response = self.client.get("/api/properties/999999/")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Not found."})

    def test_agent_endpoints_require_agent_role(self):
        self.client.force_authenticate(self.guest)

        response = self.client.get("/api/agent/properties/")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"error": IsAgent.message})


class ReservationEndpointsTest(APITestCase):
    def test_reserve_then_conflict(self):
        self.client.force_authenticate(self.guest)
        payload = {"property": self.listing.pk, "reservation_date": date.today().isoformat()}

        created = self.client.post("/api/reservations/", payload, format="json")
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["status"], "pending")

        other = Profile.objects.create_user(username="o@example.com", email="o@example.com", password="secret-pass")
        self.client.force_authenticate(other)
        conflict = self.client.post("/api/reservations/", payload, format="json")

        self.assertEqual(conflict.status_code, 409)
        self.assertEqual(conflict.json(), {"error": "This property is no longer available for reservation."})

    def test_agent_actions(self):
        reservation = Reservation.objects.create(user=self.guest, property=self.listing, reservation_date=date.today())
        self.client.force_authenticate(self.agent)

        invalid = self.client.post(f"/api/agent/reservations/{reservation.pk}/archive/")
        confirmed = self.client.post(f"/api/agent/reservations/{reservation.pk}/confirm/")

        self.assertEqual(invalid.status_code, 400)
        self.assertEqual(confirmed.json(), {"level": "success", "message": "Reservation confirmed."})

    def test_strangers_cannot_act_on_reservations(self):
        reservation = Reservation.objects.create(user=self.guest, property=self.listing, reservation_date=date.today())
        stranger = Profile.objects.create_user(
            username="s@example.com", email="s@example.com", password="secret-pass", role="landlord"
        )
        self.client.force_authenticate(stranger)

        response = self.client.post(f"/api/agent/reservations/{reservation.pk}/cancel/", {}, format="json")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"error": "Cannot modify reservations for another owner."})


class WalletEndpointsTest(APITestCase):
    def test_wallet_reports_available_balance(self):
        self.client.force_authenticate(self.agent)

        data = self.client.get("/api/wallet/").json()

        self.assertEqual(Decimal(str(data["balance"])), Decimal("0"))
        self.assertEqual(Decimal(str(data["available"])), Decimal("0"))

    def test_withdrawal_above_balance_is_a_conflict(self):
        self.client.force_authenticate(self.agent)

        response = self.client.post(
            "/api/wallet/withdrawals/", {"amount": "500", "phone": "677000000", "method": "MTN"}, format="json"
        )

        self.assertEqual(response.status_code, 409)
        self.assertTrue(response.json()["error"].startswith("Withdrawal exceeds available amount. Available: 0"))
