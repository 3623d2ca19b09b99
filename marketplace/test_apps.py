from datetime import date
from decimal import Decimal

from django.apps import apps
from django.test import TestCase

from .models import Profile, Property, Reservation


class AppLoadingTest(TestCase):
    def test_models_are_registered(self):
        config = apps.get_app_config("marketplace")

        self.assertIs(config.get_model("Reservation"), Reservation)
        self.assertTrue(apps.ready)

    def test_reservation_activity_follows_status(self):
        owner = Profile.objects.create_user(username="o@example.com", email="o@example.com", password="secret-pass")
        guest = Profile.objects.create_user(username="g@example.com", email="g@example.com", password="secret-pass")
        listing = Property.objects.create(owner=owner, title="Room", price=Decimal("10000"), location="Buea")
        reservation = Reservation.objects.create(user=guest, property=listing, reservation_date=date.today())

        self.assertTrue(reservation.is_active())
        reservation.mark_cancelled("Changed plans")
        self.assertFalse(reservation.is_active())
        self.assertEqual(reservation.property, listing)
