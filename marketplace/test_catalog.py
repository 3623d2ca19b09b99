from datetime import date
from decimal import Decimal

from django.core.cache import cache
from django.http import QueryDict
from django.test import TestCase

from .api.serializers import PropertySerializer
from .models import Profile, Property, Reservation
from .services.insights import PropertyViewService
from .services.property import OwnerListingService, PropertyCatalogService


def make_listing(owner, title, **overrides):
    fields = {
        "title": title,
        "price": Decimal("100000"),
        "location": "Douala, Bonapriso",
        "category": "standard",
        "type": "rent",
        "bedrooms": 2,
    }
    fields.update(overrides)
    return Property.objects.create(owner=owner, **fields)


class CatalogTest(TestCase):
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
        )
        self.service = PropertyCatalogService()

    def test_filters_combine(self):
        make_listing(self.agent, "Budget room", category="budget", price=Decimal("30000"), bedrooms=1)
        villa = make_listing(self.agent, "Luxury villa", category="luxury", price=Decimal("900000"), bedrooms=5)
        make_listing(self.agent, "Yaounde flat", location="Yaounde", bedrooms=3)
        make_listing(self.agent, "House for sale", type="sale", category="luxury", bedrooms=4)

        query = QueryDict("category=luxury,premium&type=rent&min_price=100000&bedrooms=3&location=douala")
        results = self.service.get_catalog(self.service.build_filters(query))

        self.assertEqual(results, [villa])

    def test_search_and_limit(self):
        for index in range(3):
            make_listing(self.agent, f"Sea view apartment {index}")
        make_listing(self.agent, "Garden duplex")

        results = self.service.get_catalog(self.service.build_filters({"search": "sea view", "limit": "2"}))

        self.assertEqual(len(results), 2)
        self.assertTrue(all("Sea view" in listing.title for listing in results))

    def test_invalid_numbers_are_ignored(self):
        filters = self.service.build_filters({"min_price": "cheap", "bedrooms": "many", "limit": "5000"})

        self.assertIsNone(filters.min_price)
        self.assertIsNone(filters.bedrooms)
        self.assertEqual(filters.limit, 100)
        self.assertEqual(filters.status, "available")

    def test_actively_reserved_listings_are_hidden(self):
        held = make_listing(self.agent, "Held flat")
        released = make_listing(self.agent, "Released flat")
        Reservation.objects.create(user=self.guest, property=held, reservation_date=date.today())
        Reservation.objects.create(user=self.guest, property=released, reservation_date=date.today(), status="cancelled")

        results = self.service.get_catalog(self.service.build_filters({}))

        self.assertEqual(results, [released])

    def test_home_is_cached_until_forced(self):
        premium = make_listing(self.agent, "Premium loft", category="premium")
        first = self.service.home()
        make_listing(self.agent, "Late luxury", category="luxury")

        self.assertEqual(self.service.home().featured, [premium])
        self.assertEqual(first.recent, [premium])
        self.assertEqual(len(self.service.home(force_refresh=True).featured), 2)

    def test_similar_excludes_current_listing(self):
        current = make_listing(self.agent, "Current")
        sibling = make_listing(self.agent, "Sibling")
        make_listing(self.agent, "Other category", category="budget")

        self.assertEqual(self.service.similar(current), [sibling])

    def test_serialized_listing_has_image_placeholder_and_owner_summary(self):
        listing = make_listing(self.agent, "No photos")

        data = PropertySerializer(listing).data

        self.assertEqual(data["image"], Property.PLACEHOLDER_IMAGE)
        self.assertEqual(data["images"], [])
        self.assertTrue(data["is_verified"])
        self.assertEqual(data["owner"]["email"], "agent@example.com")


class OwnerListingTest(TestCase):
    def setUp(self):
        cache.clear()
        self.agent = Profile.objects.create_user(
            username="owner@example.com",
            email="owner@example.com",
            password="secret-pass",
            role="landlord",
        )
        self.other = Profile.objects.create_user(
            username="other@example.com",
            email="other@example.com",
            password="secret-pass",
            role="agent",
        )
        self.service = OwnerListingService(self.agent)

    def test_create_and_derived_reserved_status(self):
        ok, form, listing = self.service.create(
            {
                "title": "New flat",
                "price": "75000",
                "location": "Buea",
                "type": "rent",
                "category": "standard",
                "amenities": ["Parking", " Wifi "],
            }
        )
        self.assertTrue(ok, form.errors)
        self.assertEqual(listing.amenities, ["Parking", "Wifi"])
        self.assertEqual(listing.rent_period, "monthly")

        Reservation.objects.create(user=self.other, property=listing, reservation_date=date.today())
        self.assertEqual(self.service.listings()[0].status, "reserved")

    def test_normal_users_cannot_list(self):
        user = Profile.objects.create_user(username="n@example.com", email="n@example.com", password="secret-pass")

        with self.assertRaises(PermissionError):
            OwnerListingService(user).create({"title": "x"})

    def test_only_the_owner_can_edit_or_delete(self):
        listing = make_listing(self.agent, "Mine")

        with self.assertRaises(PermissionError):
            OwnerListingService(self.other).delete(listing)
        with self.assertRaises(PermissionError):
            OwnerListingService(self.other).update(listing, {"title": "Theirs"})


class PropertyViewStatsTest(TestCase):
    def setUp(self):
        self.agent = Profile.objects.create_user(
            username="stats@example.com",
            email="stats@example.com",
            password="secret-pass",
            role="agent",
        )
        self.viewer = Profile.objects.create_user(
            username="viewer@example.com",
            email="viewer@example.com",
            password="secret-pass",
        )
        self.listing = make_listing(self.agent, "Watched flat")

    def test_tracking_counts_views_and_sources(self):
        PropertyViewService(self.viewer).track_view(self.listing, source="search")
        PropertyViewService(self.viewer).track_view(self.listing, source="search")
        PropertyViewService(None).track_view(self.listing, source="map", session_id="anon-1")
        PropertyViewService(None).track_view(self.listing, source="bogus", session_id="anon-2")

        stats = PropertyViewService.stats(self.listing)
        self.listing.refresh_from_db()

        self.assertEqual(self.listing.view_count, 4)
        self.assertEqual(stats.total_views, 4)
        self.assertEqual(stats.unique_viewers, 3)
        self.assertEqual(stats.views_today, 4)
        self.assertEqual(stats.top_sources[0], "search")
        self.assertEqual(PropertyViewService.agent_total_views(self.agent), 4)
