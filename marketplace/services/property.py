from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Iterable

from django.core.cache import cache
from django.core.files.storage import default_storage
from django.db.models import Exists, OuterRef, Q

from ..forms import PropertyForm, PropertyMediaForm
from ..models import Property, Reservation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertyFilters:
    """Value object holding filter parameters for catalog queries."""

    categories: tuple[str, ...] = ()
    type: str = ""
    status: str = "available"
    location: str = ""
    search: str = ""
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    bedrooms: int | None = None
    limit: int | None = None


@dataclass(frozen=True)
class HomeListings:
    featured: list[Property]
    recent: list[Property]


def _parse_decimal(raw) -> Decimal | None:
    raw = str(raw or "").strip()
    if not raw:
        return None
    try:
        return Decimal(raw)
    except (InvalidOperation, TypeError):
        return None


def _parse_int(raw) -> int | None:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return None


def active_reservations():
    return Reservation.objects.filter(status__in=Reservation.ACTIVE_STATUSES)


class PropertyCatalogService:
    """Browsing queries over listings that are open for reservation."""

    HOME_CACHE_TTL = 2 * 60
    DETAIL_CACHE_TTL = 30
    SIMILAR_CACHE_TTL = 60
    FEATURED_LIMIT = 5
    RECENT_LIMIT = 10
    SIMILAR_LIMIT = 3
    MAX_LIMIT = 100

    def __init__(self, base_queryset: Iterable[Property] | None = None) -> None:
        self.base_queryset = base_queryset if base_queryset is not None else Property.objects.all()

    def browsable(self):
        reserved_ids = active_reservations().values("property_id")
        return self.base_queryset.select_related("owner").exclude(id__in=reserved_ids)

    def build_filters(self, data) -> PropertyFilters:
        """Return validated filter parameters from raw request data."""
        if hasattr(data, "getlist"):
            raw_categories = data.getlist("category")
        else:
            raw_categories = data.get("category") or []
        if isinstance(raw_categories, str):
            raw_categories = [raw_categories]
        categories = tuple(
            part.strip()
            for value in raw_categories
            for part in str(value).split(",")
            if part.strip()
        )
        limit = _parse_int(data.get("limit"))
        if limit is not None:
            limit = max(1, min(limit, self.MAX_LIMIT))
        return PropertyFilters(
            categories=categories,
            type=(data.get("type") or "").strip(),
            status=(data.get("status") or "available").strip(),
            location=(data.get("location") or "").strip(),
            search=(data.get("search") or "").strip(),
            min_price=_parse_decimal(data.get("min_price")),
            max_price=_parse_decimal(data.get("max_price")),
            bedrooms=_parse_int(data.get("bedrooms")),
            limit=limit,
        )

    def get_catalog(self, filters: PropertyFilters) -> list[Property]:
        """Apply filters and return the matching listings, newest first."""
        queryset = self.browsable().filter(status=filters.status or "available")

        if filters.categories:
            queryset = queryset.filter(category__in=filters.categories)
        if filters.type:
            queryset = queryset.filter(type=filters.type)
        if filters.location:
            queryset = queryset.filter(location__icontains=filters.location)
        if filters.search:
            queryset = queryset.filter(
                Q(title__icontains=filters.search)
                | Q(description__icontains=filters.search)
                | Q(location__icontains=filters.search)
            )
        if filters.min_price is not None:
            queryset = queryset.filter(price__gte=filters.min_price)
        if filters.max_price is not None:
            queryset = queryset.filter(price__lte=filters.max_price)
        if filters.bedrooms is not None:
            queryset = queryset.filter(bedrooms__gte=filters.bedrooms)

        queryset = queryset.order_by("-created_at", "-id")
        if filters.limit:
            queryset = queryset[: filters.limit]
        return list(queryset)

    def home(self, force_refresh: bool = False) -> HomeListings:
        key = "properties:home"
        if not force_refresh:
            cached = cache.get(key)
            if cached is not None:
                return cached
        available = self.browsable().filter(status="available").order_by("-created_at", "-id")
        listings = HomeListings(
            featured=list(available.filter(category__in=Property.FEATURED_CATEGORIES)[: self.FEATURED_LIMIT]),
            recent=list(available[: self.RECENT_LIMIT]),
        )
        cache.set(key, listings, self.HOME_CACHE_TTL)
        return listings

    @staticmethod
    def detail_key(property_id) -> str:
        return f"properties:detail:{property_id}"

    def detail(self, property_id, force_refresh: bool = False) -> Property:
        """Return one listing; raises ``Property.DoesNotExist``."""
        key = self.detail_key(property_id)
        if not force_refresh:
            cached = cache.get(key)
            if cached is not None:
                return cached
        listing = Property.objects.select_related("owner").get(pk=property_id)
        cache.set(key, listing, self.DETAIL_CACHE_TTL)
        return listing

    def similar(self, listing: Property, force_refresh: bool = False) -> list[Property]:
        key = f"properties:similar:{listing.pk}"
        if not force_refresh:
            cached = cache.get(key)
            if cached is not None:
                return cached
        similar = list(
            self.browsable()
            .filter(status="available", category=listing.category, type=listing.type)
            .exclude(pk=listing.pk)
            .order_by("-created_at", "-id")[: self.SIMILAR_LIMIT]
        )
        cache.set(key, similar, self.SIMILAR_CACHE_TTL)
        return similar


class OwnerListingService:
    """Listing management for agents and landlords."""

    MEDIA_PREFIX = "property-media"

    def __init__(self, owner):
        self.owner = owner

    def _ensure_owner(self, listing: Property) -> None:
        if listing.owner_id != self.owner.id:
            raise PermissionError("Cannot modify listings of another owner.")

    def listings(self) -> list[Property]:
        queryset = (
            Property.objects.filter(owner=self.owner)
            .annotate(has_active_reservation=Exists(active_reservations().filter(property=OuterRef("pk"))))
            .order_by("-created_at", "-id")
        )
        listings = []
        for listing in queryset:
            if listing.has_active_reservation and listing.status == "available":
                listing.status = "reserved"
            listings.append(listing)
        return listings

    def form(self, data: Any | None = None, instance: Property | None = None) -> PropertyForm:
        return PropertyForm(data, instance=instance, owner=self.owner)

    def create(self, data: Any) -> tuple[bool, PropertyForm, Property | None]:
        if not self.owner.is_agent:
            raise PermissionError("Only agents and landlords can list properties.")
        form = self.form(data)
        if form.is_valid():
            listing = form.save()
            logger.info("Listing %s created by %s", listing.pk, self.owner.pk)
            return True, form, listing
        return False, form, None

    def update(self, listing: Property, data: Any) -> tuple[bool, PropertyForm, Property | None]:
        self._ensure_owner(listing)
        form = self.form(data, instance=listing)
        if form.is_valid():
            listing = form.save()
            cache.delete(PropertyCatalogService.detail_key(listing.pk))
            return True, form, listing
        return False, form, None

    def delete(self, listing: Property) -> None:
        self._ensure_owner(listing)
        property_id = listing.pk
        listing.delete()
        cache.delete(PropertyCatalogService.detail_key(property_id))
        logger.info("Listing %s deleted by %s", property_id, self.owner.pk)

    def add_media(self, listing: Property, files) -> tuple[bool, PropertyMediaForm, str | None]:
        self._ensure_owner(listing)
        form = PropertyMediaForm(files=files)
        if not form.is_valid():
            return False, form, None
        upload = form.cleaned_data["file"]
        suffix = Path(upload.name).suffix.lower()
        path = default_storage.save(f"{self.MEDIA_PREFIX}/{self.owner.pk}/{listing.pk}/{uuid.uuid4().hex}{suffix}", upload)
        url = default_storage.url(path)
        listing.images = [*(listing.images or []), url]
        listing.save(update_fields=["images", "updated_at"])
        cache.delete(PropertyCatalogService.detail_key(listing.pk))
        return True, form, url

    def remove_media(self, listing: Property, url: str) -> bool:
        self._ensure_owner(listing)
        images = list(listing.images or [])
        if url not in images:
            return False
        images.remove(url)
        listing.images = images
        listing.save(update_fields=["images", "updated_at"])
        cache.delete(PropertyCatalogService.detail_key(listing.pk))
        return True
