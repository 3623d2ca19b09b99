from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import timedelta

from django.db import transaction
from django.db.models import Count, F, Q
from django.utils import timezone

from ..models import Property, PropertyView

logger = logging.getLogger(__name__)

TOP_SOURCES_LIMIT = 3


@dataclass(frozen=True)
class PropertyViewStats:
    total_views: int = 0
    unique_viewers: int = 0
    views_today: int = 0
    views_this_week: int = 0
    views_this_month: int = 0
    top_sources: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return asdict(self)


class PropertyViewService:
    """Records listing views and summarises them for owners."""

    def __init__(self, viewer=None):
        self.viewer = viewer if getattr(viewer, "is_authenticated", False) else None

    def track_view(
        self,
        listing: Property,
        *,
        source: str = "direct",
        session_id: str = "",
        device_type: str = "",
        platform: str = "web",
        duration_seconds: int | None = None,
        ip_address: str | None = None,
        user_agent: str = "",
    ) -> PropertyView:
        if source not in dict(PropertyView.SOURCE_CHOICES):
            source = "direct"
        if device_type not in dict(PropertyView.DEVICE_CHOICES):
            device_type = ""
        if platform not in dict(PropertyView.PLATFORM_CHOICES):
            platform = "web"
        now = timezone.now()
        with transaction.atomic():
            view = PropertyView.objects.create(
                property=listing,
                viewer=self.viewer,
                session_id=session_id[:64],
                source=source,
                device_type=device_type,
                platform=platform,
                view_duration_seconds=duration_seconds if duration_seconds and duration_seconds > 0 else None,
                ip_address=ip_address or None,
                user_agent=(user_agent or "")[:255],
                created_at=now,
            )
            Property.objects.filter(pk=listing.pk).update(view_count=F("view_count") + 1, last_viewed_at=now)
        return view

    @staticmethod
    def stats(listing: Property, now=None) -> PropertyViewStats:
        now = now or timezone.now()
        start_of_day = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
        views = PropertyView.objects.filter(property=listing)
        totals = views.aggregate(
            total=Count("id"),
            viewers=Count("viewer", distinct=True),
            today=Count("id", filter=Q(created_at__gte=start_of_day)),
            week=Count("id", filter=Q(created_at__gte=now - timedelta(days=7))),
            month=Count("id", filter=Q(created_at__gte=now - timedelta(days=30))),
        )
        anonymous_sessions = (
            views.filter(viewer__isnull=True).exclude(session_id="").values("session_id").distinct().count()
        )
        top_sources = list(
            views.values("source")
            .annotate(hits=Count("id"))
            .order_by("-hits", "source")
            .values_list("source", flat=True)[:TOP_SOURCES_LIMIT]
        )
        return PropertyViewStats(
            total_views=totals["total"],
            unique_viewers=totals["viewers"] + anonymous_sessions,
            views_today=totals["today"],
            views_this_week=totals["week"],
            views_this_month=totals["month"],
            top_sources=top_sources,
        )

    @staticmethod
    def agent_total_views(agent) -> int:
        return PropertyView.objects.filter(property__owner=agent).count()
