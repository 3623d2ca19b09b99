from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..api.serializers import PropertySerializer, ReviewSerializer
from ..models import Property
from ..permissions import IsAgent
from ..services.insights import PropertyViewService
from ..services.property import OwnerListingService, PropertyCatalogService
from ..services.review import ReviewService
from . import form_errors

__all__ = [
    "PropertyCatalogView",
    "HomeListingsView",
    "PropertyDetailView",
    "SimilarPropertiesView",
    "PropertyViewTrackingView",
    "PropertyStatsView",
    "PropertyReviewsView",
    "OwnerListingsView",
    "OwnerListingDetailView",
    "OwnerListingMediaView",
    "AgentViewTotalsView",
]


def _refresh_requested(request) -> bool:
    return request.query_params.get("refresh") in ("1", "true")


class CatalogAPIView(APIView):
    permission_classes = [AllowAny]
    service_class = PropertyCatalogService

    def get_service(self) -> PropertyCatalogService:
        return self.service_class()


class PropertyCatalogView(CatalogAPIView):
    def get(self, request):
        service = self.get_service()
        listings = service.get_catalog(service.build_filters(request.query_params))
        return Response(PropertySerializer(listings, many=True).data)


class HomeListingsView(CatalogAPIView):
    def get(self, request):
        home = self.get_service().home(force_refresh=_refresh_requested(request))
        return Response(
            {
                "featured": PropertySerializer(home.featured, many=True).data,
                "recent": PropertySerializer(home.recent, many=True).data,
            }
        )


class PropertyDetailView(CatalogAPIView):
    def get(self, request, pk):
        listing = self.get_service().detail(pk, force_refresh=_refresh_requested(request))
        return Response(PropertySerializer(listing).data)


class SimilarPropertiesView(CatalogAPIView):
    def get(self, request, pk):
        service = self.get_service()
        similar = service.similar(service.detail(pk), force_refresh=_refresh_requested(request))
        return Response(PropertySerializer(similar, many=True).data)


class PropertyViewTrackingView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, pk):
        listing = get_object_or_404(Property, pk=pk)
        duration = request.data.get("duration_seconds")
        view = PropertyViewService(request.user).track_view(
            listing,
            source=request.data.get("source") or "direct",
            session_id=request.data.get("session_id") or request.session.session_key or "",
            device_type=request.data.get("device_type") or "",
            platform=request.data.get("platform") or "web",
            duration_seconds=int(duration) if str(duration or "").isdigit() else None,
            ip_address=request.META.get("REMOTE_ADDR"),
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
        )
        return Response({"id": view.pk}, status=status.HTTP_201_CREATED)


class PropertyStatsView(APIView):
    permission_classes = [IsAgent]

    def get(self, request, pk):
        listing = get_object_or_404(Property, pk=pk, owner=request.user)
        return Response(PropertyViewService.stats(listing).as_dict())


class PropertyReviewsView(APIView):
    def get_permissions(self):
        if self.request.method == "GET":
            return [AllowAny()]
        return [IsAuthenticated()]

    def get(self, request, pk):
        listing = get_object_or_404(Property, pk=pk)
        eligibility = ReviewService(request.user).eligibility(listing)
        return Response(
            {
                "reviews": ReviewSerializer(ReviewService.reviews(listing), many=True).data,
                "average_rating": listing.average_rating,
                "total_reviews": listing.total_reviews,
                "can_review": eligibility.can_review,
                "reason": eligibility.reason,
            }
        )

    def post(self, request, pk):
        listing = get_object_or_404(Property, pk=pk)
        ok, form, review, eligibility = ReviewService(request.user).save(listing, request.data)
        if not eligibility.can_review:
            return Response({"error": eligibility.reason}, status=status.HTTP_403_FORBIDDEN)
        if not ok:
            return form_errors(form)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


class OwnerAPIView(APIView):
    permission_classes = [IsAgent]
    service_class = OwnerListingService

    def get_service(self) -> OwnerListingService:
        return self.service_class(self.request.user)


class OwnerListingsView(OwnerAPIView):
    def get(self, request):
        return Response(PropertySerializer(self.get_service().listings(), many=True).data)

    def post(self, request):
        ok, form, listing = self.get_service().create(request.data)
        if not ok:
            return form_errors(form)
        return Response(PropertySerializer(listing).data, status=status.HTTP_201_CREATED)


class OwnerListingDetailView(OwnerAPIView):
    def patch(self, request, pk):
        listing = get_object_or_404(Property, pk=pk)
        ok, form, listing = self.get_service().update(listing, request.data)
        if not ok:
            return form_errors(form)
        return Response(PropertySerializer(listing).data)

    def delete(self, request, pk):
        listing = get_object_or_404(Property, pk=pk)
        self.get_service().delete(listing)
        return Response(status=status.HTTP_204_NO_CONTENT)


class OwnerListingMediaView(OwnerAPIView):
    def post(self, request, pk):
        listing = get_object_or_404(Property, pk=pk)
        ok, form, url = self.get_service().add_media(listing, request.FILES)
        if not ok:
            return form_errors(form)
        return Response({"url": url}, status=status.HTTP_201_CREATED)

    def delete(self, request, pk):
        listing = get_object_or_404(Property, pk=pk)
        if not self.get_service().remove_media(listing, request.data.get("url") or ""):
            return Response({"error": "Image not found on this listing."}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AgentViewTotalsView(APIView):
    permission_classes = [IsAgent]

    def get(self, request):
        return Response({"total_views": PropertyViewService.agent_total_views(request.user)})
