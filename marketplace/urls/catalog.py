"""Listing browse and management endpoints."""

from django.urls import path

from ..views import properties

urlpatterns = [
    path("api/properties/", properties.PropertyCatalogView.as_view(), name="property_catalog"),
    path("api/properties/home/", properties.HomeListingsView.as_view(), name="property_home"),
    path("api/properties/<int:pk>/", properties.PropertyDetailView.as_view(), name="property_detail"),
    path("api/properties/<int:pk>/similar/", properties.SimilarPropertiesView.as_view(), name="property_similar"),
    path("api/properties/<int:pk>/views/", properties.PropertyViewTrackingView.as_view(), name="property_track_view"),
    path("api/properties/<int:pk>/stats/", properties.PropertyStatsView.as_view(), name="property_stats"),
    path("api/properties/<int:pk>/reviews/", properties.PropertyReviewsView.as_view(), name="property_reviews"),
    path("api/agent/properties/", properties.OwnerListingsView.as_view(), name="agent_properties"),
    path(
        "api/agent/properties/<int:pk>/",
        properties.OwnerListingDetailView.as_view(),
        name="agent_property_detail",
    ),
    path(
        "api/agent/properties/<int:pk>/media/",
        properties.OwnerListingMediaView.as_view(),
        name="agent_property_media",
    ),
    path("api/agent/views/", properties.AgentViewTotalsView.as_view(), name="agent_view_totals"),
]
