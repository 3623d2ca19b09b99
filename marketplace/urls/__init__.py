"""Aggregate URL patterns for the marketplace API."""

from . import accounts, catalog, messaging, reservations, wallet

urlpatterns = [
    *accounts.urlpatterns,
    *catalog.urlpatterns,
    *reservations.urlpatterns,
    *wallet.urlpatterns,
    *messaging.urlpatterns,
]
