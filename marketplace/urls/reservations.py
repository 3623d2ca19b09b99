"""Reservation, payment and commission endpoints."""

from django.urls import path

from ..views import reservations

urlpatterns = [
    path("api/reservations/", reservations.ReservationListView.as_view(), name="reservations"),
    path("api/reservations/<int:pk>/pay/", reservations.ReservationPaymentView.as_view(), name="reservation_pay"),
    path(
        "api/reservations/<int:pk>/cancel/",
        reservations.ReservationCancelView.as_view(),
        name="reservation_cancel",
    ),
    path(
        "api/reservations/<int:pk>/refund/",
        reservations.ReservationRefundView.as_view(),
        name="reservation_refund",
    ),
    path(
        "api/reservations/<int:pk>/commission/",
        reservations.CommissionPaymentView.as_view(),
        name="reservation_commission",
    ),
    path("api/agent/reservations/", reservations.AgentReservationListView.as_view(), name="agent_reservations"),
    path(
        "api/agent/reservations/<int:pk>/<str:action>/",
        reservations.AgentReservationActionView.as_view(),
        name="agent_reservation_action",
    ),
    path("api/commissions/", reservations.CommissionListView.as_view(), name="commissions"),
    path(
        "api/commissions/<int:pk>/disputes/",
        reservations.CommissionDisputeView.as_view(),
        name="commission_dispute",
    ),
    path("api/agent/commissions/", reservations.AgentCommissionListView.as_view(), name="agent_commissions"),
]
