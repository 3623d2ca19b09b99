from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..api.serializers import CommissionDisputeSerializer, CommissionPaymentSerializer, ReservationSerializer
from ..forms import CancellationForm
from ..models import CommissionPayment, Property, Reservation
from ..permissions import IsAgent
from ..services.commission import CommissionService
from ..services.reservation import AgentReservationService, ReservationService
from . import form_errors

__all__ = [
    "ReservationListView",
    "ReservationPaymentView",
    "ReservationCancelView",
    "ReservationRefundView",
    "AgentReservationListView",
    "AgentReservationActionView",
    "CommissionListView",
    "CommissionPaymentView",
    "AgentCommissionListView",
    "CommissionDisputeView",
]


def _outcome(outcome) -> Response:
    return Response({"level": outcome.level, "message": outcome.message})


class ReservationAPIView(APIView):
    service_class = ReservationService

    def get_service(self) -> ReservationService:
        return self.service_class(self.request.user)

    def get_reservation(self, pk) -> Reservation:
        return get_object_or_404(Reservation.objects.select_related("property__owner"), pk=pk, user=self.request.user)


class ReservationListView(ReservationAPIView):
    def get(self, request):
        return Response(ReservationSerializer(self.get_service().reservations(), many=True).data)

    def post(self, request):
        listing = get_object_or_404(Property, pk=request.data.get("property"))
        ok, form, reservation = self.get_service().create(listing, request.data)
        if not ok:
            return form_errors(form)
        return Response(ReservationSerializer(reservation).data, status=status.HTTP_201_CREATED)


class ReservationPaymentView(ReservationAPIView):
    def post(self, request, pk):
        reservation = self.get_reservation(pk)
        ok, form, payment_status = self.get_service().pay(reservation, request.data)
        if not ok:
            return form_errors(form)
        reservation.refresh_from_db()
        return Response(
            {
                "status": payment_status.status if payment_status else "PENDING",
                "reservation": ReservationSerializer(reservation).data,
            }
        )


class ReservationCancelView(ReservationAPIView):
    def post(self, request, pk):
        form = CancellationForm(request.data)
        if not form.is_valid():
            return form_errors(form)
        return _outcome(self.get_service().cancel(self.get_reservation(pk), form.cleaned_data["reason"]))


class ReservationRefundView(ReservationAPIView):
    def post(self, request, pk):
        reservation = self.get_reservation(pk)
        self.get_service().request_refund(reservation)
        return Response(
            {
                "message": f"Refund {reservation.refund_number} has been processed.",
                "reservation": ReservationSerializer(reservation).data,
            }
        )


class AgentReservationListView(APIView):
    permission_classes = [IsAgent]

    def get(self, request):
        reservations = AgentReservationService(request.user).reservations()
        return Response(ReservationSerializer(reservations, many=True).data)


class AgentReservationActionView(APIView):
    permission_classes = [IsAgent]
    actions = ("confirm", "complete", "cancel")

    def post(self, request, pk, action):
        if action not in self.actions:
            return Response({"error": "Invalid action requested."}, status=status.HTTP_400_BAD_REQUEST)
        reservation = get_object_or_404(Reservation.objects.select_related("property", "user"), pk=pk)
        service = AgentReservationService(request.user)
        if action == "cancel":
            form = CancellationForm(request.data)
            if not form.is_valid():
                return form_errors(form)
            return _outcome(service.cancel(reservation, form.cleaned_data["reason"]))
        return _outcome(getattr(service, action)(reservation))


class CommissionListView(APIView):
    def get(self, request):
        return Response(CommissionPaymentSerializer(CommissionService(request.user).payments(), many=True).data)


class CommissionPaymentView(ReservationAPIView):
    def post(self, request, pk):
        reservation = self.get_reservation(pk)
        ok, form, payment = CommissionService(request.user).pay(reservation, request.data)
        if not ok:
            return form_errors(form)
        return Response(CommissionPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class AgentCommissionListView(APIView):
    permission_classes = [IsAgent]

    def get(self, request):
        commissions = CommissionService(request.user).agent_commissions()
        return Response(CommissionPaymentSerializer(commissions, many=True).data)


class CommissionDisputeView(APIView):
    def post(self, request, pk):
        payment = get_object_or_404(CommissionPayment, pk=pk)
        ok, form, dispute = CommissionService(request.user).open_dispute(payment, request.data)
        if not ok:
            return form_errors(form)
        return Response(
            {
                "message": "Your dispute has been submitted and will be reviewed by our team within 24 hours.",
                "dispute": CommissionDisputeSerializer(dispute).data,
            },
            status=status.HTTP_201_CREATED,
        )
