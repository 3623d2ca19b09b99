from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..api.serializers import (
    AgentVerificationSerializer,
    TransactionSerializer,
    WalletSerializer,
    WithdrawalRequestSerializer,
)
from ..permissions import IsAgent
from ..services.verification import VerificationService
from ..services.wallet import WalletService
from ..services.withdrawal import WithdrawalService
from . import form_errors

__all__ = [
    "WalletView",
    "TransactionListView",
    "WithdrawalListView",
    "VerificationView",
    "VerificationDocumentView",
    "VerificationSubmitView",
]


class WalletView(APIView):
    def get(self, request):
        service = WalletService(request.user)
        wallet = service.wallet()
        data = WalletSerializer(wallet).data
        data.update(
            {
                "locked_amount": service.locked_visitation_amount(),
                "pending_withdrawals": service.in_flight_withdrawals(),
                "available": service.available_withdrawable_balance(wallet),
            }
        )
        return Response(data)


class TransactionListView(APIView):
    def get(self, request):
        return Response(TransactionSerializer(WalletService(request.user).transactions(), many=True).data)


class WithdrawalListView(APIView):
    permission_classes = [IsAgent]
    service_class = WithdrawalService

    def get(self, request):
        return Response(WithdrawalRequestSerializer(WalletService(request.user).withdrawals(), many=True).data)

    def post(self, request):
        ok, form, outcome = self.service_class(request.user).submit(request.data)
        if not ok:
            return form_errors(form)
        code = status.HTTP_202_ACCEPTED if outcome.status == "PENDING" else status.HTTP_200_OK
        return Response(
            {
                "status": outcome.status,
                "monitoring": outcome.monitoring,
                "withdrawal": WithdrawalRequestSerializer(outcome.withdrawal).data,
            },
            status=code,
        )


class VerificationAPIView(APIView):
    permission_classes = [IsAgent]
    service_class = VerificationService

    def get_service(self) -> VerificationService:
        return self.service_class(self.request.user)


class VerificationView(VerificationAPIView):
    def get(self, request):
        verification = self.get_service().current()
        if verification is None:
            return Response({"verification": None})
        return Response({"verification": AgentVerificationSerializer(verification).data})

    def post(self, request):
        ok, form, verification = self.get_service().initialize(request.data)
        if not ok:
            return form_errors(form)
        return Response({"verification": AgentVerificationSerializer(verification).data})


class VerificationDocumentView(VerificationAPIView):
    def post(self, request):
        ok, form, verification = self.get_service().upload_document(request.data, request.FILES)
        if not ok:
            return form_errors(form)
        return Response({"verification": AgentVerificationSerializer(verification).data}, status=status.HTTP_201_CREATED)


class VerificationSubmitView(VerificationAPIView):
    def post(self, request):
        verification = self.get_service().submit_for_review()
        return Response({"verification": AgentVerificationSerializer(verification).data})
