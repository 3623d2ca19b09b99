"""Wallet, withdrawal and agent verification endpoints."""

from django.urls import path

from ..views import wallet

urlpatterns = [
    path("api/wallet/", wallet.WalletView.as_view(), name="wallet"),
    path("api/wallet/transactions/", wallet.TransactionListView.as_view(), name="wallet_transactions"),
    path("api/wallet/withdrawals/", wallet.WithdrawalListView.as_view(), name="wallet_withdrawals"),
    path("api/agent/verification/", wallet.VerificationView.as_view(), name="agent_verification"),
    path(
        "api/agent/verification/documents/",
        wallet.VerificationDocumentView.as_view(),
        name="agent_verification_documents",
    ),
    path(
        "api/agent/verification/submit/",
        wallet.VerificationSubmitView.as_view(),
        name="agent_verification_submit",
    ),
]
