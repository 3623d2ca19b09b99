from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.db.models import Sum

from ..exceptions import InsufficientFunds
from ..models import CommissionPayment, Transaction, Wallet, WithdrawalRequest

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
DEFAULT_HISTORY_LIMIT = 50


@dataclass(frozen=True)
class WithdrawalCheck:
    accepted: bool
    available: Decimal


def generate_reference(prefix: str = "TXN") -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{secrets.token_hex(4).upper()}"


def get_wallet(user, lock: bool = False) -> Wallet:
    wallet, _ = Wallet.objects.get_or_create(user=user)
    if lock:
        wallet = Wallet.objects.select_for_update().get(pk=wallet.pk)
    return wallet


def update_wallet_balance(user, amount_to_subtract) -> Wallet:
    """Debit ``amount_to_subtract`` under a row lock; the balance never goes negative."""
    amount = Decimal(str(amount_to_subtract))
    with transaction.atomic():
        wallet = get_wallet(user, lock=True)
        if wallet.balance < amount:
            logger.error("Debit of %s refused for user %s: balance %s", amount, user.pk, wallet.balance)
            raise InsufficientFunds()
        wallet.balance -= amount
        wallet.save(update_fields=["balance", "updated_at"])
    return wallet


def credit_wallet(user, amount, *, type: str = "deposit", reference: str | None = None, listing=None, description: str = "") -> Transaction:
    """Credit the wallet and record a completed transaction in one step."""
    amount = Decimal(str(amount))
    if amount <= 0:
        raise ValueError("Credit amount must be positive")
    with transaction.atomic():
        wallet = get_wallet(user, lock=True)
        wallet.balance += amount
        wallet.save(update_fields=["balance", "updated_at"])
        return Transaction.objects.create(
            user=user,
            property=listing,
            amount=amount,
            type=type,
            reference=reference or generate_reference(),
            status="completed",
            description=description,
        )


class WalletService:
    """Balances, history and withdrawal limits for one user."""

    def __init__(self, user):
        self.user = user

    def wallet(self) -> Wallet:
        return get_wallet(self.user)

    def transactions(self, limit: int = DEFAULT_HISTORY_LIMIT) -> list[Transaction]:
        return list(
            Transaction.objects.filter(user=self.user)
            .select_related("property")
            .order_by("-created_at", "-id")[:limit]
        )

    def withdrawals(self, limit: int = DEFAULT_HISTORY_LIMIT) -> list[WithdrawalRequest]:
        return list(WithdrawalRequest.objects.filter(user=self.user).order_by("-requested_at", "-id")[:limit])

    def add_transaction(self, amount, type: str, *, listing=None, status: str = "pending", description: str = "") -> Transaction:
        return Transaction.objects.create(
            user=self.user,
            property=listing,
            amount=amount,
            type=type,
            reference=generate_reference(),
            status=status,
            description=description,
        )

    def locked_visitation_amount(self) -> Decimal:
        """Agent share of paid commissions that escrow still holds.

        The share reaches the wallet balance only on release, so it is reported
        beside the balance and never subtracted from it.
        """
        total = CommissionPayment.objects.filter(
            agent=self.user,
            status="paid",
            escrow_status="holding",
        ).aggregate(total=Sum("agent_amount"))["total"]
        return total or ZERO

    def in_flight_withdrawals(self) -> Decimal:
        total = WithdrawalRequest.objects.filter(
            user=self.user,
            status__in=WithdrawalRequest.IN_FLIGHT_STATUSES,
        ).aggregate(total=Sum("amount"))["total"]
        return total or ZERO

    def available_withdrawable_balance(self, wallet: Wallet | None = None) -> Decimal:
        wallet = wallet or self.wallet()
        available = wallet.balance - self.in_flight_withdrawals()
        return max(available, ZERO)

    def request_withdrawal(self, amount, phone: str) -> WithdrawalCheck:
        """Check ``amount`` against the withdrawable balance; call inside a transaction to hold the lock."""
        amount = Decimal(str(amount))
        wallet = get_wallet(self.user, lock=transaction.get_connection().in_atomic_block)
        available = self.available_withdrawable_balance(wallet)
        accepted = ZERO < amount <= available
        if not accepted:
            logger.info(
                "Withdrawal of %s to %s refused for user %s (available %s)",
                amount, phone, self.user.pk, available,
            )
        return WithdrawalCheck(accepted=accepted, available=available)
