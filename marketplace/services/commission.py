from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable

from django.db import transaction
from django.utils import timezone

from ..exceptions import MarketplaceError, PollingTimeout
from ..forms import CommissionPaymentForm, DisputeForm
from ..gateway import MobileMoneyClient, get_client, poll_status
from ..models import CommissionDispute, CommissionPayment, Reservation
from .notification import notify
from .wallet import credit_wallet, generate_reference

logger = logging.getLogger(__name__)

PLATFORM_FEE_RATE = Decimal("0.30")
CENT = Decimal("0.01")
POLL_INTERVAL = 10
POLL_TIMEOUT = 5 * 60
ESCROW_HOLD = timedelta(hours=48)
RELEASE_CONDITIONS = "Released to the agent once the visit is confirmed and 48 hours have passed."


@dataclass(frozen=True)
class CommissionSplit:
    platform_fee: Decimal
    agent_amount: Decimal


def split_commission(amount) -> CommissionSplit:
    """Platform keeps 30% (rounded to the cent); the agent gets the rest."""
    amount = Decimal(str(amount))
    platform_fee = (amount * PLATFORM_FEE_RATE).quantize(CENT, rounding=ROUND_HALF_UP)
    return CommissionSplit(platform_fee=platform_fee, agent_amount=amount - platform_fee)


class CommissionService:
    """Commission payments held in escrow on behalf of agents."""

    def __init__(
        self,
        user,
        *,
        client: MobileMoneyClient | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.user = user
        self._client = client
        self.clock = clock
        self.sleep = sleep

    @property
    def client(self) -> MobileMoneyClient:
        if self._client is None:
            self._client = get_client()
        return self._client

    def payments(self) -> list[CommissionPayment]:
        return list(
            CommissionPayment.objects.filter(user=self.user)
            .select_related("agent", "property", "reservation")
            .order_by("-created_at", "-id")
        )

    def agent_commissions(self) -> list[CommissionPayment]:
        return list(
            CommissionPayment.objects.filter(agent=self.user)
            .select_related("user", "property", "reservation")
            .order_by("-created_at", "-id")
        )

    def pay(self, reservation: Reservation, data: Any) -> tuple[bool, CommissionPaymentForm, CommissionPayment | None]:
        if reservation.user_id != self.user.id:
            raise PermissionError("Only the guest of a reservation can pay its commission.")
        form = CommissionPaymentForm(data)
        if not form.is_valid():
            return False, form, None

        amount = form.cleaned_data["amount"]
        split = split_commission(amount)
        payment = CommissionPayment.objects.create(
            user=self.user,
            agent=reservation.property.owner,
            property=reservation.property,
            reservation=reservation,
            amount=amount,
            platform_fee=split.platform_fee,
            agent_amount=split.agent_amount,
            payment_method=form.cleaned_data["service"],
            payment_reference=generate_reference("COM"),
            release_conditions=RELEASE_CONDITIONS,
        )

        gateway_txn = self.client.initiate_payment(
            amount,
            form.cleaned_data["phone"],
            service=form.cleaned_data["service"],
            external_id=str(payment.pk),
            message=f"Agent Commission Payment - {payment.payment_reference}",
            user_id=str(self.user.pk),
        )
        payment.payment_reference = gateway_txn.trans_id
        payment.save(update_fields=["payment_reference", "updated_at"])

        try:
            status = poll_status(
                lambda: self.client.payment_status(gateway_txn.trans_id),
                interval=POLL_INTERVAL,
                max_attempts=POLL_TIMEOUT // POLL_INTERVAL,
                timeout=POLL_TIMEOUT,
                clock=self.clock,
                sleep=self.sleep,
            )
        except PollingTimeout:
            logger.warning("Commission payment %s still pending after %ss", payment.pk, POLL_TIMEOUT)
            return True, form, payment

        now = timezone.now()
        if status.is_successful:
            payment.status = "paid"
            payment.paid_at = now
            payment.release_date = (now + ESCROW_HOLD).date()
            payment.save(update_fields=["status", "paid_at", "release_date", "updated_at"])
            notify(
                self.user,
                "Commission Payment Successful",
                "Your commission payment has been processed and is being held securely. "
                "The agent will receive payment after the visit is confirmed and 48 hours have passed.",
                type="commission",
                data={"commission_payment_id": payment.pk},
            )
        else:
            payment.status = "cancelled"
            payment.save(update_fields=["status", "updated_at"])
            notify(
                self.user,
                "Commission Payment Failed",
                f"Your payment was {status.status.lower()}. Please try again.",
                type="commission",
                data={"commission_payment_id": payment.pk},
            )
        return True, form, payment

    def open_dispute(self, payment: CommissionPayment, data: Any) -> tuple[bool, DisputeForm, CommissionDispute | None]:
        if self.user.id not in (payment.user_id, payment.agent_id):
            raise PermissionError("Only the payer or the agent can dispute a commission.")
        if payment.status != "paid" or payment.escrow_status != "holding":
            raise MarketplaceError("Only commissions held in escrow can be disputed.", status_code=409)
        form = DisputeForm(data)
        if not form.is_valid():
            return False, form, None
        with transaction.atomic():
            dispute = form.save(commit=False)
            dispute.commission_payment = payment
            dispute.reported_by = self.user
            dispute.save()
            payment.dispute_reason = dispute.description
            payment.save(update_fields=["dispute_reason", "updated_at"])
        logger.info("Dispute %s opened on commission %s", dispute.pk, payment.pk)
        return True, form, dispute


def release_commission(payment: CommissionPayment) -> CommissionPayment:
    """Pay the agent share out of escrow into the agent's wallet."""
    with transaction.atomic():
        locked = CommissionPayment.objects.select_for_update().get(pk=payment.pk)
        if locked.status != "paid" or locked.escrow_status != "holding":
            raise MarketplaceError("Only paid commissions held in escrow can be released.", status_code=409)
        if locked.disputes.filter(status="open").exists():
            raise MarketplaceError("Resolve open disputes before releasing this commission.", status_code=409)
        credit_wallet(
            locked.agent,
            locked.agent_amount,
            type="commission",
            reference=generate_reference("REL"),
            listing=locked.property,
            description=f"Commission release for reservation {locked.reservation_id}",
        )
        locked.status = "released"
        locked.escrow_status = "released"
        locked.released_at = timezone.now()
        locked.save(update_fields=["status", "escrow_status", "released_at", "updated_at"])
    notify(
        locked.agent,
        "Commission released",
        f"{locked.agent_amount} has been added to your wallet.",
        type="commission",
        data={"commission_payment_id": locked.pk},
    )
    return locked


def refund_commission(payment: CommissionPayment) -> CommissionPayment:
    """Return a held commission to the payer's wallet."""
    with transaction.atomic():
        locked = CommissionPayment.objects.select_for_update().get(pk=payment.pk)
        if locked.status != "paid" or locked.escrow_status != "holding":
            raise MarketplaceError("Only paid commissions held in escrow can be refunded.", status_code=409)
        credit_wallet(
            locked.user,
            locked.amount,
            type="refund",
            reference=generate_reference("CRF"),
            listing=locked.property,
            description=f"Commission refund for reservation {locked.reservation_id}",
        )
        locked.status = "refunded"
        locked.escrow_status = "refunded"
        locked.save(update_fields=["status", "escrow_status", "updated_at"])
    notify(
        locked.user,
        "Commission refunded",
        f"{locked.amount} has been returned to your wallet.",
        type="commission",
        data={"commission_payment_id": locked.pk},
    )
    return locked


def resolve_dispute(dispute: CommissionDispute, status: str, resolution: str, resolved_by) -> CommissionDispute:
    if status not in ("resolved", "rejected"):
        raise ValueError(f"Unknown dispute resolution: {status}")
    dispute.status = status
    dispute.resolution = resolution
    dispute.resolved_by = resolved_by
    dispute.resolved_at = timezone.now()
    dispute.save(update_fields=["status", "resolution", "resolved_by", "resolved_at", "updated_at"])
    notify(
        dispute.reported_by,
        "Dispute update",
        f"Your dispute was {status}: {resolution}",
        type="commission",
        data={"dispute_id": dispute.pk},
    )
    return dispute
