from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable

from django.db import transaction

from ..exceptions import GatewayError, ListingUnavailable, MarketplaceError, PollingTimeout
from ..forms import MobileMoneyForm, ReservationForm
from ..gateway import MobileMoneyClient, PaymentStatus, get_client, poll_status
from ..models import Property, Reservation, Transaction
from .notification import notify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReservationActionOutcome:
    level: str
    message: str


def has_confirmed_booking(user, listing: Property) -> bool:
    return Reservation.objects.filter(user=user, property=listing, status="confirmed").exists()


def release_property(listing: Property) -> None:
    """Put a listing back on the market once no active reservation holds it."""
    still_held = Reservation.objects.filter(property=listing, status__in=Reservation.ACTIVE_STATUSES).exists()
    if not still_held:
        Property.objects.filter(pk=listing.pk, status="reserved").update(status="available")


def _display_name(user) -> str:
    return user.full_name or user.email


class ReservationService:
    """Reservations made by a user, including payment and refunds."""

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

    def _ensure_owner(self, reservation: Reservation) -> None:
        if reservation.user_id != self.user.id:
            raise PermissionError("Cannot modify reservations of another user.")

    def reservations(self) -> list[Reservation]:
        return list(
            Reservation.objects.filter(user=self.user)
            .select_related("property", "property__owner")
            .order_by("-created_at", "-id")
        )

    def create(self, listing: Property, data: Any) -> tuple[bool, ReservationForm, Reservation | None]:
        form = ReservationForm(data)
        if not form.is_valid():
            return False, form, None

        with transaction.atomic():
            locked = Property.objects.select_for_update().get(pk=listing.pk)
            if locked.owner_id == self.user.id:
                raise ListingUnavailable("You cannot reserve your own property.")
            held = Reservation.objects.filter(property=locked, status__in=Reservation.ACTIVE_STATUSES).exists()
            if locked.status != "available" or held:
                raise ListingUnavailable()
            reservation = form.save(commit=False)
            reservation.user = self.user
            reservation.property = locked
            reservation.reservation_fee = locked.reservation_fee
            reservation.save()
            locked.status = "reserved"
            locked.save(update_fields=["status", "updated_at"])

        logger.info("Reservation %s created for listing %s", reservation.pk, locked.pk)
        notify(
            locked.owner,
            "New reservation",
            f"{_display_name(self.user)} reserved {locked.title} for {reservation.reservation_date}.",
            type="reservation",
            data={"reservation_id": reservation.pk, "property_id": locked.pk},
        )
        return True, form, reservation

    def pay(self, reservation: Reservation, data: Any) -> tuple[bool, MobileMoneyForm, PaymentStatus | None]:
        """Collect the reservation fee and wait for the gateway verdict."""
        self._ensure_owner(reservation)
        if reservation.payment_status == "paid":
            raise MarketplaceError("This reservation is already paid.", status_code=409)
        if reservation.status == "cancelled":
            raise MarketplaceError("This reservation was cancelled.", status_code=409)
        form = MobileMoneyForm(data)
        if not form.is_valid():
            return False, form, None
        amount = reservation.reservation_fee or reservation.amount or Decimal("0")
        if amount <= 0:
            raise MarketplaceError("Nothing to pay for this reservation.")

        gateway_txn = self.client.initiate_payment(
            amount,
            form.cleaned_data["phone"],
            service=form.cleaned_data["service"],
            external_id=f"RES-{reservation.pk}",
            message=f"Reservation fee for {reservation.property.title}",
            user_id=str(self.user.pk),
        )
        reservation.payment_status = "pending"
        reservation.transaction_id = gateway_txn.trans_id
        reservation.save(update_fields=["payment_status", "transaction_id", "updated_at"])

        try:
            status = poll_status(
                lambda: self.client.payment_status(gateway_txn.trans_id),
                clock=self.clock,
                sleep=self.sleep,
            )
        except PollingTimeout as exc:
            logger.warning("Payment %s for reservation %s unresolved: %s", gateway_txn.trans_id, reservation.pk, exc)
            return True, form, None

        if status.is_successful:
            with transaction.atomic():
                reservation.mark_paid(gateway_txn.trans_id)
                Transaction.objects.create(
                    user=self.user,
                    property=reservation.property,
                    amount=amount,
                    type="payment",
                    reference=gateway_txn.trans_id,
                    status="completed",
                    description=f"Reservation fee for {reservation.property.title}",
                )
            notify(
                reservation.property.owner,
                "Reservation paid",
                f"{_display_name(self.user)} paid the reservation fee for {reservation.property.title}.",
                type="payment",
                data={"reservation_id": reservation.pk},
            )
        else:
            reservation.payment_status = "failed"
            reservation.save(update_fields=["payment_status", "updated_at"])
        return True, form, status

    def cancel(self, reservation: Reservation, reason: str = "") -> ReservationActionOutcome:
        self._ensure_owner(reservation)
        if reservation.status == "cancelled":
            return ReservationActionOutcome("info", "This reservation is already cancelled.")
        with transaction.atomic():
            reservation.mark_cancelled(reason)
            release_property(reservation.property)
        return ReservationActionOutcome("success", "Reservation cancelled.")

    def request_refund(self, reservation: Reservation) -> dict[str, Any]:
        self._ensure_owner(reservation)
        if reservation.payment_status != "paid":
            raise MarketplaceError("Only paid reservations can be refunded.", status_code=409)
        if reservation.refund_requested and reservation.refund_status != "failed":
            raise MarketplaceError("A refund was already requested for this reservation.", status_code=409)

        first_request = not reservation.refund_requested
        with transaction.atomic():
            if first_request:
                reservation.status = "cancelled"
                reservation.refund_requested = True
                reservation.refund_number = f"RF-{secrets.token_hex(4).upper()}"
            reservation.refund_status = "requested"
            reservation.save()
            if first_request:
                release_property(reservation.property)

        try:
            result = self.client.process_refund(reservation.pk)
        except GatewayError:
            reservation.refund_status = "failed"
            reservation.save(update_fields=["refund_status", "updated_at"])
            raise

        amount = reservation.reservation_fee or reservation.amount
        with transaction.atomic():
            reservation.refund_status = "processed"
            reservation.payment_status = "refunded"
            reservation.save(update_fields=["refund_status", "payment_status", "updated_at"])
            Transaction.objects.create(
                user=self.user,
                property=reservation.property,
                amount=amount,
                type="refund",
                reference=f"REFUND-{reservation.refund_number}",
                status="completed",
                description=f"Refund for reservation {reservation.pk}",
            )
        logger.info("Refund %s processed for reservation %s", reservation.refund_number, reservation.pk)
        return result


class AgentReservationService:
    """Confirm, complete or cancel reservations while enforcing ownership rules."""

    def __init__(self, owner):
        self.owner = owner

    def _owns_reservation(self, reservation: Reservation) -> bool:
        return reservation.property.owner_id == self.owner.id

    def _ensure_owner(self, reservation: Reservation) -> None:
        if not self._owns_reservation(reservation):
            raise PermissionError("Cannot modify reservations for another owner.")

    def reservations(self) -> list[Reservation]:
        return list(
            Reservation.objects.filter(property__owner=self.owner)
            .select_related("property", "user")
            .order_by("-created_at", "-id")
        )

    def confirm(self, reservation: Reservation) -> ReservationActionOutcome:
        self._ensure_owner(reservation)
        if reservation.status != "pending":
            return ReservationActionOutcome("info", "This reservation is no longer awaiting confirmation.")
        reservation.mark_confirmed()
        notify(
            reservation.user,
            "Reservation confirmed",
            f"Your reservation for {reservation.property.title} was confirmed.",
            type="reservation",
            data={"reservation_id": reservation.pk},
        )
        return ReservationActionOutcome("success", "Reservation confirmed.")

    def complete(self, reservation: Reservation) -> ReservationActionOutcome:
        self._ensure_owner(reservation)
        if reservation.status != "confirmed":
            return ReservationActionOutcome("info", "Only confirmed reservations can be completed.")
        reservation.mark_completed()
        return ReservationActionOutcome("success", "Reservation marked as completed.")

    def cancel(self, reservation: Reservation, reason: str = "") -> ReservationActionOutcome:
        self._ensure_owner(reservation)
        if reservation.status == "cancelled":
            return ReservationActionOutcome("info", "This reservation is already cancelled.")
        with transaction.atomic():
            reservation.mark_cancelled(reason)
            release_property(reservation.property)
        notify(
            reservation.user,
            "Reservation cancelled",
            f"Your reservation for {reservation.property.title} was cancelled by the owner.",
            type="reservation",
            data={"reservation_id": reservation.pk, "reason": reason},
        )
        return ReservationActionOutcome("success", "Reservation cancelled.")
