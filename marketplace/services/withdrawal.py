"""
Mobile money withdrawals.

A withdrawal is reserved against the wallet, sent to the gateway, checked
once after a short delay and, while still pending, handed to a
``WithdrawalMonitor``. The monitor polls every 10 seconds for at most 60
seconds, publishing progress once per second. A poll that fails on the
network is logged and the next one proceeds as usual.

Outcomes:
    SUCCESSFUL  wallet debited, request and transaction completed
    FAILED      request and transaction failed
    EXPIRED     same as FAILED
    UNKNOWN     timeout; request left ``processing``, transaction ``pending``
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable

from django.conf import settings
from django.db import connection, transaction
from django.utils import timezone

from ..exceptions import GatewayError, InsufficientFunds, WithdrawalRejected
from ..forms import WithdrawalForm
from ..gateway import MobileMoneyClient, PaymentStatus, get_client
from ..models import Transaction, WithdrawalRequest
from .notification import notify
from .wallet import WalletService, update_wallet_balance

logger = logging.getLogger(__name__)

IMMEDIATE_CHECK_DELAY = 2
MONITOR_TIMEOUT = 60
POLL_INTERVAL = 10
PROGRESS_TICK = 1

UNKNOWN = "UNKNOWN"

SUCCESS_TITLE = "Withdrawal Successful"
SUCCESS_BODY = "Your withdrawal has been processed successfully."
FAILED_TITLE = "Withdrawal Failed"
UNKNOWN_TITLE = "Withdrawal Status Unknown"
UNKNOWN_BODY = (
    "Unable to confirm withdrawal status. The transaction may have been processed successfully. "
    "Please check your mobile money account balance and contact support if needed."
)


def _failure_body(status: PaymentStatus, immediate: bool) -> str:
    if immediate:
        return "Your withdrawal could not be processed. Please try again."
    return (
        f"Your withdrawal was {status.status.lower()}. "
        "Please check your account balance to confirm if the funds were received."
    )


def finalize_withdrawal(withdrawal: WithdrawalRequest, status: PaymentStatus, immediate: bool = False) -> WithdrawalRequest:
    """Apply a terminal gateway status; a request is finalized at most once."""
    succeeded = status.is_successful
    now = timezone.now()
    with transaction.atomic():
        locked = WithdrawalRequest.objects.select_for_update().select_related("user").get(pk=withdrawal.pk)
        if locked.status in ("completed", "failed"):
            return locked
        if succeeded:
            try:
                with transaction.atomic():
                    update_wallet_balance(locked.user, locked.amount)
            except InsufficientFunds:
                logger.error("Withdrawal %s paid out but the wallet could not be debited", locked.pk)
        else:
            locked.failure_reason = status.message or f"Gateway reported {status.status}"
        locked.status = "completed" if succeeded else "failed"
        locked.processed_at = now
        locked.save()
        Transaction.objects.filter(reference=locked.gateway_reference).update(
            status="completed" if succeeded else "failed",
            updated_at=now,
        )

    logger.info("Withdrawal %s finalized as %s", locked.pk, status.status)
    if succeeded:
        notify(locked.user, SUCCESS_TITLE, SUCCESS_BODY, type="withdrawal", data={"withdrawal_id": locked.pk})
    else:
        notify(
            locked.user,
            FAILED_TITLE,
            _failure_body(status, immediate),
            type="withdrawal",
            data={"withdrawal_id": locked.pk, "status": status.status},
        )
    return locked


def mark_unknown(withdrawal: WithdrawalRequest) -> None:
    now = timezone.now()
    updated = WithdrawalRequest.objects.filter(pk=withdrawal.pk, status="pending").update(
        status="processing",
        updated_at=now,
    )
    Transaction.objects.filter(reference=withdrawal.gateway_reference, status="pending").update(updated_at=now)
    if updated:
        notify(withdrawal.user, UNKNOWN_TITLE, UNKNOWN_BODY, type="withdrawal", data={"withdrawal_id": withdrawal.pk})


@dataclass(frozen=True)
class MonitorResult:
    outcome: str
    status: PaymentStatus | None
    elapsed: float


class WithdrawalMonitor:
    """Bounded status polling for one withdrawal."""

    def __init__(
        self,
        withdrawal: WithdrawalRequest,
        *,
        client: MobileMoneyClient | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        timeout: float = MONITOR_TIMEOUT,
        poll_interval: float = POLL_INTERVAL,
        tick: float = PROGRESS_TICK,
        on_progress: Callable[["WithdrawalMonitor"], Any] | None = None,
    ):
        self.withdrawal = withdrawal
        self.client = client or get_client()
        self.clock = clock
        self.sleep = sleep
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.tick = tick
        self.on_progress = on_progress

        self.progress = 0.0
        self.seconds_left = int(timeout)
        self.current_status = "PENDING"
        self.polls = 0
        self.result: MonitorResult | None = None
        self._stopped = threading.Event()

    @property
    def time_remaining(self) -> str:
        minutes, seconds = divmod(max(self.seconds_left, 0), 60)
        return f"{minutes}:{seconds:02d}"

    @property
    def is_stopped(self) -> bool:
        return self._stopped.is_set()

    def stop(self) -> None:
        self._stopped.set()

    def _update_progress(self, elapsed: float) -> None:
        self.progress = min(elapsed / self.timeout * 100, 100.0)
        self.seconds_left = max(int(round(self.timeout - elapsed)), 0)
        if self.on_progress is not None:
            self.on_progress(self)

    def _touch(self) -> None:
        now = timezone.now()
        WithdrawalRequest.objects.filter(pk=self.withdrawal.pk).update(updated_at=now)
        Transaction.objects.filter(reference=self.withdrawal.gateway_reference).update(updated_at=now)

    def _poll(self) -> PaymentStatus | None:
        self.polls += 1
        try:
            status = self.client.withdrawal_status(self.withdrawal.gateway_reference)
        except GatewayError as exc:
            logger.warning("Withdrawal %s status poll %s failed: %s", self.withdrawal.pk, self.polls, exc)
            return None
        self.current_status = status.status
        if status.status == "PENDING":
            self._touch()
        return status

    def run(self) -> MonitorResult | None:
        """Poll until a terminal status or the timeout; ``None`` when stopped."""
        logger.info("Monitoring withdrawal %s (%s)", self.withdrawal.pk, self.withdrawal.gateway_reference)
        started = self.clock()
        next_poll = self.poll_interval
        while not self._stopped.is_set():
            self.sleep(self.tick)
            elapsed = self.clock() - started
            self._update_progress(elapsed)

            if elapsed >= next_poll:
                next_poll += self.poll_interval
                status = self._poll()
                if status is not None and status.is_terminal:
                    finalize_withdrawal(self.withdrawal, status)
                    if status.is_successful:
                        self.progress = 100.0
                    self.result = MonitorResult(status.status, status, elapsed)
                    self.stop()
                    return self.result

            if elapsed >= self.timeout:
                logger.warning("Withdrawal %s still unconfirmed after %ss", self.withdrawal.pk, self.timeout)
                mark_unknown(self.withdrawal)
                self.result = MonitorResult(UNKNOWN, None, elapsed)
                self.stop()
                return self.result

        logger.info("Monitoring of withdrawal %s stopped", self.withdrawal.pk)
        return None


def _run_in_thread(monitor: WithdrawalMonitor) -> None:
    try:
        monitor.run()
    except Exception:
        logger.exception("Withdrawal monitor for %s crashed", monitor.withdrawal.pk)
    finally:
        connection.close()


def start_monitor(monitor: WithdrawalMonitor, background: bool | None = None) -> threading.Thread | None:
    if background is None:
        background = settings.WITHDRAWAL_MONITOR_BACKGROUND
    if not background:
        monitor.run()
        return None
    thread = threading.Thread(
        target=_run_in_thread,
        args=(monitor,),
        name=f"withdrawal-monitor-{monitor.withdrawal.pk}",
        daemon=True,
    )
    thread.start()
    return thread


@dataclass(frozen=True)
class WithdrawalOutcome:
    withdrawal: WithdrawalRequest
    status: str
    monitor: WithdrawalMonitor | None = None

    @property
    def monitoring(self) -> bool:
        return self.monitor is not None


class WithdrawalService:
    """Runs the withdrawal flow for one user."""

    def __init__(
        self,
        user,
        *,
        client: MobileMoneyClient | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        background: bool | None = None,
    ):
        self.user = user
        self.client = client or get_client()
        self.clock = clock
        self.sleep = sleep
        self.background = background

    def submit(self, data) -> tuple[bool, WithdrawalForm, WithdrawalOutcome | None]:
        form = WithdrawalForm(data)
        if not form.is_valid():
            return False, form, None
        outcome = self.process(
            form.cleaned_data["amount"],
            form.cleaned_data["phone"],
            form.cleaned_data["method"],
        )
        return True, form, outcome

    def _reserve(self, amount: Decimal, phone: str, method: str) -> WithdrawalRequest:
        with transaction.atomic():
            check = WalletService(self.user).request_withdrawal(amount, phone)
            if not check.accepted:
                raise WithdrawalRejected(check.available)
            return WithdrawalRequest.objects.create(
                user=self.user,
                amount=amount,
                phone=phone,
                service=method,
                status="pending",
            )

    def process(self, amount, phone: str, method: str = "MTN") -> WithdrawalOutcome:
        amount = Decimal(str(amount))
        withdrawal = self._reserve(amount, phone, method)

        try:
            gateway_txn = self.client.initiate_withdrawal(
                amount,
                phone,
                service=method,
                message=f"Withdrawal from Propella wallet - {amount:,.0f} FCFA",
                user_id=str(self.user.pk),
                external_id=f"WDR-{withdrawal.pk}",
            )
        except GatewayError as exc:
            withdrawal.status = "failed"
            withdrawal.failure_reason = exc.message
            withdrawal.processed_at = timezone.now()
            withdrawal.save(update_fields=["status", "failure_reason", "processed_at", "updated_at"])
            raise

        with transaction.atomic():
            withdrawal.gateway_reference = gateway_txn.trans_id
            withdrawal.save(update_fields=["gateway_reference", "updated_at"])
            Transaction.objects.create(
                user=self.user,
                amount=-amount,
                type="withdrawal",
                reference=gateway_txn.trans_id,
                status="pending",
                description=f"Withdrawal to {phone} ({method})",
            )
        logger.info("Withdrawal %s initiated as %s", withdrawal.pk, gateway_txn.trans_id)

        self.sleep(IMMEDIATE_CHECK_DELAY)
        try:
            status = self.client.withdrawal_status(gateway_txn.trans_id)
        except GatewayError as exc:
            logger.warning("Immediate status check for withdrawal %s failed: %s", withdrawal.pk, exc)
            status = None

        if status is not None and status.is_terminal:
            withdrawal = finalize_withdrawal(withdrawal, status, immediate=True)
            return WithdrawalOutcome(withdrawal=withdrawal, status=status.status)

        monitor = WithdrawalMonitor(withdrawal, client=self.client, clock=self.clock, sleep=self.sleep)
        start_monitor(monitor, background=self.background)
        withdrawal.refresh_from_db()
        outcome = monitor.result.outcome if monitor.result else "PENDING"
        return WithdrawalOutcome(withdrawal=withdrawal, status=outcome, monitor=monitor)


def resume_pending(client: MobileMoneyClient | None = None, **monitor_options) -> list[MonitorResult]:
    """Monitor every request still awaiting a gateway verdict, one after another."""
    client = client or get_client()
    results = []
    pending = (
        WithdrawalRequest.objects.filter(status__in=WithdrawalRequest.IN_FLIGHT_STATUSES)
        .exclude(gateway_reference="")
        .select_related("user")
        .order_by("requested_at")
    )
    for withdrawal in pending:
        result = WithdrawalMonitor(withdrawal, client=client, **monitor_options).run()
        if result is not None:
            results.append(result)
    return results
