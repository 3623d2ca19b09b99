"""
Mobile money gateway client.

Wraps the payment provider's collect, withdraw, status and refund endpoints.
Amounts are in the configured currency (XAF by default) and phone numbers are
mobile money accounts on MTN or Orange.

Settings:
    PAYMENT_GATEWAY_URL      - base URL of the provider API
    PAYMENT_GATEWAY_KEY      - API key, sent as a bearer token
    PAYMENT_GATEWAY_TIMEOUT  - request timeout in seconds
    PAYMENT_COUNTRY          - default country code for requests
    PAYMENT_CURRENCY         - default currency for requests

Usage:
    from marketplace.gateway import MobileMoneyClient, poll_status

    client = MobileMoneyClient.from_settings()
    txn = client.initiate_payment(5000, "677000000", service="MTN")
    status = poll_status(lambda: client.payment_status(txn.trans_id))
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable

import requests
from django.conf import settings

from .exceptions import GatewayError, GatewayTimeout, PollingTimeout

logger = logging.getLogger(__name__)

STATUS_VALUES = ("CREATED", "PENDING", "SUCCESSFUL", "FAILED", "EXPIRED")
TERMINAL_STATUSES = frozenset({"SUCCESSFUL", "FAILED", "EXPIRED"})
SERVICES = ("MTN", "ORANGE")

# Polling defaults (interval and timeout in seconds)
DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_POLL_ATTEMPTS = 20
DEFAULT_POLL_TIMEOUT = 60.0


@dataclass(frozen=True)
class GatewayTransaction:
    trans_id: str
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PaymentStatus:
    status: str
    amount: Decimal | None = None
    reference: str = ""
    message: str = ""
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_successful(self) -> bool:
        return self.status == "SUCCESSFUL"

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PaymentStatus":
        status = str(payload.get("status", "")).upper()
        if status not in STATUS_VALUES:
            raise GatewayError(f"Unexpected payment status: {status or 'missing'}")
        amount = payload.get("amount")
        return cls(
            status=status,
            amount=Decimal(str(amount)) if amount is not None else None,
            reference=payload.get("reference") or payload.get("transactionId") or "",
            message=payload.get("message") or "",
            raw=payload,
        )


def _json_amount(amount) -> int | float:
    value = Decimal(str(amount))
    return int(value) if value == value.to_integral_value() else float(value)


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        return body.get("error") or body.get("message") or ""
    return ""


class MobileMoneyClient:
    """
    Client for the mobile money provider.

    Every request is a JSON POST. Network timeouts raise ``GatewayTimeout``;
    other transport failures and error responses raise ``GatewayError``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 15,
        country: str = "CM",
        currency: str = "XAF",
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.country = country
        self.currency = currency

        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        })

    @classmethod
    def from_settings(cls, **kwargs) -> "MobileMoneyClient":
        """Create a client configured from Django settings."""
        options = {
            "base_url": settings.PAYMENT_GATEWAY_URL,
            "api_key": settings.PAYMENT_GATEWAY_KEY,
            "timeout": settings.PAYMENT_GATEWAY_TIMEOUT,
            "country": settings.PAYMENT_COUNTRY,
            "currency": settings.PAYMENT_CURRENCY,
        }
        options.update(kwargs)
        return cls(**options)

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.Timeout as exc:
            logger.warning("Gateway request to %s timed out after %ss", path, self.timeout)
            raise GatewayTimeout() from exc
        except requests.RequestException as exc:
            logger.error("Gateway request to %s failed: %s", path, exc)
            raise GatewayError() from exc

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error("Gateway %s returned HTTP %s: %s", path, response.status_code, message)
            raise GatewayError(message or None)

        try:
            return response.json()
        except ValueError as exc:
            logger.error("Gateway %s returned a non-JSON body", path)
            raise GatewayError("Invalid response from the payment service.") from exc

    def _transfer(self, path: str, amount, phone: str, **options) -> GatewayTransaction:
        service = options.pop("service", None)
        if service is not None and service not in SERVICES:
            raise ValueError(f"Unsupported mobile money service: {service}")
        payload = {
            "amount": _json_amount(amount),
            "phone": phone,
            "service": service,
            "country": options.pop("country", None) or self.country,
            "currency": options.pop("currency", None) or self.currency,
        }
        payload.update({key: value for key, value in options.items() if value is not None})
        payload = {key: value for key, value in payload.items() if value is not None}

        logger.info("Gateway %s: amount=%s service=%s", path, payload["amount"], service)
        data = self._post(path, payload)
        trans_id = data.get("transId")
        if not trans_id:
            raise GatewayError("No transaction ID from the payment service.")
        return GatewayTransaction(trans_id=str(trans_id), raw=data.get("raw") or {})

    def initiate_payment(
        self,
        amount,
        phone: str,
        *,
        service: str | None = None,
        external_id: str | None = None,
        message: str | None = None,
        name: str | None = None,
        email: str | None = None,
        user_id: str | None = None,
    ) -> GatewayTransaction:
        """Collect ``amount`` from the payer's mobile money account."""
        return self._transfer(
            "collect",
            amount,
            phone,
            service=service,
            externalId=external_id,
            message=message,
            name=name,
            email=email,
            userId=user_id,
        )

    def initiate_withdrawal(
        self,
        amount,
        phone: str,
        *,
        service: str | None = None,
        external_id: str | None = None,
        message: str | None = None,
        name: str | None = None,
        email: str | None = None,
        user_id: str | None = None,
    ) -> GatewayTransaction:
        """Send ``amount`` to the recipient's mobile money account."""
        return self._transfer(
            "withdraw",
            amount,
            phone,
            service=service,
            externalId=external_id,
            message=message,
            name=name,
            email=email,
            userId=user_id,
        )

    def payment_status(self, trans_id: str, *, is_withdrawal: bool = False) -> PaymentStatus:
        data = self._post("status", {"transId": trans_id, "isWithdrawal": is_withdrawal})
        return PaymentStatus.from_payload(data)

    def withdrawal_status(self, trans_id: str) -> PaymentStatus:
        return self.payment_status(trans_id, is_withdrawal=True)

    def process_refund(self, reservation_id) -> dict[str, Any]:
        data = self._post("refund", {"reservation_id": str(reservation_id)})
        if not data.get("success"):
            raise GatewayError(data.get("error") or "Refund failed")
        return data


def get_client() -> MobileMoneyClient:
    return MobileMoneyClient.from_settings()


def poll_status(
    check: Callable[[], PaymentStatus],
    *,
    interval: float = DEFAULT_POLL_INTERVAL,
    max_attempts: int = DEFAULT_POLL_ATTEMPTS,
    timeout: float = DEFAULT_POLL_TIMEOUT,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> PaymentStatus:
    """
    Call ``check`` until it reports a terminal status.

    A failed check counts as an attempt and is followed by a pause of twice
    the interval. Raises ``PollingTimeout`` once ``timeout`` seconds have
    elapsed or ``max_attempts`` checks were made without a terminal status.
    """
    started = clock()
    attempts = 0
    while attempts < max_attempts:
        if clock() - started > timeout:
            raise PollingTimeout("Payment status polling timed out")
        try:
            status = check()
        except GatewayError as exc:
            attempts += 1
            logger.warning("Status poll attempt %s failed: %s", attempts, exc)
            sleep(interval * 2)
            continue

        attempts += 1
        logger.debug("Status poll attempt %s: %s", attempts, status.status)
        if status.is_terminal:
            return status
        sleep(interval)

    raise PollingTimeout("Payment status polling exceeded maximum attempts")
