"""Domain errors carrying the message shown to the end user."""


class MarketplaceError(Exception):
    """Base error; ``message`` is safe to show to the user."""

    status_code = 400
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None, *, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class AuthError(MarketplaceError):
    status_code = 401
    default_message = "Invalid email or password. Please check your credentials and try again."


class RateLimited(AuthError):
    status_code = 429
    default_message = "Too many login attempts. Please wait a few minutes before trying again."


class InsufficientFunds(MarketplaceError):
    status_code = 409
    default_message = "Insufficient wallet balance."


class WithdrawalRejected(MarketplaceError):
    status_code = 409

    def __init__(self, available, message: str | None = None):
        self.available = available
        super().__init__(message or f"Withdrawal exceeds available amount. Available: {available}")


class ListingUnavailable(MarketplaceError):
    status_code = 409
    default_message = "This property is no longer available for reservation."


class MessageDeliveryError(MarketplaceError):
    status_code = 502
    default_message = "Message could not be delivered. It will be retried."


class GatewayError(MarketplaceError):
    status_code = 502
    default_message = "The payment service is unavailable. Please try again later."


class GatewayTimeout(GatewayError):
    status_code = 504
    default_message = "The payment service did not respond in time."


class PollingTimeout(GatewayError):
    status_code = 504
    default_message = "Payment status polling timed out."
