"""Marketplace data models exposed as a flat module-level API."""

from .commission import CommissionDispute, CommissionPayment
from .messaging import Message, OutboxMessage
from .notification import Notification
from .profile import Profile
from .property import Property
from .reservation import Reservation
from .review import PropertyReview, PropertyView
from .verification import AgentVerification, VerificationCode
from .wallet import Transaction, Wallet, WithdrawalRequest

__all__ = [
    "Profile",
    "Property",
    "Reservation",
    "Transaction",
    "Wallet",
    "WithdrawalRequest",
    "Message",
    "OutboxMessage",
    "Notification",
    "CommissionPayment",
    "CommissionDispute",
    "AgentVerification",
    "VerificationCode",
    "PropertyReview",
    "PropertyView",
]
