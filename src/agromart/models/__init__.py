"""Pydantic models for the AgroMart checkout flow."""

from .checkout import (
    CheckoutResult,
    PaymentRequest,
    PaymentSession,
    SheetConfiguration,
    SheetOutcome,
)
from .enums import CheckoutState, Screen, SheetOutcomeStatus, SheetStyle
from .errors import (
    ERROR_MESSAGES,
    ERROR_TITLES,
    STRIPE_ERROR_MESSAGES,
    CheckoutError,
    CheckoutErrorInfo,
    ErrorCode,
    get_user_friendly_stripe_message,
)

__all__ = [
    # Enums
    "CheckoutState",
    "Screen",
    "SheetOutcomeStatus",
    "SheetStyle",
    # Checkout
    "CheckoutResult",
    "PaymentRequest",
    "PaymentSession",
    "SheetConfiguration",
    "SheetOutcome",
    # Errors
    "CheckoutError",
    "CheckoutErrorInfo",
    "ErrorCode",
    "ERROR_MESSAGES",
    "ERROR_TITLES",
    "STRIPE_ERROR_MESSAGES",
    "get_user_friendly_stripe_message",
]
