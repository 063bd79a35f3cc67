"""Error codes surfaced to the user by the checkout flow.

Every failure of a checkout attempt is terminal for that attempt and maps to
exactly one of these codes. The alert title and default message shown to the
user come from the tables below.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Checkout error codes."""

    AUTH_MISSING = "ERR_CHECKOUT_001"
    SESSION_REQUEST_FAILED = "ERR_CHECKOUT_002"
    SHEET_INIT_FAILED = "ERR_CHECKOUT_003"
    SHEET_PRESENTATION_FAILED = "ERR_CHECKOUT_004"
    CANCELLED = "ERR_CHECKOUT_005"


# Default human-readable messages, used when no detail is available
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.AUTH_MISSING: "Please log in to continue",
    ErrorCode.SESSION_REQUEST_FAILED: "Unable to process payment. Please try again later.",
    ErrorCode.SHEET_INIT_FAILED: "Unable to process payment. Please try again later.",
    ErrorCode.SHEET_PRESENTATION_FAILED: "Payment could not be completed",
    ErrorCode.CANCELLED: "cancelled",
}

# Alert dialog titles
ERROR_TITLES: dict[ErrorCode, str] = {
    ErrorCode.AUTH_MISSING: "Authentication Error",
    ErrorCode.SESSION_REQUEST_FAILED: "Payment Error",
    ErrorCode.SHEET_INIT_FAILED: "Payment Error",
    ErrorCode.SHEET_PRESENTATION_FAILED: "Payment Failed",
    ErrorCode.CANCELLED: "Payment Failed",
}


class CheckoutErrorInfo(BaseModel):
    """Serializable description of a checkout failure."""

    model_config = ConfigDict(strict=True, frozen=True)

    error_code: ErrorCode
    title: str
    message: str


class CheckoutError(Exception):
    """Raised inside the checkout flow when a step fails.

    The flow catches it at the step boundary and turns it into an alert and
    a navigation to the failure screen.
    """

    def __init__(self, code: ErrorCode, detail: str | None = None) -> None:
        self.code = code
        self.detail = detail
        self.title = ERROR_TITLES[code]
        self.message = detail or ERROR_MESSAGES[code]
        super().__init__(self.message)

    def to_info(self) -> CheckoutErrorInfo:
        """Convert this exception to a CheckoutErrorInfo."""
        return CheckoutErrorInfo(error_code=self.code, title=self.title, message=self.message)


# Stripe decline codes mapped to messages suitable for end users
STRIPE_ERROR_MESSAGES: dict[str, str] = {
    "card_declined": "Your card was declined. Please try a different card.",
    "expired_card": "Your card has expired. Please use a different card.",
    "insufficient_funds": "Your card has insufficient funds. Please try a different card.",
    "incorrect_cvc": "The security code (CVC) is incorrect. Please check and try again.",
    "incorrect_number": "The card number is incorrect. Please check and try again.",
    "processing_error": "A processing error occurred. Please try again.",
    "authentication_required": "Your bank requires authentication for this payment.",
    "generic_decline": "Your card was declined. Please try a different card.",
}


def get_user_friendly_stripe_message(
    stripe_error_code: str | None,
    default_message: str = "Payment could not be completed",
) -> str:
    """Get a user-friendly message for a Stripe error code.

    Args:
        stripe_error_code: The Stripe error code (e.g., 'card_declined').
        default_message: Message to use if error code is unknown.

    Returns:
        User-friendly error message.
    """
    if stripe_error_code and stripe_error_code in STRIPE_ERROR_MESSAGES:
        return STRIPE_ERROR_MESSAGES[stripe_error_code]
    return default_message
