"""Enumeration types for checkout data models."""

from enum import Enum


class CheckoutState(str, Enum):
    """State of a single checkout attempt."""

    IDLE = "idle"
    ACQUIRING_TOKEN = "acquiring_token"
    BLOCKED = "blocked"
    READY = "ready"
    REQUESTING_SESSION = "requesting_session"
    PRESENTING_SHEET = "presenting_sheet"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further automatic transition happens from this state."""
        return self in (CheckoutState.BLOCKED, CheckoutState.SUCCEEDED, CheckoutState.FAILED)


class SheetOutcomeStatus(str, Enum):
    """Outcome reported by a hosted payment sheet."""

    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"
    FAILED = "failed"


class Screen(str, Enum):
    """Navigation destinations reached by the checkout flow."""

    PAYMENT_SUCCESS = "PaymentSuccess"
    PAYMENT_FAILED = "PaymentFailed"


class SheetStyle(str, Enum):
    """Appearance of the payment sheet."""

    AUTOMATIC = "automatic"
    ALWAYS_LIGHT = "alwaysLight"
    ALWAYS_DARK = "alwaysDark"
