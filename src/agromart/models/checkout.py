"""Models for one checkout attempt.

Amounts on a PaymentRequest are in major currency units (e.g. dollars); the
backend expects integer minor units (cents).
"""

import uuid
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import CheckoutState, Screen, SheetOutcomeStatus, SheetStyle
from .errors import CheckoutErrorInfo

CENTS = Decimal("100")


class PaymentRequest(BaseModel):
    """What the invoking screen wants to buy. Immutable for the whole flow."""

    model_config = ConfigDict(frozen=True)

    product_id: str = Field(..., description="Marketplace product identifier")
    amount: Decimal = Field(..., description="Price in major currency units")
    product_name: str = Field(default="", description="Display name of the product")

    @property
    def amount_minor_units(self) -> int:
        """Amount in minor units, rounded half-up to the nearest cent."""
        return int((self.amount * CENTS).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @property
    def is_complete(self) -> bool:
        """Whether the request carries a product and a positive amount."""
        return bool(self.product_id.strip()) and self.amount > 0

    def to_payload(self) -> dict[str, object]:
        """Build the create-payment-intent request body."""
        return {"productId": self.product_id, "amount": self.amount_minor_units}


class PaymentSession(BaseModel):
    """Credentials issued by the backend for exactly one sheet presentation.

    Never persisted.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    session_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    client_secret: str = Field(..., min_length=1, description="PaymentIntent client secret")
    ephemeral_key: str = Field(..., min_length=1, description="Customer ephemeral key secret")
    customer_id: str = Field(..., min_length=1, description="Stripe customer ID (cus_xxx)")

    def __repr__(self) -> str:
        return f"PaymentSession(session_id={self.session_id!r}, customer_id={self.customer_id!r})"


class SheetConfiguration(BaseModel):
    """Parameters handed to the hosted payment sheet on initialization.

    Serializes with camelCase keys (``model_dump(by_alias=True)``), the
    shape hosted sheet SDKs expect.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    payment_intent_client_secret: str
    customer_id: str
    customer_ephemeral_key_secret: str
    merchant_display_name: str = "My Store"
    allows_delayed_payment_methods: bool = True
    default_billing_name: str = ""
    style: SheetStyle = SheetStyle.AUTOMATIC

    @property
    def payment_intent_id(self) -> str:
        """PaymentIntent ID (pi_xxx) embedded in the client secret."""
        return self.payment_intent_client_secret.split("_secret_", 1)[0]

    @classmethod
    def from_session(
        cls,
        session: PaymentSession,
        *,
        merchant_display_name: str = "My Store",
        allows_delayed_payment_methods: bool = True,
    ) -> "SheetConfiguration":
        """Build a sheet configuration from freshly issued session credentials."""
        return cls(
            payment_intent_client_secret=session.client_secret,
            customer_id=session.customer_id,
            customer_ephemeral_key_secret=session.ephemeral_key,
            merchant_display_name=merchant_display_name,
            allows_delayed_payment_methods=allows_delayed_payment_methods,
        )


class SheetOutcome(BaseModel):
    """Terminal result reported by a payment sheet presentation."""

    model_config = ConfigDict(frozen=True)

    status: SheetOutcomeStatus
    message: str | None = None
    error_code: str | None = Field(
        default=None,
        description="Provider error code (e.g. card_declined) when the sheet failed",
    )

    @classmethod
    def succeeded(cls) -> "SheetOutcome":
        return cls(status=SheetOutcomeStatus.SUCCEEDED)

    @classmethod
    def cancelled(cls, message: str | None = None) -> "SheetOutcome":
        return cls(status=SheetOutcomeStatus.CANCELLED, message=message)

    @classmethod
    def failed(cls, message: str, error_code: str | None = None) -> "SheetOutcome":
        return cls(status=SheetOutcomeStatus.FAILED, message=message, error_code=error_code)


class CheckoutResult(BaseModel):
    """Record of how one checkout attempt ended."""

    model_config = ConfigDict(frozen=True)

    state: CheckoutState
    screen: Screen | None = None
    outcome: SheetOutcome | None = None
    error: CheckoutErrorInfo | None = None
    session_id: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == CheckoutState.SUCCEEDED
