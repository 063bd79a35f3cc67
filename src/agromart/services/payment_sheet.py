"""Hosted payment sheet abstraction and its Stripe-backed implementation.

The checkout flow only needs two operations from a sheet: initialize it with
freshly issued session credentials, then present it and wait for the user to
finish. StripePaymentSheet delegates collecting card details to a host
surface (the UI that renders the sheet) and then asks Stripe, with the
publishable key and the client secret, what happened to the PaymentIntent.
"""

import asyncio
import logging
from typing import Protocol

import stripe
from stripe import StripeClient

from agromart.models import (
    SheetConfiguration,
    SheetOutcome,
    SheetOutcomeStatus,
    get_user_friendly_stripe_message,
)

logger = logging.getLogger(__name__)


class PaymentSheetError(Exception):
    """Raised when a payment sheet cannot be initialized or presented."""

    def __init__(self, message: str, stripe_error_code: str | None = None) -> None:
        super().__init__(message)
        self.stripe_error_code = stripe_error_code


class PaymentSheet(Protocol):
    """A hosted payment UI."""

    async def initialize(self, config: SheetConfiguration) -> None:
        """Prepare the sheet for one presentation.

        Raises:
            PaymentSheetError: If the sheet cannot be set up.
        """
        ...

    async def present(self) -> SheetOutcome:
        """Show the sheet and wait until the user completes or cancels it."""
        ...


class SheetHost(Protocol):
    """UI surface that renders the sheet and collects payment details."""

    async def collect(self, config: SheetConfiguration) -> SheetOutcome: ...


class StripePaymentSheet:
    """Payment sheet backed by Stripe PaymentIntents.

    Each initialize() consumes one client secret; initializing twice with the
    same secret is refused, as is presenting twice after one initialize().

    Usage:
        sheet = StripePaymentSheet(publishable_key, host=my_ui)
        await sheet.initialize(config)
        outcome = await sheet.present()
    """

    def __init__(self, publishable_key: str, host: SheetHost) -> None:
        """Initialize the sheet.

        Args:
            publishable_key: Stripe publishable key (pk_xxx).
            host: UI surface that collects and confirms payment details.
        """
        self._publishable_key = publishable_key
        self._host = host
        self._client: StripeClient | None = None
        self._config: SheetConfiguration | None = None
        self._used_secrets: set[str] = set()

    def _get_client(self) -> StripeClient:
        if self._client is None:
            if not self._publishable_key:
                raise PaymentSheetError("Stripe publishable key is not configured")
            self._client = StripeClient(self._publishable_key)
        return self._client

    async def _retrieve_intent(self, config: SheetConfiguration) -> stripe.PaymentIntent:
        client = self._get_client()
        return await asyncio.to_thread(
            client.payment_intents.retrieve,
            config.payment_intent_id,
            params={"client_secret": config.payment_intent_client_secret},
        )

    async def initialize(self, config: SheetConfiguration) -> None:
        secret = config.payment_intent_client_secret
        if secret in self._used_secrets:
            raise PaymentSheetError("This payment session has already been used")
        if "_secret_" not in secret:
            raise PaymentSheetError("Invalid payment intent client secret")
        if not config.customer_id or not config.customer_ephemeral_key_secret:
            raise PaymentSheetError("Customer details are missing")

        self._used_secrets.add(secret)
        self._config = None

        try:
            intent = await self._retrieve_intent(config)
        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            logger.error("PaymentIntent lookup failed: %s (code: %s)", str(e), error_code)
            raise PaymentSheetError(
                getattr(e, "user_message", None) or "Unable to load payment details",
                stripe_error_code=error_code,
            ) from e

        if intent.status == "succeeded":
            raise PaymentSheetError("This payment has already been completed")
        if intent.status == "canceled":
            raise PaymentSheetError("This payment has been canceled")

        self._config = config
        logger.info("Payment sheet initialized for %s", config.merchant_display_name)

    async def present(self) -> SheetOutcome:
        if self._config is None:
            raise PaymentSheetError("Payment sheet has not been initialized")
        config, self._config = self._config, None

        outcome = await self._host.collect(config)
        if outcome.status != SheetOutcomeStatus.SUCCEEDED:
            return outcome

        try:
            intent = await self._retrieve_intent(config)
        except stripe.StripeError as e:
            logger.error("PaymentIntent status check failed: %s", str(e))
            return SheetOutcome.failed(
                getattr(e, "user_message", None) or "Unable to confirm payment status",
                error_code=getattr(e, "code", None),
            )

        return self._outcome_for_intent(intent, config.allows_delayed_payment_methods)

    @staticmethod
    def _outcome_for_intent(intent: stripe.PaymentIntent, allows_delayed: bool) -> SheetOutcome:
        if intent.status == "succeeded":
            return SheetOutcome.succeeded()
        if intent.status == "processing":
            if allows_delayed:
                return SheetOutcome.succeeded()
            return SheetOutcome.failed("Payment is still processing")
        if intent.status == "canceled":
            return SheetOutcome.cancelled()

        last_error = getattr(intent, "last_payment_error", None)
        if last_error is not None:
            code = getattr(last_error, "decline_code", None) or getattr(last_error, "code", None)
            message = get_user_friendly_stripe_message(
                code, getattr(last_error, "message", None) or "Payment could not be completed"
            )
            return SheetOutcome.failed(message, error_code=code)
        return SheetOutcome.failed("Payment could not be completed")
