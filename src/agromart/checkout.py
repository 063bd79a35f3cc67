"""Wiring of the checkout flow from settings."""

from agromart.config import CheckoutSettings
from agromart.models import PaymentRequest
from agromart.services import (
    Alerter,
    CheckoutFlowController,
    FileTokenStore,
    Navigator,
    PaymentsApiClient,
    SheetHost,
    SSMService,
    StoredTokenProvider,
    StripePaymentSheet,
)


def create_checkout_flow(
    request: PaymentRequest,
    *,
    host: SheetHost,
    navigator: Navigator,
    alerter: Alerter,
    settings: CheckoutSettings | None = None,
    payments_api: PaymentsApiClient | None = None,
    ssm: SSMService | None = None,
) -> CheckoutFlowController:
    """Build a controller backed by the file token store, the backend and Stripe.

    Args:
        request: What the invoking screen wants to buy.
        host: UI surface that renders the payment sheet.
        navigator: Receives the success/failure navigation.
        alerter: Shows failure messages.
        settings: Defaults to CheckoutSettings.from_env().
        payments_api: Shared API client, left open for the caller to close. When
            omitted, one is created from settings and closed by the
            controller's aclose() or `async with` block.
        ssm: SSM service used when the publishable key is not in the environment.

    Raises:
        SSMServiceError: If the Stripe publishable key cannot be resolved.
    """
    settings = settings or CheckoutSettings.from_env()
    publishable_key = settings.resolve_publishable_key(ssm)

    owns_payments_api = payments_api is None
    if payments_api is None:
        payments_api = PaymentsApiClient(settings.api_url, timeout=settings.http_timeout)

    return CheckoutFlowController(
        request,
        token_provider=StoredTokenProvider(FileTokenStore(settings.token_store_path)),
        payments_api=payments_api,
        payment_sheet=StripePaymentSheet(publishable_key, host=host),
        navigator=navigator,
        alerter=alerter,
        merchant_display_name=settings.merchant_display_name,
        allows_delayed_payment_methods=settings.allows_delayed_payment_methods,
        owns_payments_api=owns_payments_api,
    )
