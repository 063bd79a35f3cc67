"""Checkout flow controller: one purchase attempt from intent to outcome.

    mount()  idle -> acquiring_token -> ready | blocked
    pay()    ready -> requesting_session -> presenting_sheet -> succeeded | failed

Every failure is terminal for the attempt: the user sees an alert and the host
is sent to the failure screen. Nothing is retried. Pressing pay again after a
terminal state starts a new attempt with a freshly requested session.
"""

import inspect
from types import TracebackType
from typing import Awaitable, Callable

from agromart.models import (
    CheckoutError,
    CheckoutResult,
    CheckoutState,
    ErrorCode,
    PaymentRequest,
    PaymentSession,
    Screen,
    SheetConfiguration,
    SheetOutcome,
    SheetOutcomeStatus,
)
from agromart.services.payment_sheet import PaymentSheet
from agromart.services.payments_api import PaymentsApiClient, PaymentsApiError
from agromart.services.token_store import TokenProvider
from agromart.services.ui import Alerter, Navigator
from agromart.utils.logging import (
    clear_correlation_id,
    get_logger,
    log_checkout_step,
    set_correlation_id,
)

logger = get_logger(__name__)

SuccessCallback = Callable[[], Awaitable[None] | None]

IN_FLIGHT_STATES = (
    CheckoutState.ACQUIRING_TOKEN,
    CheckoutState.REQUESTING_SESSION,
    CheckoutState.PRESENTING_SHEET,
)


class CheckoutFlowController:
    """Drives the checkout screen for a single PaymentRequest.

    Collaborators are injected so the flow runs the same against a real
    backend and Stripe or against test doubles.

    Usage:
        flow = CheckoutFlowController(
            PaymentRequest(product_id="p1", amount=Decimal("25.00"), product_name="Tomatoes"),
            token_provider=StoredTokenProvider(FileTokenStore(settings.token_store_path)),
            payments_api=PaymentsApiClient(settings.api_url),
            payment_sheet=StripePaymentSheet(publishable_key, host=ui),
            navigator=ui,
            alerter=ui,
        )
        result = await flow.run(on_payment_success=listing.refresh)
    """

    def __init__(
        self,
        request: PaymentRequest,
        *,
        token_provider: TokenProvider,
        payments_api: PaymentsApiClient,
        payment_sheet: PaymentSheet,
        navigator: Navigator,
        alerter: Alerter,
        merchant_display_name: str = "My Store",
        allows_delayed_payment_methods: bool = True,
        owns_payments_api: bool = False,
    ) -> None:
        self.request = request
        self._token_provider = token_provider
        self._payments_api = payments_api
        self._payment_sheet = payment_sheet
        self._navigator = navigator
        self._alerter = alerter
        self._merchant_display_name = merchant_display_name
        self._allows_delayed = allows_delayed_payment_methods
        self._owns_payments_api = owns_payments_api

        self._state = CheckoutState.IDLE
        self._token: str | None = None
        self._result: CheckoutResult | None = None

    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def result(self) -> CheckoutResult | None:
        """Result of the most recent finished attempt, if any."""
        return self._result

    @property
    def loading(self) -> bool:
        """True while a payment attempt is in flight."""
        return self._state in (CheckoutState.REQUESTING_SESSION, CheckoutState.PRESENTING_SHEET)

    @property
    def can_pay(self) -> bool:
        """Whether the pay action is currently available."""
        return self._token is not None and (
            self._state == CheckoutState.READY or self._state.is_terminal
        )

    async def mount(self) -> CheckoutState:
        """Read the authentication token; block the screen when there is none.

        Returns:
            READY when a token was found, BLOCKED otherwise.
        """
        if self._state in IN_FLIGHT_STATES:
            raise RuntimeError(f"Cannot mount checkout while {self._state.value}")

        self._state = CheckoutState.ACQUIRING_TOKEN
        self._token = None

        try:
            token = await self._token_provider.get_token()
        except Exception as e:
            logger.exception("Error retrieving auth token")
            self._block(
                CheckoutError(ErrorCode.AUTH_MISSING, "Unable to retrieve authentication details"),
                str(e),
            )
            return self._state

        if not token:
            self._block(CheckoutError(ErrorCode.AUTH_MISSING), "no token")
            return self._state

        self._token = token
        self._state = CheckoutState.READY
        log_checkout_step(
            logger, "acquire_token", product_id=self.request.product_id, state=self._state.value
        )
        return self._state

    async def pay(self, on_payment_success: SuccessCallback | None = None) -> CheckoutResult:
        """Run one payment attempt to its terminal state.

        Mounts first when the screen has not been mounted yet.

        Args:
            on_payment_success: Called once, only if the payment succeeds.
                May be a plain function or a coroutine function.

        Returns:
            CheckoutResult describing the terminal state.
        """
        if self._state in IN_FLIGHT_STATES:
            raise RuntimeError("A checkout attempt is already in progress")
        if self._state == CheckoutState.IDLE:
            await self.mount()
        if self._state == CheckoutState.BLOCKED and self._result is not None:
            return self._result
        if self._token is None:
            raise RuntimeError("Checkout has no authentication token")

        set_correlation_id()
        try:
            return await self._attempt(self._token, on_payment_success)
        finally:
            # abandoned or crashed attempts must not leave the screen loading
            if self._state in IN_FLIGHT_STATES:
                self._state = CheckoutState.FAILED
            clear_correlation_id()

    async def run(self, on_payment_success: SuccessCallback | None = None) -> CheckoutResult:
        """Mount the screen and, unless blocked, pay."""
        await self.mount()
        return await self.pay(on_payment_success)

    def cancel(self) -> None:
        """Abandon the screen. Nothing is rolled back on the backend."""
        log_checkout_step(
            logger, "cancel", product_id=self.request.product_id, state=self._state.value
        )
        self._navigator.go_back()

    async def aclose(self) -> None:
        """Release the payments API client when this controller was given ownership."""
        if self._owns_payments_api:
            await self._payments_api.aclose()

    async def __aenter__(self) -> "CheckoutFlowController":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _attempt(
        self, token: str, on_payment_success: SuccessCallback | None
    ) -> CheckoutResult:
        session: PaymentSession | None = None
        try:
            self._state = CheckoutState.REQUESTING_SESSION
            session = await self._request_session(token)

            self._state = CheckoutState.PRESENTING_SHEET
            outcome = await self._present_sheet(session)
        except CheckoutError as e:
            return self._fail(e, session)

        if outcome.status == SheetOutcomeStatus.SUCCEEDED:
            return await self._succeed(outcome, session, on_payment_success)
        if outcome.status == SheetOutcomeStatus.CANCELLED:
            return self._fail(CheckoutError(ErrorCode.CANCELLED, outcome.message), session, outcome)
        return self._fail(
            CheckoutError(ErrorCode.SHEET_PRESENTATION_FAILED, outcome.message), session, outcome
        )

    async def _request_session(self, token: str) -> PaymentSession:
        if not self.request.is_complete:
            raise CheckoutError(
                ErrorCode.SESSION_REQUEST_FAILED, "Missing required payment parameters"
            )

        log_checkout_step(
            logger,
            "request_session",
            product_id=self.request.product_id,
            amount_minor=self.request.amount_minor_units,
        )
        try:
            session = await self._payments_api.create_payment_intent(self.request, token)
        except PaymentsApiError as e:
            raise CheckoutError(ErrorCode.SESSION_REQUEST_FAILED, str(e)) from e
        except Exception as e:
            logger.exception("Payment session request failed")
            raise CheckoutError(ErrorCode.SESSION_REQUEST_FAILED) from e

        log_checkout_step(
            logger,
            "session_issued",
            product_id=self.request.product_id,
            session_id=session.session_id,
        )
        return session

    async def _present_sheet(self, session: PaymentSession) -> SheetOutcome:
        config = SheetConfiguration.from_session(
            session,
            merchant_display_name=self._merchant_display_name,
            allows_delayed_payment_methods=self._allows_delayed,
        )

        try:
            await self._payment_sheet.initialize(config)
        except Exception as e:
            logger.exception("Payment sheet initialization failed")
            raise CheckoutError(ErrorCode.SHEET_INIT_FAILED, str(e) or None) from e

        try:
            outcome = await self._payment_sheet.present()
        except Exception as e:
            logger.exception("Payment sheet presentation failed")
            raise CheckoutError(ErrorCode.SHEET_PRESENTATION_FAILED, str(e) or None) from e

        log_checkout_step(
            logger, "sheet_outcome", session_id=session.session_id, outcome=outcome.status.value
        )
        return outcome

    async def _succeed(
        self,
        outcome: SheetOutcome,
        session: PaymentSession,
        on_payment_success: SuccessCallback | None,
    ) -> CheckoutResult:
        self._state = CheckoutState.SUCCEEDED
        self._result = CheckoutResult(
            state=self._state,
            screen=Screen.PAYMENT_SUCCESS,
            outcome=outcome,
            session_id=session.session_id,
        )
        log_checkout_step(
            logger, "complete", session_id=session.session_id, state=self._state.value
        )
        self._navigator.navigate(Screen.PAYMENT_SUCCESS)

        if on_payment_success is not None:
            try:
                maybe_awaitable = on_payment_success()
                if inspect.isawaitable(maybe_awaitable):
                    await maybe_awaitable
            except Exception:
                logger.exception("Payment success callback raised")

        return self._result

    def _fail(
        self,
        error: CheckoutError,
        session: PaymentSession | None,
        outcome: SheetOutcome | None = None,
    ) -> CheckoutResult:
        self._state = CheckoutState.FAILED
        self._result = CheckoutResult(
            state=self._state,
            screen=Screen.PAYMENT_FAILED,
            outcome=outcome,
            error=error.to_info(),
            session_id=session.session_id if session else None,
        )
        log_checkout_step(
            logger,
            "complete",
            session_id=self._result.session_id,
            state=self._state.value,
            error=f"{error.code.value}: {error.message}",
        )
        self._alerter.alert(error.title, error.message)
        self._navigator.navigate(Screen.PAYMENT_FAILED)
        return self._result

    def _block(self, error: CheckoutError, reason: str) -> None:
        self._state = CheckoutState.BLOCKED
        self._result = CheckoutResult(state=self._state, error=error.to_info())
        log_checkout_step(
            logger,
            "acquire_token",
            product_id=self.request.product_id,
            state=self._state.value,
            error=reason,
        )
        self._alerter.alert(error.title, error.message)
        self._navigator.go_back()
