"""HTTP client for the marketplace payments API.

Requests one payment session per checkout attempt:

    POST {base_url}/api/payments/create-payment-intent
    Authorization: Bearer <token>
    {"productId": "p1", "amount": 2500}

    200 {"paymentIntent": "pi_..._secret_...", "ephemeralKey": "ek_...", "customer": "cus_..."}
"""

import logging
from types import TracebackType
from typing import Any

import httpx

from agromart.models import PaymentRequest, PaymentSession

logger = logging.getLogger(__name__)

SESSION_FIELDS = ("paymentIntent", "ephemeralKey", "customer")


class PaymentsApiError(Exception):
    """Raised when the payment session cannot be obtained."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize with message and optional HTTP status.

        Args:
            message: Human-readable error message, safe to show to the user.
            status_code: HTTP status code when the server answered.
        """
        super().__init__(message)
        self.status_code = status_code


class PaymentsApiClient:
    """Async client for the payments endpoints of the marketplace backend.

    Usage:
        async with PaymentsApiClient("https://api.example.com") as api:
            session = await api.create_payment_intent(request, token)
    """

    CREATE_PAYMENT_INTENT_PATH = "/api/payments/create-payment-intent"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Backend base URL, without trailing slash.
            timeout: Request timeout in seconds (ignored when client is given).
            client: Existing AsyncClient to use; the caller keeps ownership.
            transport: Transport for a client created here (tests use MockTransport).
        """
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def create_payment_intent_url(self) -> str:
        return f"{self._base_url}{self.CREATE_PAYMENT_INTENT_PATH}"

    async def create_payment_intent(self, request: PaymentRequest, token: str) -> PaymentSession:
        """Ask the backend for fresh payment session credentials.

        Args:
            request: What is being bought.
            token: Bearer token of the logged-in user.

        Returns:
            A new PaymentSession. Every call yields a new session.

        Raises:
            PaymentsApiError: On transport failure, non-2xx status, unparseable
                body or a missing session field.
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
        }

        try:
            response = await self._client.post(
                self.create_payment_intent_url,
                json=request.to_payload(),
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.warning("Payment session request failed: %s", e)
            raise PaymentsApiError(f"Unable to reach the payment server: {e}") from e

        if not response.is_success:
            raise PaymentsApiError(
                f"Server responded with status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise PaymentsApiError(
                "Invalid response format from server", status_code=response.status_code
            ) from e

        return self._session_from_payload(payload, response.status_code)

    @staticmethod
    def _session_from_payload(payload: Any, status_code: int) -> PaymentSession:
        if not isinstance(payload, dict):
            raise PaymentsApiError("Invalid response format from server", status_code=status_code)

        values = {name: payload.get(name) for name in SESSION_FIELDS}
        if not all(isinstance(v, str) and v for v in values.values()):
            missing = [name for name, v in values.items() if not (isinstance(v, str) and v)]
            logger.warning("Payment session response missing fields: %s", ", ".join(missing))
            raise PaymentsApiError(
                "Incomplete payment details received from server", status_code=status_code
            )

        return PaymentSession(
            client_secret=values["paymentIntent"],
            ephemeral_key=values["ephemeralKey"],
            customer_id=values["customer"],
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "PaymentsApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
