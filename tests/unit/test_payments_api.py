"""Unit tests for PaymentsApiClient.

All HTTP traffic goes through httpx.MockTransport.
"""

import json
from decimal import Decimal

import httpx
import pytest

from agromart.models import PaymentRequest, PaymentSession
from agromart.services.payments_api import PaymentsApiClient, PaymentsApiError

from tests.conftest import TEST_API_URL, make_session_payload


class TestCreatePaymentIntent:
    """Session creation happy path."""

    @pytest.mark.asyncio
    async def test_returns_session_from_response(self, api_factory, payment_request):
        api = api_factory(lambda request: httpx.Response(200, json=make_session_payload(7)))

        session = await api.create_payment_intent(payment_request, "tok")

        assert isinstance(session, PaymentSession)
        assert session.client_secret == "pi_test_7_secret_s7"
        assert session.ephemeral_key == "ek_test_7"
        assert session.customer_id == "cus_test_farmer"

    @pytest.mark.asyncio
    async def test_each_call_yields_new_session(self, api_factory, payment_request):
        api = api_factory(lambda request: httpx.Response(200, json=make_session_payload()))

        first = await api.create_payment_intent(payment_request, "tok")
        second = await api.create_payment_intent(payment_request, "tok")

        assert first.session_id != second.session_id

    @pytest.mark.asyncio
    async def test_accepts_any_2xx(self, api_factory, payment_request):
        api = api_factory(lambda request: httpx.Response(201, json=make_session_payload()))

        session = await api.create_payment_intent(payment_request, "tok")

        assert session.customer_id == "cus_test_farmer"

    @pytest.mark.asyncio
    async def test_amount_is_sent_in_minor_units(self, api_factory, recorded_requests):
        api = api_factory(lambda request: httpx.Response(200, json=make_session_payload()))
        request = PaymentRequest(product_id="p9", amount=Decimal("3.335"), product_name="Okra")

        await api.create_payment_intent(request, "tok")

        assert json.loads(recorded_requests[0].content) == {"productId": "p9", "amount": 334}

    def test_base_url_trailing_slash_is_trimmed(self):
        api = PaymentsApiClient(f"{TEST_API_URL}/")

        assert api.create_payment_intent_url == f"{TEST_API_URL}/api/payments/create-payment-intent"


class TestCreatePaymentIntentErrors:
    """Everything that must surface as PaymentsApiError."""

    @pytest.mark.asyncio
    async def test_non_2xx_includes_status_and_body(self, api_factory, payment_request):
        api = api_factory(lambda request: httpx.Response(401, text='{"error":"Invalid token"}'))

        with pytest.raises(PaymentsApiError) as exc_info:
            await api.create_payment_intent(payment_request, "tok")

        assert exc_info.value.status_code == 401
        assert str(exc_info.value) == 'Server responded with status 401: {"error":"Invalid token"}'

    @pytest.mark.asyncio
    async def test_unparseable_body(self, api_factory, payment_request):
        api = api_factory(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(PaymentsApiError, match="Invalid response format from server"):
            await api.create_payment_intent(payment_request, "tok")

    @pytest.mark.asyncio
    async def test_non_object_body(self, api_factory, payment_request):
        api = api_factory(lambda request: httpx.Response(200, json=["pi_123"]))

        with pytest.raises(PaymentsApiError, match="Invalid response format from server"):
            await api.create_payment_intent(payment_request, "tok")

    @pytest.mark.parametrize(
        "body",
        [
            {"paymentIntent": "pi_1_secret_x", "ephemeralKey": "ek_1"},
            {"paymentIntent": "", "ephemeralKey": "ek_1", "customer": "cus_1"},
            {"paymentIntent": "pi_1_secret_x", "ephemeralKey": None, "customer": "cus_1"},
            {"paymentIntent": "pi_1_secret_x", "ephemeralKey": "ek_1", "customer": 42},
        ],
    )
    @pytest.mark.asyncio
    async def test_missing_or_empty_fields(self, api_factory, payment_request, body):
        api = api_factory(lambda request: httpx.Response(200, json=body))

        with pytest.raises(
            PaymentsApiError, match="Incomplete payment details received from server"
        ):
            await api.create_payment_intent(payment_request, "tok")

    @pytest.mark.asyncio
    async def test_transport_error(self, api_factory, payment_request):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        api = api_factory(handler)

        with pytest.raises(PaymentsApiError) as exc_info:
            await api.create_payment_intent(payment_request, "tok")

        assert exc_info.value.status_code is None
        assert "Unable to reach the payment server" in str(exc_info.value)


class TestClientLifecycle:
    """Ownership of the underlying AsyncClient."""

    @pytest.mark.asyncio
    async def test_context_manager_closes_owned_client(self):
        async with PaymentsApiClient(TEST_API_URL) as api:
            inner = api._client

        assert inner.is_closed

    @pytest.mark.asyncio
    async def test_injected_client_is_left_open(self):
        shared = httpx.AsyncClient()
        try:
            async with PaymentsApiClient(TEST_API_URL, client=shared):
                pass
            assert not shared.is_closed
        finally:
            await shared.aclose()
