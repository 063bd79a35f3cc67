"""Pytest configuration and fixtures for the AgroMart checkout tests.

This module provides reusable fixtures for testing:
- Fake AWS credentials for moto
- Sample payment requests and backend session payloads
- Test doubles for the token provider, navigator, alerter and payment sheet
"""

import os
from decimal import Decimal
from typing import Any, Callable, Generator
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from agromart.models import PaymentRequest, SheetOutcome
from agromart.services.payments_api import PaymentsApiClient

# === Environment Setup ===

os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

TEST_API_URL = "https://api.test.agromart"
TEST_TOKEN = "jwt-user-token-abc"


# === Sample Data Fixtures ===


@pytest.fixture
def payment_request() -> PaymentRequest:
    """Tomatoes for 25.00."""
    return PaymentRequest(product_id="p1", amount=Decimal("25.00"), product_name="Tomatoes")


def make_session_payload(n: int = 1) -> dict[str, str]:
    """Backend create-payment-intent response body, unique per n."""
    return {
        "paymentIntent": f"pi_test_{n}_secret_s{n}",
        "ephemeralKey": f"ek_test_{n}",
        "customer": "cus_test_farmer",
    }


@pytest.fixture
def session_payload() -> dict[str, str]:
    return make_session_payload()


# === HTTP Fixtures ===


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def api_factory(
    recorded_requests: list[httpx.Request],
) -> Callable[[Callable[[httpx.Request], httpx.Response]], PaymentsApiClient]:
    """Build a PaymentsApiClient whose transport records requests and answers with a handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> PaymentsApiClient:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        return PaymentsApiClient(TEST_API_URL, transport=httpx.MockTransport(recording_handler))

    return factory


@pytest.fixture
def fresh_session_api(api_factory: Any) -> PaymentsApiClient:
    """API that issues a new, distinct session on every call."""
    counter = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        counter["n"] += 1
        return httpx.Response(200, json=make_session_payload(counter["n"]))

    return api_factory(handler)


# === Collaborator Doubles ===


@pytest.fixture
def token_provider() -> MagicMock:
    provider = MagicMock()
    provider.get_token = AsyncMock(return_value=TEST_TOKEN)
    return provider


@pytest.fixture
def navigator() -> MagicMock:
    return MagicMock()


@pytest.fixture
def alerter() -> MagicMock:
    return MagicMock()


@pytest.fixture
def payment_sheet() -> Generator[MagicMock, None, None]:
    """Sheet double that initializes fine and reports success."""
    sheet = MagicMock()
    sheet.initialize = AsyncMock(return_value=None)
    sheet.present = AsyncMock(return_value=SheetOutcome.succeeded())
    yield sheet
