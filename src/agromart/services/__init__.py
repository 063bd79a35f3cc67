"""Checkout services for AgroMart."""

from .checkout_flow import CheckoutFlowController
from .payment_sheet import PaymentSheet, PaymentSheetError, SheetHost, StripePaymentSheet
from .payments_api import PaymentsApiClient, PaymentsApiError
from .ssm_service import SSMService, SSMServiceError, get_ssm_service
from .token_store import (
    USER_TOKEN_KEY,
    FileTokenStore,
    InMemoryTokenStore,
    StoredTokenProvider,
    TokenProvider,
    TokenStoreError,
)
from .ui import Alerter, LoggingAlerter, Navigator

__all__ = [
    "CheckoutFlowController",
    "PaymentSheet",
    "PaymentSheetError",
    "SheetHost",
    "StripePaymentSheet",
    "PaymentsApiClient",
    "PaymentsApiError",
    "SSMService",
    "SSMServiceError",
    "get_ssm_service",
    "USER_TOKEN_KEY",
    "FileTokenStore",
    "InMemoryTokenStore",
    "StoredTokenProvider",
    "TokenProvider",
    "TokenStoreError",
    "Alerter",
    "LoggingAlerter",
    "Navigator",
]
