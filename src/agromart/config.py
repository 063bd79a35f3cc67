"""Checkout configuration loaded from environment variables."""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from agromart.services.ssm_service import SSMService, get_ssm_service

DEFAULT_API_URL = "https://agri-connect-backend2.vercel.app"
DEFAULT_TOKEN_STORE_PATH = Path.home() / ".agromart" / "storage.json"


class CheckoutSettings(BaseModel):
    """Settings for the checkout flow and its collaborators.

    Usage:
        settings = CheckoutSettings.from_env()
        client = PaymentsApiClient(settings.api_url, timeout=settings.http_timeout)
    """

    model_config = ConfigDict(frozen=True)

    api_url: str = Field(default=DEFAULT_API_URL, description="Marketplace backend base URL")
    environment: str = Field(default="dev", description="Deployment environment (dev, prod)")
    merchant_display_name: str = Field(default="My Store")
    allows_delayed_payment_methods: bool = True
    token_store_path: Path = Field(default=DEFAULT_TOKEN_STORE_PATH)
    http_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    stripe_publishable_key: str | None = Field(
        default=None,
        description="Stripe publishable key (pk_xxx); read from SSM when unset",
    )

    @classmethod
    def from_env(cls) -> "CheckoutSettings":
        """Build settings from AGROMART_* / ENVIRONMENT / STRIPE_* variables."""
        env = os.environ
        return cls(
            api_url=env.get("AGROMART_API_URL", DEFAULT_API_URL).rstrip("/"),
            environment=env.get("ENVIRONMENT", "dev"),
            merchant_display_name=env.get("AGROMART_MERCHANT_NAME", "My Store"),
            token_store_path=Path(
                env.get("AGROMART_TOKEN_STORE_PATH", str(DEFAULT_TOKEN_STORE_PATH))
            ).expanduser(),
            http_timeout=float(env.get("AGROMART_HTTP_TIMEOUT", "30")),
            stripe_publishable_key=env.get("STRIPE_PUBLISHABLE_KEY") or None,
        )

    def resolve_publishable_key(self, ssm: SSMService | None = None) -> str:
        """Return the configured publishable key, falling back to SSM.

        Raises:
            SSMServiceError: If the key is not configured and SSM lookup fails.
        """
        if self.stripe_publishable_key:
            return self.stripe_publishable_key
        return (ssm or get_ssm_service()).get_publishable_key(self.environment)
