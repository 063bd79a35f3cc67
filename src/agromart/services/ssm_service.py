"""SSM Parameter Store lookup for checkout secrets.

The Stripe publishable key is normally supplied through the environment;
deployments that keep it in Parameter Store resolve it from
``/agromart/{environment}/stripe/publishable_key``.
"""

import logging
from functools import lru_cache
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

PARAMETER_PREFIX = "/agromart"


class SSMServiceError(Exception):
    """Raised when SSM parameter retrieval fails."""


def publishable_key_parameter(environment: str) -> str:
    """Parameter path holding the Stripe publishable key for an environment."""
    return f"{PARAMETER_PREFIX}/{environment}/stripe/publishable_key"


class SSMService:
    """Cached reader for SecureString parameters.

    Usage:
        ssm = SSMService()
        key = ssm.get_parameter(publishable_key_parameter("dev"))
    """

    def __init__(self, client: Any | None = None, region: str | None = None) -> None:
        self._client = client or boto3.client("ssm", region_name=region)
        self._cache: dict[str, str] = {}

    def get_parameter(self, name: str, *, use_cache: bool = True) -> str:
        """Retrieve a decrypted parameter value.

        Args:
            name: Full parameter path
            use_cache: Whether to use the cached value if available

        Returns:
            The decrypted parameter value.

        Raises:
            SSMServiceError: If the parameter cannot be retrieved.
        """
        if use_cache and name in self._cache:
            logger.debug("SSM cache hit for %s", name)
            return self._cache[name]

        try:
            logger.info("Fetching SSM parameter: %s", name)
            response = self._client.get_parameter(Name=name, WithDecryption=True)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "ParameterNotFound":
                raise SSMServiceError(f"SSM parameter not found: {name}") from e
            if error_code == "AccessDeniedException":
                raise SSMServiceError(
                    f"Access denied to SSM parameter: {name}. "
                    "Check IAM permissions for ssm:GetParameter."
                ) from e
            raise SSMServiceError(f"Failed to retrieve SSM parameter {name}: {e}") from e
        except BotoCoreError as e:
            raise SSMServiceError(f"Failed to retrieve SSM parameter {name}: {e}") from e

        value = response["Parameter"]["Value"]
        self._cache[name] = value
        return value

    def get_publishable_key(self, environment: str) -> str:
        """Stripe publishable key for the given environment."""
        return self.get_parameter(publishable_key_parameter(environment))

    def clear_cache(self) -> None:
        """Drop all cached parameters."""
        self._cache.clear()


@lru_cache(maxsize=1)
def get_ssm_service() -> SSMService:
    """Get the shared SSMService instance."""
    return SSMService()
