"""SSM Parameter Store access for gateway secrets.

API keys and the webhook signing secret live under
``/boglepay/<environment>/<name>`` as SecureString parameters.
"""

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

PARAMETER_ROOT = "/boglepay"


class SSMServiceError(Exception):
    """Raised when SSM parameter retrieval fails."""

    pass


class SSMService:
    """Reads gateway secrets from AWS SSM Parameter Store.

    Values are cached per instance; build a new instance (or call
    ``clear_cache``) to pick up rotated secrets.

    Usage:
        ssm = SSMService(environment="prod")
        secret = ssm.get_secret("webhook_secret", default="")
    """

    def __init__(self, environment: str = "dev", client: object | None = None) -> None:
        """Initialize the SSM client.

        Args:
            environment: Environment segment of the parameter path.
            client: Optional pre-built boto3 SSM client.
        """
        self._environment = environment
        self._client = client or boto3.client("ssm")
        self._cache: dict[str, str] = {}

    def parameter_name(self, name: str) -> str:
        """Full parameter path for a secret name."""
        return f"{PARAMETER_ROOT}/{self._environment}/{name}"

    def get_secret(self, name: str, *, default: str | None = None) -> str:
        """Retrieve a decrypted secret.

        Args:
            name: Secret name, e.g. "webhook_secret" or "live_api_key".
            default: Returned when the parameter does not exist. When None,
                a missing parameter raises.

        Returns:
            The decrypted parameter value.

        Raises:
            SSMServiceError: If the parameter cannot be retrieved.
        """
        path = self.parameter_name(name)
        if path in self._cache:
            logger.debug("SSM cache hit for %s", path)
            return self._cache[path]

        try:
            logger.info("Fetching SSM parameter: %s", path)
            response = self._client.get_parameter(Name=path, WithDecryption=True)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "ParameterNotFound":
                if default is not None:
                    logger.debug("SSM parameter %s not found, using default", path)
                    return default
                raise SSMServiceError(f"SSM parameter not found: {path}") from e
            if error_code == "AccessDeniedException":
                raise SSMServiceError(
                    f"Access denied to SSM parameter: {path}. "
                    "Check IAM permissions for ssm:GetParameter."
                ) from e
            raise SSMServiceError(f"Failed to retrieve SSM parameter {path}: {e}") from e
        except BotoCoreError as e:
            raise SSMServiceError(f"Could not reach SSM for parameter {path}: {e}") from e

        value: str = response["Parameter"]["Value"]
        self._cache[path] = value
        return value

    def clear_cache(self) -> None:
        """Drop cached values so the next read goes to SSM."""
        self._cache.clear()
        logger.info("SSM parameter cache cleared")
