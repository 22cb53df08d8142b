"""Parameter Store access for secrets that are not passed in the environment.

Stripe keys live under ``/backoffice/{environment}/stripe/`` as SecureString
parameters; the API reads them once per process.
"""

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

# SSM error code -> message template
_ERROR_MESSAGES = {
    "ParameterNotFound": "SSM parameter not found: {name}",
    "AccessDeniedException": (
        "Access denied to SSM parameter: {name}. Check IAM permissions for ssm:GetParameter."
    ),
}


class SSMServiceError(Exception):
    """Raised when a parameter cannot be read."""


class SSMService:
    """Decrypting, caching reader for SSM parameters.

    Usage:
        ssm = SSMService(region_name="eu-west-1")
        key = ssm.get_parameter("/backoffice/dev/stripe/secret_key")
    """

    def __init__(self, region_name: str | None = None) -> None:
        self._client = boto3.client("ssm", region_name=region_name)
        self._values: dict[str, str] = {}

    def get_parameter(self, name: str, *, use_cache: bool = True) -> str:
        """Read and decrypt one parameter.

        Args:
            name: Full parameter path
            use_cache: Return the value read earlier in this process, if any

        Returns:
            The decrypted value

        Raises:
            SSMServiceError: If the parameter is missing, not readable, or
                the call fails.
        """
        if use_cache and name in self._values:
            return self._values[name]

        logger.info("Reading SSM parameter %s", name)
        try:
            response = self._client.get_parameter(Name=name, WithDecryption=True)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            template = _ERROR_MESSAGES.get(code, "Failed to read SSM parameter {name}: {error}")
            raise SSMServiceError(template.format(name=name, error=e)) from e
        except BotoCoreError as e:
            raise SSMServiceError(f"Failed to read SSM parameter {name}: {e}") from e

        value: str = response["Parameter"]["Value"]
        self._values[name] = value
        return value

    def clear_cache(self) -> None:
        self._values.clear()
