"""Application settings.

Settings are read from the environment exactly once, validated, and then
passed explicitly to every component that needs them. Nothing else in the
package reads ``os.environ`` directly.

Usage:
    settings = Settings.from_env()
    db = DynamoDBService(table_prefix=settings.dynamodb_table_prefix)
"""

import os
import warnings
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator

INSECURE_DEV_JWT_SECRET = "insecure-dev-secret-change-me"  # noqa: S105 - dev fallback only
DEV_EMAIL_FROM = "Bookings <no-reply@example.com>"

# Values that must be present when ENVIRONMENT=production
PRODUCTION_REQUIRED = ("jwt_secret", "admin_email", "email_from")
PRODUCTION_ENVIRONMENTS = frozenset({"prod", "production"})


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _as_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseModel):
    """Validated runtime configuration."""

    model_config = ConfigDict(frozen=True)

    environment: str = Field(default="dev", description="dev, staging or production")
    aws_region: str | None = Field(default=None, description="AWS region for boto3 clients")
    table_prefix: str | None = Field(
        default=None,
        description="DynamoDB table prefix; defaults to backoffice-{environment}",
    )

    jwt_secret: str | None = None
    jwt_expires_minutes: int = Field(default=24 * 60, ge=1)

    stripe_secret_key: str | None = Field(
        default=None,
        description="Stripe secret key; read from SSM when not set",
    )
    stripe_webhook_secret: str | None = None
    currency: str = Field(default="usd", min_length=3, max_length=3)

    email_from: str | None = None
    email_transport: str = Field(default="ses", pattern="^(ses|log)$", description="ses or log")
    admin_email: str | None = None
    notifications_enabled: bool = True

    frontend_url: str = "http://localhost:3000"
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_required(self) -> "Settings":
        if self.is_production:
            missing = [name for name in PRODUCTION_REQUIRED if not getattr(self, name)]
            if missing:
                raise ValueError(
                    "Missing required settings for production: " + ", ".join(sorted(missing))
                )
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in PRODUCTION_ENVIRONMENTS

    @property
    def dynamodb_table_prefix(self) -> str:
        return self.table_prefix or f"backoffice-{self.environment}"

    @property
    def signing_secret(self) -> str:
        """Secret used to sign access tokens.

        Falls back to an insecure development secret outside production;
        production settings never validate without ``jwt_secret``.
        """
        if self.jwt_secret:
            return self.jwt_secret
        warnings.warn(
            "JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION",
            RuntimeWarning,
            stacklevel=2,
        )
        return INSECURE_DEV_JWT_SECRET

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Validated Settings instance.

        Raises:
            pydantic.ValidationError: If a value is malformed or a
                production-only requirement is missing.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {
            "environment": env.get("ENVIRONMENT", "dev"),
            "aws_region": env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION"),
            "table_prefix": env.get("DYNAMODB_TABLE_PREFIX"),
            "jwt_secret": env.get("JWT_SECRET"),
            "stripe_secret_key": env.get("STRIPE_SECRET_KEY"),
            "stripe_webhook_secret": env.get("STRIPE_WEBHOOK_SECRET"),
            "admin_email": env.get("ADMIN_EMAIL"),
            "notifications_enabled": _as_bool(env.get("NOTIFICATIONS_ENABLED"), True),
            "cors_origins": _as_list(
                env.get("CORS_ORIGINS"),
                ["http://localhost:3000", "http://127.0.0.1:3000"],
            ),
        }
        if env.get("JWT_EXPIRES_MINUTES"):
            values["jwt_expires_minutes"] = env["JWT_EXPIRES_MINUTES"]
        if env.get("CURRENCY"):
            values["currency"] = env["CURRENCY"].lower()
        if env.get("EMAIL_TRANSPORT"):
            values["email_transport"] = env["EMAIL_TRANSPORT"].lower()
        if env.get("EMAIL_FROM"):
            values["email_from"] = env["EMAIL_FROM"]
        elif env.get("ENVIRONMENT", "dev").lower() not in PRODUCTION_ENVIRONMENTS:
            values["email_from"] = DEV_EMAIL_FROM
        if env.get("FRONTEND_URL"):
            values["frontend_url"] = env["FRONTEND_URL"]
        if env.get("LOG_LEVEL"):
            values["log_level"] = env["LOG_LEVEL"].upper()
        return cls.model_validate(values)
