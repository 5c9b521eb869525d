"""
Pydantic configuration models for provider adapters.

A config model plays the role of the per-provider builder: it carries the
region, an optional endpoint override and an optional credentials
override, and is validated before any SDK client is created.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal
from pydantic import BaseModel, ConfigDict, Field, model_validator

# IAM is global per partition; any region of the partition will do.
AWS_DEFAULT_IAM_REGION = "us-east-1"


class CredentialsOverrider(BaseModel):
    """Alternate credential source handed to the provider SDK.

    - ``session``: use the given short-lived credentials as-is
      (``access_key_id`` / ``secret_access_key`` / ``session_token`` for
      AWS, ``session_token`` as an OAuth access token for GCP).
    - ``assume_role``: assume ``role`` (AWS role ARN) or impersonate it
      (GCP service-account email) starting from the ambient credentials.
    """

    model_config = ConfigDict(extra="forbid")

    type: Literal["session", "assume_role"]
    access_key_id: str | None = None
    secret_access_key: str | None = None
    session_token: str | None = None
    role: str | None = None
    session_name: str = Field(default="crossiam", description="STS session name")
    duration_seconds: int = Field(default=3600, gt=0)

    @model_validator(mode="after")
    def check_required_fields(self) -> CredentialsOverrider:
        if self.type == "assume_role" and not self.role:
            raise ValueError("credentials_overrider of type 'assume_role' requires 'role'")
        has_keys = bool(self.access_key_id and self.secret_access_key)
        if self.type == "session" and not (has_keys or self.session_token):
            raise ValueError(
                "credentials_overrider of type 'session' requires access keys or a session_token"
            )
        return self


class AWSConfig(BaseModel):
    """Configuration for the AWS adapter.

    Credentials are resolved in order:
    1. ``credentials_overrider``, if set.
    2. Explicit values passed in the config dict.
    3. Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY,
       AWS_SESSION_TOKEN).
    4. If none is set, fields are left as None so boto3 can fall back to its
       own credential chain (instance metadata, ~/.aws/credentials, etc.).
    """

    model_config = ConfigDict(extra="forbid")

    aws_access_key_id: str | None = Field(default=None, description="AWS access key ID")
    aws_secret_access_key: str | None = Field(default=None, description="AWS secret access key")
    aws_session_token: str | None = Field(default=None, description="AWS session token")
    region_name: str | None = Field(default=None, description="AWS region (e.g. 'us-east-1')")
    endpoint_url: str | None = Field(default=None, description="IAM endpoint override")
    credentials_overrider: CredentialsOverrider | None = None

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fall back to environment variables for missing credentials."""
        env_map = {
            "aws_access_key_id": "AWS_ACCESS_KEY_ID",
            "aws_secret_access_key": "AWS_SECRET_ACCESS_KEY",
            "aws_session_token": "AWS_SESSION_TOKEN",
            "region_name": "AWS_DEFAULT_REGION",
        }
        for field, env_var in env_map.items():
            if not values.get(field):
                values[field] = os.environ.get(env_var)
        if not values.get("region_name"):
            values["region_name"] = AWS_DEFAULT_IAM_REGION
        return values


class GCPConfig(BaseModel):
    """Configuration for the GCP adapter.

    The target project is not part of the config: every operation names
    its project through ``tenant_id``.

    Credentials are resolved in order:
    1. ``credentials_overrider``, if set.
    2. An explicit ``credentials`` object.
    3. ``credentials_path`` or the GOOGLE_APPLICATION_CREDENTIALS variable.
    4. Otherwise Application Default Credentials (ADC).
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    region: str | None = Field(default=None, description="GCP region (unused by IAM)")
    endpoint: str | None = Field(default=None, description="API endpoint override")
    credentials: Any | None = Field(default=None, description="GCP credentials object")
    credentials_path: str | None = Field(
        default=None, description="Path to service account JSON key file"
    )
    credentials_overrider: CredentialsOverrider | None = None

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fall back to environment variables for missing config."""
        if not values.get("credentials_path"):
            values["credentials_path"] = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
        return values

    @model_validator(mode="after")
    def load_credentials(self) -> GCPConfig:
        """Load credentials from ``credentials_path`` if no object was given."""
        if self.credentials is None and self.credentials_path:
            path = Path(self.credentials_path)
            if not path.exists():
                raise ValueError(f"Credentials file not found: {self.credentials_path}")
            from google.oauth2 import service_account  # lazy import

            self.credentials = service_account.Credentials.from_service_account_file(
                str(path)
            )
        return self


# Map provider names to their config models for dynamic validation
CONFIG_REGISTRY: dict[str, type[BaseModel]] = {
    "aws": AWSConfig,
    "gcp": GCPConfig,
}


def validate_config(cloud_provider: str, config: dict) -> BaseModel:
    """Validate and return a typed config model for the given provider.

    Args:
        cloud_provider: The cloud provider name (e.g. 'aws', 'gcp').
        config: Raw configuration dictionary.

    Returns:
        A validated Pydantic config model.

    Raises:
        ValueError: If the provider is unknown.
        pydantic.ValidationError: If the config is invalid.
    """
    model = CONFIG_REGISTRY.get(cloud_provider)
    if model is None:
        raise ValueError(f"No config model registered for provider: {cloud_provider}")
    return model(**config)


__all__ = [
    "AWS_DEFAULT_IAM_REGION",
    "CredentialsOverrider",
    "AWSConfig",
    "GCPConfig",
    "CONFIG_REGISTRY",
    "validate_config",
]
