"""Identity client factory.

Provides :func:`identity_factory`, the single entry-point for creating an
:class:`~crossiam.client.IdentityClient`.  The provider is chosen by its
identifier, and the config dict is validated against that provider's
pydantic model before the adapter builds its SDK clients.
"""

from typing import Any

from crossiam.base import IAMBlueprint, existing_cloud_providers
from crossiam.base.config import validate_config
from crossiam.client import IdentityClient
from crossiam.aws.iam import IAM as AwsIAM
from crossiam.gcp.iam import IAM as GcpIAM


# cloud_provider -> adapter class
ADAPTER_REGISTRY: dict[str, type[IAMBlueprint]] = {
    "aws": AwsIAM,
    "gcp": GcpIAM,
}


def identity_factory(
    cloud_provider: existing_cloud_providers,
    config: dict[str, Any] | None = None,
) -> IdentityClient:
    """
    Create an identity client for the given cloud provider.
    Args:
        cloud_provider: The cloud provider (e.g., 'aws', 'gcp').
        config: Configuration dictionary (region, endpoint, credentials).
    Returns:
        An IdentityClient bound to the provider's adapter.
    Raises:
        ValueError: If the cloud provider is not supported.
        pydantic.ValidationError: If the config is invalid.
    """
    adapter_class = ADAPTER_REGISTRY.get(cloud_provider)
    if adapter_class is None:
        raise ValueError(f"Unsupported cloud provider: {cloud_provider}")

    config_obj = validate_config(cloud_provider, config or {})
    return IdentityClient(adapter_class(config_obj))  # type: ignore[call-arg]
