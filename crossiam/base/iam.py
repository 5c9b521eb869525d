"""IAM capability blueprint.

:class:`IAMBlueprint` is the contract every provider adapter implements.
Adapters receive requests that :class:`crossiam.client.IdentityClient`
has already validated, so they only enforce provider-specific field
requirements.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from crossiam.base.exceptions import ErrorKind
from crossiam.base.models import (
    AttachInlinePolicyRequest,
    CreateIdentityRequest,
    DeleteIdentityRequest,
    GetAttachedPoliciesRequest,
    GetIdentityRequest,
    GetInlinePolicyDetailsRequest,
    RemovePolicyRequest,
)


class IAMBlueprint(ABC):
    """Abstract interface for identity and policy management.

    Maps to AWS IAM roles + inline policies and GCP service accounts +
    project IAM bindings.
    """

    provider_id: str

    # --- Identity lifecycle ---

    @abstractmethod
    def do_create_identity(self, request: CreateIdentityRequest) -> str:
        """Create (or converge) an identity and return its identifier.

        Returns:
            Role ARN for AWS, service-account email for GCP.
        """

    @abstractmethod
    def do_get_identity(self, request: GetIdentityRequest) -> str:
        """Return the unique identifier of an existing identity."""

    @abstractmethod
    def do_delete_identity(self, request: DeleteIdentityRequest) -> None:
        """Delete an identity."""

    # --- Policy management ---

    @abstractmethod
    def do_attach_inline_policy(self, request: AttachInlinePolicyRequest) -> None:
        """Attach a canonical policy document to an identity.

        - **AWS**: stored as a named inline role policy
          (``policy_document.name`` is required).
        - **GCP**: each Allow action becomes a role binding for
          ``serviceAccount:<request.resource>`` on the project policy.
        """

    @abstractmethod
    def do_get_inline_policy_details(self, request: GetInlinePolicyDetailsRequest) -> str:
        """Return the JSON document of a named inline policy."""

    @abstractmethod
    def do_get_attached_policies(self, request: GetAttachedPoliciesRequest) -> list[str]:
        """List policy names (AWS) or role names (GCP) held by an identity."""

    @abstractmethod
    def do_remove_policy(self, request: RemovePolicyRequest) -> None:
        """Remove a policy (AWS) or role grant (GCP) from an identity."""

    # --- Errors & lifecycle ---

    @abstractmethod
    def classify_error(self, exc: BaseException) -> ErrorKind:
        """Map a provider-native failure to a canonical kind."""

    @abstractmethod
    def close(self) -> None:
        """Release SDK client handles.  Safe to call more than once."""

    def __enter__(self) -> IAMBlueprint:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
