"""Provider-blind identity client.

:class:`IdentityClient` is the public capability surface.  It validates
every call, builds the typed request, delegates to the adapter it holds
and turns any adapter failure into a canonical
:class:`~crossiam.base.exceptions.CrossIAMError`.  It performs no I/O of
its own.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, TypeVar

from pydantic import BaseModel, ValidationError

from crossiam.base.errors import translate_error
from crossiam.base.exceptions import InvalidArgumentError
from crossiam.base.iam import IAMBlueprint
from crossiam.base.logger import iam_logger
from crossiam.base.models import (
    AttachInlinePolicyRequest,
    CreateIdentityRequest,
    CreateOptions,
    DeleteIdentityRequest,
    GetAttachedPoliciesRequest,
    GetIdentityRequest,
    GetInlinePolicyDetailsRequest,
    Present,
    RemovePolicyRequest,
    TrustConfiguration,
    Unset,
)


def _require(value: str | None, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{field} is required")
    return value


def _require_present(holder: Any, field: str) -> Any:
    """Unwrap a :class:`Present` holder; ``UNSET`` or ``None`` is an error."""
    if holder is None or isinstance(holder, Unset):
        raise InvalidArgumentError(f"{field} cannot be unset")
    if not isinstance(holder, Present):
        raise InvalidArgumentError(f"{field} must be wrapped in Present(...)")
    return holder.value


RequestT = TypeVar("RequestT", bound=BaseModel)


def _build(model: type[RequestT], **fields: Any) -> RequestT:
    """Construct a request model; invalid field values are an ``InvalidArgumentError``."""
    try:
        return model(**fields)
    except ValidationError as e:
        raise InvalidArgumentError(f"invalid {model.__name__}: {e}") from e


class IdentityClient:
    """Identity and policy lifecycle across cloud providers.

    Example::

        from crossiam import identity_factory, Present, TrustConfiguration

        with identity_factory("aws", {"region_name": "us-east-1"}) as iam:
            arn = iam.create_identity(
                "deployer", "CI deploy role", "123456789012", "us-east-1",
                Present(TrustConfiguration(trusted_principals=["ec2.amazonaws.com"])),
                Present(),
            )
    """

    def __init__(self, adapter: IAMBlueprint) -> None:
        self._adapter = adapter

    @property
    def provider_id(self) -> str:
        return self._adapter.provider_id

    def close(self) -> None:
        self._adapter.close()

    def __enter__(self) -> IdentityClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @contextmanager
    def _call(
        self, operation: str, identity: str | None = None, tenant: str | None = None
    ) -> Iterator[None]:
        context = {
            "provider": self.provider_id,
            "operation": operation,
            "identity": identity,
            "tenant": tenant,
        }
        iam_logger.debug(f"{operation} started", **context)
        try:
            yield
        except Exception as e:
            err = translate_error(e, self._adapter.classify_error, f"{operation} failed")
            iam_logger.error(
                f"{operation} failed: {err}", error_kind=err.error_kind.value, **context
            )
            if err is e:
                raise
            raise err from e

    # --- Identity lifecycle ---

    def create_identity(
        self,
        identity_name: str,
        description: str | None,
        tenant_id: str,
        region: str | None,
        trust_config: Present[TrustConfiguration] | Unset,
        options: Present[CreateOptions] | Unset,
    ) -> str:
        """Create an identity, or converge an existing one to the request.

        Args:
            identity_name: Role name (AWS) or service-account id (GCP).
            description: Free-text description.
            tenant_id: AWS account ID or GCP project.
            region: Target region.
            trust_config: ``Present(TrustConfiguration(...))`` or ``Present()``.
            options: ``Present(CreateOptions(...))`` or ``Present()``.

        Returns:
            Role ARN (AWS) or service-account email (GCP).

        Raises:
            InvalidArgumentError: If a name is blank or a holder is ``UNSET``.
        """
        _require(identity_name, "identity_name")
        _require(tenant_id, "tenant_id")
        request = _build(
            CreateIdentityRequest,
            identity_name=identity_name,
            description=description,
            tenant_id=tenant_id,
            region=region,
            trust_config=_require_present(trust_config, "trust_config"),
            options=_require_present(options, "options"),
        )
        with self._call("create_identity", identity_name, tenant_id):
            return self._adapter.do_create_identity(request)

    def get_identity(self, identity_name: str, tenant_id: str, region: str | None = None) -> str:
        """Return the provider identifier of an identity."""
        request = _build(
            GetIdentityRequest,
            identity_name=_require(identity_name, "identity_name"),
            tenant_id=_require(tenant_id, "tenant_id"),
            region=region,
        )
        with self._call("get_identity", identity_name, tenant_id):
            return self._adapter.do_get_identity(request)

    def delete_identity(self, identity_name: str, tenant_id: str, region: str | None = None) -> None:
        request = _build(
            DeleteIdentityRequest,
            identity_name=_require(identity_name, "identity_name"),
            tenant_id=_require(tenant_id, "tenant_id"),
            region=region,
        )
        with self._call("delete_identity", identity_name, tenant_id):
            self._adapter.do_delete_identity(request)

    # --- Policy management ---

    def attach_inline_policy(self, request: AttachInlinePolicyRequest) -> None:
        """Attach ``request.policy_document`` to ``request.identity_name``.

        Raises:
            InvalidArgumentError: If the request, identity name or policy
                document is missing.
        """
        if request is None:
            raise InvalidArgumentError("request cannot be null")
        _require(request.identity_name, "identity_name")
        if request.policy_document is None:
            raise InvalidArgumentError("policy_document cannot be null")
        with self._call("attach_inline_policy", request.identity_name, request.tenant_id):
            self._adapter.do_attach_inline_policy(request)

    def get_inline_policy_details(self, request: GetInlinePolicyDetailsRequest) -> str:
        """Return an inline policy document as JSON."""
        if request is None:
            raise InvalidArgumentError("request cannot be null")
        with self._call("get_inline_policy_details", request.identity_name, request.tenant_id):
            return self._adapter.do_get_inline_policy_details(request)

    def get_attached_policies(self, request: GetAttachedPoliciesRequest) -> list[str]:
        if request is None:
            raise InvalidArgumentError("request cannot be null")
        with self._call("get_attached_policies", request.identity_name, request.tenant_id):
            return self._adapter.do_get_attached_policies(request)

    def remove_policy(
        self, identity_name: str, policy_name: str, tenant_id: str, region: str | None = None
    ) -> None:
        request = _build(
            RemovePolicyRequest,
            identity_name=_require(identity_name, "identity_name"),
            policy_name=_require(policy_name, "policy_name"),
            tenant_id=_require(tenant_id, "tenant_id"),
            region=region,
        )
        with self._call("remove_policy", identity_name, tenant_id):
            self._adapter.do_remove_policy(request)
