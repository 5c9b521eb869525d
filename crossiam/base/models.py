"""
Canonical, provider-neutral data model.

Policy documents, trust configuration, create options and the typed
requests handed to adapters.  All models are frozen pydantic models; no
provider SDK type appears here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


# ── Present / Unset holder ───────────────────────────────────────────
class Unset:
    """Sentinel for a holder argument that was never supplied."""

    _instance: Unset | None = None

    def __new__(cls) -> Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = Unset()


@dataclass(frozen=True)
class Present(Generic[T]):
    """A supplied holder whose contents may still be empty.

    ``Present()`` is distinct from :data:`UNSET`: the caller made an explicit
    choice to pass nothing.
    """

    value: T | None = None

    @property
    def is_empty(self) -> bool:
        return self.value is None


# ── Policy model ──────────────────────────────────────────────────────
class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Effect(str, Enum):
    ALLOW = "Allow"
    DENY = "Deny"


class Statement(_Frozen):
    """One grant or denial inside a :class:`PolicyDocument`.

    For GCP, each entry of ``actions`` is read literally as an IAM role
    name (``roles/storage.objectViewer``).  ``sid``, ``resources``,
    ``principals`` and ``conditions`` only matter to AWS.
    """

    sid: str | None = None
    effect: Effect
    actions: tuple[str, ...] = ()
    resources: tuple[str, ...] | None = None
    principals: dict[str, Any] | None = None
    conditions: dict[str, Any] | None = None


class PolicyDocument(_Frozen):
    """Ordered list of statements plus a policy-language version tag."""

    name: str | None = None
    version: str | None = None
    statements: tuple[Statement, ...] = ()


class TrustConfiguration(_Frozen):
    """Who may assume / act as a new identity."""

    trusted_principals: tuple[str, ...] = ()
    conditions: dict[str, Any] | None = None


class CreateOptions(_Frozen):
    """Optional knobs; ignored by providers without the concept."""

    path: str | None = None
    max_session_duration: int | None = Field(default=None, gt=0)
    permission_boundary: str | None = None


# ── Requests ──────────────────────────────────────────────────────────
class CreateIdentityRequest(_Frozen):
    identity_name: str
    description: str | None = None
    tenant_id: str
    region: str | None = None
    trust_config: TrustConfiguration | None = None
    options: CreateOptions | None = None


class AttachInlinePolicyRequest(_Frozen):
    """Attach *policy_document* to an identity.

    ``resource`` is the target the grant applies to: GCP reads it as the
    service-account email; AWS ignores it.
    """

    identity_name: str | None = None
    policy_document: PolicyDocument | None = None
    tenant_id: str | None = None
    region: str | None = None
    resource: str | None = None


class GetInlinePolicyDetailsRequest(_Frozen):
    identity_name: str | None = None
    policy_name: str | None = None
    role_name: str | None = None
    tenant_id: str | None = None
    region: str | None = None


class GetAttachedPoliciesRequest(_Frozen):
    identity_name: str | None = None
    role_name: str | None = None
    tenant_id: str | None = None
    region: str | None = None


class RemovePolicyRequest(_Frozen):
    identity_name: str
    policy_name: str
    tenant_id: str
    region: str | None = None


class DeleteIdentityRequest(_Frozen):
    identity_name: str
    tenant_id: str
    region: str | None = None


class GetIdentityRequest(_Frozen):
    identity_name: str
    tenant_id: str
    region: str | None = None


__all__ = [
    "UNSET",
    "Unset",
    "Present",
    "Effect",
    "Statement",
    "PolicyDocument",
    "TrustConfiguration",
    "CreateOptions",
    "CreateIdentityRequest",
    "AttachInlinePolicyRequest",
    "GetInlinePolicyDetailsRequest",
    "GetAttachedPoliciesRequest",
    "RemovePolicyRequest",
    "DeleteIdentityRequest",
    "GetIdentityRequest",
]
