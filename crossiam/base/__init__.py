"""Capability blueprint, canonical model and core utilities.

Every provider adapter inherits from :class:`IAMBlueprint`.  Import the
models to build requests and policy documents.
"""

from .iam import IAMBlueprint
from .models import (
    UNSET,
    Unset,
    Present,
    Effect,
    Statement,
    PolicyDocument,
    TrustConfiguration,
    CreateOptions,
    CreateIdentityRequest,
    AttachInlinePolicyRequest,
    GetInlinePolicyDetailsRequest,
    GetAttachedPoliciesRequest,
    RemovePolicyRequest,
    DeleteIdentityRequest,
    GetIdentityRequest,
)
from .supported_providers import existing_cloud_providers


__all__ = [
    "IAMBlueprint",
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
    "existing_cloud_providers",
]
