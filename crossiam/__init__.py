"""Crossiam: one identity and policy API for AWS and GCP.

Entry point for the library. Import :func:`identity_factory` to create a
client for a provider::

    from crossiam import identity_factory

    iam = identity_factory("aws", {"region_name": "us-east-1"})
"""

from .base import (
    IAMBlueprint,
    UNSET,
    Present,
    Effect,
    Statement,
    PolicyDocument,
    TrustConfiguration,
    CreateOptions,
    AttachInlinePolicyRequest,
    GetInlinePolicyDetailsRequest,
    GetAttachedPoliciesRequest,
)
from .base.exceptions import CrossIAMError, ErrorKind
from .client import IdentityClient
from .factory import identity_factory

__all__ = [
    "IAMBlueprint",
    "UNSET",
    "Present",
    "Effect",
    "Statement",
    "PolicyDocument",
    "TrustConfiguration",
    "CreateOptions",
    "AttachInlinePolicyRequest",
    "GetInlinePolicyDetailsRequest",
    "GetAttachedPoliciesRequest",
    "CrossIAMError",
    "ErrorKind",
    "IdentityClient",
    "identity_factory",
]
