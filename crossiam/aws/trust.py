"""Translation of the canonical model into AWS policy JSON.

Builds assume-role (trust) policies from a :class:`TrustConfiguration`
and inline role policies from a :class:`PolicyDocument`.
"""

from __future__ import annotations

import re
from typing import Any, NamedTuple

from crossiam.base import policy_json
from crossiam.base.models import PolicyDocument, TrustConfiguration

POLICY_VERSION = "2012-10-17"
STS_ASSUME_ROLE = "sts:AssumeRole"
ARN_PREFIX = "arn:"
SERVICE_PRINCIPAL_SUFFIX = ".amazonaws.com"

_ACCOUNT_ID = re.compile(r"[0-9]{12}")


def account_root_arn(account_id: str) -> str:
    return f"arn:aws:iam::{account_id}:root"


class Principals(NamedTuple):
    aws: list[str]
    service: list[str]


def classify_principals(trusted_principals: tuple[str, ...] | list[str]) -> Principals:
    """Split trusted principals into AWS and Service principals.

    First match wins per entry: an ARN is kept as-is, a 12-digit account
    ID becomes the account root ARN, a name ending in ``.amazonaws.com``
    is a service principal, anything else is kept as an AWS principal.
    Blank entries are skipped.
    """
    aws: list[str] = []
    service: list[str] = []
    for principal in trusted_principals:
        if not principal or not principal.strip():
            continue
        if principal.startswith(ARN_PREFIX):
            aws.append(principal)
        elif _ACCOUNT_ID.fullmatch(principal):
            aws.append(account_root_arn(principal))
        elif principal.endswith(SERVICE_PRINCIPAL_SUFFIX):
            service.append(principal)
        else:
            aws.append(principal)
    return Principals(aws, service)


def build_trust_policy(tenant_id: str, trust_config: TrustConfiguration | None) -> dict[str, Any]:
    """Build the assume-role policy for a new role.

    Without any usable principal the role trusts its own account root,
    so the document always names a principal.
    """
    principals = classify_principals(trust_config.trusted_principals if trust_config else ())
    if not principals.aws and not principals.service:
        principals.aws.append(account_root_arn(tenant_id))

    principal: dict[str, list[str]] = {}
    if principals.aws:
        principal["AWS"] = principals.aws
    if principals.service:
        principal["Service"] = principals.service

    statement: dict[str, Any] = {
        "Effect": "Allow",
        "Action": STS_ASSUME_ROLE,
        "Principal": principal,
    }
    if trust_config and trust_config.conditions:
        statement["Condition"] = trust_config.conditions

    return {"Version": POLICY_VERSION, "Statement": [statement]}


def build_trust_policy_json(tenant_id: str, trust_config: TrustConfiguration | None) -> str:
    return policy_json.dumps(build_trust_policy(tenant_id, trust_config), "assume role policy document")


def build_inline_policy(document: PolicyDocument) -> dict[str, Any]:
    """Translate a canonical document statement by statement, keeping order."""
    statements: list[dict[str, Any]] = []
    for stmt in document.statements:
        native: dict[str, Any] = {"Effect": stmt.effect.value}
        if stmt.actions:
            native["Action"] = list(stmt.actions)
        if stmt.sid and stmt.sid.strip():
            native["Sid"] = stmt.sid
        if stmt.resources:
            native["Resource"] = list(stmt.resources)
        if stmt.conditions:
            native["Condition"] = stmt.conditions
        if stmt.principals:
            native["Principal"] = stmt.principals
        statements.append(native)

    version = document.version if document.version and document.version.strip() else POLICY_VERSION
    return {"Version": version, "Statement": statements}


def build_inline_policy_json(document: PolicyDocument) -> str:
    return policy_json.dumps(build_inline_policy(document), "inline policy document")
