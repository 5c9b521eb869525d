"""Role-binding merge on GCP IAM policies.

GCP policies can only grant, so Deny statements are dropped before
translation.  All functions mutate a ``google.iam.v1.policy_pb2.Policy``
in place and leave unrelated bindings untouched.
"""

from __future__ import annotations

from google.iam.v1 import policy_pb2

from crossiam.base.models import Effect, PolicyDocument

SERVICE_ACCOUNT_PREFIX = "serviceAccount:"
SERVICE_ACCOUNT_DOMAIN = ".gserviceaccount.com"


def service_account_member(email: str) -> str:
    return f"{SERVICE_ACCOUNT_PREFIX}{email}"


def principal_member(principal: str) -> str:
    """Turn a trusted principal into an IAM member string.

    Strings that already carry a type prefix (``group:``, ``domain:`` ...)
    are used verbatim.
    """
    if ":" in principal:
        return principal
    if principal.endswith(SERVICE_ACCOUNT_DOMAIN):
        return service_account_member(principal)
    return f"user:{principal}"


def granted_roles(document: PolicyDocument) -> list[str]:
    """Role names granted by the Allow statements of *document*."""
    roles: list[str] = []
    for statement in document.statements:
        if statement.effect is not Effect.ALLOW:
            continue
        roles.extend(statement.actions)
    return roles


def _unconditional(binding: policy_pb2.Binding, role: str) -> bool:
    return binding.role == role and not binding.HasField("condition")


def add_binding(policy: policy_pb2.Policy, role: str, member: str) -> bool:
    """Grant *role* to *member*.

    Joins the existing binding for the role if there is one, so the policy
    never holds two unconditional bindings for the same role.

    Returns:
        ``True`` if the policy changed.
    """
    for binding in policy.bindings:
        if _unconditional(binding, role):
            if member in binding.members:
                return False
            binding.members.append(member)
            return True
    policy.bindings.add(role=role, members=[member])
    return True


def remove_binding(policy: policy_pb2.Policy, role: str, member: str) -> bool:
    """Revoke *role* from *member*, dropping the binding once it is empty.

    Returns:
        ``True`` if the policy changed.
    """
    for index, binding in enumerate(policy.bindings):
        if _unconditional(binding, role) and member in binding.members:
            binding.members.remove(member)
            if not binding.members:
                del policy.bindings[index]
            return True
    return False


def merge_document(policy: policy_pb2.Policy, document: PolicyDocument, member: str) -> bool:
    """Fold every Allow action of *document* into *policy* as a role for *member*."""
    changed = False
    for role in granted_roles(document):
        changed = add_binding(policy, role, member) or changed
    return changed


def roles_for_member(policy: policy_pb2.Policy, member: str) -> list[str]:
    return [binding.role for binding in policy.bindings if member in binding.members]
