"""AWS IAM implementation of the IAM blueprint."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import ClientError

from crossiam.aws import errors
from crossiam.aws.trust import build_inline_policy_json, build_trust_policy_json
from crossiam.base import policy_json
from crossiam.base.config import AWSConfig
from crossiam.base.exceptions import ErrorKind, InvalidArgumentError
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
    RemovePolicyRequest,
)

PROVIDER_ID = "aws"


def _credential_kwargs(config: AWSConfig) -> dict[str, Any]:
    """Resolve the credentials boto3 clients are built with."""
    overrider = config.credentials_overrider
    if overrider is None:
        return {
            "aws_access_key_id": config.aws_access_key_id,
            "aws_secret_access_key": config.aws_secret_access_key,
            "aws_session_token": config.aws_session_token,
        }
    if overrider.type == "session":
        return {
            "aws_access_key_id": overrider.access_key_id,
            "aws_secret_access_key": overrider.secret_access_key,
            "aws_session_token": overrider.session_token,
        }
    sts = boto3.client(
        "sts",
        aws_access_key_id=config.aws_access_key_id,
        aws_secret_access_key=config.aws_secret_access_key,
        aws_session_token=config.aws_session_token,
        region_name=config.region_name,
    )
    try:
        creds = sts.assume_role(
            RoleArn=overrider.role,
            RoleSessionName=overrider.session_name,
            DurationSeconds=overrider.duration_seconds,
        )["Credentials"]
    finally:
        sts.close()
    return {
        "aws_access_key_id": creds["AccessKeyId"],
        "aws_secret_access_key": creds["SecretAccessKey"],
        "aws_session_token": creds["SessionToken"],
    }


class IAM(IAMBlueprint):
    """AWS IAM adapter: identities are roles, policies are inline role policies.

    Attributes:
        client: boto3 IAM client.
        region: Region the client was built for.
    """

    provider_id = PROVIDER_ID

    def __init__(self, config: AWSConfig) -> None:
        """Initialize the IAM client.

        Args:
            config: AWS configuration object.
                   Expected attributes:
                   - region_name: AWS region (defaults to us-east-1)
                   - endpoint_url: Optional IAM endpoint override
                   - aws_access_key_id / aws_secret_access_key / aws_session_token
                   - credentials_overrider: Optional alternate credential source
        """
        self.client: Any = None
        self.region: str | None = config.region_name
        self.client = boto3.client(
            "iam",
            region_name=config.region_name,
            endpoint_url=config.endpoint_url,
            **_credential_kwargs(config),
        )

    def close(self) -> None:
        client = getattr(self, "client", None)
        if client is not None:
            self.client = None
            client.close()

    def classify_error(self, exc: BaseException) -> ErrorKind:
        return errors.classify_error(exc)

    # --- Identity lifecycle ---

    def do_create_identity(self, request: CreateIdentityRequest) -> str:
        """Create an IAM role, or converge an existing one.

        If the role already exists its description, max session duration
        and trust policy are updated where they differ from the request.
        The updates are independent calls; a failure in the second leaves
        the first applied.

        Returns:
            Role ARN.
        """
        trust_policy = build_trust_policy_json(request.tenant_id, request.trust_config)
        params: dict[str, Any] = {
            "RoleName": request.identity_name,
            "AssumeRolePolicyDocument": trust_policy,
            "Description": request.description or "",
        }
        opts = request.options
        if opts is not None:
            if opts.path and opts.path.strip():
                params["Path"] = opts.path
            if opts.max_session_duration is not None:
                params["MaxSessionDuration"] = opts.max_session_duration
            if opts.permission_boundary and opts.permission_boundary.strip():
                params["PermissionsBoundary"] = opts.permission_boundary

        try:
            resp = self.client.create_role(**params)
            return resp["Role"]["Arn"]  # type: ignore[no-any-return]
        except ClientError as e:
            if errors.error_code(e) != "EntityAlreadyExists":
                raise

        iam_logger.info(
            "Role already exists, converging",
            provider=PROVIDER_ID,
            operation="create_identity",
            identity=request.identity_name,
            tenant=request.tenant_id,
        )
        existing = self.client.get_role(RoleName=request.identity_name)["Role"]
        self._update_role_if_needed(existing, request.description, trust_policy, opts)
        return existing["Arn"]  # type: ignore[no-any-return]

    def _update_role_if_needed(
        self,
        existing: dict[str, Any],
        description: str | None,
        trust_policy: str,
        opts: CreateOptions | None,
    ) -> None:
        role_name = existing["RoleName"]
        target_description = description or ""
        session_duration = opts.max_session_duration if opts else None

        needs_update = (existing.get("Description") or "") != target_description
        if not needs_update and session_duration is not None:
            needs_update = session_duration != existing.get("MaxSessionDuration")

        if needs_update:
            params: dict[str, Any] = {"RoleName": role_name, "Description": target_description}
            if session_duration is not None:
                params["MaxSessionDuration"] = session_duration
            self.client.update_role(**params)

        if policy_json.differs(existing.get("AssumeRolePolicyDocument"), trust_policy):
            self.client.update_assume_role_policy(RoleName=role_name, PolicyDocument=trust_policy)

    def do_get_identity(self, request: GetIdentityRequest) -> str:
        """Return the role ARN."""
        resp = self.client.get_role(RoleName=request.identity_name)
        return resp["Role"]["Arn"]  # type: ignore[no-any-return]

    def do_delete_identity(self, request: DeleteIdentityRequest) -> None:
        self.client.delete_role(RoleName=request.identity_name)

    # --- Policy management ---

    def do_attach_inline_policy(self, request: AttachInlinePolicyRequest) -> None:
        """Put a named inline policy on the role.

        Raises:
            InvalidArgumentError: If the document has no name or cannot be
                serialized.
        """
        document = request.policy_document
        if document is None or not (document.name and document.name.strip()):
            raise InvalidArgumentError("policy name is required for AWS IAM")
        self.client.put_role_policy(
            RoleName=request.identity_name,
            PolicyName=document.name,
            PolicyDocument=build_inline_policy_json(document),
        )

    def do_get_inline_policy_details(self, request: GetInlinePolicyDetailsRequest) -> str:
        """Return the decoded JSON of an inline role policy.

        Requires ``role_name`` and ``policy_name``.
        """
        if not (request.role_name and request.role_name.strip()):
            raise InvalidArgumentError("role_name is required for AWS IAM")
        if not (request.policy_name and request.policy_name.strip()):
            raise InvalidArgumentError("policy_name is required for AWS IAM")
        resp = self.client.get_role_policy(
            RoleName=request.role_name, PolicyName=request.policy_name
        )
        return policy_json.decode(resp["PolicyDocument"]) or ""

    def do_get_attached_policies(self, request: GetAttachedPoliciesRequest) -> list[str]:
        """List inline policy names on the role named by ``role_name``."""
        if not (request.role_name and request.role_name.strip()):
            raise InvalidArgumentError("role_name is required for AWS IAM")
        names: list[str] = []
        paginator = self.client.get_paginator("list_role_policies")
        for page in paginator.paginate(RoleName=request.role_name):
            names.extend(page.get("PolicyNames", []))
        return names

    def do_remove_policy(self, request: RemovePolicyRequest) -> None:
        self.client.delete_role_policy(
            RoleName=request.identity_name, PolicyName=request.policy_name
        )
