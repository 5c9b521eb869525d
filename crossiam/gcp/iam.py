"""GCP IAM implementation of the IAM blueprint."""

from __future__ import annotations

from typing import Any

from google.api_core import exceptions as gcp_exceptions
from google.cloud import iam_admin_v1, resourcemanager_v3
from google.iam.v1 import policy_pb2

from crossiam.base.config import GCPConfig
from crossiam.base.exceptions import (
    ErrorKind,
    InvalidArgumentError,
    UnsupportedOperationError,
)
from crossiam.base.iam import IAMBlueprint
from crossiam.base.logger import iam_logger
from crossiam.base.models import (
    AttachInlinePolicyRequest,
    CreateIdentityRequest,
    DeleteIdentityRequest,
    GetAttachedPoliciesRequest,
    GetIdentityRequest,
    GetInlinePolicyDetailsRequest,
    RemovePolicyRequest,
    TrustConfiguration,
)
from crossiam.gcp import errors
from crossiam.gcp.bindings import (
    add_binding,
    merge_document,
    principal_member,
    remove_binding,
    roles_for_member,
    service_account_member,
)

PROVIDER_ID = "gcp"
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
SERVICE_ACCOUNT_USER_ROLE = "roles/iam.serviceAccountUser"
# Version 3 is required to read conditional bindings without losing them.
REQUESTED_POLICY_VERSION = 3


def _resolve_credentials(config: GCPConfig) -> Any:
    overrider = config.credentials_overrider
    if overrider is None:
        return config.credentials
    if overrider.type == "session":
        from google.oauth2 import credentials as oauth2_credentials

        return oauth2_credentials.Credentials(token=overrider.session_token)

    import google.auth
    from google.auth import impersonated_credentials

    source = config.credentials
    if source is None:
        source, _ = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
    return impersonated_credentials.Credentials(
        source_credentials=source,
        target_principal=overrider.role,
        target_scopes=[CLOUD_PLATFORM_SCOPE],
        lifetime=overrider.duration_seconds,
    )


def _require(value: str | None, field: str) -> str:
    if not value or not value.strip():
        raise InvalidArgumentError(f"{field} is required for GCP IAM")
    return value


def project_id(tenant_id: str) -> str:
    """Accept ``my-project`` or ``projects/my-project``."""
    return tenant_id[len("projects/"):] if tenant_id.startswith("projects/") else tenant_id


def service_account_email(identity: str, project: str) -> str:
    """Accept a bare account id or a full service-account email."""
    if "@" in identity:
        return identity
    return f"{identity}@{project}.iam.gserviceaccount.com"


class IAM(IAMBlueprint):
    """GCP IAM adapter: identities are service accounts, policies are
    project-level role bindings.

    Uses the IAM Admin API for service accounts and the Resource Manager
    API for the project IAM policy.

    Attributes:
        projects_client: Resource Manager projects client.
        iam_client: IAM Admin client.
    """

    provider_id = PROVIDER_ID

    def __init__(self, config: GCPConfig) -> None:
        """Initialize the Resource Manager and IAM Admin clients.

        Args:
            config: GCP configuration object.
                   Expected attributes:
                   - region: Optional region (IAM is global)
                   - endpoint: Optional API endpoint override
                   - credentials / credentials_path / credentials_overrider
        """
        self.projects_client: Any = None
        self.iam_client: Any = None
        self.region: str | None = config.region
        credentials = _resolve_credentials(config)
        client_options = {"api_endpoint": config.endpoint} if config.endpoint else None
        self.projects_client = resourcemanager_v3.ProjectsClient(
            credentials=credentials, client_options=client_options
        )
        try:
            self.iam_client = iam_admin_v1.IAMClient(
                credentials=credentials, client_options=client_options
            )
        except Exception:
            self.close()
            raise

    def close(self) -> None:
        for attr in ("projects_client", "iam_client"):
            client = getattr(self, attr, None)
            if client is not None:
                setattr(self, attr, None)
                client.transport.close()

    def classify_error(self, exc: BaseException) -> ErrorKind:
        return errors.classify_error(exc)

    # --- Project policy ---

    def _get_policy(self, resource: str) -> policy_pb2.Policy:
        """Fetch the project IAM policy; an absent policy reads as empty.

        The returned message carries the policy ``etag``.  Writing it back
        unchanged makes the write conditional: if another writer got in
        between, Resource Manager answers ``ABORTED``.
        """
        policy = self.projects_client.get_iam_policy(
            request={
                "resource": resource,
                "options": {"requested_policy_version": REQUESTED_POLICY_VERSION},
            }
        )
        return policy if policy is not None else policy_pb2.Policy()

    def _set_policy(self, resource: str, policy: policy_pb2.Policy) -> None:
        self.projects_client.set_iam_policy(request={"resource": resource, "policy": policy})

    # --- Identity lifecycle ---

    def do_create_identity(self, request: CreateIdentityRequest) -> str:
        """Create a service account, or reuse it if it already exists.

        Trusted principals are granted ``roles/iam.serviceAccountUser`` on
        the new account.  Path, session duration and permission boundary
        have no GCP counterpart and are ignored.

        Returns:
            Service-account email.
        """
        project = project_id(request.tenant_id)
        try:
            account = self.iam_client.create_service_account(
                request={
                    "name": f"projects/{project}",
                    "account_id": request.identity_name,
                    "service_account": {
                        "display_name": request.identity_name,
                        "description": request.description or "",
                    },
                }
            )
        except gcp_exceptions.AlreadyExists:
            iam_logger.info(
                "Service account already exists, reusing it",
                provider=PROVIDER_ID,
                operation="create_identity",
                identity=request.identity_name,
                tenant=request.tenant_id,
            )
            account = self.iam_client.get_service_account(
                request={"name": self._account_name(request.identity_name, project)}
            )

        email: str = account.email
        self._grant_trusted_principals(email, project, request.trust_config)
        return email

    def _account_name(self, identity: str, project: str) -> str:
        return f"projects/{project}/serviceAccounts/{service_account_email(identity, project)}"

    def _grant_trusted_principals(
        self, email: str, project: str, trust_config: TrustConfiguration | None
    ) -> None:
        if trust_config is None:
            return
        members = [
            principal_member(p.strip()) for p in trust_config.trusted_principals if p and p.strip()
        ]
        if not members:
            return
        resource = self._account_name(email, project)
        policy = self.iam_client.get_iam_policy(request={"resource": resource})
        if policy is None:
            policy = policy_pb2.Policy()
        changed = False
        for member in members:
            changed = add_binding(policy, SERVICE_ACCOUNT_USER_ROLE, member) or changed
        if changed:
            self.iam_client.set_iam_policy(request={"resource": resource, "policy": policy})

    def do_get_identity(self, request: GetIdentityRequest) -> str:
        """Return the service-account email."""
        project = project_id(request.tenant_id)
        account = self.iam_client.get_service_account(
            request={"name": self._account_name(request.identity_name, project)}
        )
        return account.email  # type: ignore[no-any-return]

    def do_delete_identity(self, request: DeleteIdentityRequest) -> None:
        project = project_id(request.tenant_id)
        self.iam_client.delete_service_account(
            request={"name": self._account_name(request.identity_name, project)}
        )

    # --- Policy management ---

    def do_attach_inline_policy(self, request: AttachInlinePolicyRequest) -> None:
        """Grant every Allow action of the document as a project role.

        Each action is used verbatim as a role name (``roles/...``) and bound
        to ``serviceAccount:<resource>`` with ``resource`` taken as given.
        When ``resource`` is blank the member is the identity's service
        account.  Deny statements are skipped.  The merged policy is always
        written back.
        """
        project = project_id(_require(request.tenant_id, "tenant_id"))
        if request.resource and request.resource.strip():
            member = service_account_member(request.resource)
        else:
            identity = _require(request.identity_name, "resource")
            member = service_account_member(service_account_email(identity, project))

        resource = f"projects/{project}"
        policy = self._get_policy(resource)
        merge_document(policy, request.policy_document, member)  # type: ignore[arg-type]
        self._set_policy(resource, policy)

    def do_get_inline_policy_details(self, request: GetInlinePolicyDetailsRequest) -> str:
        raise UnsupportedOperationError(
            "GCP IAM has no named inline policies; use get_attached_policies"
        )

    def do_get_attached_policies(self, request: GetAttachedPoliciesRequest) -> list[str]:
        """List project roles bound to the service account."""
        project = project_id(_require(request.tenant_id, "tenant_id"))
        email = service_account_email(_require(request.identity_name, "identity_name"), project)
        policy = self._get_policy(f"projects/{project}")
        return roles_for_member(policy, service_account_member(email))

    def do_remove_policy(self, request: RemovePolicyRequest) -> None:
        """Revoke the project role ``policy_name`` from the service account.

        Nothing is written if the account does not hold the role.
        """
        project = project_id(request.tenant_id)
        member = service_account_member(service_account_email(request.identity_name, project))
        resource = f"projects/{project}"
        policy = self._get_policy(resource)
        if remove_binding(policy, request.policy_name, member):
            self._set_policy(resource, policy)
