"""Tests for GCP IAM adapter."""

from unittest.mock import patch, MagicMock
import pytest

from google.api_core import exceptions as gcp_exceptions
from google.iam.v1 import policy_pb2

from crossiam.base.config import CredentialsOverrider, GCPConfig
from crossiam.base.exceptions import InvalidArgumentError, UnsupportedOperationError
from crossiam.base.models import (
    AttachInlinePolicyRequest,
    CreateIdentityRequest,
    CreateOptions,
    DeleteIdentityRequest,
    GetAttachedPoliciesRequest,
    GetIdentityRequest,
    GetInlinePolicyDetailsRequest,
    PolicyDocument,
    RemovePolicyRequest,
    Statement,
    TrustConfiguration,
)
from crossiam.gcp.iam import IAM, SERVICE_ACCOUNT_USER_ROLE

PROJECT = "my-project"
SA = f"svc@{PROJECT}.iam.gserviceaccount.com"
MEMBER = f"serviceAccount:{SA}"
SA_NAME = f"projects/{PROJECT}/serviceAccounts/{SA}"


def _document(*statements):
    return PolicyDocument(statements=list(statements))


def _attach(**overrides):
    params = {
        "identity_name": "svc",
        "tenant_id": f"projects/{PROJECT}",
        "resource": SA,
        "policy_document": _document(
            Statement(effect="Allow", actions=["roles/storage.objectViewer"]),
        ),
    }
    params.update(overrides)
    return AttachInlinePolicyRequest(**params)


def _written_policy(projects) -> policy_pb2.Policy:
    projects.set_iam_policy.assert_called_once()
    return projects.set_iam_policy.call_args[1]["request"]["policy"]


@pytest.fixture
def svc():
    with patch("crossiam.gcp.iam.resourcemanager_v3.ProjectsClient") as MockProjects, \
            patch("crossiam.gcp.iam.iam_admin_v1.IAMClient") as MockIAM:
        instance = IAM(GCPConfig())
        yield instance, MockProjects.return_value, MockIAM.return_value


# --- construction ---

class TestConstruction:
    def test_endpoint_override(self):
        with patch("crossiam.gcp.iam.resourcemanager_v3.ProjectsClient") as MockProjects, \
                patch("crossiam.gcp.iam.iam_admin_v1.IAMClient"):
            IAM(GCPConfig(endpoint="localhost:8080"))
            kwargs = MockProjects.call_args[1]
            assert kwargs["client_options"] == {"api_endpoint": "localhost:8080"}

    def test_explicit_credentials(self):
        creds = MagicMock()
        with patch("crossiam.gcp.iam.resourcemanager_v3.ProjectsClient") as MockProjects, \
                patch("crossiam.gcp.iam.iam_admin_v1.IAMClient") as MockIAM:
            IAM(GCPConfig(credentials=creds))
            assert MockProjects.call_args[1]["credentials"] is creds
            assert MockIAM.call_args[1]["credentials"] is creds

    def test_session_overrider(self):
        with patch("crossiam.gcp.iam.resourcemanager_v3.ProjectsClient") as MockProjects, \
                patch("crossiam.gcp.iam.iam_admin_v1.IAMClient"):
            IAM(GCPConfig(credentials_overrider=CredentialsOverrider(
                type="session", session_token="ya29.token",
            )))
            assert MockProjects.call_args[1]["credentials"].token == "ya29.token"


class TestClose:
    def test_closes_transports_once(self, svc):
        inst, projects, iam = svc
        inst.close()
        inst.close()
        projects.transport.close.assert_called_once()
        iam.transport.close.assert_called_once()

    def test_failed_construction_closes_built_transport(self):
        with patch("crossiam.gcp.iam.resourcemanager_v3.ProjectsClient") as MockProjects, \
                patch("crossiam.gcp.iam.iam_admin_v1.IAMClient") as MockIAM:
            MockIAM.side_effect = RuntimeError("no client")
            with pytest.raises(RuntimeError):
                IAM(GCPConfig())
            MockProjects.return_value.transport.close.assert_called_once()


# --- attach_inline_policy ---

class TestAttachInlinePolicy:
    def test_single_allow_on_empty_policy(self, svc):
        inst, projects, _ = svc
        projects.get_iam_policy.return_value = policy_pb2.Policy()
        inst.do_attach_inline_policy(_attach())

        policy = _written_policy(projects)
        assert len(policy.bindings) == 1
        assert policy.bindings[0].role == "roles/storage.objectViewer"
        assert list(policy.bindings[0].members) == [MEMBER]
        assert projects.set_iam_policy.call_args[1]["request"]["resource"] == f"projects/{PROJECT}"

    def test_reads_policy_version_3(self, svc):
        inst, projects, _ = svc
        projects.get_iam_policy.return_value = policy_pb2.Policy()
        inst.do_attach_inline_policy(_attach())
        request = projects.get_iam_policy.call_args[1]["request"]
        assert request == {
            "resource": f"projects/{PROJECT}",
            "options": {"requested_policy_version": 3},
        }

    def test_null_policy_treated_as_empty(self, svc):
        inst, projects, _ = svc
        projects.get_iam_policy.return_value = None
        inst.do_attach_inline_policy(_attach())
        assert len(_written_policy(projects).bindings) == 1

    def test_merges_existing_binding(self, svc):
        inst, projects, _ = svc
        existing = policy_pb2.Policy()
        existing.bindings.add(role="roles/storage.objectViewer", members=["user:bob@example.com"])
        projects.get_iam_policy.return_value = existing
        inst.do_attach_inline_policy(_attach())

        policy = _written_policy(projects)
        assert len(policy.bindings) == 1
        assert list(policy.bindings[0].members) == ["user:bob@example.com", MEMBER]

    def test_skips_deny_statements(self, svc):
        inst, projects, _ = svc
        projects.get_iam_policy.return_value = policy_pb2.Policy()
        inst.do_attach_inline_policy(_attach(policy_document=_document(
            Statement(effect="Deny", actions=["roles/owner"]),
        )))
        assert len(_written_policy(projects).bindings) == 0

    def test_writes_back_etag(self, svc):
        inst, projects, _ = svc
        projects.get_iam_policy.return_value = policy_pb2.Policy(etag=b"BwX1")
        inst.do_attach_inline_policy(_attach())
        assert _written_policy(projects).etag == b"BwX1"

    def test_bare_project_and_identity_fallback(self, svc):
        inst, projects, _ = svc
        projects.get_iam_policy.return_value = policy_pb2.Policy()
        inst.do_attach_inline_policy(_attach(tenant_id=PROJECT, resource=None))
        assert list(_written_policy(projects).bindings[0].members) == [MEMBER]

    def test_resource_used_verbatim(self, svc):
        inst, projects, _ = svc
        projects.get_iam_policy.return_value = policy_pb2.Policy()
        inst.do_attach_inline_policy(_attach(tenant_id="projects/p", resource="test-sa"))
        assert list(_written_policy(projects).bindings[0].members) == ["serviceAccount:test-sa"]

    def test_tenant_required(self, svc):
        inst, projects, _ = svc
        with pytest.raises(InvalidArgumentError, match="tenant_id"):
            inst.do_attach_inline_policy(_attach(tenant_id=None))
        projects.get_iam_policy.assert_not_called()

    def test_concurrent_write_rejected(self, svc):
        inst, projects, _ = svc
        projects.get_iam_policy.return_value = policy_pb2.Policy(etag=b"old")
        projects.set_iam_policy.side_effect = gcp_exceptions.Aborted("etag mismatch")
        with pytest.raises(gcp_exceptions.Aborted):
            inst.do_attach_inline_policy(_attach())


# --- create_identity ---

class TestCreateIdentity:
    def _request(self, **overrides):
        params = {
            "identity_name": "svc",
            "description": "worker",
            "tenant_id": PROJECT,
            "trust_config": TrustConfiguration(),
            "options": CreateOptions(path="/ignored/"),
        }
        params.update(overrides)
        return CreateIdentityRequest(**params)

    def test_success(self, svc):
        inst, _, iam = svc
        iam.create_service_account.return_value = MagicMock(email=SA)
        assert inst.do_create_identity(self._request()) == SA
        request = iam.create_service_account.call_args[1]["request"]
        assert request["name"] == f"projects/{PROJECT}"
        assert request["account_id"] == "svc"
        assert request["service_account"] == {"display_name": "svc", "description": "worker"}
        iam.set_iam_policy.assert_not_called()

    def test_already_exists(self, svc):
        inst, _, iam = svc
        iam.create_service_account.side_effect = gcp_exceptions.AlreadyExists("exists")
        iam.get_service_account.return_value = MagicMock(email=SA)
        assert inst.do_create_identity(self._request()) == SA
        assert iam.get_service_account.call_args[1]["request"]["name"] == SA_NAME

    def test_trusted_principals_granted(self, svc):
        inst, _, iam = svc
        iam.create_service_account.return_value = MagicMock(email=SA)
        iam.get_iam_policy.return_value = policy_pb2.Policy()
        inst.do_create_identity(self._request(trust_config=TrustConfiguration(
            trusted_principals=["alice@example.com", " ", "group:ops@example.com"],
        )))
        request = iam.set_iam_policy.call_args[1]["request"]
        assert request["resource"] == SA_NAME
        binding = request["policy"].bindings[0]
        assert binding.role == SERVICE_ACCOUNT_USER_ROLE
        assert list(binding.members) == ["user:alice@example.com", "group:ops@example.com"]

    def test_other_error_propagates(self, svc):
        inst, _, iam = svc
        iam.create_service_account.side_effect = gcp_exceptions.PermissionDenied("nope")
        with pytest.raises(gcp_exceptions.PermissionDenied):
            inst.do_create_identity(self._request())


# --- get / delete identity ---

class TestIdentity:
    def test_get(self, svc):
        inst, _, iam = svc
        iam.get_service_account.return_value = MagicMock(email=SA)
        assert inst.do_get_identity(GetIdentityRequest(identity_name="svc", tenant_id=PROJECT)) == SA
        assert iam.get_service_account.call_args[1]["request"]["name"] == SA_NAME

    def test_get_by_email(self, svc):
        inst, _, iam = svc
        iam.get_service_account.return_value = MagicMock(email=SA)
        inst.do_get_identity(GetIdentityRequest(identity_name=SA, tenant_id=f"projects/{PROJECT}"))
        assert iam.get_service_account.call_args[1]["request"]["name"] == SA_NAME

    def test_delete(self, svc):
        inst, _, iam = svc
        inst.do_delete_identity(DeleteIdentityRequest(identity_name="svc", tenant_id=PROJECT))
        iam.delete_service_account.assert_called_once_with(request={"name": SA_NAME})


# --- policy inspection / removal ---

class TestPolicies:
    def _policy(self):
        policy = policy_pb2.Policy()
        policy.bindings.add(role="roles/viewer", members=[MEMBER])
        policy.bindings.add(role="roles/owner", members=["user:a@b.com"])
        return policy

    def test_get_attached_policies(self, svc):
        inst, projects, _ = svc
        projects.get_iam_policy.return_value = self._policy()
        roles = inst.do_get_attached_policies(
            GetAttachedPoliciesRequest(identity_name="svc", tenant_id=PROJECT)
        )
        assert roles == ["roles/viewer"]

    def test_get_attached_policies_requires_identity(self, svc):
        inst, _, _ = svc
        with pytest.raises(InvalidArgumentError, match="identity_name"):
            inst.do_get_attached_policies(GetAttachedPoliciesRequest(tenant_id=PROJECT))

    def test_remove_policy(self, svc):
        inst, projects, _ = svc
        projects.get_iam_policy.return_value = self._policy()
        inst.do_remove_policy(RemovePolicyRequest(
            identity_name="svc", policy_name="roles/viewer", tenant_id=PROJECT,
        ))
        assert [b.role for b in _written_policy(projects).bindings] == ["roles/owner"]

    def test_remove_policy_absent_no_write(self, svc):
        inst, projects, _ = svc
        projects.get_iam_policy.return_value = self._policy()
        inst.do_remove_policy(RemovePolicyRequest(
            identity_name="svc", policy_name="roles/editor", tenant_id=PROJECT,
        ))
        projects.set_iam_policy.assert_not_called()

    def test_inline_policy_details_unsupported(self, svc):
        inst, _, _ = svc
        with pytest.raises(UnsupportedOperationError):
            inst.do_get_inline_policy_details(GetInlinePolicyDetailsRequest(policy_name="p"))
