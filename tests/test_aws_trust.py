"""Tests for AWS trust-policy and inline-policy translation."""

import json
import pytest

from crossiam.aws.trust import (
    POLICY_VERSION,
    build_inline_policy,
    build_trust_policy,
    build_trust_policy_json,
    classify_principals,
)
from crossiam.base.models import PolicyDocument, Statement, TrustConfiguration

ACCOUNT = "123456789012"


class TestClassifyPrincipals:
    @pytest.mark.parametrize("account", ["123456789012", "000000000000", "987654321098"])
    def test_account_id_becomes_root(self, account):
        assert classify_principals([account]).aws == [f"arn:aws:iam::{account}:root"]

    @pytest.mark.parametrize("service", ["lambda.amazonaws.com", "ec2.amazonaws.com"])
    def test_service_principal(self, service):
        result = classify_principals([service])
        assert result.service == [service]
        assert result.aws == []

    @pytest.mark.parametrize("arn", [
        "arn:aws:iam::123456789012:role/other",
        "arn:aws:iam::123456789012:user/alice",
        "arn:aws:sts::123456789012:assumed-role/r/s",
    ])
    def test_arn_passthrough(self, arn):
        assert classify_principals([arn]).aws == [arn]

    def test_arn_wins_over_service_suffix(self):
        odd = "arn:aws:iam::123456789012:role/x.amazonaws.com"
        result = classify_principals([odd])
        assert result.aws == [odd]
        assert result.service == []

    def test_not_twelve_digits_falls_back(self):
        assert classify_principals(["12345"]).aws == ["12345"]
        assert classify_principals(["1234567890123"]).aws == ["1234567890123"]

    def test_non_ascii_digits_not_account_id(self):
        arabic = "١" * 12
        assert classify_principals([arabic]).aws == [arabic]

    def test_unknown_kept_as_aws(self):
        assert classify_principals(["*"]).aws == ["*"]

    def test_blank_skipped(self):
        result = classify_principals(["", "   ", "lambda.amazonaws.com"])
        assert result.aws == []
        assert result.service == ["lambda.amazonaws.com"]

    def test_order_preserved(self):
        result = classify_principals([ACCOUNT, "arn:aws:iam::111122223333:root"])
        assert result.aws == [f"arn:aws:iam::{ACCOUNT}:root", "arn:aws:iam::111122223333:root"]


class TestBuildTrustPolicy:
    @pytest.mark.parametrize("trust_config", [
        None,
        TrustConfiguration(),
        TrustConfiguration(trusted_principals=["", "  "]),
    ])
    def test_defaults_to_own_account_root(self, trust_config):
        doc = build_trust_policy(ACCOUNT, trust_config)
        assert doc["Statement"][0]["Principal"] == {"AWS": [f"arn:aws:iam::{ACCOUNT}:root"]}

    def test_mixed_principals(self):
        doc = build_trust_policy(ACCOUNT, TrustConfiguration(
            trusted_principals=["111122223333", "ecs-tasks.amazonaws.com"],
        ))
        assert doc == {
            "Version": POLICY_VERSION,
            "Statement": [{
                "Effect": "Allow",
                "Action": "sts:AssumeRole",
                "Principal": {
                    "AWS": ["arn:aws:iam::111122223333:root"],
                    "Service": ["ecs-tasks.amazonaws.com"],
                },
            }],
        }

    def test_conditions(self):
        conditions = {"StringEquals": {"sts:ExternalId": "xyz"}}
        doc = build_trust_policy(ACCOUNT, TrustConfiguration(conditions=conditions))
        assert doc["Statement"][0]["Condition"] == conditions

    def test_json_is_compact(self):
        text = build_trust_policy_json(ACCOUNT, None)
        assert " " not in text
        assert json.loads(text)["Version"] == POLICY_VERSION


class TestBuildInlinePolicy:
    def test_default_version(self):
        doc = build_inline_policy(PolicyDocument(version="  ", statements=[]))
        assert doc == {"Version": POLICY_VERSION, "Statement": []}

    def test_explicit_version(self):
        assert build_inline_policy(PolicyDocument(version="2008-10-17"))["Version"] == "2008-10-17"

    def test_statement_order_and_fields(self):
        doc = build_inline_policy(PolicyDocument(statements=[
            Statement(effect="Deny", actions=["iam:*"], resources=["*"]),
            Statement(
                effect="Allow",
                actions=["sts:AssumeRole"],
                principals={"AWS": ["arn:aws:iam::111122223333:root"]},
                conditions={"Bool": {"aws:MultiFactorAuthPresent": "true"}},
            ),
        ]))
        first, second = doc["Statement"]
        assert first == {"Effect": "Deny", "Action": ["iam:*"], "Resource": ["*"]}
        assert second["Principal"] == {"AWS": ["arn:aws:iam::111122223333:root"]}
        assert second["Condition"] == {"Bool": {"aws:MultiFactorAuthPresent": "true"}}
        assert "Sid" not in second

    def test_empty_actions_omitted(self):
        doc = build_inline_policy(PolicyDocument(statements=[Statement(effect="Allow")]))
        assert doc["Statement"] == [{"Effect": "Allow"}]
