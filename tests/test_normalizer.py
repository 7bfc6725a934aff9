"""
Tests for policy normalization, reconciliation and equivalence.
"""

import json

import pytest

from iprc.errors import InvalidPolicyDocumentError
from iprc.policy import (
    normalize,
    policies_are_equivalent,
    reconcile,
    suppress_diff,
    validate_policy_json,
)

POLICY = """
{
  "Version": "2012-10-17",
  "Statement": [
    {
      "Effect": "Allow",
      "Action": ["s3:GetObject", "s3:ListBucket"],
      "Resource": "*"
    }
  ]
}
"""


class TestNormalize:
    """Test canonical serialization."""

    def test_sorted_and_compact(self):
        """Test that keys are sorted and whitespace removed."""
        assert normalize('{ "b": 2,\n "a": 1 }') == '{"a":1,"b":2}'

    def test_idempotent(self):
        """Test that normalize(normalize(x)) == normalize(x)."""
        once = normalize(POLICY)
        assert normalize(once) == once

    def test_unicode_preserved(self):
        """Test that non-ASCII text is not escaped."""
        assert normalize('{"Sid": "caf\\u00e9"}') == '{"Sid":"café"}'

    @pytest.mark.parametrize("raw", [
        "",
        "not json",
        "{\"a\": }",
        "[1, 2]",
        "\"text\"",
        "{\"a\": NaN}",
    ])
    def test_invalid_rejected(self, raw):
        """Test that non-object or invalid text is rejected."""
        with pytest.raises(InvalidPolicyDocumentError):
            normalize(raw)


class TestValidatePolicyJson:
    """Test configuration-time validation."""

    def test_valid(self):
        """Test that a valid policy passes."""
        validate_policy_json(POLICY)

    def test_empty(self):
        """Test that blank text is rejected."""
        with pytest.raises(InvalidPolicyDocumentError, match="empty"):
            validate_policy_json("   ")

    def test_not_object(self):
        """Test that text not starting with a brace is rejected."""
        with pytest.raises(InvalidPolicyDocumentError, match="not a JSON object"):
            validate_policy_json('["Statement"]')

    def test_invalid_json(self):
        """Test that malformed JSON is rejected."""
        with pytest.raises(InvalidPolicyDocumentError, match="invalid JSON"):
            validate_policy_json('{"Version": "2012-10-17",}')


class TestReconcile:
    """Test choosing the value persisted after a read."""

    def test_equivalent_keeps_declared(self):
        """Test that formatting-only differences keep the declared text."""
        declared = '{"b": 2, "a": 1}'
        remote = '{"a":1,"b":2}'
        assert reconcile(declared, remote) == declared

    def test_drift_returns_normalized_remote(self):
        """Test that a real difference surfaces the remote document."""
        declared = '{"a": 1}'
        remote = '{ "a": 2 }'
        assert reconcile(declared, remote) == '{"a":2}'

    def test_empty_declared_returns_remote(self):
        """Test that import (no declared text) takes the remote document."""
        assert reconcile("", '{ "a": 1 }') == '{"a":1}'

    def test_iam_equivalent_keeps_declared(self):
        """Test that service-side reformatting of a policy is not drift."""
        remote = json.dumps({
            "Statement": [{
                "Resource": ["*"],
                "Action": ["s3:ListBucket", "s3:GetObject"],
                "Effect": "Allow",
            }],
            "Version": "2012-10-17",
        })
        assert reconcile(POLICY, remote) == POLICY

    def test_invalid_declared(self):
        """Test that an unparseable declared document is an error."""
        with pytest.raises(InvalidPolicyDocumentError):
            reconcile("{", '{"a": 1}')

    def test_invalid_remote(self):
        """Test that an unparseable remote document is an error."""
        with pytest.raises(InvalidPolicyDocumentError):
            reconcile('{"a": 1}', "{")


class TestSuppressDiff:
    """Test plan-time diff suppression."""

    def test_key_order(self):
        """Test that key order is not a difference."""
        assert suppress_diff('{"a":1,"b":2}', '{"b":2,"a":1}') is True

    def test_value_change(self):
        """Test that a changed value is a difference."""
        assert suppress_diff('{"a":1}', '{"a":2}') is False

    def test_unparseable_not_suppressed(self):
        """Test that invalid text never suppresses a diff."""
        assert suppress_diff('{"a":1}', "garbage") is False


class TestEquivalence:
    """Test structural equivalence rules."""

    def test_bool_is_not_number(self):
        """Test that true and 1 differ."""
        assert not policies_are_equivalent({"a": True}, {"a": 1})

    def test_int_equals_float(self):
        """Test that 1 and 1.0 are the same JSON number."""
        assert policies_are_equivalent({"a": 1}, {"a": 1.0})

    def test_plain_list_order_matters(self):
        """Test that lists outside policy statements are ordered."""
        assert not policies_are_equivalent({"a": [1, 2]}, {"a": [2, 1]})

    def test_statement_order_ignored(self):
        """Test that statement order does not matter."""
        first = {"Version": "2012-10-17", "Statement": [
            {"Effect": "Allow", "Action": "s3:GetObject", "Resource": "*"},
            {"Effect": "Deny", "Action": "s3:DeleteObject", "Resource": "*"},
        ]}
        second = {"Version": "2012-10-17", "Statement": [
            {"Effect": "Deny", "Action": "s3:DeleteObject", "Resource": "*"},
            {"Effect": "Allow", "Action": "s3:GetObject", "Resource": "*"},
        ]}
        assert policies_are_equivalent(first, second)

    def test_single_statement_object(self):
        """Test that a bare statement object equals a one-element list."""
        statement = {"Effect": "Allow", "Action": "iam:GetUser", "Resource": "*"}
        assert policies_are_equivalent(
            {"Statement": statement},
            {"Statement": [statement]},
        )

    def test_string_equals_singleton_list(self):
        """Test that Action "x" equals ["x"]."""
        assert policies_are_equivalent(
            {"Statement": [{"Effect": "Allow", "Action": "ec2:*", "Resource": "*"}]},
            {"Statement": [{"Effect": "Allow", "Action": ["ec2:*"], "Resource": ["*"]}]},
        )

    def test_different_actions(self):
        """Test that different action sets are not equivalent."""
        assert not policies_are_equivalent(
            {"Statement": [{"Effect": "Allow", "Action": ["ec2:*", "s3:*"], "Resource": "*"}]},
            {"Statement": [{"Effect": "Allow", "Action": ["ec2:*"], "Resource": "*"}]},
        )

    def test_wildcard_principal(self):
        """Test that "*" equals {"AWS": "*"}."""
        assert policies_are_equivalent(
            {"Statement": [{"Effect": "Allow", "Principal": "*", "Action": "sts:AssumeRole"}]},
            {"Statement": [{"Effect": "Allow", "Principal": {"AWS": ["*"]}, "Action": "sts:AssumeRole"}]},
        )

    def test_missing_sid_equals_empty(self):
        """Test that an absent Sid equals an empty Sid."""
        assert policies_are_equivalent(
            {"Statement": [{"Sid": "", "Effect": "Allow", "Action": "s3:*", "Resource": "*"}]},
            {"Statement": [{"Effect": "Allow", "Action": "s3:*", "Resource": "*"}]},
        )

    def test_condition_values(self):
        """Test that condition values compare as string sets."""
        assert policies_are_equivalent(
            {"Statement": [{"Effect": "Allow", "Action": "s3:*", "Resource": "*",
                            "Condition": {"Bool": {"aws:SecureTransport": True}}}]},
            {"Statement": [{"Effect": "Allow", "Action": "s3:*", "Resource": "*",
                            "Condition": {"Bool": {"aws:SecureTransport": ["true"]}}}]},
        )

    def test_numeric_condition_values(self):
        """Test that 1, 1.0 and "1" are the same condition value."""
        def statement(value):
            return {"Statement": [{"Effect": "Allow", "Action": "s3:*", "Resource": "*",
                                   "Condition": {"NumericLessThan": {"s3:max-keys": value}}}]}

        assert policies_are_equivalent(statement(1), statement(1.0))
        assert policies_are_equivalent(statement(1.0), statement(["1"]))
        assert not policies_are_equivalent(statement(1.5), statement("1"))

    def test_version_differs(self):
        """Test that a different Version is a real change."""
        assert not policies_are_equivalent(
            {"Version": "2012-10-17", "Statement": []},
            {"Version": "2008-10-17", "Statement": []},
        )
