"""
Tests for binding identifiers and generated policy names.
"""

from datetime import datetime, timedelta, timezone

import pytest

from iprc.binding.identifier import encode_id, parse_id
from iprc.binding.naming import prefixed_unique_id, unique_id
from iprc.config import UNIQUE_ID_PREFIX, UNIQUE_ID_SUFFIX_LENGTH
from iprc.errors import MalformedIdentifierError
from iprc.utils.time import MonotonicClock


class TestIdentifierCodec:
    """Test encoding and decoding of binding identifiers."""

    def test_encode(self):
        """Test that principal and policy name are joined with a colon."""
        assert encode_id("alice", "read-only") == "alice:read-only"

    @pytest.mark.parametrize("principal,policy", [
        ("alice", "read-only"),
        ("svc.deployer", "terraform-20261018174530123400000001"),
        ("bob", "a:b:c"),
        ("", "policy"),
        ("carol", ""),
    ])
    def test_round_trip(self, principal, policy):
        """Test that decode(encode(p, n)) returns (p, n)."""
        assert parse_id(encode_id(principal, policy)) == (principal, policy)

    def test_policy_name_keeps_delimiters(self):
        """Test that decoding splits on the first delimiter only."""
        assert parse_id("alice:ns:policy") == ("alice", "ns:policy")

    def test_missing_delimiter_rejected(self):
        """Test that an identifier without a delimiter is malformed."""
        with pytest.raises(MalformedIdentifierError):
            parse_id("no-delimiter-here")

    def test_empty_identifier_rejected(self):
        """Test that the empty identifier is malformed."""
        with pytest.raises(MalformedIdentifierError):
            parse_id("")

    def test_delimiter_in_principal_not_escaped(self):
        """Test that a principal containing the delimiter does not round-trip."""
        assert parse_id(encode_id("a:b", "policy")) == ("a", "b:policy")


class TestGeneratedNames:
    """Test generated policy names."""

    def test_unique_id_default_prefix(self):
        """Test that unique names use the default prefix."""
        name = unique_id()
        assert name.startswith(UNIQUE_ID_PREFIX)
        assert len(name) == len(UNIQUE_ID_PREFIX) + UNIQUE_ID_SUFFIX_LENGTH

    def test_prefixed_unique_id(self):
        """Test that the user prefix is kept verbatim."""
        name = prefixed_unique_id("deploy-")
        assert name.startswith("deploy-")
        suffix = name[len("deploy-"):]
        assert len(suffix) == UNIQUE_ID_SUFFIX_LENGTH
        assert suffix[:18].isdigit()

    def test_names_unique_and_ordered(self):
        """Test that names generated in sequence are distinct and sorted."""
        names = [unique_id() for _ in range(50)]
        assert len(set(names)) == len(names)
        assert names == sorted(names)


class TestMonotonicClock:
    """Test the clock behind generated names."""

    def test_never_goes_backwards(self):
        """Test that a system clock stepping back does not move the reading back."""
        start = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)
        readings = iter([start, start - timedelta(seconds=5), start + timedelta(seconds=1)])
        clock = MonotonicClock(source=lambda: next(readings))

        first = clock.now()
        second = clock.now()
        third = clock.now()

        assert first == second == start
        assert third > second
