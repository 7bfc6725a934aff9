"""
Policy document normalization and diff suppression.

Documents are compared by structure, never by text, so formatting changes
introduced by the remote service do not show up as drift.
"""

from typing import Any

from ..errors import InvalidPolicyDocumentError
from ..utils.canonical_json import canonicalize, parse
from .equivalence import policies_are_equivalent


def parse_policy(raw: str) -> Any:
    """
    Parse policy text into a JSON object.

    Args:
        raw: Policy document text

    Returns:
        Parsed document (a dict)

    Raises:
        InvalidPolicyDocumentError: If the text is not a JSON object
    """
    try:
        document = parse(raw)
    except ValueError as e:
        raise InvalidPolicyDocumentError(f"policy ({raw}) is invalid JSON: {e}")

    if not isinstance(document, dict):
        raise InvalidPolicyDocumentError(
            f"policy ({raw}) must be a JSON object, got {type(document).__name__}"
        )
    return document


def normalize(raw: str) -> str:
    """
    Canonicalize a policy document.

    Sorted keys and compact separators; idempotent.

    Raises:
        InvalidPolicyDocumentError: If the text does not parse
    """
    return canonicalize(parse_policy(raw))


def validate_policy_json(raw: str):
    """
    Validate policy text at configuration-acceptance time.

    Args:
        raw: Declared policy text

    Raises:
        InvalidPolicyDocumentError: If empty, not an object, or invalid JSON
    """
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidPolicyDocumentError("policy contains an invalid JSON policy: empty document")

    if not raw.lstrip().startswith("{"):
        raise InvalidPolicyDocumentError(
            "policy contains an invalid JSON policy: not a JSON object"
        )

    parse_policy(raw)


def reconcile(declared: str, remote: str) -> str:
    """
    Choose the policy text to persist after reading the remote document.

    Args:
        declared: Last declared policy text (may be empty on import)
        remote: Policy text just fetched from the remote service

    Returns:
        ``declared`` unchanged when equivalent to ``remote``,
        otherwise ``remote`` normalized

    Raises:
        InvalidPolicyDocumentError: If either text fails to parse
    """
    remote_document = parse_policy(remote)
    if not declared:
        return canonicalize(remote_document)

    declared_document = parse_policy(declared)
    if policies_are_equivalent(declared_document, remote_document):
        return declared
    return canonicalize(remote_document)


def suppress_diff(old: str, new: str) -> bool:
    """
    Whether a planned change from ``old`` to ``new`` is only formatting.

    Args:
        old: Policy text currently in state
        new: Policy text in configuration

    Returns:
        True if both denote equivalent documents; False if they differ
        or either fails to parse
    """
    try:
        return policies_are_equivalent(parse_policy(old), parse_policy(new))
    except InvalidPolicyDocumentError:
        return False
