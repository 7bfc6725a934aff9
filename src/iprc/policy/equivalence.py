"""
Structural equivalence of policy documents.

Plain JSON values are equal when their parsed structures are equal. Documents
carrying a ``Statement`` additionally get the leniency the identity service
applies when it stores a policy: statement order does not matter, a single
string equals a one-element list, a wildcard principal equals ``{"AWS": "*"}``
and a missing Sid equals an empty one.
"""

from typing import Any, Dict, FrozenSet, List, Optional

from ..utils.canonical_json import canonicalize

STATEMENT_KEY = "Statement"

_SET_VALUED_KEYS = ("Action", "NotAction", "Resource", "NotResource")
_PRINCIPAL_KEYS = ("Principal", "NotPrincipal")
_HANDLED_KEYS = frozenset(
    ("Sid", "Effect", "Condition") + _SET_VALUED_KEYS + _PRINCIPAL_KEYS
)


def policies_are_equivalent(first: Any, second: Any) -> bool:
    """
    Decide whether two parsed documents denote the same policy.

    Args:
        first: Parsed JSON value
        second: Parsed JSON value

    Returns:
        True if equivalent
    """
    if _is_policy_document(first) and _is_policy_document(second):
        return _documents_equivalent(first, second)
    return json_equal(first, second)


def json_equal(first: Any, second: Any) -> bool:
    """
    Structural equality of parsed JSON.

    Unlike ``==``, booleans never equal numbers; ints and floats with the
    same value are equal since JSON has a single number type.
    """
    if isinstance(first, bool) or isinstance(second, bool):
        return isinstance(first, bool) and isinstance(second, bool) and first is second
    if isinstance(first, (int, float)) and isinstance(second, (int, float)):
        return first == second
    if isinstance(first, dict) and isinstance(second, dict):
        if first.keys() != second.keys():
            return False
        return all(json_equal(first[key], second[key]) for key in first)
    if isinstance(first, list) and isinstance(second, list):
        if len(first) != len(second):
            return False
        return all(json_equal(a, b) for a, b in zip(first, second))
    if type(first) is not type(second):
        return False
    return first == second


def _is_policy_document(value: Any) -> bool:
    return isinstance(value, dict) and STATEMENT_KEY in value


def _documents_equivalent(first: Dict[str, Any], second: Dict[str, Any]) -> bool:
    first_rest = {k: v for k, v in first.items() if k != STATEMENT_KEY}
    second_rest = {k: v for k, v in second.items() if k != STATEMENT_KEY}
    if not json_equal(first_rest, second_rest):
        return False

    first_statements = _as_list(first[STATEMENT_KEY])
    second_statements = _as_list(second[STATEMENT_KEY])
    if len(first_statements) != len(second_statements):
        return False

    # Order-insensitive matching; each statement may be used once
    unmatched = list(second_statements)
    for statement in first_statements:
        for index, candidate in enumerate(unmatched):
            if _statements_equivalent(statement, candidate):
                del unmatched[index]
                break
        else:
            return False
    return True


def _statements_equivalent(first: Any, second: Any) -> bool:
    if not isinstance(first, dict) or not isinstance(second, dict):
        return json_equal(first, second)

    if first.get("Sid", "") != second.get("Sid", ""):
        return False

    if not json_equal(first.get("Effect"), second.get("Effect")):
        return False

    for key in _SET_VALUED_KEYS:
        if _string_set(first.get(key)) != _string_set(second.get(key)):
            return False

    for key in _PRINCIPAL_KEYS:
        if _principal_map(first.get(key)) != _principal_map(second.get(key)):
            return False

    if _condition_map(first.get("Condition")) != _condition_map(second.get("Condition")):
        return False

    first_rest = {k: v for k, v in first.items() if k not in _HANDLED_KEYS}
    second_rest = {k: v for k, v in second.items() if k not in _HANDLED_KEYS}
    return json_equal(first_rest, second_rest)


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    return [value]


def _string_set(value: Any) -> Optional[FrozenSet[str]]:
    """String-or-list value as a set; non-strings keep their JSON form."""
    if value is None:
        return None
    return frozenset(_as_string(item) for item in _as_list(value))


def _as_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    return canonicalize(value)


def _principal_map(value: Any) -> Optional[Dict[str, FrozenSet[str]]]:
    if value is None:
        return None
    if value == "*":
        return {"AWS": frozenset(["*"])}
    if not isinstance(value, dict):
        return {"": _string_set(value)}
    return {kind: _string_set(ids) for kind, ids in value.items()}


def _condition_map(value: Any) -> Optional[Dict[str, Any]]:
    """
    Condition blocks compare operator by operator and key by key.
    Values are sets of strings; ``true`` and ``"true"`` are the same value.
    """
    if value is None:
        return None
    if not isinstance(value, dict):
        return {"": _as_string(value)}

    result: Dict[str, Any] = {}
    for operator, block in value.items():
        if isinstance(block, dict):
            result[operator] = {
                key: frozenset(_condition_value(item) for item in _as_list(values))
                for key, values in block.items()
            }
        else:
            result[operator] = _as_string(block)
    return result


def _condition_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return _as_string(value)
