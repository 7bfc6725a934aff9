"""
Canonical JSON serialization for stable policy comparison.
Ensures equal documents always produce identical JSON strings.
"""

import json
from typing import Any

from ..config import JSON_SEPARATORS, JSON_SORT_KEYS, JSON_ENSURE_ASCII


def _reject_constant(name: str):
    raise ValueError(f"Non-standard JSON constant: {name}")


def canonicalize(obj: Any) -> str:
    """
    Serialize an object to canonical JSON.

    Canonical properties:
    - Keys are sorted
    - No whitespace
    - Non-ASCII characters kept as-is

    Args:
        obj: Python object to serialize

    Returns:
        Canonical JSON string

    Raises:
        TypeError: If object is not JSON-serializable
    """
    try:
        return json.dumps(
            obj,
            separators=JSON_SEPARATORS,
            sort_keys=JSON_SORT_KEYS,
            ensure_ascii=JSON_ENSURE_ASCII,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise TypeError(f"Object not JSON-serializable: {e}")


def parse(json_str: str) -> Any:
    """
    Parse strict JSON text into a Python object.

    NaN and Infinity literals are rejected since they are not JSON.

    Args:
        json_str: JSON string to parse

    Returns:
        Parsed Python object

    Raises:
        ValueError: If JSON is invalid
    """
    if not isinstance(json_str, str):
        raise ValueError(f"Expected str, got {type(json_str).__name__}")

    try:
        return json.loads(json_str, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}")
