"""
Composite identifiers for principal/policy bindings.

An identifier is ``<principal name>:<policy name>``. Decoding splits on the
first delimiter only, so policy names may contain ``:`` but principal names
must not; no escaping is performed.
"""

from typing import Tuple

from ..config import ID_DELIMITER
from ..errors import MalformedIdentifierError


def encode_id(principal_name: str, policy_name: str) -> str:
    """
    Build the identifier of a binding.

    Args:
        principal_name: Principal the policy is attached to
        policy_name: Inline policy name

    Returns:
        Opaque identifier string
    """
    return f"{principal_name}{ID_DELIMITER}{policy_name}"


def parse_id(identifier: str) -> Tuple[str, str]:
    """
    Split an identifier back into principal name and policy name.

    Args:
        identifier: Identifier produced by encode_id

    Returns:
        (principal_name, policy_name); either part may be empty

    Raises:
        MalformedIdentifierError: If the delimiter is absent
    """
    parts = identifier.split(ID_DELIMITER, 1)
    if len(parts) != 2:
        raise MalformedIdentifierError(
            f"inline policy id ({identifier}) must be of the form "
            f"<principal name>{ID_DELIMITER}<policy name>"
        )
    return parts[0], parts[1]
