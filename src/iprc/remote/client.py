"""
Contract of the remote identity service as consumed by the reconciler.

Implementations report failures by raising RemoteServiceError with a
RemoteErrorKind; callers branch on the kind, never on message text.
"""

from typing import Protocol, runtime_checkable

from ..errors import RemoteErrorKind, RemoteServiceError


@runtime_checkable
class InlinePolicyClient(Protocol):
    """
    Inline policy operations on a single principal type.
    """

    def put_inline_policy(self, principal_name: str, policy_name: str, document: str) -> None:
        """Create or overwrite the named inline policy of a principal."""
        ...

    def get_inline_policy(self, principal_name: str, policy_name: str) -> str:
        """Return the stored document text, possibly URL-escaped."""
        ...

    def delete_inline_policy(self, principal_name: str, policy_name: str) -> None:
        """Delete the named inline policy of a principal."""
        ...


def not_found(message: str) -> RemoteServiceError:
    """Build a NOT_FOUND service error."""
    return RemoteServiceError(RemoteErrorKind.NOT_FOUND, message)
