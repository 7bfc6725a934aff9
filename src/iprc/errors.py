"""
Domain-specific exceptions for IPRC.
All exceptions are explicit and carry meaningful context.
"""

from enum import Enum
from typing import Optional


class IPRCError(Exception):
    """Base exception for all IPRC errors."""
    pass


class PolicyDocumentError(IPRCError):
    """Base exception for policy-document errors."""
    pass


class InvalidPolicyDocumentError(PolicyDocumentError):
    """Raised when text does not parse as a policy document."""
    pass


class IdentifierError(IPRCError):
    """Base exception for binding identifier errors."""
    pass


class MalformedIdentifierError(IdentifierError):
    """Raised when an identifier lacks the principal/policy delimiter."""
    pass


class DeclarationError(IPRCError):
    """Base exception for invalid declared configuration."""
    pass


class ConflictingNameError(DeclarationError):
    """Raised when both an explicit name and a name prefix are declared."""
    pass


class RemoteErrorKind(Enum):
    """Classification of failures reported by the remote identity service."""
    NOT_FOUND = "not_found"
    MALFORMED_DOCUMENT = "malformed_document"
    THROTTLED = "throttled"
    LIMIT_EXCEEDED = "limit_exceeded"
    SERVICE = "service"


class RemoteServiceError(IPRCError):
    """Raised by identity service clients when a remote call fails."""

    def __init__(self, kind: RemoteErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def is_not_found(self) -> bool:
        return self.kind is RemoteErrorKind.NOT_FOUND


class RemoteOperationError(IPRCError):
    """
    Base exception for a failed lifecycle operation against the remote service.

    Carries the operation name and the binding identifier it was acting on.
    """

    operation = "operating on"

    def __init__(self, identifier: str, cause: Optional[Exception] = None, detail: Optional[str] = None):
        self.identifier = identifier
        self.cause = cause
        reason = detail if detail is not None else str(cause)
        super().__init__(f"{self.operation} inline policy ({identifier}): {reason}")


class RemoteWriteError(RemoteOperationError):
    """Raised when the remote upsert of an inline policy fails."""
    operation = "putting"


class RemoteReadError(RemoteOperationError):
    """Raised when an inline policy cannot be read back."""
    operation = "reading"


class PropagationTimeoutError(RemoteReadError):
    """Raised when a freshly created binding never became visible."""
    pass


class RemoteDeleteError(RemoteOperationError):
    """Raised when the remote delete of an inline policy fails."""
    operation = "deleting"


class DatabaseError(IPRCError):
    """Base exception for local service database errors."""
    pass


class SchemaError(DatabaseError):
    """Raised when database schema operations fail."""
    pass
