"""
Input and output structures exchanged with the declarative state store.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import ConflictingNameError
from ..policy.normalizer import validate_policy_json


@dataclass
class PolicyDeclaration:
    """
    Declared configuration of one inline policy binding.
    """
    principal_name: str
    policy: str
    name: Optional[str] = None
    name_prefix: Optional[str] = None

    def validate(self):
        """
        Validate declared values before any remote call.

        Raises:
            ConflictingNameError: If both name and name_prefix are set
            InvalidPolicyDocumentError: If policy is not a JSON object
        """
        if self.name and self.name_prefix:
            raise ConflictingNameError(
                f"\"name\": conflicts with name_prefix ({self.name}, {self.name_prefix})"
            )
        validate_policy_json(self.policy)

    def to_dict(self) -> Dict[str, Any]:
        """Convert declaration to dictionary."""
        return {
            'principal': self.principal_name,
            'policy': self.policy,
            'name': self.name,
            'name_prefix': self.name_prefix,
        }


@dataclass
class BindingState:
    """
    Current state of a binding, as persisted by the state store.
    """
    id: str
    principal_name: str
    policy_name: str
    policy: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary."""
        return {
            'id': self.id,
            'principal': self.principal_name,
            'name': self.policy_name,
            'policy': self.policy,
        }


@dataclass
class FetchResult:
    """
    Outcome of a remote lookup: the raw document text, or not found.
    """
    document: Optional[str]
    found: bool

    @classmethod
    def missing(cls) -> 'FetchResult':
        return cls(document=None, found=False)
