"""Remote identity service clients for IPRC."""

from .client import InlinePolicyClient
from .local import LocalPolicyService

__all__ = ['InlinePolicyClient', 'LocalPolicyService']
