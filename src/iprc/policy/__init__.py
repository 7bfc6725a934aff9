"""Policy document handling for IPRC."""

from .equivalence import policies_are_equivalent
from .normalizer import normalize, parse_policy, reconcile, suppress_diff, validate_policy_json

__all__ = [
    'policies_are_equivalent',
    'normalize',
    'parse_policy',
    'reconcile',
    'suppress_diff',
    'validate_policy_json',
]
