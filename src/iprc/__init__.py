"""
IPRC - Inline Policy Reconciliation Core

Keeps an inline access policy attached to one principal of a cloud identity
service in line with its declared document.

Main exports:
- InlinePolicyReconciler: put / read / delete lifecycle
- EventuallyConsistentReader: read-after-write lookups
- PolicyDeclaration, BindingState: state store input and output
- LocalPolicyService: SQLite-backed identity service
"""

import logging

from .reconciler import InlinePolicyReconciler
from .reader import EventuallyConsistentReader
from .binding import (
    BindingState,
    FetchResult,
    PolicyDeclaration,
    encode_id,
    parse_id,
)
from .policy import normalize, reconcile, suppress_diff, validate_policy_json
from .remote import InlinePolicyClient, LocalPolicyService
from .errors import *

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    'InlinePolicyReconciler',
    'EventuallyConsistentReader',
    'BindingState',
    'FetchResult',
    'PolicyDeclaration',
    'encode_id',
    'parse_id',
    'normalize',
    'reconcile',
    'suppress_diff',
    'validate_policy_json',
    'InlinePolicyClient',
    'LocalPolicyService',
]
