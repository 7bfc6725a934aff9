"""Binding identity and state structures for IPRC."""

from .identifier import encode_id, parse_id
from .naming import unique_id, prefixed_unique_id
from .model import PolicyDeclaration, BindingState, FetchResult

__all__ = [
    'encode_id',
    'parse_id',
    'unique_id',
    'prefixed_unique_id',
    'PolicyDeclaration',
    'BindingState',
    'FetchResult',
]
