"""Utility modules for IPRC."""

from . import canonical_json
from . import retry
from . import time

__all__ = ['canonical_json', 'retry', 'time']
