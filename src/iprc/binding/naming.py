"""
Generated policy names.

Names are a prefix, a UTC timestamp and a per-process counter, so two
names generated by the same process never collide and sort in creation order.
"""

import itertools

from ..config import UNIQUE_ID_PREFIX, UNIQUE_ID_COUNTER_WIDTH
from ..utils.time import compact_timestamp

_counter = itertools.count(1)
_COUNTER_MASK = (1 << (4 * UNIQUE_ID_COUNTER_WIDTH)) - 1


def prefixed_unique_id(prefix: str) -> str:
    """
    Generate a unique name starting with ``prefix``.

    Args:
        prefix: User supplied name prefix (may be empty)

    Returns:
        prefix + timestamp + hex counter
    """
    count = next(_counter) & _COUNTER_MASK
    return f"{prefix}{compact_timestamp()}{count:0{UNIQUE_ID_COUNTER_WIDTH}x}"


def unique_id() -> str:
    """Generate a unique name with the default prefix."""
    return prefixed_unique_id(UNIQUE_ID_PREFIX)
