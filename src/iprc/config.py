"""
Configuration constants for IPRC.
These are immutable system constants, not runtime configuration.
"""

# Identifier constants
ID_DELIMITER = ":"

# Generated policy names
UNIQUE_ID_PREFIX = "terraform-"
UNIQUE_ID_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
UNIQUE_ID_FRACTION_DIGITS = 4  # Ten-thousandths of a second
UNIQUE_ID_COUNTER_WIDTH = 8  # Hex digits of the per-process counter
UNIQUE_ID_SUFFIX_LENGTH = 26  # 18-digit timestamp + counter

# Read-after-write propagation
PROPAGATION_TIMEOUT = 120.0  # Seconds a fresh binding may stay invisible
RETRY_MIN_DELAY = 0.5
RETRY_MAX_DELAY = 10.0
RETRY_BACKOFF_FACTOR = 2.0

# Canonical JSON settings
JSON_SEPARATORS = (',', ':')  # No whitespace
JSON_SORT_KEYS = True
JSON_ENSURE_ASCII = False

# Principal types an inline policy can be attached to
PRINCIPAL_USER = "user"
PRINCIPAL_ROLE = "role"
PRINCIPAL_GROUP = "group"
VALID_PRINCIPAL_TYPES = frozenset([PRINCIPAL_USER, PRINCIPAL_ROLE, PRINCIPAL_GROUP])

# Local service database
DB_SCHEMA_VERSION = 1
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
