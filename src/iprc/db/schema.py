"""
Database schema of the local identity service.
All schema changes must be versioned and migrated.
"""

from ..config import DB_SCHEMA_VERSION, VALID_PRINCIPAL_TYPES


SCHEMA_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL,
    description TEXT NOT NULL
)
"""

_PRINCIPAL_TYPE_CHECK = ", ".join(f"'{t}'" for t in sorted(VALID_PRINCIPAL_TYPES))

PRINCIPALS_TABLE = f"""
CREATE TABLE IF NOT EXISTS principals (
    principal_type TEXT NOT NULL,
    principal_name TEXT NOT NULL,
    created_at TEXT NOT NULL,
    PRIMARY KEY (principal_type, principal_name),
    CHECK(principal_type IN ({_PRINCIPAL_TYPE_CHECK})),
    CHECK(length(principal_name) > 0)
)
"""

# visible_at is a monotonic clock reading; rows are hidden from reads until then
INLINE_POLICIES_TABLE = """
CREATE TABLE IF NOT EXISTS inline_policies (
    principal_type TEXT NOT NULL,
    principal_name TEXT NOT NULL,
    policy_name TEXT NOT NULL,
    document TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    visible_at REAL NOT NULL,
    PRIMARY KEY (principal_type, principal_name, policy_name),
    FOREIGN KEY (principal_type, principal_name)
        REFERENCES principals(principal_type, principal_name)
        ON DELETE CASCADE
)
"""


def get_schema_statements() -> list[str]:
    """Get all schema creation statements in order."""
    return [
        SCHEMA_VERSION_TABLE,
        PRINCIPALS_TABLE,
        INLINE_POLICIES_TABLE,
    ]


def get_initial_version_insert() -> tuple[str, tuple]:
    """Get SQL and parameters recording the initial schema version."""
    from ..utils.time import now

    return (
        "INSERT INTO schema_version (version, applied_at, description) VALUES (?, ?, ?)",
        (DB_SCHEMA_VERSION, now(), "Initial schema"),
    )


REQUIRED_TABLES = ('schema_version', 'principals', 'inline_policies')
