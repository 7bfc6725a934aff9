"""
Local identity service backed by SQLite.

Implements the InlinePolicyClient contract against a local database so the
reconciler can run without a cloud account. It behaves like the real service
where the reconciler depends on it: documents come back URL-escaped, writes
to unknown principals fail with NOT_FOUND, and a newly written policy can be
kept invisible to reads for ``propagation_delay`` seconds.
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, List
from urllib.parse import quote

from ..config import PRINCIPAL_USER, VALID_PRINCIPAL_TYPES
from ..db.connection import DatabaseConnection
from ..db.migrations import initialize_schema
from ..errors import DatabaseError, RemoteErrorKind, RemoteServiceError
from ..utils.canonical_json import parse
from ..utils.time import now
from .client import not_found

logger = logging.getLogger(__name__)


class LocalPolicyService:
    """
    Inline policies of one principal type, stored in SQLite.
    """

    def __init__(
        self,
        db_path: str = ":memory:",
        principal_type: str = PRINCIPAL_USER,
        propagation_delay: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the service.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
            principal_type: user, role or group
            propagation_delay: Seconds a new policy stays invisible to reads
            clock: Monotonic clock used for visibility
        """
        if principal_type not in VALID_PRINCIPAL_TYPES:
            raise ValueError(f"Invalid principal type: {principal_type}")
        if propagation_delay < 0:
            raise ValueError(f"Invalid propagation delay: {propagation_delay}")

        self.principal_type = principal_type
        self.propagation_delay = propagation_delay
        self.clock = clock

        self.db = DatabaseConnection(db_path)
        self.db.connect()
        initialize_schema(self.db)

    def close(self):
        """Close database connection."""
        self.db.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ==================== Principals ====================

    def create_principal(self, principal_name: str):
        """
        Register a principal that inline policies can be attached to.

        Raises:
            RemoteServiceError: SERVICE if the principal already exists
        """
        if self.principal_exists(principal_name):
            raise RemoteServiceError(
                RemoteErrorKind.SERVICE,
                f"{self._label()} with name {principal_name} already exists.",
            )
        with self._service_errors():
            with self.db.transaction():
                self.db.execute(
                    "INSERT INTO principals (principal_type, principal_name, created_at) VALUES (?, ?, ?)",
                    (self.principal_type, principal_name, now()),
                )

    def delete_principal(self, principal_name: str):
        """Remove a principal together with all of its inline policies."""
        self._require_principal(principal_name)
        with self._service_errors():
            with self.db.transaction():
                self.db.execute(
                    "DELETE FROM principals WHERE principal_type = ? AND principal_name = ?",
                    (self.principal_type, principal_name),
                )

    def principal_exists(self, principal_name: str) -> bool:
        row = self.db.fetch_one(
            "SELECT 1 FROM principals WHERE principal_type = ? AND principal_name = ?",
            (self.principal_type, principal_name),
        )
        return row is not None

    # ==================== Inline policies ====================

    def put_inline_policy(self, principal_name: str, policy_name: str, document: str) -> None:
        """
        Create or overwrite an inline policy.

        Only the first write of a name starts the invisibility window;
        overwrites are visible as soon as the original write is.

        Raises:
            RemoteServiceError: NOT_FOUND for an unknown principal,
                MALFORMED_DOCUMENT if the document is not a JSON object
        """
        self._require_principal(principal_name)
        self._check_document(document)

        logger.debug("PutPolicy %s %s/%s", self.principal_type, principal_name, policy_name)
        with self._service_errors():
            with self.db.transaction():
                self.db.execute(
                    """
                    INSERT INTO inline_policies (
                        principal_type, principal_name, policy_name, document, updated_at, visible_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?)
                    ON CONFLICT (principal_type, principal_name, policy_name)
                    DO UPDATE SET document = excluded.document, updated_at = excluded.updated_at
                    """,
                    (
                        self.principal_type,
                        principal_name,
                        policy_name,
                        document,
                        now(),
                        self.clock() + self.propagation_delay,
                    ),
                )

    def get_inline_policy(self, principal_name: str, policy_name: str) -> str:
        """
        Return the URL-escaped document of a visible inline policy.

        Raises:
            RemoteServiceError: NOT_FOUND if the principal or the policy is
                missing, or the policy is not visible yet
        """
        self._require_principal(principal_name)

        logger.debug("GetPolicy %s %s/%s", self.principal_type, principal_name, policy_name)
        row = self.db.fetch_one(
            """
            SELECT document, visible_at FROM inline_policies
            WHERE principal_type = ? AND principal_name = ? AND policy_name = ?
            """,
            (self.principal_type, principal_name, policy_name),
        )
        if row is None or row['visible_at'] > self.clock():
            raise not_found(
                f"The {self.principal_type} policy with name {policy_name} cannot be found."
            )
        return quote(row['document'], safe="")

    def delete_inline_policy(self, principal_name: str, policy_name: str) -> None:
        """
        Delete an inline policy, visible or not.

        Raises:
            RemoteServiceError: NOT_FOUND if the principal or the policy is missing
        """
        self._require_principal(principal_name)

        logger.debug("DeletePolicy %s %s/%s", self.principal_type, principal_name, policy_name)
        with self._service_errors():
            with self.db.transaction():
                cursor = self.db.execute(
                    """
                    DELETE FROM inline_policies
                    WHERE principal_type = ? AND principal_name = ? AND policy_name = ?
                    """,
                    (self.principal_type, principal_name, policy_name),
                )
        if cursor.rowcount == 0:
            raise not_found(
                f"The {self.principal_type} policy with name {policy_name} cannot be found."
            )

    def list_inline_policies(self, principal_name: str) -> List[str]:
        """Names of all inline policies of a principal, visible or not."""
        self._require_principal(principal_name)
        rows = self.db.fetch_all(
            """
            SELECT policy_name FROM inline_policies
            WHERE principal_type = ? AND principal_name = ?
            ORDER BY policy_name
            """,
            (self.principal_type, principal_name),
        )
        return [row['policy_name'] for row in rows]

    # ==================== Helpers ====================

    def _label(self) -> str:
        return self.principal_type.capitalize()

    def _require_principal(self, principal_name: str):
        if not self.principal_exists(principal_name):
            raise not_found(f"The {self.principal_type} with name {principal_name} cannot be found.")

    def _check_document(self, document: str):
        try:
            parsed = parse(document)
        except ValueError as e:
            raise RemoteServiceError(RemoteErrorKind.MALFORMED_DOCUMENT, f"Syntax errors in policy: {e}")
        if not isinstance(parsed, dict):
            raise RemoteServiceError(RemoteErrorKind.MALFORMED_DOCUMENT, "Syntax errors in policy.")

    @contextmanager
    def _service_errors(self):
        try:
            yield
        except DatabaseError as e:
            raise RemoteServiceError(RemoteErrorKind.SERVICE, str(e)) from e
