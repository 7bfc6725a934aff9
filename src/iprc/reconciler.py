"""
IPRC Public API - Inline Policy Reconciliation Core

Lifecycle of one inline policy attached to one principal: put (create and
update are the same upsert), read back against the declared document, and
delete. All remote state flows through the InlinePolicyClient contract.
"""

import logging
import re
from typing import Optional
from urllib.parse import unquote_plus

from .binding.identifier import encode_id, parse_id
from .binding.model import BindingState, PolicyDeclaration
from .binding.naming import prefixed_unique_id, unique_id
from .errors import RemoteDeleteError, RemoteReadError, RemoteServiceError, RemoteWriteError
from .policy.normalizer import normalize, reconcile
from .reader import EventuallyConsistentReader
from .remote.client import InlinePolicyClient

logger = logging.getLogger(__name__)

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def query_unescape(text: str) -> str:
    """
    Decode URL query escaping, rejecting malformed %XX sequences.

    Raises:
        ValueError: If a "%" is not followed by two hex digits
    """
    match = _BAD_ESCAPE.search(text)
    if match:
        raise ValueError(f"invalid URL escape {text[match.start():match.start() + 3]!r}")
    return unquote_plus(text)


class InlinePolicyReconciler:
    """
    Reconciles declared inline policies with the remote identity service.

    The caller serializes operations on the same identifier; nothing here
    provides mutual exclusion across calls.
    """

    def __init__(
        self,
        client: InlinePolicyClient,
        reader: Optional[EventuallyConsistentReader] = None,
    ):
        """
        Initialize reconciler.

        Args:
            client: Remote identity service client
            reader: Reader used for read-back; defaults to one over ``client``
        """
        self.client = client
        self.reader = reader or EventuallyConsistentReader(client)

    # ==================== Write ====================

    def put(
        self,
        principal_name: str,
        policy: str,
        name: Optional[str] = None,
        name_prefix: Optional[str] = None,
        is_new: bool = True,
        current_id: Optional[str] = None,
    ) -> str:
        """
        Create or overwrite an inline policy.

        The policy name is chosen once: for an existing binding it is taken
        from ``current_id`` and any supplied name or prefix is ignored.

        Args:
            principal_name: Principal to attach the policy to
            policy: Declared policy document text
            name: Explicit policy name
            name_prefix: Prefix for a generated policy name
            is_new: Whether this call creates the binding
            current_id: Identifier of the existing binding when not new

        Returns:
            Identifier of the binding

        Raises:
            InvalidPolicyDocumentError: If the document does not parse
            MalformedIdentifierError: If ``current_id`` is malformed
            RemoteWriteError: If the remote write fails
        """
        document = normalize(policy)

        if not is_new:
            if current_id is None:
                raise ValueError("current_id is required to update an existing binding")
            _, policy_name = parse_id(current_id)
        elif name:
            policy_name = name
        elif name_prefix:
            policy_name = prefixed_unique_id(name_prefix)
        else:
            policy_name = unique_id()

        identifier = encode_id(principal_name, policy_name)
        try:
            self.client.put_inline_policy(principal_name, policy_name, document)
        except RemoteServiceError as e:
            raise RemoteWriteError(identifier, e) from e

        logger.info("Put inline policy (%s)", identifier)
        return identifier

    # ==================== Read ====================

    def read(
        self,
        identifier: str,
        declared_policy: str = "",
        is_freshly_created: bool = False,
        deadline: Optional[float] = None,
    ) -> Optional[BindingState]:
        """
        Refresh a binding from the remote service.

        Args:
            identifier: Binding identifier
            declared_policy: Policy text currently held in state
            is_freshly_created: Whether the binding was created by this operation
            deadline: Absolute monotonic deadline of the overall operation

        Returns:
            BindingState to persist, or None when the binding no longer
            exists and should be removed from state

        Raises:
            MalformedIdentifierError: If the identifier is malformed
            InvalidPolicyDocumentError: If either document fails to parse
            RemoteReadError: If the remote read fails
        """
        principal_name, policy_name = parse_id(identifier)

        result = self.reader.fetch(
            principal_name,
            policy_name,
            is_freshly_created,
            deadline=deadline,
        )
        if not result.found:
            logger.warning("Inline policy (%s) not found, removing from state", identifier)
            return None

        try:
            remote_policy = query_unescape(result.document)
        except ValueError as e:
            raise RemoteReadError(identifier, e) from e
        policy_to_set = reconcile(declared_policy, remote_policy)

        return BindingState(
            id=identifier,
            principal_name=principal_name,
            policy_name=policy_name,
            policy=policy_to_set,
        )

    # ==================== Delete ====================

    def delete(self, identifier: str):
        """
        Delete a binding; deleting one that is already gone succeeds.

        Raises:
            MalformedIdentifierError: If the identifier is malformed
            RemoteDeleteError: If the remote delete fails for another reason
        """
        principal_name, policy_name = parse_id(identifier)

        try:
            self.client.delete_inline_policy(principal_name, policy_name)
        except RemoteServiceError as e:
            if e.is_not_found:
                logger.debug("Inline policy (%s) already deleted", identifier)
                return
            raise RemoteDeleteError(identifier, e) from e

        logger.info("Deleted inline policy (%s)", identifier)

    # ==================== Flows ====================

    def apply(
        self,
        declaration: PolicyDeclaration,
        current_id: Optional[str] = None,
        deadline: Optional[float] = None,
    ) -> BindingState:
        """
        Write a declared binding and read it back.

        Creates the binding when ``current_id`` is None, otherwise updates
        it in place.

        Args:
            declaration: Declared configuration
            current_id: Identifier of the existing binding, if any
            deadline: Absolute monotonic deadline of the overall operation

        Returns:
            BindingState to persist

        Raises:
            DeclarationError: If the declaration is invalid
            RemoteReadError: If the written binding cannot be read back
        """
        declaration.validate()

        is_new = current_id is None
        identifier = self.put(
            declaration.principal_name,
            declaration.policy,
            name=declaration.name,
            name_prefix=declaration.name_prefix,
            is_new=is_new,
            current_id=current_id,
        )

        state = self.read(
            identifier,
            declared_policy=normalize(declaration.policy),
            is_freshly_created=is_new,
            deadline=deadline,
        )
        if state is None:
            # Only reachable for updates: the binding vanished right after the write
            raise RemoteWriteError(identifier, detail="inline policy disappeared after write")
        return state

    def import_state(self, identifier: str) -> Optional[BindingState]:
        """
        Adopt an existing inline policy by identifier.

        Returns:
            BindingState with the normalized remote document, or None if absent
        """
        return self.read(identifier, declared_policy="", is_freshly_created=False)
