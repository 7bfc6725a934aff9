"""
Read-after-write lookups against an eventually consistent service.

A binding that was just written may not be visible to reads yet. Only
then is a not-found answer retried; for an existing binding not-found means
it was deleted out of band and is reported as missing, not as an error.
"""

import logging
import time
from typing import Callable, Optional

from .binding.identifier import encode_id
from .binding.model import FetchResult
from .config import PROPAGATION_TIMEOUT
from .errors import (
    PropagationTimeoutError,
    RemoteReadError,
    RemoteServiceError,
)
from .remote.client import InlinePolicyClient
from .utils.retry import (
    BackoffPolicy,
    NonRetryableError,
    RetryableError,
    RetryTimeoutError,
    retry_within,
)

logger = logging.getLogger(__name__)


class EventuallyConsistentReader:
    """
    Fetches inline policy documents, tolerating propagation lag after creation.
    """

    def __init__(
        self,
        client: InlinePolicyClient,
        timeout: float = PROPAGATION_TIMEOUT,
        backoff: Optional[BackoffPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize reader.

        Args:
            client: Remote identity service client
            timeout: Propagation window in seconds
            backoff: Delay policy between retries
            sleep: Sleep function (injectable for tests)
            clock: Monotonic clock (injectable for tests)
        """
        self.client = client
        self.timeout = timeout
        self.backoff = backoff or BackoffPolicy()
        self.sleep = sleep
        self.clock = clock

    def fetch(
        self,
        principal_name: str,
        policy_name: str,
        is_freshly_created: bool,
        deadline: Optional[float] = None,
    ) -> FetchResult:
        """
        Look up an inline policy document.

        Args:
            principal_name: Principal the policy is attached to
            policy_name: Inline policy name
            is_freshly_created: Whether the binding was written by this operation
            deadline: Absolute ``clock`` value of the caller's overall deadline

        Returns:
            FetchResult with the raw (possibly URL-escaped) document, or
            ``found=False`` when an existing binding has disappeared

        Raises:
            PropagationTimeoutError: If a fresh binding never became visible
            RemoteReadError: For any other remote failure or an empty document
        """
        identifier = encode_id(principal_name, policy_name)

        def lookup() -> str:
            try:
                return self.client.get_inline_policy(principal_name, policy_name)
            except RemoteServiceError as e:
                if is_freshly_created and e.is_not_found:
                    raise RetryableError(e)
                raise NonRetryableError(e)

        error: Optional[RemoteServiceError] = None
        document = None
        try:
            document = retry_within(
                self.timeout,
                lookup,
                deadline=deadline,
                backoff=self.backoff,
                sleep=self.sleep,
                clock=self.clock,
            )
        except RetryTimeoutError:
            logger.debug("Inline policy (%s) not visible after %.1fs, checking once more", identifier, self.timeout)
            try:
                document = self.client.get_inline_policy(principal_name, policy_name)
            except RemoteServiceError as e:
                error = e
        except RemoteServiceError as e:
            error = e

        if error is not None:
            if error.is_not_found and not is_freshly_created:
                return FetchResult.missing()
            if error.is_not_found:
                raise PropagationTimeoutError(identifier, error) from error
            raise RemoteReadError(identifier, error) from error

        if not document:
            raise RemoteReadError(identifier, detail="empty response")

        return FetchResult(document=document, found=True)
