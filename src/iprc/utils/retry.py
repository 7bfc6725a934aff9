"""
Bounded retry with exponential backoff.

The callback decides per attempt whether a failure may be retried by
raising RetryableError or NonRetryableError around the underlying error.
"""

import logging
import time
from typing import Any, Callable, Optional

from ..config import RETRY_MIN_DELAY, RETRY_MAX_DELAY, RETRY_BACKOFF_FACTOR
from .time import remaining

logger = logging.getLogger(__name__)


class RetryableError(Exception):
    """Wraps a failure that may clear up if the call is repeated."""

    def __init__(self, cause: Exception):
        super().__init__(str(cause))
        self.cause = cause


class NonRetryableError(Exception):
    """Wraps a failure that ends the retry loop immediately."""

    def __init__(self, cause: Exception):
        super().__init__(str(cause))
        self.cause = cause


class RetryTimeoutError(Exception):
    """Raised when the retry window is spent while failures were still retryable."""

    def __init__(self, timeout: float, last_error: Optional[Exception]):
        super().__init__(f"timeout while waiting for condition ({timeout:.1f}s): {last_error}")
        self.timeout = timeout
        self.last_error = last_error


class BackoffPolicy:
    """
    Exponential delay between attempts, clamped to [min_delay, max_delay].
    """

    def __init__(
        self,
        min_delay: float = RETRY_MIN_DELAY,
        max_delay: float = RETRY_MAX_DELAY,
        factor: float = RETRY_BACKOFF_FACTOR,
    ):
        if min_delay <= 0 or max_delay < min_delay or factor < 1:
            raise ValueError(
                f"Invalid backoff bounds: min={min_delay}, max={max_delay}, factor={factor}"
            )
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.factor = factor

    def get_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (0-based)."""
        return min(self.min_delay * (self.factor ** attempt), self.max_delay)


def retry_within(
    timeout: float,
    func: Callable[[], Any],
    *,
    deadline: Optional[float] = None,
    backoff: Optional[BackoffPolicy] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Any:
    """
    Call ``func`` until it returns, fails terminally, or the window is spent.

    Args:
        timeout: Length of the retry window in seconds
        func: Zero-argument callback; raises RetryableError or NonRetryableError
        deadline: Optional absolute ``clock`` value capping the window
        backoff: Delay policy between attempts
        sleep: Sleep function (injectable for tests)
        clock: Monotonic clock (injectable for tests)

    Returns:
        Whatever ``func`` returned

    Raises:
        RetryTimeoutError: If only retryable failures occurred within the window
        Exception: The cause of a NonRetryableError, re-raised as-is
    """
    backoff = backoff or BackoffPolicy()
    end = clock() + timeout
    if deadline is not None:
        end = min(end, deadline)

    attempt = 0
    while True:
        try:
            return func()
        except NonRetryableError as e:
            raise e.cause
        except RetryableError as e:
            left = remaining(end, clock)
            if left <= 0:
                raise RetryTimeoutError(timeout, e.cause)
            delay = min(backoff.get_delay(attempt), left)
            logger.debug("Retry #%d in %.2fs due to: %s", attempt + 1, delay, e.cause)
            sleep(delay)
            attempt += 1
