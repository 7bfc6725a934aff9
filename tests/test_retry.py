"""
Tests for bounded retry.
"""

import pytest

from iprc.utils.retry import (
    BackoffPolicy,
    NonRetryableError,
    RetryableError,
    RetryTimeoutError,
    retry_within,
)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float):
        self.now += seconds


class TestBackoffPolicy:
    """Test delay computation."""

    def test_exponential_then_capped(self):
        policy = BackoffPolicy(min_delay=1.0, max_delay=5.0, factor=2.0)
        assert [policy.get_delay(n) for n in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]

    @pytest.mark.parametrize("kwargs", [
        {"min_delay": 0},
        {"min_delay": 2.0, "max_delay": 1.0},
        {"factor": 0.5},
    ])
    def test_invalid_bounds(self, kwargs):
        with pytest.raises(ValueError):
            BackoffPolicy(**kwargs)


class TestRetryWithin:
    """Test the retry loop."""

    def test_returns_first_success(self):
        """Test that a successful call returns immediately."""
        clock = FakeClock()
        assert retry_within(10.0, lambda: 42, sleep=clock.sleep, clock=clock) == 42
        assert clock.now == 0.0

    def test_non_retryable_reraises_cause(self):
        """Test that the wrapped cause is raised unchanged."""
        clock = FakeClock()
        cause = KeyError("gone")

        def func():
            raise NonRetryableError(cause)

        with pytest.raises(KeyError) as exc_info:
            retry_within(10.0, func, sleep=clock.sleep, clock=clock)
        assert exc_info.value is cause

    def test_timeout_carries_last_error(self):
        """Test that the window ending reports the last retryable cause."""
        clock = FakeClock()
        causes = iter(range(100))

        def func():
            raise RetryableError(RuntimeError(f"attempt {next(causes)}"))

        with pytest.raises(RetryTimeoutError) as exc_info:
            retry_within(3.0, func, sleep=clock.sleep, clock=clock)

        assert clock.now == pytest.approx(3.0)
        assert isinstance(exc_info.value.last_error, RuntimeError)

    def test_past_deadline_single_attempt(self):
        """Test that an expired deadline allows one attempt and no sleep."""
        clock = FakeClock()
        clock.now = 50.0
        calls = []

        def func():
            calls.append(clock.now)
            raise RetryableError(RuntimeError("not yet"))

        with pytest.raises(RetryTimeoutError):
            retry_within(10.0, func, deadline=40.0, sleep=clock.sleep, clock=clock)

        assert calls == [50.0]
