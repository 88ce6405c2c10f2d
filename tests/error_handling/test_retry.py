"""Tests for bounded retry with exponential backoff."""

import pytest

from pages_deployer.error_handling import DeploymentErrorHandler, RetryPolicy
from pages_deployer.exceptions import DeploymentError, ErrorKind
from pages_deployer.settings import Settings


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FlakyOperation:
    """Fails ``failures`` times with ``error`` before returning ``result``."""

    def __init__(self, failures: int, error: Exception, result: str = "deployed"):
        self.failures = failures
        self.error = error
        self.result = result
        self.attempts = 0

    async def __call__(self) -> str:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise self.error
        return self.result


def network_error() -> DeploymentError:
    return DeploymentError("connection reset", kind=ErrorKind.NETWORK)


class TestWithRetry:
    """Retry loop behavior."""

    @pytest.mark.asyncio
    async def test_fails_twice_then_succeeds(self):
        sleep = RecordingSleep()
        handler = DeploymentErrorHandler(
            retry_policy=RetryPolicy(max_attempts=3, base_delay_s=2.0, max_delay_s=30.0, backoff_multiplier=2.0),
            sleep=sleep,
        )
        operation = FlakyOperation(failures=2, error=network_error())

        result = await handler.with_retry(operation, "Deployment Process", "deployment")

        assert result == "deployed"
        assert operation.attempts == 3
        assert sleep.delays == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_delays_are_capped(self):
        sleep = RecordingSleep()
        handler = DeploymentErrorHandler(
            retry_policy=RetryPolicy(max_attempts=4, base_delay_s=10.0, max_delay_s=30.0, backoff_multiplier=10.0),
            sleep=sleep,
        )
        operation = FlakyOperation(failures=3, error=network_error())

        await handler.with_retry(operation, "Deployment Process", "deployment")

        assert sleep.delays == [10.0, 30.0, 30.0]

    @pytest.mark.asyncio
    async def test_exhausted_attempts_raise_last_error(self):
        sleep = RecordingSleep()
        handler = DeploymentErrorHandler(sleep=sleep)
        error = network_error()
        operation = FlakyOperation(failures=10, error=error)

        with pytest.raises(DeploymentError) as exc_info:
            await handler.with_retry(operation, "Build Process", "build")

        assert exc_info.value is error
        assert operation.attempts == 3
        assert len(sleep.delays) == 2

    @pytest.mark.asyncio
    async def test_non_retryable_error_is_raised_immediately(self):
        sleep = RecordingSleep()
        handler = DeploymentErrorHandler(sleep=sleep)
        operation = FlakyOperation(failures=1, error=DeploymentError("Not logged in", kind=ErrorKind.AUTHENTICATION))

        with pytest.raises(DeploymentError, match="Not logged in"):
            await handler.with_retry(operation, "Deployment Process", "deployment")

        assert operation.attempts == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_unclassified_errors_are_matched_on_output(self):
        sleep = RecordingSleep()
        handler = DeploymentErrorHandler(sleep=sleep)
        operation = FlakyOperation(failures=1, error=DeploymentError("Command failed", raw_output="Error: 502 Bad Gateway"))

        assert await handler.with_retry(operation, "Deployment Process", "deployment") == "deployed"
        assert operation.attempts == 2

    @pytest.mark.asyncio
    async def test_lambda_returning_coroutine_is_awaited_and_retried(self):
        sleep = RecordingSleep()
        handler = DeploymentErrorHandler(sleep=sleep)
        operation = FlakyOperation(failures=1, error=network_error())

        result = await handler.with_retry(lambda: operation(), "Deployment Process", "deployment")

        assert result == "deployed"
        assert operation.attempts == 2
        assert sleep.delays == [2.0]

    @pytest.mark.asyncio
    async def test_single_attempt_policy(self):
        handler = DeploymentErrorHandler(retry_policy=RetryPolicy(max_attempts=1), sleep=RecordingSleep())
        operation = FlakyOperation(failures=1, error=network_error())

        with pytest.raises(DeploymentError):
            await handler.with_retry(operation, "Deployment Process", "deployment")

        assert operation.attempts == 1


class TestRetryPolicy:
    """Delay schedule."""

    @pytest.mark.parametrize("attempt,expected", [(1, 2.0), (2, 4.0), (3, 8.0), (4, 16.0), (5, 30.0), (10, 30.0)])
    def test_delay_for(self, attempt: int, expected: float):
        assert RetryPolicy().delay_for(attempt) == expected

    def test_delay_for_rejects_zero(self):
        with pytest.raises(ValueError):
            RetryPolicy().delay_for(0)

    def test_handler_exposes_delays(self):
        handler = DeploymentErrorHandler(retry_policy=RetryPolicy(base_delay_s=1.0, backoff_multiplier=3.0, max_delay_s=5.0))

        assert [handler.calculate_retry_delay(n) for n in (1, 2, 3)] == [1.0, 3.0, 5.0]

    def test_from_settings(self, tmp_path):
        settings = Settings(_env_file=None, project_root=tmp_path, retry_max_attempts=5, retry_base_delay_s=0.5, retry_max_delay_s=4.0)

        policy = RetryPolicy.from_settings(settings)

        assert policy.max_attempts == 5
        assert policy.base_delay_s == 0.5
        assert policy.max_delay_s == 4.0
        assert policy.backoff_multiplier == 2.0
