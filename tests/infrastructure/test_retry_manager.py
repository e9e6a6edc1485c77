"""
Unit tests for RetryManager in forklift.infrastructure.retry_manager.
"""

import asyncio
from unittest.mock import AsyncMock, call, patch

import pytest

from forklift.infrastructure.error_handler import (
    NetworkError,
    RateLimitError,
    RepositoryNotFoundError,
)
from forklift.infrastructure.retry_manager import RetryConfig, RetryManager


# ---- Helpers ---------------------------------------------------------------

class MockAsyncFunction:
    """Helper class to create async functions with controllable behavior."""

    def __init__(self):
        self.call_count = 0
        self.side_effects = []
        self.return_value = "success"

    def set_side_effects(self, effects):
        """Set a list of exceptions to raise on each call, followed by success."""
        self.side_effects = effects

    async def __call__(self):
        self.call_count += 1

        if self.side_effects and self.call_count <= len(self.side_effects):
            effect = self.side_effects[self.call_count - 1]
            if isinstance(effect, Exception):
                raise effect
            return effect

        return self.return_value


# ---- RetryConfig tests -----------------------------------------------------

def test_retry_config_defaults():
    config = RetryConfig()

    assert config.max_retries == 3
    assert config.initial_delay == 2.0
    assert config.max_delay == 8.0
    assert config.backoff_factor == 2.0
    assert RateLimitError in config.retryable_errors
    assert NetworkError in config.retryable_errors
    assert RepositoryNotFoundError not in config.retryable_errors


def test_retry_manager_from_config():
    config = RetryConfig(max_retries=5, initial_delay=0.5, max_delay=60.0, backoff_factor=3.0)
    manager = RetryManager.from_config(config)

    assert manager.max_retries == 5
    assert manager.base_delay == 0.5
    assert manager.max_delay == 60.0
    assert manager.exponential_base == 3.0


# ---- RetryManager initialization tests -------------------------------------

def test_retry_manager_default_initialization():
    manager = RetryManager()

    assert manager.max_retries == 3
    assert manager.base_delay == 2.0
    assert manager.max_delay == 8.0
    assert manager.exponential_base == 2.0
    assert manager.jitter is False


def test_retry_manager_rejects_negative_retries():
    with pytest.raises(ValueError):
        RetryManager(max_retries=-1)


# ---- Successful operation tests --------------------------------------------

@pytest.mark.asyncio
async def test_successful_operation_without_retries():
    manager = RetryManager()
    mock_func = MockAsyncFunction()
    mock_func.return_value = "success_result"

    with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        result = await manager.execute(mock_func)

    assert result == "success_result"
    assert mock_func.call_count == 1
    mock_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_fails_twice_then_succeeds_with_backoff_delays():
    """Two rate-limit failures: three attempts, waiting 2s then 4s."""
    manager = RetryManager()
    mock_func = MockAsyncFunction()
    mock_func.set_side_effects([
        RateLimitError("secondary rate limit"),
        RateLimitError("secondary rate limit"),
    ])

    with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        result = await manager.execute(mock_func)

    assert result == "success"
    assert mock_func.call_count == 3
    assert mock_sleep.await_args_list == [call(2.0), call(4.0)]


@pytest.mark.asyncio
async def test_passes_arguments_through():
    manager = RetryManager()
    func = AsyncMock(return_value=42)

    result = await manager.execute(func, "owner", "repo", page=3)

    assert result == 42
    func.assert_awaited_once_with("owner", "repo", page=3)


# ---- Max attempts tests ---------------------------------------------------

@pytest.mark.asyncio
async def test_stops_retrying_after_max_attempts():
    manager = RetryManager(max_retries=3)
    mock_func = MockAsyncFunction()
    mock_func.set_side_effects([RateLimitError("Persistent rate limit")] * 10)

    with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        with pytest.raises(RateLimitError, match="Persistent rate limit"):
            await manager.execute(mock_func)

    # 1 initial + 3 retries, waiting 2s, 4s and 8s
    assert mock_func.call_count == 4
    assert mock_sleep.await_args_list == [call(2.0), call(4.0), call(8.0)]


@pytest.mark.asyncio
async def test_max_retries_override():
    manager = RetryManager(max_retries=5, base_delay=0.01)
    mock_func = MockAsyncFunction()
    mock_func.set_side_effects([NetworkError("Always fails")] * 10)

    with pytest.raises(NetworkError):
        await manager.execute(mock_func, max_retries=1)

    assert mock_func.call_count == 2


@pytest.mark.asyncio
async def test_zero_retries_fails_on_first_error():
    manager = RetryManager(max_retries=0)
    mock_func = MockAsyncFunction()
    mock_func.set_side_effects([NetworkError("down")])

    with pytest.raises(NetworkError):
        await manager.execute(mock_func)

    assert mock_func.call_count == 1


# ---- Non-retryable exception tests ----------------------------------------

@pytest.mark.asyncio
async def test_non_retryable_exception_raised_immediately():
    manager = RetryManager(max_retries=3, base_delay=0.01)
    mock_func = MockAsyncFunction()
    mock_func.set_side_effects([RepositoryNotFoundError("404")])

    with pytest.raises(RepositoryNotFoundError):
        await manager.execute(mock_func)

    assert mock_func.call_count == 1


@pytest.mark.asyncio
async def test_mixed_retryable_and_non_retryable_exceptions():
    manager = RetryManager(max_retries=3, base_delay=0.01)
    mock_func = MockAsyncFunction()
    mock_func.set_side_effects([
        NetworkError("Retryable error"),
        ValueError("Non-retryable error"),
    ])

    with pytest.raises(ValueError, match="Non-retryable error"):
        await manager.execute(mock_func)

    assert mock_func.call_count == 2


@pytest.mark.asyncio
async def test_custom_exceptions_override_defaults():
    manager = RetryManager(max_retries=2, base_delay=0.01)
    mock_func = MockAsyncFunction()
    mock_func.set_side_effects([ConnectionError("reset")])

    result = await manager.execute(mock_func, exceptions=(ConnectionError,))

    assert result == "success"
    assert mock_func.call_count == 2


# ---- Exponential backoff tests --------------------------------------------

def test_calculate_delay_doubles_up_to_cap():
    manager = RetryManager()

    assert manager._calculate_delay(0) == 2.0
    assert manager._calculate_delay(1) == 4.0
    assert manager._calculate_delay(2) == 8.0
    assert manager._calculate_delay(3) == 8.0


def test_calculate_delay_custom_backoff_factor():
    manager = RetryManager(base_delay=2.0, exponential_base=3.0, max_delay=100.0)

    assert manager._calculate_delay(0) == 2.0
    assert manager._calculate_delay(1) == 6.0
    assert manager._calculate_delay(2) == 18.0
    assert manager._calculate_delay(3) == 54.0


def test_calculate_delay_with_jitter():
    manager = RetryManager(base_delay=10.0, max_delay=100.0, jitter=True)

    delays = [manager._calculate_delay(0) for _ in range(100)]

    assert all(8.0 <= delay <= 12.0 for delay in delays)
    assert len(set(delays)) > 1


# ---- Integration tests -----------------------------------------------------

@pytest.mark.asyncio
async def test_real_delay_timing():
    manager = RetryManager(max_retries=2, base_delay=0.05, max_delay=1.0)
    mock_func = MockAsyncFunction()
    mock_func.set_side_effects([NetworkError("First failure"), NetworkError("Second failure")])

    loop = asyncio.get_running_loop()
    start_time = loop.time()
    result = await manager.execute(mock_func)
    elapsed = loop.time() - start_time

    # 0.05 + 0.10
    assert elapsed >= 0.15
    assert result == "success"
    assert mock_func.call_count == 3


@pytest.mark.asyncio
async def test_logging_behavior(caplog):
    manager = RetryManager(max_retries=1, base_delay=0.01)
    mock_func = MockAsyncFunction()
    mock_func.set_side_effects([NetworkError("Test error")])

    with caplog.at_level("WARNING"):
        result = await manager.execute(mock_func)

    assert result == "success"
    assert "Attempt 1 failed: Test error" in caplog.text
    assert "Retrying in" in caplog.text


@pytest.mark.asyncio
async def test_logging_on_final_failure(caplog):
    manager = RetryManager(max_retries=1, base_delay=0.01)
    mock_func = MockAsyncFunction()
    mock_func.set_side_effects([NetworkError("Failure 1"), NetworkError("Failure 2")])

    with caplog.at_level("ERROR"):
        with pytest.raises(NetworkError):
            await manager.execute(mock_func)

    assert "All 2 attempts failed, giving up" in caplog.text
