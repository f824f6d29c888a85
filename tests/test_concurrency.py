"""
Tests for the concurrency primitives.

Covers the compute-once cell, the bounded runner and cooperative
cancellation.
"""

import asyncio

import pytest

from testbridge.application.concurrency import (
    AsyncOnce,
    CancellationToken,
    OperationCancelledError,
    limit_with_parameters,
    raise_if_cancelled,
)
from testbridge.domain.models import TestBridgeError


class TestCancellationToken:
    def test_initial_state(self):
        token = CancellationToken()

        assert token.is_cancellation_requested is False
        token.raise_if_cancelled()

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()

        assert token.is_cancellation_requested is True
        with pytest.raises(OperationCancelledError):
            token.raise_if_cancelled()

    def test_module_helper_accepts_none(self):
        raise_if_cancelled(None)

    def test_error_is_a_domain_error(self):
        error = OperationCancelledError(partial_result=[1])

        assert isinstance(error, TestBridgeError)
        assert error.partial_result == [1]
        assert str(error) == "Operation cancelled"


class TestAsyncOnce:
    @pytest.mark.asyncio
    async def test_factory_runs_once_for_concurrent_callers(self):
        calls = 0

        async def factory():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0)
            return "value"

        cell = AsyncOnce(factory)

        results = await asyncio.gather(*(cell.get() for _ in range(5)))

        assert results == ["value"] * 5
        assert calls == 1
        assert cell.is_computed

    @pytest.mark.asyncio
    async def test_none_is_cached(self):
        calls = []

        async def factory():
            calls.append(1)
            return None

        cell = AsyncOnce(factory)

        assert await cell.get() is None
        assert await cell.get() is None
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_failed_computation_is_retried(self):
        attempts = []

        async def factory():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("first attempt")
            return 42

        cell = AsyncOnce(factory)

        with pytest.raises(RuntimeError):
            await cell.get()
        assert not cell.is_computed
        assert await cell.get() == 42


class TestLimitWithParameters:
    @pytest.mark.asyncio
    async def test_results_keep_input_order(self):
        async def slow_square(n):
            # Later inputs finish first.
            await asyncio.sleep(0.01 * (5 - n))
            return n * n

        results = await limit_with_parameters(3, slow_square, range(5))

        assert results == [0, 1, 4, 9, 16]

    @pytest.mark.asyncio
    async def test_concurrency_bound(self):
        in_flight = 0
        peak = 0

        async def work(n):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.001)
            in_flight -= 1
            return n

        await limit_with_parameters(2, work, range(10))

        assert peak == 2

    @pytest.mark.asyncio
    async def test_empty_inputs(self):
        async def work(n):
            return n

        assert await limit_with_parameters(4, work, []) == []

    @pytest.mark.asyncio
    async def test_invalid_concurrency(self):
        async def work(n):
            return n

        with pytest.raises(ValueError, match="at least 1"):
            await limit_with_parameters(0, work, [1])

    @pytest.mark.asyncio
    async def test_cancellation_returns_completed_prefix(self):
        token = CancellationToken()
        started = []

        async def work(n):
            started.append(n)
            if n == 1:
                token.cancel()
            return n

        with pytest.raises(OperationCancelledError) as exc_info:
            await limit_with_parameters(1, work, range(5), token)

        assert exc_info.value.partial_result == [0, 1]
        assert started == [0, 1]

    @pytest.mark.asyncio
    async def test_cancellation_raised_by_unit(self):
        async def work(n):
            if n == 2:
                raise OperationCancelledError()
            return n

        with pytest.raises(OperationCancelledError) as exc_info:
            await limit_with_parameters(1, work, range(4))

        assert exc_info.value.partial_result == [0, 1]

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self):
        async def work(n):
            raise KeyError(n)

        with pytest.raises(KeyError):
            await limit_with_parameters(2, work, [1, 2])
