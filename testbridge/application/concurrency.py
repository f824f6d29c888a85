"""
Concurrency primitives shared by the resolution engine and batch operations.

Provides cooperative cancellation, a compute-once async cell for memoized
session fields, and a bounded-concurrency runner that keeps results in input
order.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Generic, TypeVar

from ..domain.models import TestBridgeError

logger = logging.getLogger(__name__)

I = TypeVar("I")
R = TypeVar("R")
T = TypeVar("T")

_UNSET: Any = object()


class OperationCancelledError(TestBridgeError):
    """
    Raised when a batch operation observes a cancellation request.

    ``partial_result`` holds whatever was produced before the request was
    observed, in input order.
    """

    def __init__(self, message: str = "Operation cancelled", partial_result: Any = None):
        super().__init__(message)
        self.partial_result = partial_result


class CancellationToken:
    """Cooperative cancellation flag checked between units of work."""

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError()


def raise_if_cancelled(cancellation: CancellationToken | None) -> None:
    if cancellation is not None:
        cancellation.raise_if_cancelled()


class AsyncOnce(Generic[T]):
    """
    Async cell whose value is computed at most once.

    Concurrent first callers wait on the same lock, so the factory runs a
    single time even when several coroutines race for the value. A computed
    ``None`` is cached like any other value.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]]) -> None:
        self._factory = factory
        self._value: Any = _UNSET
        self._lock = asyncio.Lock()

    @property
    def is_computed(self) -> bool:
        return self._value is not _UNSET

    async def get(self) -> T:
        if self._value is not _UNSET:
            return self._value

        async with self._lock:
            if self._value is _UNSET:
                self._value = await self._factory()
        return self._value


async def limit_with_parameters(
    concurrent: int,
    generator: Callable[[I], Awaitable[R]],
    inputs: Iterable[I],
    cancellation: CancellationToken | None = None,
) -> list[R]:
    """
    Run ``generator`` over ``inputs`` with at most ``concurrent`` in flight.

    Work is spread over ``concurrent`` lanes that pull the next input as soon
    as their previous one settles. The cancellation token is checked before
    every unit; once cancelled, no lane starts new work.

    Args:
        concurrent: Maximum number of units executing at a time
        generator: Coroutine function invoked once per input
        inputs: Inputs to feed the generator
        cancellation: Optional cooperative cancellation token

    Returns:
        Results in the same order as ``inputs``

    Raises:
        OperationCancelledError: If cancellation was requested. Its
            ``partial_result`` holds the results completed so far, in input order.
    """
    if concurrent < 1:
        raise ValueError("concurrent must be at least 1")

    remaining: deque[tuple[int, I]] = deque(enumerate(inputs))
    completed: list[tuple[int, R]] = []
    cancelled = False

    async def lane() -> None:
        nonlocal cancelled
        while remaining:
            if cancelled or (cancellation and cancellation.is_cancellation_requested):
                cancelled = True
                return
            index, item = remaining.popleft()
            try:
                result = await generator(item)
            except OperationCancelledError:
                cancelled = True
                return
            completed.append((index, result))

    lanes = min(concurrent, len(remaining)) or 1
    await asyncio.gather(*(lane() for _ in range(lanes)))

    completed.sort(key=lambda pair: pair[0])
    results = [result for _, result in completed]

    if cancelled:
        logger.debug("Batch cancelled after %d unit(s)", len(results))
        raise OperationCancelledError(partial_result=results)

    return results
