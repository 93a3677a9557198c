"""Bounded-concurrency batch execution for per-wallet operations."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from functools import partial
from typing import Any, TypeVar

from sol_dropkit.models.config import BatchSettings

log = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]


async def run_in_windows(operations: Sequence[Operation[T]], window: int) -> list[T]:
    """Run deferred operations in consecutive windows of at most ``window``.

    Every operation of a window is started together and the whole window is
    awaited before the next one starts. Results keep the input order. The
    first exception raised inside a window propagates once that window has
    settled, and no later window is started.
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")

    results: list[T] = []
    for start in range(0, len(operations), window):
        chunk = operations[start:start + window]
        log.debug("Starting window at %d (%d operations)", start, len(chunk))
        settled = await asyncio.gather(*(op() for op in chunk), return_exceptions=True)
        for outcome in settled:
            if isinstance(outcome, BaseException):
                raise outcome
        results.extend(settled)
    return results


async def run_bounded(operations: Sequence[Operation[T]], limit: int) -> list[T]:
    """Run deferred operations with at most ``limit`` in flight at any time.

    A new operation is admitted as soon as any running one finishes.
    Results keep the input order. On the first failure the operations still
    running are cancelled, the ones not yet admitted never start, and the
    exception propagates.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    if not operations:
        return []

    semaphore = asyncio.Semaphore(limit)
    failed = asyncio.Event()

    async def _run_one(op: Operation[T]) -> T:
        async with semaphore:
            if failed.is_set():
                raise asyncio.CancelledError()
            try:
                return await op()
            except BaseException:
                failed.set()
                raise

    tasks = [asyncio.ensure_future(_run_one(op)) for op in operations]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def with_timeout(
    operation: Operation[T],
    seconds: float | None,
    on_timeout: Callable[[], T] | None = None,
) -> Operation[T]:
    """Wrap a deferred operation with an ``asyncio.wait_for`` deadline.

    When the deadline passes, ``on_timeout()`` becomes the result if given;
    otherwise the timeout propagates like any other failure.
    """
    if seconds is None:
        return operation

    async def _bounded() -> T:
        try:
            return await asyncio.wait_for(operation(), timeout=seconds)
        except asyncio.TimeoutError:
            if on_timeout is None:
                raise
            return on_timeout()

    return _bounded


async def run_batch(
    operations: Sequence[Operation[Any]],
    settings: BatchSettings,
    on_timeout: Callable[[int], Any] | None = None,
) -> list[Any]:
    """Run operations with the strategy and deadline from ``settings``.

    ``on_timeout(i)`` supplies the result of operation ``i`` when it misses
    ``settings.op_timeout``. Per-wallet operations that must not abort the
    batch pass one; without it a missed deadline fails the batch.
    """
    ops = [
        with_timeout(
            op,
            settings.op_timeout,
            partial(on_timeout, i) if on_timeout is not None else None,
        )
        for i, op in enumerate(operations)
    ]
    if settings.sliding:
        return await run_bounded(ops, settings.window)
    return await run_in_windows(ops, settings.window)
