"""
services/fanout.py

Responsibility: Runs a batch of awaitables concurrently as tasks owned by the
caller and joins them all before returning.
Does NOT: know anything about DNS, retries, or logging policy.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Iterable
from typing import Any, TypeVar

T = TypeVar("T")


async def fan_out(awaitables: Iterable[Awaitable[T]]) -> list[T]:
    """
    Runs every awaitable as its own task and returns the results in input order.

    The first failure observed cancels every task still running, waits for
    them to finish, and is then re-raised. No task outlives this call,
    whether it returns or raises.

    Args:
        awaitables: Coroutines or futures to run concurrently.

    Returns:
        The results, in the same order as `awaitables`.

    Raises:
        Exception: Whatever the first failing task raised.
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    if not tasks:
        return []

    try:
        pending: set[asyncio.Future[Any]] = set(tasks)
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
            # Among tasks that finished in the same step, report the earliest submitted.
            for task in tasks:
                if task in done and not task.cancelled() and task.exception() is not None:
                    raise task.exception()  # type: ignore[misc]
        return [task.result() for task in tasks]
    finally:
        unfinished = [task for task in tasks if not task.done()]
        for task in unfinished:
            task.cancel()
        if unfinished:
            await asyncio.gather(*unfinished, return_exceptions=True)
