"""
tests/unit/test_fanout.py

Unit tests for services/fanout.py.
"""

from __future__ import annotations

import asyncio

import pytest

from services.fanout import fan_out


@pytest.mark.asyncio
async def test_fan_out_returns_results_in_input_order():
    """Results follow submission order, not completion order."""

    async def after(delay: float, value: str) -> str:
        await asyncio.sleep(delay)
        return value

    results = await fan_out([after(0.03, "a"), after(0.0, "b"), after(0.01, "c")])
    assert results == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_fan_out_runs_tasks_concurrently():
    """All awaitables are in flight at the same time."""
    started: list[int] = []
    gate = asyncio.Event()

    async def worker(n: int) -> int:
        started.append(n)
        if len(started) == 3:
            gate.set()
        await asyncio.wait_for(gate.wait(), timeout=1)
        return n

    assert await fan_out(worker(n) for n in range(3)) == [0, 1, 2]


@pytest.mark.asyncio
async def test_fan_out_empty_input():
    assert await fan_out([]) == []


@pytest.mark.asyncio
async def test_fan_out_cancels_siblings_on_first_failure():
    """The first failure propagates and no sibling task is left running."""
    cancelled = asyncio.Event()

    async def slow() -> None:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    async def fail() -> None:
        await asyncio.sleep(0)
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        await fan_out([slow(), fail()])
    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_fan_out_surfaces_the_first_observed_failure():
    """When failures happen at different times the earliest one wins."""

    async def fail_after(delay: float, message: str) -> None:
        await asyncio.sleep(delay)
        raise RuntimeError(message)

    with pytest.raises(RuntimeError, match="early"):
        await fan_out([fail_after(0.05, "late"), fail_after(0.0, "early")])
