"""Tests for single-flight request deduplication."""

from __future__ import annotations

import asyncio

import pytest

from linguaspark.services.deduplicator import RequestDeduplicator


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_invocation() -> None:
    dedup = RequestDeduplicator()
    calls: list[int] = []
    release = asyncio.Event()

    async def request() -> dict[str, int]:
        calls.append(1)
        await release.wait()
        return {"value": 42}

    tasks = [asyncio.create_task(dedup.dedupe("k", request)) for _ in range(5)]
    await asyncio.sleep(0)
    assert dedup.get_in_flight_count() == 1

    release.set()
    results = await asyncio.gather(*tasks)

    assert len(calls) == 1
    assert all(result is results[0] for result in results)
    assert dedup.get_in_flight_count() == 0

    stats = dedup.get_stats()
    assert stats.started == 1
    assert stats.joined == 4


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_failure() -> None:
    dedup = RequestDeduplicator()
    calls: list[int] = []

    async def request() -> None:
        calls.append(1)
        await asyncio.sleep(0)
        raise ValueError("boom")

    results = await asyncio.gather(
        *(dedup.dedupe("k", request) for _ in range(5)),
        return_exceptions=True,
    )

    assert len(calls) == 1
    assert all(isinstance(r, ValueError) for r in results)
    assert all(r is results[0] for r in results)
    assert dedup.get_in_flight_keys() == []


@pytest.mark.asyncio
async def test_sequential_calls_run_again() -> None:
    dedup = RequestDeduplicator()
    calls: list[int] = []

    async def request() -> int:
        calls.append(1)
        return len(calls)

    assert await dedup.dedupe("k", request) == 1
    assert await dedup.dedupe("k", request) == 2


@pytest.mark.asyncio
async def test_different_keys_do_not_share() -> None:
    dedup = RequestDeduplicator()

    async def request(value: str) -> str:
        await asyncio.sleep(0)
        return value

    a, b = await asyncio.gather(
        dedup.dedupe("a", lambda: request("a")),
        dedup.dedupe("b", lambda: request("b")),
    )
    assert (a, b) == ("a", "b")


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_shared_request() -> None:
    dedup = RequestDeduplicator()
    release = asyncio.Event()

    async def request() -> str:
        await release.wait()
        return "done"

    first = asyncio.create_task(dedup.dedupe("k", request))
    second = asyncio.create_task(dedup.dedupe("k", request))
    await asyncio.sleep(0)

    first.cancel()
    await asyncio.sleep(0)
    release.set()

    assert await second == "done"
    with pytest.raises(asyncio.CancelledError):
        await first


@pytest.mark.asyncio
async def test_cancel_all_clears_in_flight() -> None:
    dedup = RequestDeduplicator()

    async def request() -> None:
        await asyncio.Event().wait()

    task = asyncio.create_task(dedup.dedupe("k", request))
    await asyncio.sleep(0)

    assert dedup.cancel_all() == 1
    assert dedup.get_in_flight_count() == 0
    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_cancel_is_synchronous_and_targets_one_key() -> None:
    dedup = RequestDeduplicator()

    async def request() -> None:
        await asyncio.Event().wait()

    kept = asyncio.create_task(dedup.dedupe("kept", request))
    dropped = asyncio.create_task(dedup.dedupe("dropped", request))
    await asyncio.sleep(0)

    assert dedup.cancel("dropped") is True
    assert dedup.cancel("dropped") is False
    assert dedup.cancel("unknown") is False
    assert dedup.get_in_flight_keys() == ["kept"]

    with pytest.raises(asyncio.CancelledError):
        await dropped

    assert dedup.cancel_all() == 1
    with pytest.raises(asyncio.CancelledError):
        await kept
