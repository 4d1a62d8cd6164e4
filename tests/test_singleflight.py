"""SingleFlight のユニットテスト"""

import asyncio

import pytest
from k1s0_switcherlabs.singleflight import SingleFlight


async def test_concurrent_calls_share_one_task() -> None:
    """同じキーの同時呼び出しは 1 回だけ実行される。"""
    flights = SingleFlight()
    calls = 0
    gate = asyncio.Event()

    async def fetch() -> int:
        nonlocal calls
        calls += 1
        await gate.wait()
        return 42

    waiters = [asyncio.ensure_future(flights.do("k", fetch)) for _ in range(3)]
    await asyncio.sleep(0)
    assert flights.in_flight("k") is True
    gate.set()
    assert await asyncio.gather(*waiters) == [42, 42, 42]
    assert calls == 1


async def test_cancelled_caller_does_not_cancel_fetch() -> None:
    """呼び出し側をキャンセルしても取得は継続する。"""
    flights = SingleFlight()
    gate = asyncio.Event()
    finished: list[str] = []

    async def fetch() -> str:
        await gate.wait()
        finished.append("done")
        return "value"

    waiter = asyncio.ensure_future(flights.do("k", fetch))
    await asyncio.sleep(0)
    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter
    gate.set()
    for _ in range(5):
        await asyncio.sleep(0)
    assert finished == ["done"]
    assert flights.in_flight("k") is False


async def test_failure_is_not_reused() -> None:
    """失敗したタスクは次の呼び出しで再実行される。"""
    flights = SingleFlight()
    attempts = 0

    async def fetch() -> str:
        nonlocal attempts
        attempts += 1
        if attempts == 1:
            raise RuntimeError("first attempt fails")
        return "ok"

    with pytest.raises(RuntimeError):
        await flights.do("k", fetch)
    assert await flights.do("k", fetch) == "ok"
    assert attempts == 2
