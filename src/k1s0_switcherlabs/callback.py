"""awaitable とコールバックの二つの呼び出し規約をつなぐアダプタ"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")

Callback = Callable[[Exception | None, Any], None]


def callbackify(
    awaitable: Awaitable[T],
    callback: Callback | None = None,
) -> asyncio.Future[Any]:
    """awaitable をタスクとして開始し、callback があれば完了時に通知する。

    callback なしの場合は結果（または例外）をそのまま返すタスクを返す。
    callback ありの場合は (error, value) を loop.call_soon で予約するため、
    呼び出し元のスタック内で同期的に呼ばれることはない。このときタスクは None を返す。
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        if inspect.iscoroutine(awaitable):
            awaitable.close()
        raise
    if callback is None:
        return asyncio.ensure_future(awaitable)

    async def _notify() -> None:
        try:
            value = await awaitable
        except Exception as e:
            loop.call_soon(callback, e, None)
        else:
            loop.call_soon(callback, None, value)

    return loop.create_task(_notify())
