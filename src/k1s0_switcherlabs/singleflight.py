"""同一キーの同時取得を 1 回にまとめる in-flight レジストリ"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from functools import partial
from typing import Any, TypeVar

T = TypeVar("T")


class SingleFlight:
    """キーごとに実行中のタスクを 1 つだけ保持する。

    呼び出し側は asyncio.shield 越しに共有タスクを待つため、呼び出し側が
    キャンセルされても取得自体は継続し、結果はキャッシュに反映される。
    """

    def __init__(self) -> None:
        self._tasks: dict[Hashable, asyncio.Task[Any]] = {}

    def in_flight(self, key: Hashable) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    async def do(self, key: Hashable, fn: Callable[[], Awaitable[T]]) -> T:
        task = self._tasks.get(key)
        if task is None or task.done():
            task = asyncio.ensure_future(fn())
            self._tasks[key] = task
            task.add_done_callback(partial(self._forget, key))
        return await asyncio.shield(task)

    def _forget(self, key: Hashable, task: asyncio.Task[Any]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
        # 待機者が全員キャンセルされた場合でも例外を回収済みにする
        if not task.cancelled():
            task.exception()
