"""SwitcherLabsClient 実装"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Mapping

import structlog

from .callback import Callback, callbackify
from .config import SwitcherLabsConfig, build_config
from .engine import ResolutionEngine
from .identity import IDENTITY_TTL, IdentityCache
from .models import Identity
from .state import STATE_TTL, StateCache
from .transport import HttpTransport, Transport

logger = structlog.get_logger(__name__)


class SwitcherLabsClient:
    """SwitcherLabs フィーチャーフラグクライアント。

    1 インスタンスは 1 つの API キー（= 1 つのフラグ空間）に対応する。
    状態は評価のたびに遅延的に鮮度確認され、バックグラウンドの定期更新は行わない。

    使用例::

        async with SwitcherLabsClient(api_key="...") as client:
            enabled = await client.evaluate("new-checkout", identifier="user-1")
    """

    def __init__(
        self,
        api_key: str | None = None,
        host: str | None = None,
        port: int | None = None,
        protocol: str | None = None,
        timeout_ms: int | None = None,
        *,
        config: SwitcherLabsConfig | None = None,
        transport: Transport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if config is None:
            config = build_config(
                api_key=api_key,
                host=host,
                port=port,
                protocol=protocol,
                timeout_ms=timeout_ms,
            )
        self._config = config
        self._transport = transport or HttpTransport(config)
        self._identities = IdentityCache(self._transport, ttl=IDENTITY_TTL, clock=clock)
        self._state = StateCache(
            self._transport, self._identities, ttl=STATE_TTL, clock=clock
        )
        self._engine = ResolutionEngine(self._state, self._identities)

    @property
    def config(self) -> SwitcherLabsConfig:
        return self._config

    @property
    def state(self) -> StateCache:
        return self._state

    @property
    def identities(self) -> IdentityCache:
        return self._identities

    async def __aenter__(self) -> SwitcherLabsClient:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def initialize(self) -> None:
        """初回の状態取得を行う。"""
        await self.refresh_state()
        logger.info("client_initialized", host=self._config.host)

    async def refresh_state(self) -> None:
        """期限切れであればグローバル状態を再取得する。"""
        await self._state.ensure_fresh()

    def fetch_identity(
        self,
        identifier: str,
        callback: Callback | None = None,
    ) -> asyncio.Future[Identity | None]:
        """識別子のオーバーライド取得をタスクとして開始する（有効期限内ならキャッシュを返す）。

        callback を渡すと完了後に callback(error, identity) が非同期に呼ばれる。
        """
        return callbackify(self._identities.resolve(identifier), callback)

    async def evaluate(
        self,
        key: str,
        identifier: str | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> Any:
        """フラグの実効値を返す。"""
        return await self._engine.evaluate(key, identifier, overrides)

    def evaluate_flag(
        self,
        key: str,
        identifier: str | None = None,
        overrides: Mapping[str, Any] | None = None,
        callback: Callback | None = None,
    ) -> asyncio.Future[Any]:
        """evaluate をタスクとして開始する。

        callback を渡すと完了後に callback(error, value) が非同期に呼ばれる。
        実行中のイベントループ内から呼び出すこと。
        """
        return callbackify(self.evaluate(key, identifier, overrides), callback)

    async def aclose(self) -> None:
        await self._transport.aclose()
