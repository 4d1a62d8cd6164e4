"""グローバルなフラグ・オーバーライド状態のキャッシュ"""

from __future__ import annotations

import time
from typing import Callable

import structlog

from .identity import IdentityCache
from .models import StateSnapshot
from .singleflight import SingleFlight
from .transport import Transport

logger = structlog.get_logger(__name__)

STATE_TTL = 60.0


class StateCache:
    """グローバルスナップショットと最終更新時刻を保持する。

    スナップショットは不変で、更新成功時に参照ごと差し替える。
    読み手が異なる更新のフラグとオーバーライドを混在して見ることはない。
    """

    def __init__(
        self,
        transport: Transport,
        identities: IdentityCache | None = None,
        ttl: float = STATE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transport = transport
        self._identities = identities
        self._ttl = ttl
        self._clock = clock
        self._snapshot = StateSnapshot()
        self._flights = SingleFlight()

    @property
    def snapshot(self) -> StateSnapshot:
        """最後に取得したスナップショット（期限切れの可能性あり）。"""
        return self._snapshot

    def is_fresh(self) -> bool:
        refreshed_at = self._snapshot.refreshed_at
        return refreshed_at is not None and self._clock() - refreshed_at < self._ttl

    async def ensure_fresh(self) -> StateSnapshot:
        """期限切れなら状態を再取得し、現在のスナップショットを返す。"""
        if self.is_fresh():
            return self._snapshot
        return await self._flights.do("state", self._refresh)

    async def _refresh(self) -> StateSnapshot:
        try:
            data = await self._transport.fetch_state()
            now = self._clock()
            snapshot = StateSnapshot.from_response(data, refreshed_at=now)
        except Exception as e:
            logger.warning("state_refresh_failed", error=str(e))
            raise
        self._snapshot = snapshot
        logger.info(
            "state_refreshed",
            flags=len(snapshot.flags),
            overrides=len(snapshot.overrides),
        )
        if self._identities is not None:
            self._identities.evict_stale(now)
        return snapshot
