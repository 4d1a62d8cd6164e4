"""識別子ごとのオーバーライドキャッシュ"""

from __future__ import annotations

import time
from typing import Callable

import structlog

from .models import Identity
from .singleflight import SingleFlight
from .transport import Transport

logger = structlog.get_logger(__name__)

IDENTITY_TTL = 5.0


class IdentityCache:
    """識別子ごとに取得時刻を持つ Identity のキャッシュ。"""

    def __init__(
        self,
        transport: Transport,
        ttl: float = IDENTITY_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transport = transport
        self._ttl = ttl
        self._clock = clock
        self._identities: dict[str, Identity] = {}
        self._flights = SingleFlight()

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._identities

    def __len__(self) -> int:
        return len(self._identities)

    def get(self, identifier: str) -> Identity | None:
        """キャッシュ済みの Identity を返す（鮮度は問わない）。"""
        return self._identities.get(identifier)

    def is_fresh(self, identity: Identity, now: float | None = None) -> bool:
        now = self._clock() if now is None else now
        return now - identity.fetched_at < self._ttl

    async def resolve(self, identifier: str | None) -> Identity | None:
        """識別子の Identity を返す。期限切れまたは未取得ならトランスポートから取得する。"""
        if not identifier:
            return None
        # 対象の識別子のエントリは再取得が成功するまで残す
        self.evict_stale(keep=identifier)
        identity = self._identities.get(identifier)
        if identity is not None and self.is_fresh(identity):
            return identity
        return await self._flights.do(identifier, lambda: self._fetch(identifier))

    async def _fetch(self, identifier: str) -> Identity:
        try:
            data = await self._transport.fetch_identity(identifier)
            identity = Identity.from_response(identifier, data, fetched_at=self._clock())
        except Exception as e:
            logger.warning("identity_fetch_failed", identifier=identifier, error=str(e))
            raise
        self._identities[identifier] = identity
        logger.debug(
            "identity_fetched", identifier=identifier, overrides=len(identity.overrides)
        )
        return identity

    def evict_stale(self, now: float | None = None, keep: str | None = None) -> int:
        """期限切れの Identity を削除し、削除件数を返す。keep の識別子は残す。"""
        now = self._clock() if now is None else now
        stale = [
            identifier
            for identifier, identity in self._identities.items()
            if identifier != keep and identity.fetched_at + self._ttl < now
        ]
        for identifier in stale:
            del self._identities[identifier]
        if stale:
            logger.debug("identities_evicted", count=len(stale))
        return len(stale)
