"""フラグ値の解決エンジン"""

from __future__ import annotations

from typing import Any, Mapping

import structlog

from .exceptions import FlagNotFoundError
from .identity import IdentityCache
from .models import Flag, Identity, StateSnapshot
from .rules import NO_MATCH, match_rule
from .state import StateCache

logger = structlog.get_logger(__name__)


class ValueSource:
    """解決した値の出どころ。"""

    CALL_SITE: str = "CALL_SITE"
    IDENTITY: str = "IDENTITY"
    GLOBAL_OVERRIDE: str = "GLOBAL_OVERRIDE"
    DYNAMIC_RULE: str = "DYNAMIC_RULE"
    DEFAULT: str = "DEFAULT"


def base_value(
    flag: Flag,
    snapshot: StateSnapshot,
    overrides: Mapping[str, Any],
    identity: Identity | None,
) -> Any:
    """ダイナミックルールを除いた優先順位でフラグの値を決める。"""
    if flag.key in overrides:
        return overrides[flag.key]
    if identity is not None and flag.key in identity.overrides:
        return identity.overrides[flag.key]
    if flag.key in snapshot.overrides:
        return snapshot.overrides[flag.key].value
    return flag.value


class ResolutionEngine:
    """StateCache・IdentityCache・ルール評価を組み合わせてフラグ値を解決する。

    優先順位: 呼び出し側オーバーライド > Identity オーバーライド >
    グローバルオーバーライド > ダイナミックルール > フラグ既定値。
    """

    def __init__(self, state: StateCache, identities: IdentityCache) -> None:
        self._state = state
        self._identities = identities

    async def evaluate(
        self,
        key: str,
        identifier: str | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> Any:
        value, source = await self._resolve(key, identifier, overrides or {})
        logger.debug("flag_evaluated", key=key, identifier=identifier, source=source)
        return value

    async def _resolve(
        self,
        key: str,
        identifier: str | None,
        overrides: Mapping[str, Any],
    ) -> tuple[Any, str]:
        # 存在確認は再取得前の（期限切れかもしれない）状態に対して行う
        if key not in self._state.snapshot.flags:
            raise FlagNotFoundError(key)

        identity = await self._identities.resolve(identifier)

        if key in overrides:
            return overrides[key], ValueSource.CALL_SITE
        if identity is not None and key in identity.overrides:
            return identity.overrides[key], ValueSource.IDENTITY

        snapshot = await self._state.ensure_fresh()
        if key in snapshot.overrides:
            return snapshot.overrides[key].value, ValueSource.GLOBAL_OVERRIDE

        flag = snapshot.flags.get(key)
        if flag is None:
            raise FlagNotFoundError(key)
        if flag.dynamic_rules:
            matched = match_rule(
                flag,
                snapshot.flags_by_id,
                lambda target: base_value(target, snapshot, overrides, identity),
            )
            if matched is not NO_MATCH:
                return matched, ValueSource.DYNAMIC_RULE
        return flag.value, ValueSource.DEFAULT
