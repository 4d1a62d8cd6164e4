"""InMemoryTransport 実装"""

from __future__ import annotations

import copy
from typing import Any

from .exceptions import SwitcherLabsError
from .transport import Transport


class InMemoryTransport(Transport):
    """テスト用インメモリトランスポート。リクエスト回数を記録する。"""

    def __init__(
        self,
        flags: list[dict[str, Any]] | None = None,
        overrides: list[dict[str, Any]] | None = None,
    ) -> None:
        self.flags: list[dict[str, Any]] = list(flags or [])
        self.overrides: list[dict[str, Any]] = list(overrides or [])
        self.identities: dict[str, dict[str, Any]] = {}
        self.state_error: SwitcherLabsError | None = None
        self.identity_error: SwitcherLabsError | None = None
        self.state_requests = 0
        self.identity_requests: list[str] = []

    def set_identity(self, identifier: str, overrides: dict[str, Any]) -> None:
        """識別子のオーバーライドを設定する。"""
        self.identities[identifier] = dict(overrides)

    async def fetch_state(self) -> dict[str, Any]:
        self.state_requests += 1
        if self.state_error is not None:
            raise self.state_error
        return {
            "flags": copy.deepcopy(self.flags),
            "overrides": copy.deepcopy(self.overrides),
        }

    async def fetch_identity(self, identifier: str) -> dict[str, Any]:
        self.identity_requests.append(identifier)
        if self.identity_error is not None:
            raise self.identity_error
        return {"overrides": dict(self.identities.get(identifier, {}))}
