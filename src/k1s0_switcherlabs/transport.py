"""SwitcherLabs API トランスポート"""

from __future__ import annotations

import platform
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from ._version import __version__
from .config import SwitcherLabsConfig
from .exceptions import (
    ApiError,
    ParseError,
    SwitcherLabsError,
    TransportError,
)

logger = structlog.get_logger(__name__)

STATE_PATH = "/sdk/initialize"
IDENTITY_PATH = "/sdk/identities/{identifier}"


class Transport(ABC):
    """SwitcherLabs API トランスポート抽象基底クラス。"""

    @abstractmethod
    async def fetch_state(self) -> dict[str, Any]:
        """グローバルなフラグとオーバーライドのスナップショットを取得する。"""
        ...

    @abstractmethod
    async def fetch_identity(self, identifier: str) -> dict[str, Any]:
        """識別子ごとのオーバーライドを取得する。"""
        ...

    async def aclose(self) -> None:
        """保持しているリソースを解放する。"""


class HttpTransport(Transport):
    """httpx を使った SwitcherLabs HTTP トランスポート。

    接続を再利用するため AsyncClient を保持し、aclose() で閉じる。
    """

    def __init__(
        self,
        config: SwitcherLabsConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._client = client

    @property
    def user_agent(self) -> str:
        return (
            f"k1s0-switcherlabs-python/{__version__} "
            f"python/{platform.python_version()}"
        )

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            auth=httpx.BasicAuth("", self._config.api_key),
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                "User-Agent": self.user_agent,
            },
            timeout=self._config.timeout_seconds,
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = self._make_client()
        return self._client

    def _handle_response(self, resp: httpx.Response, context: str) -> dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise ParseError(
                f"{context}: response body is not valid JSON (HTTP {resp.status_code})",
                cause=e,
            ) from e
        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            error = data["error"]
            raise ApiError(
                status_code=resp.status_code,
                message=f"{context}: {error.get('message', 'API error')}",
                error=error,
            )
        if resp.status_code >= 400:
            raise ApiError(
                status_code=resp.status_code,
                message=f"{context}: HTTP {resp.status_code}",
            )
        if not isinstance(data, dict):
            raise ParseError(
                f"{context}: expected a JSON object, got {type(data).__name__}"
            )
        return data

    async def _get(self, path: str, context: str) -> dict[str, Any]:
        try:
            resp = await self._get_client().get(path)
            return self._handle_response(resp, context)
        except SwitcherLabsError:
            raise
        except httpx.TimeoutException as e:
            raise TransportError(
                "Request aborted due to timeout being reached "
                f"({self._config.timeout_ms}ms)",
                timeout=True,
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{context}: {e}", cause=e) from e

    async def fetch_state(self) -> dict[str, Any]:
        return await self._get(STATE_PATH, "fetch_state")

    async def fetch_identity(self, identifier: str) -> dict[str, Any]:
        path = IDENTITY_PATH.format(identifier=quote(identifier, safe=""))
        return await self._get(path, f"fetch_identity({identifier})")

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            logger.debug("transport_closed")
