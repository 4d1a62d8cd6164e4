"""switcherlabs クライアント設定（pydantic BaseModel）"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError

DEFAULT_HOST = "api.switcherlabs.com"
DEFAULT_PORT = 443
DEFAULT_TIMEOUT_MS = 60_000


class SwitcherLabsConfig(BaseModel):
    """SwitcherLabs クライアント設定。"""

    api_key: str = Field(min_length=1)
    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    protocol: Literal["http", "https"] = "https"
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)

    @property
    def base_url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}"

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


def build_config(**values: Any) -> SwitcherLabsConfig:
    """キーワード引数から設定を構築する。None は既定値として扱う。"""
    data = {k: v for k, v in values.items() if v is not None}
    if not data.get("api_key"):
        raise ConfigurationError(
            "You must set api_key in the config when initializing a SwitcherLabs client."
        )
    try:
        return SwitcherLabsConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Config validation failed: {e}", cause=e) from e
