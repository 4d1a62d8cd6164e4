"""switcherlabs ライブラリの例外型定義"""

from __future__ import annotations

from typing import Any


class SwitcherLabsError(Exception):
    """switcherlabs ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class SwitcherLabsErrorCodes:
    """SwitcherLabsError のエラーコード定数。"""

    CONFIGURATION_ERROR: str = "CONFIGURATION_ERROR"
    FLAG_NOT_FOUND: str = "FLAG_NOT_FOUND"
    TIMEOUT: str = "TIMEOUT"
    CONNECTION_ERROR: str = "CONNECTION_ERROR"
    API_ERROR: str = "API_ERROR"
    PARSE_ERROR: str = "PARSE_ERROR"
    RULE_INTEGRITY_ERROR: str = "RULE_INTEGRITY_ERROR"


class ConfigurationError(SwitcherLabsError):
    """設定不備（API キー未設定など）。構築時に送出され、リトライされない。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(SwitcherLabsErrorCodes.CONFIGURATION_ERROR, message, cause)


class FlagNotFoundError(SwitcherLabsError):
    """要求されたフラグが最後に取得した状態に存在しない。"""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(
            SwitcherLabsErrorCodes.FLAG_NOT_FOUND,
            f"flag requested does not exist: {key}",
        )


class TransportError(SwitcherLabsError):
    """ネットワーク・接続・タイムアウトの失敗。"""

    def __init__(
        self,
        message: str,
        timeout: bool = False,
        cause: Exception | None = None,
    ) -> None:
        code = (
            SwitcherLabsErrorCodes.TIMEOUT
            if timeout
            else SwitcherLabsErrorCodes.CONNECTION_ERROR
        )
        super().__init__(code, message, cause)

    @property
    def is_timeout(self) -> bool:
        return self.code == SwitcherLabsErrorCodes.TIMEOUT


class ApiError(SwitcherLabsError):
    """サービスが返したエラーレスポンス。元の HTTP ステータスを保持する。"""

    def __init__(
        self,
        status_code: int,
        message: str,
        error: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.error: dict[str, Any] = dict(error or {})
        super().__init__(SwitcherLabsErrorCodes.API_ERROR, message)


class ParseError(SwitcherLabsError):
    """レスポンスボディが JSON でない、または期待する形をしていない。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(SwitcherLabsErrorCodes.PARSE_ERROR, message, cause)


class RuleIntegrityError(SwitcherLabsError):
    """ダイナミックルールが存在しないフラグ ID や未知の演算子を参照している。"""

    def __init__(self, message: str) -> None:
        super().__init__(SwitcherLabsErrorCodes.RULE_INTEGRITY_ERROR, message)
