"""switcherlabs データモデル"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Mapping

from .exceptions import ParseError, RuleIntegrityError


class Operator(StrEnum):
    """ダイナミックルールの比較演算子。"""

    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="


@dataclass(frozen=True)
class Expression:
    """ルール条件式。参照フラグの値と定数を比較する。"""

    flag_id: Any
    op: Operator
    value: Any

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Expression:
        raw_op = data["op"]
        try:
            op = Operator(raw_op)
        except ValueError as e:
            raise RuleIntegrityError(f"unsupported rule operator: {raw_op!r}") from e
        return cls(flag_id=data["flag_id"], op=op, value=data.get("value"))


@dataclass(frozen=True)
class DynamicRule:
    """ダイナミックルール。リスト順に評価され、最初に一致したものが採用される。"""

    expression: Expression
    value: Any

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DynamicRule:
        return cls(
            expression=Expression.from_dict(data["expression"]),
            value=data.get("value"),
        )


@dataclass(frozen=True)
class Flag:
    """フィーチャーフラグ。"""

    id: Any
    key: str
    value: Any = None
    dynamic_rules: tuple[DynamicRule, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Flag:
        return cls(
            id=data["id"],
            key=data["key"],
            value=data.get("value"),
            dynamic_rules=tuple(
                DynamicRule.from_dict(r) for r in data.get("dynamic_rules") or []
            ),
        )


@dataclass(frozen=True)
class Override:
    """グローバルオーバーライド。"""

    key: str
    value: Any

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Override:
        return cls(key=data["key"], value=data.get("value"))


@dataclass(frozen=True)
class StateSnapshot:
    """グローバル状態のスナップショット。更新時は丸ごと差し替える。"""

    flags: Mapping[str, Flag] = field(default_factory=dict)
    flags_by_id: Mapping[Any, Flag] = field(default_factory=dict)
    overrides: Mapping[str, Override] = field(default_factory=dict)
    refreshed_at: float | None = None

    @classmethod
    def from_response(cls, data: Any, refreshed_at: float) -> StateSnapshot:
        """/sdk/initialize のレスポンスからスナップショットを生成する。"""
        try:
            flags = [Flag.from_dict(f) for f in data["flags"]]
            overrides = [Override.from_dict(o) for o in data["overrides"]]
            # id やキーがハッシュ不可能な場合もここで TypeError になる
            by_key = {f.key: f for f in flags}
            by_id = {f.id: f for f in flags}
            overrides_by_key = {o.key: o for o in overrides}
        except (KeyError, TypeError, AttributeError) as e:
            raise ParseError(f"malformed state response: {e!r}", cause=e) from e
        return cls(
            flags=by_key,
            flags_by_id=by_id,
            overrides=overrides_by_key,
            refreshed_at=refreshed_at,
        )


@dataclass(frozen=True)
class Identity:
    """識別子ごとのオーバーライド集合。"""

    identifier: str
    overrides: Mapping[str, Any]
    fetched_at: float

    @classmethod
    def from_response(cls, identifier: str, data: Any, fetched_at: float) -> Identity:
        """/sdk/identities/{identifier} のレスポンスから Identity を生成する。"""
        try:
            overrides = data["overrides"]
        except (KeyError, TypeError) as e:
            raise ParseError(f"malformed identity response: {e!r}", cause=e) from e
        if not isinstance(overrides, dict):
            raise ParseError(
                f"malformed identity response: overrides is {type(overrides).__name__}"
            )
        return cls(identifier=identifier, overrides=dict(overrides), fetched_at=fetched_at)
