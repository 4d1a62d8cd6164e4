"""ダイナミックルール評価"""

from __future__ import annotations

import math
from typing import Any, Callable, Mapping

from .exceptions import RuleIntegrityError
from .models import Flag, Operator

# ルールが一致しなかったことを表す番兵（None はフラグ値として正当なため使えない）
NO_MATCH: Any = object()


def _to_number(value: Any) -> float | int | None:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return None


def _coerce(left: Any, right: Any) -> tuple[Any, Any]:
    """緩い比較のために左右の値をそろえる。

    文字列同士はそのまま比較し、片方が数値（bool を含む）なら両方を数値に変換する。
    """
    if isinstance(left, str) and isinstance(right, str):
        return left, right
    numeric = (int, float)
    if isinstance(left, numeric) or isinstance(right, numeric):
        lnum, rnum = _to_number(left), _to_number(right)
        if lnum is not None and rnum is not None:
            return lnum, rnum
    return left, right


def compare(op: Operator, left: Any, right: Any) -> bool:
    """演算子 op で left と right を比較する。比較できない順序比較は False。

    順序比較では None を 0 として扱う。等価比較では None は None とのみ等しい。
    """
    if op is Operator.EQ:
        left, right = _coerce(left, right)
        return bool(left == right)
    if op is Operator.NE:
        left, right = _coerce(left, right)
        return bool(left != right)
    left, right = _coerce(
        0 if left is None else left,
        0 if right is None else right,
    )
    try:
        if op is Operator.LT:
            return bool(left < right)
        if op is Operator.LE:
            return bool(left <= right)
        if op is Operator.GT:
            return bool(left > right)
        if op is Operator.GE:
            return bool(left >= right)
    except TypeError:
        return False
    raise RuleIntegrityError(f"unsupported rule operator: {op!r}")


def match_rule(
    flag: Flag,
    flags_by_id: Mapping[Any, Flag],
    base_value: Callable[[Flag], Any],
) -> Any:
    """flag のダイナミックルールを順に評価し、最初に一致したルールの値を返す。

    参照先フラグの入力値は base_value で解決する。base_value はオーバーライドと
    既定値のみを参照し、参照先のルールは評価しない。一致しなければ NO_MATCH。
    """
    for rule in flag.dynamic_rules:
        expression = rule.expression
        target = flags_by_id.get(expression.flag_id)
        if target is None:
            raise RuleIntegrityError(
                f"rule on flag {flag.key!r} references unknown flag id "
                f"{expression.flag_id!r}"
            )
        if compare(expression.op, base_value(target), expression.value):
            return rule.value
    return NO_MATCH
