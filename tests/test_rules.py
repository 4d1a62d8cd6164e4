"""ダイナミックルール評価のユニットテスト"""

import pytest
from k1s0_switcherlabs import (
    NO_MATCH,
    DynamicRule,
    Expression,
    Flag,
    Operator,
    RuleIntegrityError,
    compare,
    match_rule,
)


def make_rule(flag_id: int, op: Operator, threshold: object, value: object) -> DynamicRule:
    return DynamicRule(expression=Expression(flag_id=flag_id, op=op, value=threshold), value=value)


def test_compare_numbers() -> None:
    """数値同士の比較。"""
    assert compare(Operator.GT, 15, 10) is True
    assert compare(Operator.GE, 10, 10) is True
    assert compare(Operator.LT, 3, 10) is True
    assert compare(Operator.LE, 11, 10) is False
    assert compare(Operator.EQ, 1, 1.0) is True
    assert compare(Operator.NE, 1, 2) is True


def test_compare_coerces_numeric_strings() -> None:
    """数値文字列は数値と緩く比較される。"""
    assert compare(Operator.EQ, "10", 10) is True
    assert compare(Operator.GT, "15", 10) is True
    assert compare(Operator.NE, "10", 10) is False


def test_compare_booleans_as_numbers() -> None:
    """bool は 0/1 として比較される。"""
    assert compare(Operator.EQ, True, 1) is True
    assert compare(Operator.GT, True, 0) is True
    assert compare(Operator.EQ, True, True) is True


def test_compare_non_numeric_string_against_number() -> None:
    """数値にできない文字列との比較は等価・順序とも偽になる。"""
    assert compare(Operator.EQ, "abc", 1) is False
    assert compare(Operator.NE, "abc", 1) is True
    assert compare(Operator.GT, "abc", 1) is False
    assert compare(Operator.LT, "abc", 1) is False


def test_compare_strings_lexically() -> None:
    """文字列同士は辞書順で比較される。"""
    assert compare(Operator.LT, "apple", "banana") is True
    assert compare(Operator.EQ, "on", "on") is True


def test_compare_incomparable_types_is_false() -> None:
    """順序付けできない組み合わせは False。"""
    assert compare(Operator.LE, [1], "x") is False
    assert compare(Operator.GT, {"a": 1}, 0) is False


def test_compare_none_is_zero_in_ordered_comparisons() -> None:
    """順序比較では None は 0 として扱われる。"""
    assert compare(Operator.GE, None, 0) is True
    assert compare(Operator.LT, None, 1) is True
    assert compare(Operator.LE, 0, None) is True
    assert compare(Operator.GT, None, 1) is False
    assert compare(Operator.GT, None, "abc") is False


def test_compare_none_equality_is_strict() -> None:
    """等価比較では None は None とのみ等しい。"""
    assert compare(Operator.EQ, None, None) is True
    assert compare(Operator.EQ, None, 0) is False
    assert compare(Operator.NE, None, 0) is True


def test_none_valued_flag_matches_ordered_rule() -> None:
    """既定値が None のフラグも順序比較のルールに一致する。"""
    source = Flag(id=2, key="plan-level", value=None)
    target = Flag(id=3, key="tier", value="basic", dynamic_rules=(make_rule(2, Operator.GE, 0, "zero"),))
    assert match_rule(target, {2: source, 3: target}, lambda f: f.value) == "zero"


def test_first_matching_rule_wins() -> None:
    """リスト順で最初に一致したルールが採用される。"""
    source = Flag(id=2, key="plan-level", value=15)
    target = Flag(
        id=3,
        key="tier",
        value="basic",
        dynamic_rules=(
            make_rule(2, Operator.GT, 10, "A"),
            make_rule(2, Operator.GT, 0, "B"),
        ),
    )
    result = match_rule(target, {2: source, 3: target}, lambda f: f.value)
    assert result == "A"


def test_later_rule_matches_when_earlier_does_not() -> None:
    """先のルールが一致しなければ次のルールが評価される。"""
    source = Flag(id=2, key="plan-level", value=5)
    target = Flag(
        id=3,
        key="tier",
        value="basic",
        dynamic_rules=(
            make_rule(2, Operator.GT, 10, "A"),
            make_rule(2, Operator.GT, 0, "B"),
        ),
    )
    assert match_rule(target, {2: source, 3: target}, lambda f: f.value) == "B"


def test_no_match_returns_sentinel() -> None:
    """一致するルールがなければ NO_MATCH を返す。"""
    source = Flag(id=2, key="plan-level", value=-1)
    target = Flag(id=3, key="tier", dynamic_rules=(make_rule(2, Operator.GT, 0, "B"),))
    assert match_rule(target, {2: source, 3: target}, lambda f: f.value) is NO_MATCH


def test_rule_value_none_is_a_match() -> None:
    """ルールの値が None でも一致として扱われる。"""
    source = Flag(id=2, key="plan-level", value=1)
    target = Flag(id=3, key="tier", value="basic", dynamic_rules=(make_rule(2, Operator.EQ, 1, None),))
    assert match_rule(target, {2: source, 3: target}, lambda f: f.value) is None


def test_base_value_lookup_is_used_for_input() -> None:
    """参照先フラグの入力値は base_value から取得される。"""
    source = Flag(id=2, key="plan-level", value=5)
    target = Flag(id=3, key="tier", dynamic_rules=(make_rule(2, Operator.GT, 10, "A"),))
    seen: list[str] = []

    def lookup(flag: Flag) -> object:
        seen.append(flag.key)
        return 20

    assert match_rule(target, {2: source, 3: target}, lookup) == "A"
    assert seen == ["plan-level"]


def test_unknown_flag_id_raises_integrity_error() -> None:
    """存在しないフラグ ID を参照するルールは RuleIntegrityError。"""
    target = Flag(id=3, key="tier", dynamic_rules=(make_rule(99, Operator.EQ, 1, "A"),))
    with pytest.raises(RuleIntegrityError):
        match_rule(target, {3: target}, lambda f: f.value)
