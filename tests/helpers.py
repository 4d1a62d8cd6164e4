"""テスト用ヘルパー"""

from __future__ import annotations

from typing import Any


class FakeClock:
    """手動で進める時計。"""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_flags() -> list[dict[str, Any]]:
    return [
        {"id": 1, "key": "checkout", "value": False, "dynamic_rules": []},
        {"id": 2, "key": "plan-level", "value": 5, "dynamic_rules": []},
        {
            "id": 3,
            "key": "tier",
            "value": "basic",
            "dynamic_rules": [
                {"expression": {"flag_id": 2, "op": ">", "value": 10}, "value": "A"},
                {"expression": {"flag_id": 2, "op": ">", "value": 0}, "value": "B"},
            ],
        },
    ]
