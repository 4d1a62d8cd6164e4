"""switcherlabs テスト共通フィクスチャ"""

from __future__ import annotations

import pytest
from helpers import FakeClock, make_flags
from k1s0_switcherlabs import InMemoryTransport, SwitcherLabsClient


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> InMemoryTransport:
    return InMemoryTransport(
        flags=make_flags(),
        overrides=[{"key": "checkout", "value": True}],
    )


@pytest.fixture
async def client(transport: InMemoryTransport, clock: FakeClock) -> SwitcherLabsClient:
    sl = SwitcherLabsClient(api_key="test-key", transport=transport, clock=clock)
    await sl.initialize()
    return sl
