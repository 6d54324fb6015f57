"""Shared fixtures: a scripted in-memory wallet and a small bridge feed."""

import pytest

from reality_bridge.core.bridge import BridgeResolver
from reality_bridge.core.questions import QuestionChain, QuestionRecord

from tests.fakes import BRIDGE_ROWS, HOME_PROXY, QUESTION_ID, FakeWallet


@pytest.fixture
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest.fixture
def resolver() -> BridgeResolver:
    return BridgeResolver.from_feed(BRIDGE_ROWS)


@pytest.fixture
def question() -> QuestionRecord:
    """Open Gnosis question whose arbitrator is a bridged home proxy."""
    return QuestionRecord(
        id=QUESTION_ID,
        chain=QuestionChain(id="0x64", name="Gnosis", native_currency="xDAI"),
        arbitrator=HOME_PROXY.lower(),
        current_bond="0.5",
        phase="open",
        title="Will it rain in Paris tomorrow?",
    )
