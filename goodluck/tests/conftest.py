from typing import Callable

import pytest
from prometheus_client import CollectorRegistry

from goodluck.beacon import RandomnessBeacon
from goodluck.game import LuckyGame
from goodluck.host import Chain
from goodluck.metrics import Metrics
from goodluck.token import InMemoryToken

OWNER = "owner"
BANKROLL = 10_000


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> Metrics:
    return Metrics(registry=registry)


@pytest.fixture
def chain() -> Chain:
    return Chain(seed=b"goodluck-tests")


@pytest.fixture
def token(chain: Chain) -> InMemoryToken:
    return InMemoryToken(chain)


@pytest.fixture
def beacon(chain: Chain, metrics: Metrics) -> RandomnessBeacon:
    return RandomnessBeacon(chain, owner=OWNER, metrics=metrics)


@pytest.fixture
def game(chain: Chain, token: InMemoryToken, beacon: RandomnessBeacon, metrics: Metrics) -> LuckyGame:
    g = LuckyGame(chain, token, beacon, owner=OWNER, metrics=metrics)
    token.mint(g.address, BANKROLL)
    return g


@pytest.fixture
def fund(token: InMemoryToken, game: LuckyGame) -> Callable[[str, int], None]:
    """Mint `amount` to `account` and approve the game to pull all of it."""

    def _fund(account: str, amount: int) -> None:
        assert token.mint(account, amount)
        assert token.approve(account, game.address, token.allowance(account, game.address) + amount)

    return _fund


@pytest.fixture
def pin_instant(monkeypatch: pytest.MonkeyPatch, beacon: RandomnessBeacon) -> Callable[[int], None]:
    """Force the next instant draws to return `value`."""

    def _pin(value: int) -> None:
        monkeypatch.setattr(beacon, "get_instant_random", lambda caller: value)

    return _pin
