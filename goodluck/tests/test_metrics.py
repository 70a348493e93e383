import pytest
from prometheus_client import CollectorRegistry

from goodluck.commit_reveal import build_commitment
from goodluck.constants import COMMIT_PHASE_LENGTH, DELAY_BLOCKS
from goodluck.errors import CommitTooLate
from goodluck.metrics import Metrics

SALT = b"\x07" * 32


def sample(registry, name, **labels):
    return registry.get_sample_value(f"goodluck_game_{name}", labels or None) or 0.0


def test_unknown_outcomes_are_folded(registry, metrics):
    metrics.record_commit("weird")
    metrics.record_reveal("weird")
    metrics.record_draw("instant", "weird")
    assert sample(registry, "commits_total", outcome="invalid") == 1
    assert sample(registry, "reveals_total", outcome="invalid") == 1
    assert sample(registry, "randomness_total", strategy="instant", outcome="invalid") == 1


def test_unknown_label_families_raise(metrics):
    with pytest.raises(ValueError):
        metrics.record_draw("oracle", "fulfilled")
    with pytest.raises(ValueError):
        metrics.record_bet("turbo", "won")
    with pytest.raises(ValueError):
        metrics.record_ledger_op("mint")


def test_custom_namespace():
    reg = CollectorRegistry()
    m = Metrics(namespace="devnet", registry=reg)
    m.record_commit("accepted")
    assert reg.get_sample_value("devnet_game_commits_total", {"outcome": "accepted"}) == 1


def test_beacon_commit_reveal_is_counted(registry, beacon, chain):
    start = beacon.start_new_round("x").round_start
    beacon.commit("alice", build_commitment(1, SALT))
    chain.set_timestamp(start + COMMIT_PHASE_LENGTH)
    with pytest.raises(CommitTooLate):
        beacon.commit("bob", build_commitment(1, SALT))
    beacon.reveal("alice", 1, SALT)

    assert sample(registry, "commits_total", outcome="accepted") == 1
    assert sample(registry, "commits_total", outcome="too_late") == 1
    assert sample(registry, "reveals_total", outcome="accepted") == 1
    assert sample(registry, "randomness_total", strategy="reveal", outcome="fulfilled") == 1


def test_delayed_wait_is_observed(registry, beacon, chain):
    t = beacon.request_delayed_random("alice")
    chain.mine(DELAY_BLOCKS + 3)
    beacon.get_delayed_random("alice", t)
    assert sample(registry, "randomness_total", strategy="delayed", outcome="requested") == 1
    assert sample(registry, "randomness_total", strategy="delayed", outcome="fulfilled") == 1
    assert sample(registry, "delayed_wait_blocks_count") == 1
    assert sample(registry, "delayed_wait_blocks_sum") == DELAY_BLOCKS + 3


def test_game_counts_bets_and_rewards(registry, game, fund, pin_instant):
    fund("p", 100)
    pin_instant(0)
    game.place_bet_instant("p", 10, 1)
    game.place_bet_instant("p", 5, 1)
    assert sample(registry, "bets_total", mode="instant", outcome="lost") == 2
    assert sample(registry, "reward_tokens_total") == 15

    fund("lp", 10)
    game.deposit("lp", 10)
    game.claim("lp")
    game.claim("lp")
    assert sample(registry, "ledger_ops_total", op="deposit", outcome="ok") == 1
    assert sample(registry, "ledger_ops_total", op="claim", outcome="ok") == 1
    assert sample(registry, "ledger_ops_total", op="claim", outcome="noop") == 1
