"""
Prometheus metrics for the beacon, the settlement game and the reward ledger.

Instruments:
  • commits_total               commitment submissions per outcome
  • reveals_total               reveal attempts per outcome
  • randomness_total            randomness draws per strategy and outcome
  • bets_total                  bets per mode and outcome
  • ledger_ops_total            ledger entry-point calls per op and outcome
  • reward_tokens_total         tokens routed into the pool by losing bets
  • delayed_wait_blocks         blocks between a delayed request and its draw

Label vocabularies are small and fixed; an unknown label value is recorded as
"invalid" (or "rejected" for bets/ledger ops) instead of widening cardinality.

Usage
-----
    from goodluck.metrics import METRICS

    METRICS.record_commit("accepted")
    METRICS.record_bet("safe", "won")
    METRICS.observe_delayed_wait(6)

Tests and embedders that need isolation construct their own `Metrics` with a
private `CollectorRegistry`.
"""

from __future__ import annotations

from typing import Iterable

from prometheus_client import REGISTRY, Counter, Histogram


# --------- Vocabularies (kept small for bounded cardinality) ---------

_COMMIT_OUTCOMES = (
    "accepted",     # commit stored for the round
    "too_late",     # arrived after commit window closed
    "duplicate",    # already have a commit from the same participant this round
    "invalid",      # malformed / no open round / paused
)

_REVEAL_OUTCOMES = (
    "accepted",     # reveal matched commitment and window open
    "too_early",    # reveal before commit window closed
    "bad_reveal",   # hash mismatch vs commitment
    "missing",      # no live commitment for the participant
    "invalid",
)

_STRATEGIES = ("instant", "delayed", "reveal")

_DRAW_OUTCOMES = (
    "requested",      # delayed ticket issued
    "fulfilled",      # value produced
    "not_available",  # polled too early or the target fell out of lookback
    "cancelled",
    "invalid",
)

_BET_MODES = ("instant", "safe")

_BET_OUTCOMES = (
    "won",
    "lost",
    "pending",    # safe bet accepted, awaiting finalize
    "cancelled",  # safe bet refunded
    "rejected",   # validation failure or rollback
)

_LEDGER_OPS = ("deposit", "withdraw", "claim", "reward", "emergency_withdraw")

_LEDGER_OUTCOMES = ("ok", "noop", "rejected")

# Blocks waited between request and draw: the delay itself up to the lookback horizon
_WAIT_BLOCKS_BUCKETS = (5.0, 6.0, 8.0, 12.0, 16.0, 32.0, 64.0, 128.0, 256.0)


class Metrics:
    """
    Container for all goodluck Prometheus instruments.

    Args:
        namespace: Prometheus metric namespace (prefix).
        subsystem: Prometheus metric subsystem (inserted between namespace and name).
        registry:  Prometheus registry to register the metrics with.
    """

    def __init__(
        self,
        *,
        namespace: str = "goodluck",
        subsystem: str = "game",
        registry=REGISTRY,
        wait_buckets: Iterable[float] = _WAIT_BLOCKS_BUCKETS,
    ) -> None:
        self.commits_total = Counter(
            "commits_total",
            "Number of commitment submissions processed, labeled by outcome.",
            labelnames=("outcome",),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.reveals_total = Counter(
            "reveals_total",
            "Number of reveal attempts processed, labeled by outcome.",
            labelnames=("outcome",),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.randomness_total = Counter(
            "randomness_total",
            "Randomness draws and requests, labeled by strategy and outcome.",
            labelnames=("strategy", "outcome"),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.bets_total = Counter(
            "bets_total",
            "Bets processed, labeled by mode and outcome.",
            labelnames=("mode", "outcome"),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.ledger_ops_total = Counter(
            "ledger_ops_total",
            "Reward ledger operations, labeled by op and outcome.",
            labelnames=("op", "outcome"),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.reward_tokens_total = Counter(
            "reward_tokens_total",
            "Tokens from losing bets added to the reward pool.",
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.delayed_wait_blocks = Histogram(
            "delayed_wait_blocks",
            "Blocks elapsed between a delayed request and its fulfilment.",
            buckets=tuple(wait_buckets),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )

    # ----- Recording helpers -------------------------------------------------

    def record_commit(self, outcome: str) -> None:
        if outcome not in _COMMIT_OUTCOMES:
            outcome = "invalid"
        self.commits_total.labels(outcome=outcome).inc()

    def record_reveal(self, outcome: str) -> None:
        if outcome not in _REVEAL_OUTCOMES:
            outcome = "invalid"
        self.reveals_total.labels(outcome=outcome).inc()

    def record_draw(self, strategy: str, outcome: str) -> None:
        """
        Increment the randomness counter.

        `strategy` must be one of _STRATEGIES; unknown outcomes map to "invalid".
        """
        if strategy not in _STRATEGIES:
            raise ValueError(f"unknown randomness strategy {strategy!r}")
        if outcome not in _DRAW_OUTCOMES:
            outcome = "invalid"
        self.randomness_total.labels(strategy=strategy, outcome=outcome).inc()

    def record_bet(self, mode: str, outcome: str) -> None:
        if mode not in _BET_MODES:
            raise ValueError(f"unknown bet mode {mode!r}")
        if outcome not in _BET_OUTCOMES:
            outcome = "rejected"
        self.bets_total.labels(mode=mode, outcome=outcome).inc()

    def record_ledger_op(self, op: str, outcome: str = "ok") -> None:
        if op not in _LEDGER_OPS:
            raise ValueError(f"unknown ledger op {op!r}")
        if outcome not in _LEDGER_OUTCOMES:
            outcome = "rejected"
        self.ledger_ops_total.labels(op=op, outcome=outcome).inc()

    def add_reward_tokens(self, amount: int) -> None:
        if amount > 0:
            self.reward_tokens_total.inc(amount)

    def observe_delayed_wait(self, blocks: int) -> None:
        self.delayed_wait_blocks.observe(float(blocks))


# Singleton used by most components
METRICS = Metrics()

__all__ = [
    "Metrics",
    "METRICS",
    "_COMMIT_OUTCOMES",
    "_REVEAL_OUTCOMES",
    "_DRAW_OUTCOMES",
    "_BET_OUTCOMES",
]
