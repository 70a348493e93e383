"""
goodluck configuration.

This file defines typed configuration objects and helpers for:
- Beacon timing (commit window length, delayed-draw distance, lookback horizon)
- The simulated host (block interval, genesis timestamp, initial height)
- Operational knobs (metrics namespace, log level)

The payout ratio and the ledger's fixed-point scale are protocol constants
(`goodluck.constants`) and are intentionally absent here.

Provides:
- Dataclass-based configs with validation
- Loading from environment variables (prefix configurable)
- Loading from a JSON or YAML file
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict

import yaml

from .constants import COMMIT_PHASE_LENGTH, DELAY_BLOCKS, FINALIZED_LOOKBACK

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _require_int(name: str, value: Any) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an integer (got {value!r})")


# -------------------------
# Sub-configs
# -------------------------


@dataclass
class BeaconTiming:
    """
    commit_phase_s:     seconds the commit window stays open after a round starts
    delay_blocks:       blocks between a delayed request and its target height
    finalized_lookback: how many past heights keep a readable finalized value
    """

    commit_phase_s: int = COMMIT_PHASE_LENGTH
    delay_blocks: int = DELAY_BLOCKS
    finalized_lookback: int = FINALIZED_LOOKBACK

    def validate(self) -> None:
        for name in ("commit_phase_s", "delay_blocks", "finalized_lookback"):
            _require_int(name, getattr(self, name))
        if self.commit_phase_s <= 0:
            raise ValueError("commit_phase_s must be > 0")
        if self.delay_blocks <= 0:
            raise ValueError("delay_blocks must be > 0")
        if self.finalized_lookback <= 0:
            raise ValueError("finalized_lookback must be > 0")
        if self.delay_blocks >= self.finalized_lookback:
            raise ValueError(
                f"delay_blocks ({self.delay_blocks}) must be smaller than "
                f"finalized_lookback ({self.finalized_lookback})"
            )


@dataclass
class ChainParams:
    """
    Parameters of the in-process host used by tests, the CLI simulator and
    local experiments.

    block_time_s:      timestamp advance per mined block
    genesis_time_unix: timestamp of height 0
    start_height:      height the chain starts at
    """

    block_time_s: int = 12
    genesis_time_unix: int = 1_700_000_000
    start_height: int = 1

    def validate(self) -> None:
        for name in ("block_time_s", "genesis_time_unix", "start_height"):
            _require_int(name, getattr(self, name))
        if self.block_time_s <= 0:
            raise ValueError("block_time_s must be > 0")
        if self.genesis_time_unix < 0:
            raise ValueError("genesis_time_unix must be >= 0")
        if self.start_height < 1:
            # height 0 has no predecessor to draw a finalized value from
            raise ValueError("start_height must be >= 1")


# -------------------------
# Top-level config
# -------------------------


@dataclass
class GameConfig:
    """
    Top-level configuration.

      - beacon: commit-reveal and delayed-draw timing
      - chain:  simulated host parameters
      - metrics_namespace: Prometheus namespace for all collectors
      - log_level: root log level applied by the CLI
    """

    beacon: BeaconTiming = field(default_factory=BeaconTiming)
    chain: ChainParams = field(default_factory=ChainParams)
    metrics_namespace: str = "goodluck"
    log_level: str = "INFO"

    def validate(self) -> None:
        self.beacon.validate()
        self.chain.validate()
        if not isinstance(self.metrics_namespace, str) or not isinstance(self.log_level, str):
            raise ValueError("metrics_namespace and log_level must be strings")
        if not self.metrics_namespace or not self.metrics_namespace.replace("_", "").isalnum():
            raise ValueError("metrics_namespace must be a non-empty identifier")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")

    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    # -------------------------
    # Serialization helpers
    # -------------------------

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    # -------------------------
    # Loaders
    # -------------------------

    @staticmethod
    def from_env(prefix: str = "GOODLUCK_") -> "GameConfig":
        """
        Load configuration from environment variables. All variables are optional.

        Supported keys:
          - GOODLUCK_COMMIT_PHASE_S=3600
          - GOODLUCK_DELAY_BLOCKS=5
          - GOODLUCK_FINALIZED_LOOKBACK=256

          - GOODLUCK_BLOCK_TIME_S=12
          - GOODLUCK_GENESIS_TIME_UNIX=1700000000
          - GOODLUCK_START_HEIGHT=1

          - GOODLUCK_METRICS_NAMESPACE=goodluck
          - GOODLUCK_LOG_LEVEL=INFO
        """

        def _get(name: str, cast: Any, default: Any) -> Any:
            key = prefix + name
            raw = os.getenv(key)
            if raw is None:
                return default
            try:
                return cast(raw)
            except ValueError as e:
                raise ValueError(f"Invalid value for {key}: {raw!r}") from e

        cfg = GameConfig(
            beacon=BeaconTiming(
                commit_phase_s=_get("COMMIT_PHASE_S", int, COMMIT_PHASE_LENGTH),
                delay_blocks=_get("DELAY_BLOCKS", int, DELAY_BLOCKS),
                finalized_lookback=_get("FINALIZED_LOOKBACK", int, FINALIZED_LOOKBACK),
            ),
            chain=ChainParams(
                block_time_s=_get("BLOCK_TIME_S", int, 12),
                genesis_time_unix=_get("GENESIS_TIME_UNIX", int, 1_700_000_000),
                start_height=_get("START_HEIGHT", int, 1),
            ),
            metrics_namespace=_get("METRICS_NAMESPACE", str, "goodluck"),
            log_level=_get("LOG_LEVEL", str, "INFO"),
        )
        cfg.validate()
        return cfg

    @staticmethod
    def from_file(path: str) -> "GameConfig":
        """
        Load configuration from a JSON or YAML file. Keys mirror the dataclass
        structure. Example (YAML):

            beacon:
              commit_phase_s: 600
              delay_blocks: 5
            chain:
              block_time_s: 2
            log_level: DEBUG
        """
        text = _read_text(path)
        data = _parse_json_or_yaml(text, path)

        beacon_d = _section(data, "beacon", path)
        chain_d = _section(data, "chain", path)

        cfg = GameConfig(
            beacon=BeaconTiming(
                commit_phase_s=beacon_d.pop("commit_phase_s", COMMIT_PHASE_LENGTH),
                delay_blocks=beacon_d.pop("delay_blocks", DELAY_BLOCKS),
                finalized_lookback=beacon_d.pop("finalized_lookback", FINALIZED_LOOKBACK),
            ),
            chain=ChainParams(
                block_time_s=chain_d.pop("block_time_s", 12),
                genesis_time_unix=chain_d.pop("genesis_time_unix", 1_700_000_000),
                start_height=chain_d.pop("start_height", 1),
            ),
            metrics_namespace=data.pop("metrics_namespace", "goodluck"),
            log_level=data.pop("log_level", "INFO"),
        )
        unknown = sorted({str(k) for k in data} | {f"beacon.{k}" for k in beacon_d} | {f"chain.{k}" for k in chain_d})
        if unknown:
            raise ValueError(f"unknown config keys in {path}: {', '.join(unknown)}")
        cfg.validate()
        return cfg


# -------------------------
# Utilities
# -------------------------


def _section(data: Dict[str, Any], key: str, path_hint: str) -> Dict[str, Any]:
    sub = data.pop(key, None)
    if sub is None:
        return {}
    if not isinstance(sub, dict):
        raise ValueError(f"'{key}' in {path_hint} must be a mapping")
    return sub


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _parse_json_or_yaml(text: str, path_hint: str) -> Dict[str, Any]:
    if path_hint.endswith((".yaml", ".yml")):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML config at {path_hint}") from e
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            try:
                data = yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise ValueError(f"Config at {path_hint} is neither JSON nor YAML") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root in {path_hint} must be a mapping")
    return data


DEFAULT = GameConfig()

__all__ = ["BeaconTiming", "ChainParams", "GameConfig", "DEFAULT"]
