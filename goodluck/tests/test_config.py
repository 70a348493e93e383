import json
import logging

import pytest

from goodluck.config import DEFAULT, BeaconTiming, ChainParams, GameConfig
from goodluck.host import Chain


def test_defaults_match_protocol_constants():
    cfg = GameConfig()
    cfg.validate()
    assert cfg.beacon.commit_phase_s == 3600
    assert cfg.beacon.delay_blocks == 5
    assert cfg.beacon.finalized_lookback == 256
    assert cfg.log_level_value() == logging.INFO
    assert DEFAULT.to_dict() == cfg.to_dict()
    assert json.loads(cfg.to_json())["beacon"]["delay_blocks"] == 5


def test_from_env_overrides(monkeypatch):
    monkeypatch.setenv("GOODLUCK_COMMIT_PHASE_S", "600")
    monkeypatch.setenv("GOODLUCK_DELAY_BLOCKS", "7")
    monkeypatch.setenv("GOODLUCK_BLOCK_TIME_S", "2")
    monkeypatch.setenv("GOODLUCK_LOG_LEVEL", "debug")
    cfg = GameConfig.from_env()
    assert cfg.beacon.commit_phase_s == 600
    assert cfg.beacon.delay_blocks == 7
    assert cfg.chain.block_time_s == 2
    assert cfg.log_level_value() == logging.DEBUG


def test_from_env_custom_prefix(monkeypatch):
    monkeypatch.setenv("GL_START_HEIGHT", "10")
    assert GameConfig.from_env(prefix="GL_").chain.start_height == 10


@pytest.mark.parametrize(
    "key,value",
    [
        ("GOODLUCK_DELAY_BLOCKS", "five"),
        ("GOODLUCK_DELAY_BLOCKS", "0"),
        ("GOODLUCK_FINALIZED_LOOKBACK", "5"),  # not larger than the delay
        ("GOODLUCK_START_HEIGHT", "0"),
        ("GOODLUCK_LOG_LEVEL", "chatty"),
        ("GOODLUCK_METRICS_NAMESPACE", "bad-name"),
    ],
)
def test_from_env_rejects_bad_values(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ValueError):
        GameConfig.from_env()


def test_from_json_file(tmp_path):
    p = tmp_path / "goodluck.json"
    p.write_text(json.dumps({"beacon": {"delay_blocks": 3}, "chain": {"block_time_s": 1}}))
    cfg = GameConfig.from_file(str(p))
    assert cfg.beacon.delay_blocks == 3
    assert cfg.beacon.commit_phase_s == 3600
    assert cfg.chain.block_time_s == 1


def test_from_yaml_file(tmp_path):
    p = tmp_path / "goodluck.yaml"
    p.write_text(
        "beacon:\n"
        "  commit_phase_s: 60\n"
        "chain:\n"
        "  genesis_time_unix: 0\n"
        "log_level: WARNING\n"
    )
    cfg = GameConfig.from_file(str(p))
    assert cfg.beacon.commit_phase_s == 60
    assert cfg.chain.genesis_time_unix == 0
    assert cfg.log_level == "WARNING"


def test_empty_file_gives_defaults(tmp_path):
    p = tmp_path / "empty.yml"
    p.write_text("")
    assert GameConfig.from_file(str(p)).to_dict() == GameConfig().to_dict()


@pytest.mark.parametrize(
    "body",
    [
        '{"payout_multiplier": 3}',
        '{"beacon": {"delay": 3}}',
        "[1, 2, 3]",
        '{"beacon": {"delay_blocks": 300}}',
        '{"beacon": 5}',
        '{"chain": [1, 2]}',
        '{"beacon": {"delay_blocks": "5"}}',
        '{"chain": {"start_height": true}}',
        '{"log_level": 3}',
    ],
)
def test_from_file_rejects_bad_documents(tmp_path, body):
    p = tmp_path / "bad.json"
    p.write_text(body)
    with pytest.raises(ValueError):
        GameConfig.from_file(str(p))


def test_sub_config_validation():
    with pytest.raises(ValueError):
        BeaconTiming(commit_phase_s=0).validate()
    with pytest.raises(ValueError):
        ChainParams(block_time_s=0).validate()


def test_chain_from_config_uses_params():
    cfg = GameConfig(
        beacon=BeaconTiming(delay_blocks=2, finalized_lookback=16),
        chain=ChainParams(block_time_s=5, genesis_time_unix=100, start_height=3),
    )
    c = Chain.from_config(cfg)
    assert c.height == 3
    assert c.timestamp == 115
    assert c.lookback == 16
