import json

import pytest
from typer.testing import CliRunner

from goodluck.cli import app, simulate
from goodluck.commit_reveal import build_commitment_hex
from goodluck.config import GameConfig
from goodluck.version import __version__

runner = CliRunner()

SALT_HEX = "0x" + "11" * 32


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_commitment_with_given_salt():
    result = runner.invoke(app, ["commitment", "--number", "42", "--salt", SALT_HEX])
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert out == {
        "number": 42,
        "salt": SALT_HEX,
        "commitment": build_commitment_hex(42, bytes.fromhex("11" * 32)),
    }


def test_commitment_draws_a_salt_when_omitted():
    result = runner.invoke(app, ["commitment", "-n", "7"])
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert len(out["salt"]) == 2 + 64
    assert out["commitment"] == build_commitment_hex(7, bytes.fromhex(out["salt"][2:]))


@pytest.mark.parametrize(
    "args",
    [
        ["commitment", "--number", "1", "--salt", "0xabc"],   # odd length
        ["commitment", "--number", "1", "--salt", "0x1111"],  # wrong size
        ["commitment", "--number", "-1", "--salt", SALT_HEX],
    ],
)
def test_commitment_rejects_bad_input(args):
    result = runner.invoke(app, args)
    assert result.exit_code == 2


def test_config_from_file(tmp_path):
    p = tmp_path / "cfg.yaml"
    p.write_text("beacon:\n  delay_blocks: 9\n")
    result = runner.invoke(app, ["config", "--file", str(p)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["beacon"]["delay_blocks"] == 9


def test_config_bad_file(tmp_path):
    p = tmp_path / "cfg.json"
    p.write_text('{"nope": 1}')
    result = runner.invoke(app, ["config", "--file", str(p)])
    assert result.exit_code == 2


@pytest.mark.parametrize("body", ["beacon: 5\n", "beacon:\n  delay_blocks: '5'\n"])
def test_config_wrongly_typed_file(tmp_path, body):
    p = tmp_path / "cfg.yaml"
    p.write_text(body)
    result = runner.invoke(app, ["config", "--file", str(p)])
    assert result.exit_code == 2
    assert "Invalid configuration" in result.output


def test_simulate_rejects_unknown_mode():
    result = runner.invoke(app, ["simulate", "--mode", "turbo"])
    assert result.exit_code == 2


@pytest.mark.parametrize("mode", ["instant", "safe"])
def test_simulate_command_runs(mode):
    result = runner.invoke(app, ["simulate", "--bets", "4", "--mode", mode])
    assert result.exit_code == 0, result.output
    assert f'"mode": "{mode}"' in result.output


@pytest.mark.parametrize("mode", ["instant", "safe"])
def test_simulation_accounting(mode):
    kw = dict(bets=12, stakers=3, stake=1_000, amount=10, mode=mode, bankroll=5_000, seed=b"acct")
    summary = simulate(GameConfig(), **kw)

    assert summary["won"] + summary["lost"] == 12
    assert summary["rewardsAdded"] == summary["lost"] * 10
    assert summary["totalStaked"] == 3_000
    # nothing was claimed, so custody holds every inflow minus the payouts
    assert summary["custody"] == 5_000 + 3_000 + 12 * 10 - summary["paidOut"]
    assert sum(summary["providerPending"].values()) <= summary["rewardsAdded"]

    assert simulate(GameConfig(), **kw) == summary


def test_simulation_without_providers_strands_rewards():
    summary = simulate(
        GameConfig(), bets=6, stakers=0, stake=1, amount=10, mode="instant", bankroll=1_000, seed=b"solo"
    )
    assert summary["totalStaked"] == 0
    assert summary["pendingRewards"] == summary["lost"] * 10
    assert summary["providerPending"] == {}
