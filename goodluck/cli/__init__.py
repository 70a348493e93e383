"""
goodluck.cli
------------

Small convenience CLI around the beacon, the game and the reward pool.

Commands:
  - config      : Show the effective configuration (env or file).
  - commitment  : Build a commit-reveal commitment H(number || salt).
  - simulate    : Run a deterministic in-process game session and print a summary.

Environment:
  GOODLUCK_* variables override configuration defaults (see goodluck.config).

Example:
  goodluck config --file ./goodluck.yaml
  goodluck commitment --number 42 --salt 0x$(printf '11%.0s' {1..32})
  goodluck simulate --bets 20 --stakers 3 --mode safe
"""

from __future__ import annotations

import json
import logging
import secrets
from typing import Any, Dict, Optional

import typer
from prometheus_client import CollectorRegistry

from ..beacon import RandomnessBeacon
from ..commit_reveal import SALT_LEN, build_commitment_hex
from ..config import GameConfig
from ..errors import GoodluckError
from ..game import LuckyGame
from ..host import Chain
from ..metrics import Metrics
from ..token import InMemoryToken
from ..types import Address
from ..utils.bytes import from_hex, to_hex
from ..version import __version__

__all__ = ["app", "main"]

log = logging.getLogger(__name__)

app = typer.Typer(
    name="goodluck",
    help="Randomness beacon and pari-mutuel reward pool tools.",
    no_args_is_help=True,
    add_completion=False,
)


def _load_config(path: Optional[str]) -> GameConfig:
    try:
        return GameConfig.from_file(path) if path else GameConfig.from_env()
    except (OSError, ValueError) as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=2)


def _setup_logging(cfg: GameConfig) -> None:
    logging.basicConfig(
        level=cfg.log_level_value(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _echo(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2, sort_keys=True))


@app.command("version")
def cmd_version() -> None:
    """Print the package version."""
    typer.echo(__version__)


@app.command("config")
def cmd_config(
    file: Optional[str] = typer.Option(None, "--file", "-f", help="JSON or YAML config file."),
) -> None:
    """Show the effective configuration."""
    cfg = _load_config(file)
    typer.echo(cfg.to_json())


@app.command("commitment")
def cmd_commitment(
    number: int = typer.Option(..., "--number", "-n", min=0, help="Secret number to commit to."),
    salt: Optional[str] = typer.Option(
        None, "--salt", "-s", help=f"0x-hex salt of exactly {SALT_LEN} bytes (random if omitted)."
    ),
) -> None:
    """
    Build the commitment for (number, salt).

    Keep the salt: revealing requires the same number and salt.
    """
    if salt is None:
        raw = secrets.token_bytes(SALT_LEN)
    else:
        try:
            raw = from_hex(salt)
        except ValueError:
            typer.echo("Invalid --salt: must be even-length hex.", err=True)
            raise typer.Exit(code=2)
    try:
        commitment = build_commitment_hex(number, raw)
    except ValueError as e:
        typer.echo(f"Invalid input: {e}", err=True)
        raise typer.Exit(code=2)
    _echo({"number": number, "salt": to_hex(raw), "commitment": commitment})


@app.command("simulate")
def cmd_simulate(
    bets: int = typer.Option(10, "--bets", min=0, help="Number of bets to place."),
    stakers: int = typer.Option(2, "--stakers", min=0, help="Number of liquidity providers."),
    stake: int = typer.Option(1_000, "--stake", min=1, help="Deposit per liquidity provider."),
    amount: int = typer.Option(10, "--amount", min=1, help="Stake per bet."),
    mode: str = typer.Option("instant", "--mode", help="instant | safe"),
    bankroll: int = typer.Option(10_000, "--bankroll", min=0, help="Tokens pre-funded into the game."),
    seed: str = typer.Option("goodluck-sim", "--seed", help="Chain seed; same seed, same outcomes."),
    file: Optional[str] = typer.Option(None, "--file", "-f", help="JSON or YAML config file."),
) -> None:
    """Run a deterministic local session and print the resulting pool state."""
    if mode not in ("instant", "safe"):
        typer.echo("Invalid --mode: expected 'instant' or 'safe'.", err=True)
        raise typer.Exit(code=2)
    cfg = _load_config(file)
    _setup_logging(cfg)
    try:
        summary = simulate(
            cfg,
            bets=bets,
            stakers=stakers,
            stake=stake,
            amount=amount,
            mode=mode,
            bankroll=bankroll,
            seed=seed.encode("utf-8"),
        )
    except GoodluckError as e:
        _echo({"error": e.to_dict()})
        raise typer.Exit(code=1)
    _echo(summary)


def simulate(
    cfg: GameConfig,
    *,
    bets: int,
    stakers: int,
    stake: int,
    amount: int,
    mode: str,
    bankroll: int,
    seed: bytes,
) -> Dict[str, Any]:
    """
    Play `bets` bets (alternating choices across a handful of players) against
    a pool funded by `stakers` providers, then report outcomes and the pool.
    """
    chain = Chain.from_config(cfg, seed=seed)
    metrics = Metrics(namespace=cfg.metrics_namespace, registry=CollectorRegistry())
    owner = Address("owner")
    token = InMemoryToken(chain)
    beacon = RandomnessBeacon(chain, owner=owner, timing=cfg.beacon, metrics=metrics)
    game = LuckyGame(chain, token, beacon, owner=owner, metrics=metrics)
    token.mint(game.address, bankroll)

    providers = [Address(f"lp{i}") for i in range(stakers)]
    for lp in providers:
        token.mint(lp, stake)
        token.approve(lp, game.address, stake)
        game.deposit(lp, stake)

    players = [Address(f"player{i}") for i in range(4)]
    for p in players:
        token.mint(p, amount * bets)
        token.approve(p, game.address, amount * bets)

    won = lost = paid = 0
    for i in range(bets):
        player = players[i % len(players)]
        choice = i % 2
        if mode == "instant":
            result = game.place_bet_instant(player, amount, choice)
        else:
            game.place_bet_safe(player, amount, choice)
            chain.mine(cfg.beacon.delay_blocks + 1)
            result = game.finalize_bet(player)
        chain.mine(1)
        if result.won:
            won += 1
            paid += result.payout
        else:
            lost += 1

    pending = {lp: game.preview_pending(lp) for lp in providers}
    log.info("simulation done: %d won, %d lost", won, lost)
    return {
        "mode": mode,
        "bets": bets,
        "won": won,
        "lost": lost,
        "paidOut": paid,
        "height": chain.height,
        "totalStaked": game.total_staked(),
        "accRewardPerShare": game.acc_reward_per_share(),
        "pendingRewards": game.pending_rewards(),
        "rewardsAdded": game.ledger.pool.rewards_added,
        "providerPending": pending,
        "custody": game.custody_balance(),
    }


def main() -> None:  # pragma: no cover
    app(prog_name="goodluck")


if __name__ == "__main__":  # pragma: no cover
    main()
