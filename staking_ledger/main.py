"""Staking Ledger CLI."""
import os
import sys
import time
from pathlib import Path
from typing import Callable, Optional

import click
from loguru import logger

from .core.config import get_state_dir, load_config
from .core.engine import DEFAULT_POOL_ACCOUNT, StakingEngine
from .core.errors import StakingError
from .core.store import StateStore
from .core.token import InMemoryTokenLedger


def configure_logging() -> None:
    """Send loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=os.getenv("STAKING_LEDGER_LOG_LEVEL", "INFO"))


def _now(now: Optional[int]) -> int:
    return int(time.time()) if now is None else now


def _load(store: StateStore) -> StakingEngine:
    try:
        engine = store.load()
    except StakingError as e:
        logger.error(f"{e.code}: {e}")
        sys.exit(1)
    if engine is None:
        logger.error(f"No ledger found in {store.state_dir}")
        logger.error("Create one first with:")
        logger.error("  staking-ledger create --admin <account>")
        sys.exit(1)
    return engine


def _run(store: StateStore, action: Callable[[StakingEngine], object], save: bool = True):
    """Apply an action to the stored ledger, saving it only on success."""
    engine = _load(store)
    try:
        result = action(engine)
    except StakingError as e:
        logger.error(f"{e.code}: {e}")
        sys.exit(1)
    if save:
        store.save(engine)
    return result


now_option = click.option('--now', type=int, default=None,
                          help='Unix timestamp to apply (defaults to current time)')
caller_option = click.option('--caller', required=True, help='Account performing the call')


@click.group()
@click.version_option(package_name="staking-ledger")
@click.option('--state-dir', type=click.Path(file_okay=False), default=None,
              help='Directory holding the ledger state')
@click.pass_context
def cli(ctx, state_dir: Optional[str]):
    """Staking Ledger CLI - Lock tokens, earn rewards, and check launchpad tiers"""
    configure_logging()
    ctx.obj = StateStore(state_dir or get_state_dir())


@cli.command()
@click.option('--admin', required=True, help='Account allowed to fund the pool and change scoring')
@click.option('--pool-account', default=DEFAULT_POOL_ACCOUNT, help='Token account holding staked funds')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              default=None, help='YAML file overriding tier settings')
@click.option('--force', is_flag=True, help='Replace an existing ledger')
@click.pass_obj
def create(store: StateStore, admin: str, pool_account: str, config_path: Optional[str], force: bool):
    """Create an empty ledger"""
    if store.exists() and not force:
        logger.error(f"A ledger already exists in {store.state_dir} (use --force to replace it)")
        sys.exit(1)
    config = load_config(Path(config_path) if config_path else None)
    engine = StakingEngine(InMemoryTokenLedger(), admin, pool_account=pool_account, config=config)
    store.save(engine)
    logger.info(f"Created ledger administered by {admin} in {store.state_dir}")


# Token ledger

@cli.command()
@click.argument('account')
@click.argument('amount', type=int)
@click.pass_obj
def mint(store: StateStore, account: str, amount: int):
    """Mint test tokens to an account"""
    _run(store, lambda engine: engine.token.mint(account, amount))
    click.echo(f"Minted {amount} to {account}")


@cli.command()
@click.argument('owner')
@click.argument('amount', type=int)
@click.pass_obj
def approve(store: StateStore, owner: str, amount: int):
    """Allow the staking pool to move tokens of OWNER"""
    _run(store, lambda engine: engine.token.approve(owner, engine.pool_account, amount))
    click.echo(f"{owner} approved {amount} for staking")


@cli.command()
@click.argument('account')
@click.pass_obj
def balance(store: StateStore, account: str):
    """Show token balance of an account"""
    amount = _run(store, lambda engine: engine.token.balance_of(account), save=False)
    click.echo(f"Balance: {amount}")


# Pool

@cli.command()
@click.argument('amount', type=int)
@caller_option
@click.pass_obj
def init(store: StateStore, amount: int, caller: str):
    """Fund the reward pool and open staking"""
    _run(store, lambda engine: engine.initialize(amount, caller))
    click.echo(f"Staking open with reward pool of {amount}")


@cli.command()
@click.argument('amount', type=int)
@caller_option
@click.pass_obj
def fund(store: StateStore, amount: int, caller: str):
    """Top up the reward pool"""
    _run(store, lambda engine: engine.fund_pool(amount, caller))
    click.echo(f"Added {amount} to the reward pool")


@cli.command()
@click.pass_obj
def pool(store: StateStore):
    """Show reward pool status"""
    engine = _load(store)
    click.echo(f"Open: {engine.is_open}")
    click.echo(f"Reward budget: {engine.funded_amount}")
    click.echo(f"Custody balance: {engine.token.balance_of(engine.pool_account)}")


# Stake lifecycle

@cli.command()
@click.argument('amount', type=int)
@click.argument('lock_tier', type=int)
@caller_option
@now_option
@click.pass_obj
def deposit(store: StateStore, amount: int, lock_tier: int, caller: str, now: Optional[int]):
    """Stake AMOUNT at LOCK_TIER (0-4)"""
    stake_id = _run(store, lambda engine: engine.deposit(amount, lock_tier, caller, _now(now)))
    click.echo(f"Stake id: {stake_id}")


@cli.command()
@click.argument('stake_id', type=int)
@caller_option
@now_option
@click.pass_obj
def unlock(store: StateStore, stake_id: int, caller: str, now: Optional[int]):
    """Start the unlock cooldown of a stake"""
    _run(store, lambda engine: engine.initiate_unlock(stake_id, caller, _now(now)))
    click.echo(f"Stake {stake_id} is unlocking")


@cli.command()
@click.argument('stake_id', type=int)
@now_option
@click.pass_obj
def reward(store: StateStore, stake_id: int, now: Optional[int]):
    """Show reward accrued by a stake"""
    amount = _run(store, lambda engine: engine.calculate_reward(stake_id, _now(now)), save=False)
    click.echo(f"Reward: {amount}")


@cli.command()
@click.argument('stake_id', type=int)
@caller_option
@now_option
@click.pass_obj
def withdraw(store: StateStore, stake_id: int, caller: str, now: Optional[int]):
    """Withdraw principal and reward of an unlocked stake"""
    payout = _run(store, lambda engine: engine.withdraw(stake_id, caller, _now(now)))
    click.echo(f"Withdrew {payout}")


@cli.command()
@click.argument('stake_id', type=int)
@click.argument('new_tier', type=int)
@caller_option
@now_option
@click.pass_obj
def restake(store: StateStore, stake_id: int, new_tier: int, caller: str, now: Optional[int]):
    """Fold accrued reward into a stake and relock it at NEW_TIER"""
    _run(store, lambda engine: engine.restake(stake_id, new_tier, caller, _now(now)))
    click.echo(f"Stake {stake_id} restaked at lock tier {new_tier}")


# Queries

@cli.command()
@click.argument('stake_id', type=int)
@now_option
@click.pass_obj
def stake(store: StateStore, stake_id: int, now: Optional[int]):
    """Show details of a stake"""
    def describe(engine: StakingEngine):
        record = engine.get_stake(stake_id)
        return record, engine.is_withdrawable(stake_id, _now(now))

    record, withdrawable = _run(store, describe, save=False)
    click.echo(f"Stake {record.id}")
    click.echo(f"  Owner: {record.owner}")
    click.echo(f"  Principal: {record.principal}")
    click.echo(f"  Lock tier: {record.lock_tier}")
    click.echo(f"  Status: {record.status.value}")
    click.echo(f"  Deposited at: {record.deposited_at}")
    if record.unlock_initiated_at is not None:
        click.echo(f"  Unlock initiated at: {record.unlock_initiated_at}")
    click.echo(f"  Withdrawable: {withdrawable}")
    click.echo(f"  Rewarded: {record.rewarded}")


@cli.command()
@click.argument('owner')
@click.pass_obj
def stakes(store: StateStore, owner: str):
    """List stake ids created by OWNER"""
    ids = _load(store).get_stake_ids_by_owner(owner)
    if not ids:
        click.echo(f"No stakes found for {owner}")
        return
    click.echo(" ".join(str(i) for i in ids))


@cli.command()
@click.argument('owner')
@click.pass_obj
def score(store: StateStore, owner: str):
    """Show total launchpad score of OWNER"""
    total = _run(store, lambda engine: engine.get_total_score(owner), save=False)
    click.echo(f"Score: {total}")


@cli.command()
@click.argument('owner')
@click.pass_obj
def tier(store: StateStore, owner: str):
    """Show launchpad tier of OWNER"""
    value = _run(store, lambda engine: engine.get_tier_by_owner(owner), save=False)
    click.echo(f"Launchpad tier: {value}")


@cli.command('launchpad-tier')
@click.argument('stake_id', type=int)
@click.pass_obj
def launchpad_tier(store: StateStore, stake_id: int):
    """Show launchpad tier of a single stake"""
    value = _run(store, lambda engine: engine.calculate_launchpad_tier(stake_id), save=False)
    click.echo(f"Launchpad tier: {value}")


@cli.command('launchpad-tiers')
@click.argument('owner')
@click.pass_obj
def launchpad_tiers(store: StateStore, owner: str):
    """Show launchpad tier and multiplier of every stake of OWNER"""
    def collect(engine: StakingEngine):
        tiers, multipliers = engine.get_launchpad_tiers_by_owner(owner)
        return engine.get_stake_ids_by_owner(owner), tiers, multipliers

    ids, tiers, multipliers = _run(store, collect, save=False)
    if not ids:
        click.echo(f"No stakes found for {owner}")
        return
    for stake_id, value, multiplier in zip(ids, tiers, multipliers):
        click.echo(f"{stake_id}: tier {value} (x{multiplier})")


# Admin configuration

@cli.group()
def config():
    """View and change scoring configuration"""
    pass


@config.command()
@click.pass_obj
def show(store: StateStore):
    """Show current configuration"""
    engine = _load(store)
    cfg = engine.config
    click.echo(f"Admin: {engine.admin}")
    for index, profile in enumerate(cfg.tier_profiles):
        click.echo(
            f"Lock tier {index}: cooldown {profile.cooldown}s, "
            f"rate {profile.annual_rate_bps} bps, score {cfg.tier_scores[index]}"
        )
    click.echo(f"Base score value: {cfg.base_score_value}")
    click.echo(f"Launchpad thresholds: {', '.join(str(t) for t in cfg.launchpad_thresholds)}")


@config.command('set-base-score')
@click.argument('value', type=int)
@caller_option
@click.pass_obj
def set_base_score(store: StateStore, value: int, caller: str):
    """Set the global base score value"""
    _run(store, lambda engine: engine.set_base_score_value(value, caller))
    click.echo(f"Base score value set to {value}")


@config.command('set-tier-score')
@click.argument('tier_index', type=int)
@click.argument('value', type=int)
@caller_option
@click.pass_obj
def set_tier_score(store: StateStore, tier_index: int, value: int, caller: str):
    """Set the score weight of a lock tier"""
    _run(store, lambda engine: engine.set_tier_score(tier_index, value, caller))
    click.echo(f"Tier {tier_index} score set to {value}")


@config.command('set-thresholds')
@click.argument('values', type=int, nargs=-1, required=True)
@caller_option
@click.pass_obj
def set_thresholds(store: StateStore, values, caller: str):
    """Set ascending launchpad tier score thresholds"""
    _run(store, lambda engine: engine.set_tier_thresholds(list(values), caller))
    click.echo(f"Launchpad thresholds set to {', '.join(str(v) for v in values)}")


if __name__ == '__main__':
    cli()
