"""CLI entry point for sol-dropkit."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from sol_dropkit import __version__
from sol_dropkit.config import (
    ConfigError,
    load_config,
    load_drop_wallets,
    load_env_files,
    validate_config,
)
from sol_dropkit.models.config import DropkitConfig
from sol_dropkit.models.records import DrainReport
from sol_dropkit.runner import DropkitRunner

log = logging.getLogger(__name__)


def _load(ctx: click.Context) -> DropkitConfig:
    cfg = load_config(ctx.obj["config_path"])
    if ctx.obj["keys_dir"]:
        cfg.keys_dir = ctx.obj["keys_dir"]
    if not ctx.obj["verbose"]:
        _apply_log_level(cfg.log_level)
    return cfg


def _apply_log_level(name: str) -> None:
    level = logging.getLevelName(name.upper())
    if isinstance(level, int):
        logging.getLogger().setLevel(level)
    else:
        log.warning("Unknown log_level %r in config, keeping INFO", name)


def _require_valid(cfg: DropkitConfig, command: str, drop_wallets: list[str] | None = None) -> None:
    """Exit with every configuration problem listed if ``command`` cannot run."""
    try:
        validate_config(cfg, command, drop_wallets)
    except ConfigError as exc:
        click.echo(f"Error: invalid configuration for '{command}':", err=True)
        for problem in exc.problems:
            click.echo(f"  - {problem}", err=True)
        sys.exit(1)


def _echo_accounts(balances) -> None:
    click.echo(click.style("\nACCOUNTS", bold=True))
    for w in balances:
        b = w.balance
        click.echo(f"{b.pubkey} {b.sol:.9f} {b.quote.amount} {b.base.amount}")


def _echo_report(report: DrainReport) -> None:
    label = report.asset.upper()
    click.echo(click.style(f"\n{label} DRAINED", bold=True))
    if not report.results:
        click.echo("  (nothing to drain)")
    for r in report.results:
        outcome = r.signature if r.success else f"FAILED: {r.error}"
        click.echo(f"  {r.wallet} {r.amount} -> {outcome}")
    if report.failed:
        click.echo(f"  {len(report.failed)}/{len(report.results)} transfers failed", err=True)


@click.group()
@click.version_option(__version__, prog_name="sol-dropkit")
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-e", "--env", "env_profile", default=None, help="Load .env.<ENV>.local (default: $DROPKIT_ENV or development)")
@click.option("-k", "--keys-dir", default=None, help="Directory of wallet key files (default: ./keys)")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    env_profile: str | None,
    keys_dir: str | None,
    verbose: bool,
) -> None:
    """sol-dropkit - check, claim and drain a directory of Solana wallets."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["keys_dir"] = keys_dir
    ctx.obj["verbose"] = verbose

    load_env_files(env_profile)

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# ── Check ──────────────────────────────────────────────


@cli.command()
@click.option("--execute", is_flag=True, help="Accepted for parity with claim; check never writes")
@click.option("--write-drop-wallets", is_flag=True, help="Save eligible wallets as the claim allow-list")
@click.pass_context
def check(ctx: click.Context, execute: bool, write_drop_wallets: bool) -> None:
    """Check claim eligibility per wallet and show the valid wallets and total."""
    cfg = _load(ctx)
    _require_valid(cfg, "check")

    async def _check():
        runner = DropkitRunner(cfg)
        try:
            return await runner.check(write_drop_wallets_file=write_drop_wallets)
        finally:
            await runner.close()

    report = asyncio.run(_check())

    _echo_accounts(report.balances)
    click.echo(click.style("\nELIGIBILITY", bold=True))
    for r in report.records:
        note = f" ({r.status.value}: {r.error})" if r.error else ""
        click.echo(f"  {r.pubkey} {r.amount}{note}")
    click.echo(f"\nTOTAL {report.summary.total}")
    click.echo(f"DROP_WALLETS {report.summary.drop_wallets}")
    if report.summary.errors:
        click.echo(
            f"{report.summary.errors} lookups failed; their wallets may still be eligible",
            err=True,
        )
    if write_drop_wallets:
        click.echo(f"Saved allow-list to {cfg.drop_wallets_path}")


# ── Claim ──────────────────────────────────────────────


@cli.command()
@click.option("--execute", is_flag=True, help="Submit claim transactions (default: dry run)")
@click.pass_context
def claim(ctx: click.Context, execute: bool) -> None:
    """Claim the airdrop for every allow-listed drop wallet."""
    cfg = _load(ctx)
    try:
        drop_wallets = load_drop_wallets(cfg)
    except (ConfigError, ValueError) as exc:
        click.echo(f"Error: cannot read drop wallets: {exc}", err=True)
        sys.exit(1)
    _require_valid(cfg, "claim", drop_wallets)

    async def _claim():
        runner = DropkitRunner(cfg)
        try:
            return await runner.claim(drop_wallets, execute=execute)
        finally:
            await runner.close()

    results = asyncio.run(_claim())

    if not execute:
        click.echo("DRY RUN: no transactions submitted. Re-run with --execute to claim.")
    for r in results:
        if r.success:
            click.echo(f"  {r.wallet} claimed {r.amount}: {r.signature}")
        elif r.dry_run:
            click.echo(f"  {r.wallet} would claim {r.amount}")
        else:
            click.echo(f"  {r.wallet} FAILED: {r.error}")

    click.echo(click.style("\nDONE", bold=True))
    sys.exit(0)


# ── Drain ──────────────────────────────────────────────


@cli.command()
@click.option("--base", is_flag=True, help="Drain the base mint")
@click.option("--quote", is_flag=True, help="Drain the quote mint")
@click.option("--tokens", is_flag=True, help="Drain both base and quote")
@click.option("--sol", is_flag=True, help="Drain SOL, keeping the fee reserve")
@click.pass_context
def drain(ctx: click.Context, base: bool, quote: bool, tokens: bool, sol: bool) -> None:
    """Drain wallet balances {base, quote, tokens, sol} into the destination wallet."""
    cfg = _load(ctx)
    _require_valid(cfg, "drain")

    async def _drain():
        runner = DropkitRunner(cfg)
        try:
            return await runner.drain(base=base or tokens, quote=quote or tokens, sol=sol)
        finally:
            await runner.close()

    run = asyncio.run(_drain())

    _echo_accounts(run.balances)
    for report in run.reports:
        click.echo(click.style(f"\n{report.asset.upper()} SIZE", bold=True) + f" {report.total}")
        _echo_report(report)


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the effective configuration."""
    cfg = _load(ctx)
    click.echo(f"RPC URL:      {cfg.rpc_url or '(not set)'}")
    click.echo(f"Base mint:    {cfg.base_mint or '(not set)'}")
    click.echo(f"Quote mint:   {cfg.quote_mint or '(not set)'}")
    click.echo(f"Keys dir:     {cfg.keys_dir}")
    click.echo(f"Destination:  {cfg.destination or '(not set)'}")
    click.echo(f"Fee reserve:  {cfg.fee_reserve} lamports")
    click.echo(f"Program:      {cfg.distributor.program_id}")
    click.echo(f"Token mint:   {cfg.distributor.token_mint}")
    click.echo(f"Proof URL:    {cfg.distributor.proof_url}")
    click.echo(f"Drop wallets: {len(cfg.drop_wallets)} configured, file {cfg.drop_wallets_path}")
    click.echo(
        f"Batch:        window={cfg.batch.window} "
        f"{'sliding' if cfg.batch.sliding else 'fixed'} timeout={cfg.batch.op_timeout or 'none'}"
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
