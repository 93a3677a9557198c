"""Configuration loading: .env files + TOML file + environment variables."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from dotenv import load_dotenv

from sol_dropkit.chain.accounts import is_valid_pubkey
from sol_dropkit.models.config import BatchSettings, DistributorConfig, DropkitConfig

log = logging.getLogger(__name__)

COMMANDS = ("check", "claim", "drain")


class ConfigError(ValueError):
    """Configuration is missing or invalid for the requested command."""

    def __init__(self, problems: list[str]) -> None:
        super().__init__("; ".join(problems))
        self.problems = problems


def load_env_files(profile: str | None = None, directory: str | Path = ".") -> None:
    """Load ``.env.<profile>.local`` then ``.env``. Variables already set win."""
    profile = profile or os.environ.get("DROPKIT_ENV") or os.environ.get("NODE_ENV") or "development"
    root = Path(directory)
    for name in (f".env.{profile}.local", ".env"):
        p = root / name
        if p.exists():
            load_dotenv(p, override=False)
            log.debug("Loaded environment from %s", p)


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "DROPKIT_",
) -> DropkitConfig:
    """Load configuration from a TOML file and environment variables.

    Priority (highest wins):
        1. Environment variables (RPC_MAINNET, BASE_MINT, DROPKIT_*, ...)
        2. TOML config file
        3. Defaults from DropkitConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = DropkitConfig()

    # ── Solana section ─────────────────────────────────────
    solana = raw.get("solana", {})
    if v := solana.get("rpc_url"):
        cfg.rpc_url = str(v)
    if v := solana.get("base_mint"):
        cfg.base_mint = str(v)
    if v := solana.get("quote_mint"):
        cfg.quote_mint = str(v)

    # ── Wallets section ────────────────────────────────────
    wallets = raw.get("wallets", {})
    if v := wallets.get("keys_dir"):
        cfg.keys_dir = str(v)
    if v := wallets.get("key_pattern"):
        cfg.key_pattern = str(v)
    if v := wallets.get("drop_wallets"):
        cfg.drop_wallets = [str(w) for w in v]
    if v := wallets.get("drop_wallets_path"):
        cfg.drop_wallets_path = str(v)

    # ── Drain section ──────────────────────────────────────
    drain = raw.get("drain", {})
    if v := drain.get("destination"):
        cfg.destination = str(v)
    if v := drain.get("base_destination"):
        cfg.base_destination = str(v)
    if v := drain.get("quote_destination"):
        cfg.quote_destination = str(v)
    if (v := drain.get("fee_reserve")) is not None:
        cfg.fee_reserve = int(v)

    # ── Batch section ──────────────────────────────────────
    batch = raw.get("batch", {})
    cfg.batch = BatchSettings(
        window=int(batch.get("window", 5)),
        sliding=bool(batch.get("sliding", False)),
        op_timeout=float(batch["op_timeout"]) if batch.get("op_timeout") else None,
    )

    # ── Distributor section ────────────────────────────────
    dist = raw.get("distributor", {})
    defaults = DistributorConfig()
    cfg.distributor = DistributorConfig(
        program_id=dist.get("program_id", defaults.program_id),
        token_mint=dist.get("token_mint", defaults.token_mint),
        token_decimals=int(dist.get("token_decimals", defaults.token_decimals)),
        proof_url=dist.get("proof_url", defaults.proof_url),
        proof_timeout=float(dist.get("proof_timeout", defaults.proof_timeout)),
    )

    if v := raw.get("log_level"):
        cfg.log_level = str(v)

    # ── Environment variable overrides (highest priority) ──
    if rpc := os.environ.get(f"{env_prefix}RPC_URL") or os.environ.get("RPC_MAINNET"):
        cfg.rpc_url = rpc
    if base := os.environ.get(f"{env_prefix}BASE_MINT") or os.environ.get("BASE_MINT"):
        cfg.base_mint = base
    if quote := os.environ.get(f"{env_prefix}QUOTE_MINT") or os.environ.get("QUOTE_MINT"):
        cfg.quote_mint = quote
    if keys := os.environ.get(f"{env_prefix}KEYS_DIR"):
        cfg.keys_dir = keys
    if dest := os.environ.get(f"{env_prefix}DESTINATION"):
        cfg.destination = dest
    if dest := os.environ.get(f"{env_prefix}BASE_DESTINATION"):
        cfg.base_destination = dest
    if dest := os.environ.get(f"{env_prefix}QUOTE_DESTINATION"):
        cfg.quote_destination = dest
    if drops := os.environ.get(f"{env_prefix}DROP_WALLETS"):
        cfg.drop_wallets = [w.strip() for w in drops.split(",") if w.strip()]
    if path := os.environ.get(f"{env_prefix}DROP_WALLETS_PATH"):
        cfg.drop_wallets_path = path
    if window := os.environ.get(f"{env_prefix}WINDOW"):
        cfg.batch.window = int(window)

    cfg.keys_dir = str(Path(cfg.keys_dir).expanduser())

    return cfg


def load_drop_wallets(cfg: DropkitConfig) -> list[str]:
    """Allow-listed drop wallets: configured list plus the saved file, de-duplicated."""
    wallets = list(cfg.drop_wallets)
    p = Path(cfg.drop_wallets_path).expanduser()
    if p.exists():
        with open(p, encoding="utf-8") as f:
            saved = json.load(f)
        if not isinstance(saved, list):
            raise ConfigError([f"{p}: expected a JSON array of wallet addresses"])
        wallets.extend(str(w) for w in saved)
    return list(dict.fromkeys(wallets))


def write_drop_wallets(path: str | Path, wallets: list[str]) -> Path:
    p = Path(path).expanduser()
    with open(p, "w", encoding="utf-8") as f:
        json.dump(wallets, f, indent=2)
    log.info("Wrote %d drop wallets to %s", len(wallets), p)
    return p


def validate_config(
    cfg: DropkitConfig,
    command: str,
    drop_wallets: list[str] | None = None,
) -> None:
    """Raise ConfigError listing every problem that would break ``command``."""
    if command not in COMMANDS:
        raise ValueError(f"unknown command: {command}")

    problems: list[str] = []
    if not cfg.rpc_url:
        problems.append("RPC URL is not set (RPC_MAINNET or DROPKIT_RPC_URL)")
    if cfg.batch.window < 1:
        problems.append(f"batch window must be >= 1, got {cfg.batch.window}")

    if command in ("check", "drain"):
        for name, value in (("BASE_MINT", cfg.base_mint), ("QUOTE_MINT", cfg.quote_mint)):
            if not value:
                problems.append(f"{name} is not set")
            elif not is_valid_pubkey(value):
                problems.append(f"{name} is not a valid address: {value}")

    if command == "claim":
        for name, value in (
            ("distributor program_id", cfg.distributor.program_id),
            ("distributor token_mint", cfg.distributor.token_mint),
        ):
            if not is_valid_pubkey(value):
                problems.append(f"{name} is not a valid address: {value}")
        wallets = drop_wallets if drop_wallets is not None else cfg.drop_wallets
        if not wallets:
            problems.append(
                "drop wallet allow-list is empty; run `check --write-drop-wallets` "
                "or set DROPKIT_DROP_WALLETS"
            )
        problems.extend(
            f"drop wallet is not a valid address: {w}" for w in wallets if not is_valid_pubkey(w)
        )

    if command == "drain":
        if not cfg.destination:
            problems.append("drain destination wallet is not set (DROPKIT_DESTINATION)")
        elif not is_valid_pubkey(cfg.destination):
            problems.append(f"drain destination is not a valid address: {cfg.destination}")
        for name, value in (
            ("base destination", cfg.base_destination),
            ("quote destination", cfg.quote_destination),
        ):
            if value and not is_valid_pubkey(value):
                problems.append(f"{name} is not a valid address: {value}")
        if cfg.fee_reserve < 0:
            problems.append("fee_reserve must not be negative")

    if problems:
        raise ConfigError(problems)
