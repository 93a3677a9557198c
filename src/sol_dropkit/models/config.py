"""Configuration models."""

from __future__ import annotations

from dataclasses import dataclass, field

JUP_MINT = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"
MERKLE_DISTRIBUTOR_PROGRAM = "meRjbQXFNf5En86FXT2YPz1dQzLj4Yb3xK8u1MVgqpb"  # same program for WEN and JUP
JUP_PROOF_URL = "https://worker.jup.ag/jup-claim-proof"


@dataclass
class BatchSettings:
    """How per-wallet operations are scheduled."""

    window: int = 5  # operations in flight per window
    sliding: bool = False  # semaphore admission instead of window barriers
    op_timeout: float | None = None  # seconds per operation, None = no deadline


@dataclass
class DistributorConfig:
    """Merkle distributor the claim command targets."""

    program_id: str = MERKLE_DISTRIBUTOR_PROGRAM
    token_mint: str = JUP_MINT
    token_decimals: int = 6
    proof_url: str = JUP_PROOF_URL
    proof_timeout: float = 15.0  # seconds

    @property
    def decimal_factor(self) -> int:
        return 10 ** self.token_decimals


@dataclass
class DropkitConfig:
    """Complete tool configuration."""

    # Solana
    rpc_url: str = ""
    base_mint: str = ""
    quote_mint: str = ""

    # Wallets
    keys_dir: str = "./keys"
    key_pattern: str = "*.json"

    # Claim allow-list (filled from `check --write-drop-wallets` or by hand)
    drop_wallets: list[str] = field(default_factory=list)
    drop_wallets_path: str = "./drop_wallets.json"

    # Drain destinations
    destination: str = ""  # collection wallet, receives SOL
    base_destination: str = ""  # token account, defaults to destination's ATA
    quote_destination: str = ""
    fee_reserve: int = 5000  # lamports left behind when draining SOL

    log_level: str = "info"

    batch: BatchSettings = field(default_factory=BatchSettings)
    distributor: DistributorConfig = field(default_factory=DistributorConfig)
