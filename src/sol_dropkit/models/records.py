"""Per-wallet record types produced by the batch operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from solders.keypair import Keypair

LAMPORTS_PER_SOL = 1_000_000_000


@dataclass(frozen=True)
class TokenBalance:
    """Balance of one mint held in a wallet's associated token account."""

    has_account: bool
    raw_amount: int  # smallest unit
    amount: float  # decimal-adjusted
    decimals: int
    ata: str
    mint: str


@dataclass(frozen=True)
class BalanceSnapshot:
    """Native and base/quote token balances of a wallet at inspection time."""

    pubkey: str
    lamports: int
    base: TokenBalance
    quote: TokenBalance

    @property
    def sol(self) -> float:
        return self.lamports / LAMPORTS_PER_SOL


@dataclass
class WalletBalances:
    """A loaded keypair with its balance snapshot."""

    keypair: Keypair
    balance: BalanceSnapshot

    @property
    def pubkey(self) -> str:
        return self.balance.pubkey


class EligibilityStatus(str, Enum):
    """Outcome of a proof lookup. Amount is 0 for both non-eligible states."""

    ELIGIBLE = "eligible"
    INELIGIBLE = "ineligible"  # service answered, no allocation
    ERROR = "error"  # transport, HTTP or decoding failure


@dataclass
class EligibilityRecord:
    """Claimable amount and merkle proof for a wallet."""

    pubkey: str
    amount: int = 0  # smallest unit; 0 = not eligible or lookup failed
    proof: list[bytes] | None = None
    merkle_tree: str | None = None  # distributor account
    status: EligibilityStatus = EligibilityStatus.INELIGIBLE
    error: str | None = None

    @property
    def eligible(self) -> bool:
        return self.amount > 0


@dataclass
class EligibilitySummary:
    """Aggregate of a check run."""

    total_raw: int
    total: float  # scaled by the token's decimals
    drop_wallets: list[str]
    ineligible: int
    errors: int


@dataclass
class ClaimResult:
    """Result of a new_claim() transaction for one drop wallet."""

    wallet: str
    amount: int = 0
    signature: str | None = None
    error: str | None = None
    dry_run: bool = False

    @property
    def success(self) -> bool:
        return self.signature is not None


@dataclass
class TransferResult:
    """Result of one drain transfer."""

    wallet: str
    asset: str  # "base" | "quote" | "sol"
    amount: int  # smallest unit
    signature: str | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.signature is not None


@dataclass
class DrainReport:
    """All transfers of one asset class."""

    asset: str
    total_raw: int
    total: float
    results: list[TransferResult]

    @property
    def failed(self) -> list[TransferResult]:
        return [r for r in self.results if not r.success]
