"""Data models for sol_dropkit."""

from sol_dropkit.models.config import BatchSettings, DistributorConfig, DropkitConfig
from sol_dropkit.models.records import (
    BalanceSnapshot,
    ClaimResult,
    DrainReport,
    EligibilityRecord,
    EligibilityStatus,
    EligibilitySummary,
    TokenBalance,
    TransferResult,
    WalletBalances,
)

__all__ = [
    "BatchSettings", "DistributorConfig", "DropkitConfig",
    "BalanceSnapshot", "TokenBalance", "WalletBalances",
    "EligibilityRecord", "EligibilityStatus", "EligibilitySummary",
    "ClaimResult", "TransferResult", "DrainReport",
]
