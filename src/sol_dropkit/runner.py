"""Command runner - wires the ledger, proof service and batch components together."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from solders.keypair import Keypair

from sol_dropkit.airdrop.claimer import ClaimSubmitter
from sol_dropkit.airdrop.proofs import ProofFetcher, check_all, summarize
from sol_dropkit.chain.balances import BalanceInspector
from sol_dropkit.chain.keys import load_keypairs
from sol_dropkit.chain.ledger import SolanaLedger
from sol_dropkit.config import write_drop_wallets
from sol_dropkit.interfaces.ledger import LedgerClient
from sol_dropkit.interfaces.proofs import ProofSource
from sol_dropkit.models.config import DropkitConfig
from sol_dropkit.models.records import (
    ClaimResult,
    DrainReport,
    EligibilityRecord,
    EligibilitySummary,
    WalletBalances,
)
from sol_dropkit.sweep.drainer import Drainer

log = logging.getLogger(__name__)


@dataclass
class CheckReport:
    balances: list[WalletBalances]
    records: list[EligibilityRecord]
    summary: EligibilitySummary


@dataclass
class DrainRun:
    balances: list[WalletBalances]
    reports: list[DrainReport] = field(default_factory=list)


class DropkitRunner:
    """Runs the check, claim and drain commands over the configured key directory.

    One ledger client and one proof-service client are shared by every
    operation of a run. Both can be injected for tests.
    """

    def __init__(
        self,
        cfg: DropkitConfig,
        ledger: LedgerClient | None = None,
        proofs: ProofSource | None = None,
    ) -> None:
        self._cfg = cfg
        self.ledger: LedgerClient = ledger or SolanaLedger(cfg.rpc_url)
        self.proofs: ProofSource = proofs or ProofFetcher(
            cfg.distributor.proof_url,
            cfg.distributor.token_mint,
            timeout=cfg.distributor.proof_timeout,
        )

    def load_keypairs(self) -> list[Keypair]:
        return load_keypairs(self._cfg.keys_dir, self._cfg.key_pattern)

    def _inspector(self) -> BalanceInspector:
        return BalanceInspector(self.ledger, self._cfg.base_mint, self._cfg.quote_mint)

    async def close(self) -> None:
        await self.ledger.close()
        aclose = getattr(self.proofs, "aclose", None)
        if aclose is not None:
            await aclose()

    async def check(self, write_drop_wallets_file: bool = False) -> CheckReport:
        """Balances and claim eligibility of every wallet."""
        keypairs = self.load_keypairs()
        balances = await self._inspector().inspect_all(keypairs, self._cfg.batch)

        records = await check_all(self.proofs, [w.pubkey for w in balances], self._cfg.batch)
        summary = summarize(records, self._cfg.distributor.decimal_factor)
        log.info(
            "Check complete: %d eligible, %d ineligible, %d errors, total %s",
            len(summary.drop_wallets), summary.ineligible, summary.errors, summary.total,
        )

        if write_drop_wallets_file:
            write_drop_wallets(self._cfg.drop_wallets_path, summary.drop_wallets)

        return CheckReport(balances=balances, records=records, summary=summary)

    async def claim(self, drop_wallets: list[str], execute: bool = False) -> list[ClaimResult]:
        """Claim for each allow-listed wallet. Dry run unless ``execute``."""
        keypairs = self.load_keypairs()
        submitter = ClaimSubmitter(self.ledger, self.proofs, self._cfg.distributor)
        log.info(
            "Claiming for %d drop wallets (%s)",
            len(drop_wallets), "EXECUTE" if execute else "DRY RUN",
        )
        return await submitter.claim_all(drop_wallets, keypairs, execute, self._cfg.batch)

    async def drain(self, base: bool = False, quote: bool = False, sol: bool = False) -> DrainRun:
        """Sweep the selected asset classes into the collection wallet."""
        keypairs = self.load_keypairs()
        balances = await self._inspector().inspect_all(keypairs, self._cfg.batch)
        run = DrainRun(balances=balances)

        drainer = Drainer.for_destination(
            self.ledger,
            self._cfg.destination,
            self._cfg.base_mint,
            self._cfg.quote_mint,
            base_destination=self._cfg.base_destination,
            quote_destination=self._cfg.quote_destination,
            fee_reserve=self._cfg.fee_reserve,
        )
        if base:
            run.reports.append(await drainer.drain_token(balances, "base", self._cfg.batch))
        if quote:
            run.reports.append(await drainer.drain_token(balances, "quote", self._cfg.batch))
        if sol:
            run.reports.append(await drainer.drain_sol(balances, self._cfg.batch))
        return run
