"""Merkle distributor claim submitter - one new_claim() transaction per drop wallet."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from sol_dropkit.batch import run_batch
from sol_dropkit.chain.accounts import associated_token_address, claim_status_address
from sol_dropkit.chain.instructions import create_ata_ix, new_claim_ix
from sol_dropkit.interfaces.ledger import LedgerClient
from sol_dropkit.interfaces.proofs import ProofSource
from sol_dropkit.models.config import BatchSettings, DistributorConfig
from sol_dropkit.models.records import ClaimResult

log = logging.getLogger(__name__)


class ClaimSubmitter:
    """Builds and, when asked to execute, submits claim transactions.

    The distributor account comes from the proof service response rather
    than being derived. Nothing is written to the ledger unless ``execute``
    is set. Every failure is returned in ``ClaimResult.error`` so one bad
    wallet never stops the batch.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        proofs: ProofSource,
        distributor: DistributorConfig,
    ) -> None:
        self._ledger = ledger
        self._proofs = proofs
        self._program_id = Pubkey.from_string(distributor.program_id)
        self._mint = Pubkey.from_string(distributor.token_mint)

    async def build_instructions(
        self, claimant: Pubkey, amount: int, proof: Sequence[bytes], merkle_tree: str
    ) -> list[Instruction]:
        """Instructions for one claim, creating the claimant's ATA if it is missing."""
        distributor = Pubkey.from_string(merkle_tree)
        claim_status = claim_status_address(self._program_id, claimant, distributor)
        source = associated_token_address(distributor, self._mint)
        destination = associated_token_address(claimant, self._mint)

        instructions: list[Instruction] = []
        if not await self._ledger.account_exists(str(destination)):
            instructions.append(create_ata_ix(claimant, claimant, self._mint))

        instructions.append(
            new_claim_ix(
                program_id=self._program_id,
                distributor=distributor,
                claim_status=claim_status,
                source=source,
                destination=destination,
                claimant=claimant,
                amount_unlocked=amount,
                amount_locked=0,
                proof=proof,
            )
        )
        return instructions

    async def claim(self, keypair: Keypair, execute: bool = False) -> ClaimResult:
        wallet = str(keypair.pubkey())
        record = await self._proofs.fetch(wallet)
        if not record.eligible:
            return ClaimResult(wallet=wallet, error=record.error or "not eligible")
        if not record.merkle_tree:
            return ClaimResult(wallet=wallet, amount=record.amount, error="proof response has no merkle_tree")

        try:
            instructions = await self.build_instructions(
                keypair.pubkey(), record.amount, record.proof or [], record.merkle_tree,
            )
            if not execute:
                log.info("Dry run: would claim %d for %s", record.amount, wallet)
                return ClaimResult(wallet=wallet, amount=record.amount, dry_run=True)

            log.info("Submitting new_claim for %s (amount=%d)", wallet, record.amount)
            signature = await self._ledger.send_transaction(instructions, keypair)
            log.info("DONE %s", signature)
            return ClaimResult(wallet=wallet, amount=record.amount, signature=signature)

        except Exception as exc:
            log.error("Claim failed for %s: %s", wallet, exc)
            return ClaimResult(wallet=wallet, amount=record.amount, error=str(exc))

    async def claim_all(
        self,
        drop_wallets: Sequence[str],
        keypairs: Sequence[Keypair],
        execute: bool,
        settings: BatchSettings,
    ) -> list[ClaimResult]:
        """Claim for every allow-listed wallet, in allow-list order."""
        by_pubkey = {str(kp.pubkey()): kp for kp in keypairs}

        def _op(wallet: str):
            async def _claim() -> ClaimResult:
                kp = by_pubkey.get(wallet)
                if kp is None:
                    return ClaimResult(wallet=wallet, error="no keypair loaded for drop wallet")
                return await self.claim(kp, execute)
            return _claim

        def _timed_out(i: int) -> ClaimResult:
            error = f"timed out after {settings.op_timeout}s"
            log.error("Claim failed for %s: %s", drop_wallets[i], error)
            return ClaimResult(wallet=drop_wallets[i], error=error)

        return await run_batch([_op(w) for w in drop_wallets], settings, on_timeout=_timed_out)
