"""Wallet balance inspection: native SOL plus base and quote token accounts."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from solders.keypair import Keypair

from sol_dropkit.batch import run_batch
from sol_dropkit.chain.accounts import associated_token_address
from sol_dropkit.chain.ledger import TokenAccountState
from sol_dropkit.interfaces.ledger import LedgerClient
from sol_dropkit.models.config import BatchSettings
from sol_dropkit.models.records import BalanceSnapshot, TokenBalance, WalletBalances

log = logging.getLogger(__name__)


class BalanceInspector:
    """Reads a wallet's SOL, base and quote balances.

    Read-only. A missing associated token account counts as a zero balance;
    any RPC error propagates to the caller.
    """

    def __init__(self, ledger: LedgerClient, base_mint: str, quote_mint: str) -> None:
        self._ledger = ledger
        self._base_mint = base_mint
        self._quote_mint = quote_mint
        self._decimals: dict[str, int] = {}

    async def _mint_decimals(self, mint: str) -> int:
        if mint not in self._decimals:
            self._decimals[mint] = await self._ledger.get_mint_decimals(mint)
        return self._decimals[mint]

    async def inspect(self, pubkey: str) -> BalanceSnapshot:
        base_ata = str(associated_token_address(pubkey, self._base_mint))
        quote_ata = str(associated_token_address(pubkey, self._quote_mint))

        lamports, base_acc, quote_acc, base_dec, quote_dec = await asyncio.gather(
            self._ledger.get_balance(pubkey),
            self._ledger.get_token_account(base_ata),
            self._ledger.get_token_account(quote_ata),
            self._mint_decimals(self._base_mint),
            self._mint_decimals(self._quote_mint),
        )

        return BalanceSnapshot(
            pubkey=pubkey,
            lamports=lamports,
            base=_token_balance(base_acc, base_ata, self._base_mint, base_dec),
            quote=_token_balance(quote_acc, quote_ata, self._quote_mint, quote_dec),
        )

    async def inspect_all(
        self, keypairs: Sequence[Keypair], settings: BatchSettings
    ) -> list[WalletBalances]:
        """Snapshot every wallet, in key order."""
        log.info("Retrieving %d account balances...", len(keypairs))

        def _op(kp: Keypair):
            async def _inspect() -> WalletBalances:
                return WalletBalances(keypair=kp, balance=await self.inspect(str(kp.pubkey())))
            return _inspect

        return await run_batch([_op(kp) for kp in keypairs], settings)


def _token_balance(
    account: TokenAccountState | None, ata: str, mint: str, decimals: int
) -> TokenBalance:
    raw = account.amount if account is not None else 0
    return TokenBalance(
        has_account=account is not None,
        raw_amount=raw,
        amount=raw / 10 ** decimals,
        decimals=decimals,
        ata=ata,
        mint=mint,
    )
