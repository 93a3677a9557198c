"""Drainer - sweeps token and SOL balances into the collection wallet."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from solders.pubkey import Pubkey

from sol_dropkit.batch import run_batch
from sol_dropkit.chain.accounts import associated_token_address
from sol_dropkit.chain.instructions import sol_transfer_ix, token_transfer_ix
from sol_dropkit.interfaces.ledger import LedgerClient
from sol_dropkit.models.config import BatchSettings
from sol_dropkit.models.records import (
    LAMPORTS_PER_SOL,
    DrainReport,
    TokenBalance,
    TransferResult,
    WalletBalances,
)

log = logging.getLogger(__name__)

TOKEN_ASSETS = ("base", "quote")


class Drainer:
    """Moves each wallet's balances to fixed destinations, one transaction per wallet.

    Wallets with nothing to move are skipped without a transaction or a
    result entry. A failed or timed-out transfer is reported in its
    TransferResult and does not stop the other transfers.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        destination: str,
        base_destination: str,
        quote_destination: str,
        fee_reserve: int = 5000,
    ) -> None:
        self._ledger = ledger
        self._destination = Pubkey.from_string(destination)
        self._token_destinations = {
            "base": Pubkey.from_string(base_destination),
            "quote": Pubkey.from_string(quote_destination),
        }
        self._fee_reserve = fee_reserve

    @classmethod
    def for_destination(
        cls,
        ledger: LedgerClient,
        destination: str,
        base_mint: str,
        quote_mint: str,
        base_destination: str = "",
        quote_destination: str = "",
        fee_reserve: int = 5000,
    ) -> Drainer:
        """Default token destinations to the collection wallet's ATAs."""
        return cls(
            ledger,
            destination,
            base_destination or str(associated_token_address(destination, base_mint)),
            quote_destination or str(associated_token_address(destination, quote_mint)),
            fee_reserve,
        )

    async def _transfer(self, wallet: WalletBalances, asset: str, amount: int, instructions) -> TransferResult:
        try:
            signature = await self._ledger.send_transaction(instructions, wallet.keypair)
        except Exception as exc:
            log.error("Draining %s from %s failed: %s", asset, wallet.pubkey, exc)
            return TransferResult(wallet=wallet.pubkey, asset=asset, amount=amount, error=str(exc))
        log.info("Drained %s %d from %s (%s)", asset, amount, wallet.pubkey, signature)
        return TransferResult(wallet=wallet.pubkey, asset=asset, amount=amount, signature=signature)

    def _timed_out(
        self, wallet: WalletBalances, asset: str, amount: int, settings: BatchSettings
    ) -> TransferResult:
        error = f"timed out after {settings.op_timeout}s"
        log.error("Draining %s from %s failed: %s", asset, wallet.pubkey, error)
        return TransferResult(wallet=wallet.pubkey, asset=asset, amount=amount, error=error)

    async def drain_token(
        self, wallets: Sequence[WalletBalances], asset: str, settings: BatchSettings
    ) -> DrainReport:
        """Transfer the full base or quote balance of every wallet holding some."""
        if asset not in TOKEN_ASSETS:
            raise ValueError(f"unknown token asset: {asset}")
        destination = self._token_destinations[asset]

        holdings: list[tuple[WalletBalances, TokenBalance]] = [
            (w, getattr(w.balance, asset)) for w in wallets
        ]
        total_raw = sum(tb.raw_amount for _, tb in holdings)
        total = sum(tb.amount for _, tb in holdings)
        log.info("%s size %s across %d wallets", asset.upper(), total, len(wallets))

        def _op(wallet: WalletBalances, tb: TokenBalance):
            async def _drain() -> TransferResult:
                owner = wallet.keypair.pubkey()
                ix = token_transfer_ix(
                    source=Pubkey.from_string(tb.ata),
                    mint=Pubkey.from_string(tb.mint),
                    destination=destination,
                    owner=owner,
                    amount=tb.raw_amount,
                    decimals=tb.decimals,
                )
                return await self._transfer(wallet, asset, tb.raw_amount, [ix])
            return _drain

        to_drain = [(w, tb) for w, tb in holdings if tb.raw_amount > 0]

        def _timed_out(i: int) -> TransferResult:
            wallet, tb = to_drain[i]
            return self._timed_out(wallet, asset, tb.raw_amount, settings)

        results = await run_batch(
            [_op(w, tb) for w, tb in to_drain], settings, on_timeout=_timed_out,
        )
        return DrainReport(asset=asset, total_raw=total_raw, total=total, results=results)

    async def drain_sol(
        self, wallets: Sequence[WalletBalances], settings: BatchSettings
    ) -> DrainReport:
        """Transfer each wallet's SOL minus the fee reserve.

        Balances are re-read first since token drains spend fees. A wallet
        missing the batch deadline is reported as a failed transfer of 0.
        """
        total_raw = sum(w.balance.lamports for w in wallets)
        log.info("SOL size %s across %d wallets", total_raw / LAMPORTS_PER_SOL, len(wallets))

        def _op(wallet: WalletBalances):
            async def _drain() -> TransferResult | None:
                lamports = await self._ledger.get_balance(wallet.pubkey)
                if lamports <= self._fee_reserve:
                    return None
                amount = lamports - self._fee_reserve
                ix = sol_transfer_ix(wallet.keypair.pubkey(), self._destination, amount)
                return await self._transfer(wallet, "sol", amount, [ix])
            return _drain

        def _timed_out(i: int) -> TransferResult:
            return self._timed_out(wallets[i], "sol", 0, settings)

        settled = await run_batch([_op(w) for w in wallets], settings, on_timeout=_timed_out)
        return DrainReport(
            asset="sol",
            total_raw=total_raw,
            total=total_raw / LAMPORTS_PER_SOL,
            results=[r for r in settled if r is not None],
        )
