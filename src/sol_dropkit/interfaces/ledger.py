"""LedgerClient protocol - read and write access to the Solana RPC."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from solders.instruction import Instruction
from solders.keypair import Keypair

from sol_dropkit.chain.ledger import TokenAccountState


class LedgerClient(Protocol):
    """Queries balances and accounts, submits signed transactions."""

    async def get_balance(self, pubkey: str) -> int:
        """Native balance in lamports."""
        ...

    async def get_token_account(self, address: str) -> TokenAccountState | None:
        """Decoded SPL token account, or None if it does not exist."""
        ...

    async def get_mint_decimals(self, mint: str) -> int:
        ...

    async def account_exists(self, address: str) -> bool:
        ...

    async def send_transaction(
        self, instructions: Sequence[Instruction], signer: Keypair
    ) -> str:
        """Sign with ``signer`` (also fee payer), submit, confirm, return the signature."""
        ...

    async def close(self) -> None:
        ...
