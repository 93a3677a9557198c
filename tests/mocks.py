"""Mock implementations of the external-facing components."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from solders.instruction import Instruction
from solders.keypair import Keypair

from sol_dropkit.chain.ledger import TokenAccountState
from sol_dropkit.models.records import EligibilityRecord, EligibilityStatus


class MockLedger:
    """Implements LedgerClient protocol over in-memory balances and accounts."""

    def __init__(
        self,
        balances: dict[str, int] | None = None,
        token_accounts: dict[str, TokenAccountState] | None = None,
        decimals: dict[str, int] | None = None,
        existing: set[str] | None = None,
        fail_send_for: set[str] | None = None,
        hang_send_for: set[str] | None = None,
        fail_reads: bool = False,
        latency: float = 0.0,
    ) -> None:
        self.balances = balances or {}
        self.token_accounts = token_accounts or {}
        self.decimals = decimals or {}
        self.existing = existing or set()
        self.fail_send_for = fail_send_for or set()
        self.hang_send_for = hang_send_for or set()
        self.fail_reads = fail_reads
        self.latency = latency
        self.sent: list[tuple[list[Instruction], str]] = []
        self.balance_calls: list[str] = []
        self.closed = False

    async def _io(self) -> None:
        await asyncio.sleep(self.latency)
        if self.fail_reads:
            raise ConnectionError("mock RPC unreachable")

    async def get_balance(self, pubkey: str) -> int:
        self.balance_calls.append(pubkey)
        await self._io()
        return self.balances.get(pubkey, 0)

    async def get_token_account(self, address: str) -> TokenAccountState | None:
        await self._io()
        return self.token_accounts.get(address)

    async def get_mint_decimals(self, mint: str) -> int:
        await self._io()
        return self.decimals.get(mint, 6)

    async def account_exists(self, address: str) -> bool:
        await self._io()
        return address in self.existing or address in self.token_accounts

    async def send_transaction(
        self, instructions: Sequence[Instruction], signer: Keypair
    ) -> str:
        await asyncio.sleep(self.latency)
        payer = str(signer.pubkey())
        if payer in self.hang_send_for:
            await asyncio.sleep(1)
        if payer in self.fail_send_for:
            raise RuntimeError("mock transaction failed")
        self.sent.append((list(instructions), payer))
        return f"mock_sig_{len(self.sent)}"

    async def close(self) -> None:
        self.closed = True


class MockProofSource:
    """Implements ProofSource protocol from a pubkey -> record map."""

    def __init__(
        self,
        records: dict[str, EligibilityRecord] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.records = records or {}
        self.delays = delays or {}
        self.fetch_calls: list[str] = []

    async def fetch(self, pubkey: str) -> EligibilityRecord:
        self.fetch_calls.append(pubkey)
        await asyncio.sleep(self.delays.get(pubkey, 0))
        return self.records.get(
            pubkey, EligibilityRecord(pubkey=pubkey, status=EligibilityStatus.INELIGIBLE),
        )
