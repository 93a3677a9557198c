"""Solana RPC access over the solana-py async client."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed, Processed
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction
from spl.token._layouts import ACCOUNT_LAYOUT, MINT_LAYOUT

log = logging.getLogger(__name__)

_STATE_FROZEN = 2


@dataclass(frozen=True)
class TokenAccountState:
    """The parts of an SPL token account the tool cares about."""

    address: str
    mint: str
    owner: str
    amount: int
    is_frozen: bool = False


def decode_token_account(address: str, data: bytes) -> TokenAccountState:
    """Decode raw SPL token account data."""
    parsed = ACCOUNT_LAYOUT.parse(data)
    return TokenAccountState(
        address=address,
        mint=str(Pubkey.from_bytes(parsed.mint)),
        owner=str(Pubkey.from_bytes(parsed.owner)),
        amount=int(parsed.amount),
        is_frozen=parsed.state == _STATE_FROZEN,
    )


def decode_mint_decimals(data: bytes) -> int:
    return int(MINT_LAYOUT.parse(data).decimals)


class TransactionFailedError(RuntimeError):
    """A submitted transaction was confirmed with an execution error."""

    def __init__(self, signature: str, err: object) -> None:
        super().__init__(f"transaction {signature} failed: {err}")
        self.signature = signature
        self.err = err


class SolanaLedger:
    """Ledger queries and transaction submission against one RPC endpoint.

    A single AsyncClient is shared by every concurrent operation of a run.
    RPC failures are not caught here; callers decide whether a failure is
    fatal to their batch.
    """

    def __init__(self, rpc_url: str, client: AsyncClient | None = None) -> None:
        self._rpc_url = rpc_url
        self._client = client or AsyncClient(rpc_url, commitment=Confirmed)

    async def close(self) -> None:
        await self._client.close()

    async def get_balance(self, pubkey: str) -> int:
        resp = await self._client.get_balance(Pubkey.from_string(pubkey), commitment=Confirmed)
        return int(resp.value)

    async def get_token_account(self, address: str) -> TokenAccountState | None:
        resp = await self._client.get_account_info(Pubkey.from_string(address), commitment=Confirmed)
        if resp.value is None:
            return None
        return decode_token_account(address, bytes(resp.value.data))

    async def get_mint_decimals(self, mint: str) -> int:
        resp = await self._client.get_account_info(Pubkey.from_string(mint), commitment=Confirmed)
        if resp.value is None:
            raise ValueError(f"mint account not found: {mint}")
        return decode_mint_decimals(bytes(resp.value.data))

    async def account_exists(self, address: str) -> bool:
        resp = await self._client.get_account_info(Pubkey.from_string(address), commitment=Confirmed)
        return resp.value is not None

    async def send_transaction(
        self, instructions: Sequence[Instruction], signer: Keypair
    ) -> str:
        """Sign with the wallet's own key, submit, and wait for confirmation."""
        if not instructions:
            raise ValueError("No instructions to send")

        blockhash = (await self._client.get_latest_blockhash(Confirmed)).value.blockhash
        tx = Transaction.new_signed_with_payer(
            list(instructions), signer.pubkey(), [signer], blockhash,
        )
        resp = await self._client.send_transaction(
            tx, opts=TxOpts(skip_confirmation=True, preflight_commitment=Processed),
        )
        signature = resp.value
        confirmed = await self._client.confirm_transaction(signature, commitment=Confirmed)
        status = confirmed.value[0] if confirmed.value else None
        if status is not None and status.err is not None:
            raise TransactionFailedError(str(signature), status.err)

        log.debug("Confirmed %s (payer %s)", signature, signer.pubkey())
        return str(signature)
