"""Instruction builders."""

from __future__ import annotations

import hashlib
import struct
from collections.abc import Sequence

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYS_PROGRAM_ID
from solders.system_program import TransferParams, transfer
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import (
    TransferCheckedParams,
    create_associated_token_account,
    transfer_checked,
)


def anchor_discriminator(name: str) -> bytes:
    """First 8 bytes of sha256("global:<name>"), Anchor's method selector."""
    return hashlib.sha256(f"global:{name}".encode("utf-8")).digest()[:8]


NEW_CLAIM_DISCRIMINATOR = anchor_discriminator("new_claim")


def encode_new_claim_args(amount_unlocked: int, amount_locked: int, proof: Sequence[bytes]) -> bytes:
    """Borsh encoding of (u64, u64, Vec<[u8; 32]>)."""
    for node in proof:
        if len(node) != 32:
            raise ValueError(f"proof nodes must be 32 bytes, got {len(node)}")
    head = struct.pack("<QQI", amount_unlocked, amount_locked, len(proof))
    return NEW_CLAIM_DISCRIMINATOR + head + b"".join(bytes(node) for node in proof)


def new_claim_ix(
    program_id: Pubkey,
    distributor: Pubkey,
    claim_status: Pubkey,
    source: Pubkey,
    destination: Pubkey,
    claimant: Pubkey,
    amount_unlocked: int,
    amount_locked: int,
    proof: Sequence[bytes],
) -> Instruction:
    """Merkle distributor ``new_claim`` call moving tokens from ``source`` to ``destination``."""
    return Instruction(
        program_id=program_id,
        accounts=[
            AccountMeta(pubkey=distributor, is_signer=False, is_writable=True),
            AccountMeta(pubkey=claim_status, is_signer=False, is_writable=True),
            AccountMeta(pubkey=source, is_signer=False, is_writable=True),
            AccountMeta(pubkey=destination, is_signer=False, is_writable=True),
            AccountMeta(pubkey=claimant, is_signer=True, is_writable=True),
            AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
            AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
        ],
        data=encode_new_claim_args(amount_unlocked, amount_locked, proof),
    )


def create_ata_ix(payer: Pubkey, owner: Pubkey, mint: Pubkey) -> Instruction:
    return create_associated_token_account(payer=payer, owner=owner, mint=mint)


def token_transfer_ix(
    source: Pubkey,
    mint: Pubkey,
    destination: Pubkey,
    owner: Pubkey,
    amount: int,
    decimals: int,
) -> Instruction:
    return transfer_checked(
        TransferCheckedParams(
            program_id=TOKEN_PROGRAM_ID,
            source=source,
            mint=mint,
            dest=destination,
            owner=owner,
            amount=int(amount),
            decimals=decimals,
        )
    )


def sol_transfer_ix(from_pubkey: Pubkey, to_pubkey: Pubkey, lamports: int) -> Instruction:
    return transfer(TransferParams(from_pubkey=from_pubkey, to_pubkey=to_pubkey, lamports=int(lamports)))
