"""Deterministic address derivation."""

from __future__ import annotations

from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

CLAIM_STATUS_SEED = b"ClaimStatus"


def _key(value: Pubkey | str) -> Pubkey:
    return value if isinstance(value, Pubkey) else Pubkey.from_string(value)


def associated_token_address(owner: Pubkey | str, mint: Pubkey | str) -> Pubkey:
    """ATA of ``mint`` for ``owner``. Off-curve owners (PDAs) are allowed."""
    return get_associated_token_address(_key(owner), _key(mint))


def claim_status_address(
    program_id: Pubkey | str, claimant: Pubkey | str, distributor: Pubkey | str
) -> Pubkey:
    """PDA recording that ``claimant`` has claimed from ``distributor``."""
    address, _bump = Pubkey.find_program_address(
        [CLAIM_STATUS_SEED, bytes(_key(claimant)), bytes(_key(distributor))],
        _key(program_id),
    )
    return address


def is_valid_pubkey(value: str) -> bool:
    try:
        Pubkey.from_string(value)
    except ValueError:
        return False
    return True
