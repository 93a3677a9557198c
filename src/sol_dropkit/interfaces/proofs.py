"""ProofSource protocol - claim eligibility and merkle proofs per wallet."""

from __future__ import annotations

from typing import Protocol

from sol_dropkit.models.records import EligibilityRecord


class ProofSource(Protocol):
    """Looks up a wallet's allocation in the token distribution."""

    async def fetch(self, pubkey: str) -> EligibilityRecord:
        """Never raises: failures come back as a zero-amount record."""
        ...
