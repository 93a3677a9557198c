"""Protocol interfaces for the external collaborators."""

from sol_dropkit.interfaces.ledger import LedgerClient
from sol_dropkit.interfaces.proofs import ProofSource

__all__ = ["LedgerClient", "ProofSource"]
