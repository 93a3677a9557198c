"""Solana integration components."""

from sol_dropkit.chain.keys import KeyFileError, load_keypair, load_keypairs
from sol_dropkit.chain.ledger import SolanaLedger, TokenAccountState, TransactionFailedError

__all__ = [
    "KeyFileError", "load_keypair", "load_keypairs",
    "SolanaLedger", "TokenAccountState", "TransactionFailedError",
]
