"""sol_dropkit - batch claim checks, claims and balance sweeps for Solana wallets."""

__version__ = "0.1.0"
