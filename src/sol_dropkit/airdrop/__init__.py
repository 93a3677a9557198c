"""Token distribution: eligibility checks and claims."""

from sol_dropkit.airdrop.claimer import ClaimSubmitter
from sol_dropkit.airdrop.proofs import ProofFetcher, check_all, summarize

__all__ = ["ClaimSubmitter", "ProofFetcher", "check_all", "summarize"]
