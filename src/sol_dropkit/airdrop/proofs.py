"""Claim proof fetcher - asks the distribution's proof service per wallet."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from sol_dropkit.batch import run_batch
from sol_dropkit.interfaces.proofs import ProofSource
from sol_dropkit.models.config import BatchSettings
from sol_dropkit.models.records import (
    EligibilityRecord,
    EligibilityStatus,
    EligibilitySummary,
)

log = logging.getLogger(__name__)


class ProofFetcher:
    """Fetches ``{amount, proof, merkle_tree}`` from ``<base_url>/<mint>/<pubkey>``.

    ``fetch`` never raises. Transport errors, non-2xx replies and malformed
    bodies come back as an ERROR record, a reply without a positive amount as
    INELIGIBLE; both carry amount 0.
    """

    def __init__(
        self,
        base_url: str,
        mint: str,
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._mint = mint
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=10),
            follow_redirects=True,
        )

    def url_for(self, pubkey: str) -> str:
        return f"{self._base_url}/{self._mint}/{pubkey}"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, pubkey: str) -> EligibilityRecord:
        try:
            resp = await self._client.get(self.url_for(pubkey))
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            return _failed(pubkey, f"proof service HTTP {exc.response.status_code}")
        except (httpx.HTTPError, ValueError) as exc:
            return _failed(pubkey, f"{type(exc).__name__}: {exc}")

        if not isinstance(data, dict):
            return _failed(pubkey, "unexpected proof response")

        try:
            amount = int(data.get("amount") or 0)
            proof = [bytes(node) for node in data.get("proof") or []]
        except (TypeError, ValueError) as exc:
            return _failed(pubkey, f"malformed proof data: {exc}")

        if amount <= 0:
            log.warning("No proof data for %s, wallet likely not eligible", pubkey)
            return EligibilityRecord(pubkey=pubkey, status=EligibilityStatus.INELIGIBLE)

        log.info("checked: %s %d", pubkey, amount)
        return EligibilityRecord(
            pubkey=pubkey,
            amount=amount,
            proof=proof,
            merkle_tree=data.get("merkle_tree"),
            status=EligibilityStatus.ELIGIBLE,
        )


def _failed(pubkey: str, error: str) -> EligibilityRecord:
    log.warning("Proof lookup failed for %s: %s", pubkey, error)
    return EligibilityRecord(pubkey=pubkey, status=EligibilityStatus.ERROR, error=error)


async def check_all(
    source: ProofSource, pubkeys: Sequence[str], settings: BatchSettings
) -> list[EligibilityRecord]:
    """Look up every wallet, in input order.

    A lookup missing ``settings.op_timeout`` becomes an ERROR record.
    """

    def _op(pubkey: str):
        async def _fetch() -> EligibilityRecord:
            return await source.fetch(pubkey)
        return _fetch

    def _timed_out(i: int) -> EligibilityRecord:
        return _failed(pubkeys[i], f"timed out after {settings.op_timeout}s")

    return await run_batch([_op(pk) for pk in pubkeys], settings, on_timeout=_timed_out)


def summarize(records: Sequence[EligibilityRecord], decimal_factor: int) -> EligibilitySummary:
    """Total claimable amount and the wallets holding an allocation."""
    total_raw = sum(r.amount for r in records)
    return EligibilitySummary(
        total_raw=total_raw,
        total=total_raw / decimal_factor,
        drop_wallets=[r.pubkey for r in records if r.eligible],
        ineligible=len([r for r in records if r.status == EligibilityStatus.INELIGIBLE]),
        errors=len([r for r in records if r.status == EligibilityStatus.ERROR]),
    )
