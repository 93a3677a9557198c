"""Claim submitter: dry runs, ATA creation, instruction layout, failure capture."""

from __future__ import annotations

import hashlib
import struct

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from spl.token.constants import ASSOCIATED_TOKEN_PROGRAM_ID

from sol_dropkit.airdrop.claimer import ClaimSubmitter
from sol_dropkit.chain.accounts import associated_token_address, claim_status_address
from sol_dropkit.chain.instructions import encode_new_claim_args
from sol_dropkit.models.config import (
    JUP_MINT,
    MERKLE_DISTRIBUTOR_PROGRAM,
    BatchSettings,
    DistributorConfig,
)
from sol_dropkit.models.records import EligibilityRecord, EligibilityStatus

from tests.factories import MERKLE_TREE, make_eligible
from tests.mocks import MockProofSource

PROGRAM = Pubkey.from_string(MERKLE_DISTRIBUTOR_PROGRAM)


def _setup(mock_ledger, *records):
    proofs = MockProofSource({r.pubkey: r for r in records})
    return ClaimSubmitter(mock_ledger, proofs, DistributorConfig()), proofs


# ── Dry run ───────────────────────────────────────────────────────


async def test_dry_run_never_sends(mock_ledger):
    """No --execute → proof fetched, instructions built, nothing submitted."""
    kp = Keypair()
    submitter, proofs = _setup(mock_ledger, make_eligible(str(kp.pubkey()), amount=900))

    result = await submitter.claim(kp)

    assert result.dry_run
    assert not result.success
    assert result.amount == 900
    assert result.error is None
    assert proofs.fetch_calls == [str(kp.pubkey())]
    assert mock_ledger.sent == []


# ── Execute ───────────────────────────────────────────────────────


async def test_execute_creates_missing_token_account(mock_ledger):
    kp = Keypair()
    submitter, _ = _setup(mock_ledger, make_eligible(str(kp.pubkey())))

    result = await submitter.claim(kp, execute=True)

    assert result.success
    assert result.signature == "mock_sig_1"
    [(instructions, payer)] = mock_ledger.sent
    assert payer == str(kp.pubkey())
    assert len(instructions) == 2
    assert instructions[0].program_id == ASSOCIATED_TOKEN_PROGRAM_ID
    assert instructions[1].program_id == PROGRAM


async def test_execute_skips_existing_token_account(mock_ledger):
    kp = Keypair()
    mock_ledger.existing.add(str(associated_token_address(kp.pubkey(), JUP_MINT)))
    submitter, _ = _setup(mock_ledger, make_eligible(str(kp.pubkey())))

    await submitter.claim(kp, execute=True)

    [(instructions, _)] = mock_ledger.sent
    assert len(instructions) == 1
    assert instructions[0].program_id == PROGRAM


async def test_new_claim_instruction_layout(mock_ledger):
    kp = Keypair()
    claimant = kp.pubkey()
    distributor = Pubkey.from_string(MERKLE_TREE)
    submitter, _ = _setup(mock_ledger)

    instructions = await submitter.build_instructions(
        claimant, 1_234_567, [bytes([9] * 32)] * 3, MERKLE_TREE,
    )
    ix = instructions[-1]
    data = bytes(ix.data)

    assert data[:8] == hashlib.sha256(b"global:new_claim").digest()[:8]
    assert struct.unpack_from("<QQI", data, 8) == (1_234_567, 0, 3)
    assert len(data) == 8 + 20 + 3 * 32

    keys = [m.pubkey for m in ix.accounts]
    assert keys[0] == distributor
    assert keys[1] == claim_status_address(PROGRAM, claimant, distributor)
    assert keys[2] == associated_token_address(distributor, JUP_MINT)
    assert keys[3] == associated_token_address(claimant, JUP_MINT)
    assert keys[4] == claimant
    assert ix.accounts[4].is_signer
    assert not any(m.is_signer for i, m in enumerate(ix.accounts) if i != 4)


def test_proof_nodes_must_be_32_bytes():
    with pytest.raises(ValueError):
        encode_new_claim_args(1, 0, [b"short"])


# ── Failures become results ───────────────────────────────────────


async def test_send_failure_captured(mock_ledger):
    kp = Keypair()
    mock_ledger.fail_send_for.add(str(kp.pubkey()))
    submitter, _ = _setup(mock_ledger, make_eligible(str(kp.pubkey())))

    result = await submitter.claim(kp, execute=True)

    assert not result.success
    assert "mock transaction failed" in (result.error or "")


async def test_ineligible_wallet_not_submitted(mock_ledger):
    kp = Keypair()
    submitter, _ = _setup(mock_ledger)

    result = await submitter.claim(kp, execute=True)

    assert result.error == "not eligible"
    assert mock_ledger.sent == []


async def test_lookup_error_reported(mock_ledger):
    kp = Keypair()
    pubkey = str(kp.pubkey())
    failed = EligibilityRecord(pubkey=pubkey, status=EligibilityStatus.ERROR, error="proof service HTTP 502")
    submitter, _ = _setup(mock_ledger, failed)

    result = await submitter.claim(kp, execute=True)

    assert result.error == "proof service HTTP 502"
    assert mock_ledger.sent == []


async def test_missing_merkle_tree_reported(mock_ledger):
    kp = Keypair()
    record = make_eligible(str(kp.pubkey()))
    record.merkle_tree = None
    submitter, _ = _setup(mock_ledger, record)

    result = await submitter.claim(kp, execute=True)

    assert "merkle_tree" in (result.error or "")
    assert mock_ledger.sent == []


# ── Batch ─────────────────────────────────────────────────────────


async def test_claim_all_follows_allow_list(mock_ledger):
    keypairs = [Keypair() for _ in range(3)]
    stranger = str(Keypair().pubkey())
    records = [make_eligible(str(kp.pubkey())) for kp in keypairs]
    submitter, _ = _setup(mock_ledger, *records)
    allow_list = [str(keypairs[2].pubkey()), stranger, str(keypairs[0].pubkey())]

    results = await submitter.claim_all(allow_list, keypairs, True, BatchSettings(window=2))

    assert [r.wallet for r in results] == allow_list
    assert results[0].success and results[2].success
    assert results[1].error == "no keypair loaded for drop wallet"
    assert len(mock_ledger.sent) == 2


async def test_claim_all_slow_wallet_does_not_abort_batch(mock_ledger):
    keypairs = [Keypair() for _ in range(3)]
    pubkeys = [str(kp.pubkey()) for kp in keypairs]
    proofs = MockProofSource(
        {pk: make_eligible(pk) for pk in pubkeys},
        delays={pubkeys[0]: 1},
    )
    submitter = ClaimSubmitter(mock_ledger, proofs, DistributorConfig())

    results = await submitter.claim_all(
        pubkeys, keypairs, True, BatchSettings(window=5, op_timeout=0.05),
    )

    assert [r.wallet for r in results] == pubkeys
    assert not results[0].success
    assert "timed out" in (results[0].error or "")
    assert results[1].success and results[2].success
    assert len(mock_ledger.sent) == 2
