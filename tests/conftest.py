"""Shared fixtures for sol_dropkit tests."""

from __future__ import annotations

import pytest
from solders.keypair import Keypair

from sol_dropkit.models.config import BatchSettings, DistributorConfig, DropkitConfig

from tests.factories import BASE_MINT, QUOTE_MINT
from tests.mocks import MockLedger, MockProofSource

DESTINATION = str(Keypair.from_seed(bytes([7] * 32)).pubkey())

_ENV_VARS = (
    "RPC_MAINNET", "BASE_MINT", "QUOTE_MINT", "NODE_ENV",
    "DROPKIT_ENV", "DROPKIT_RPC_URL", "DROPKIT_BASE_MINT", "DROPKIT_QUOTE_MINT",
    "DROPKIT_KEYS_DIR", "DROPKIT_DESTINATION", "DROPKIT_BASE_DESTINATION",
    "DROPKIT_QUOTE_DESTINATION", "DROPKIT_DROP_WALLETS", "DROPKIT_DROP_WALLETS_PATH",
    "DROPKIT_WINDOW",
)


def make_test_config(**overrides) -> DropkitConfig:
    """Build a DropkitConfig suitable for testing."""
    defaults = dict(
        rpc_url="http://127.0.0.1:8899",
        base_mint=BASE_MINT,
        quote_mint=QUOTE_MINT,
        keys_dir="./keys",
        destination=DESTINATION,
        fee_reserve=5000,
        batch=BatchSettings(window=5),
        distributor=DistributorConfig(proof_url="https://proofs.test/claim-proof"),
    )
    defaults.update(overrides)
    return DropkitConfig(**defaults)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the developer's environment and .env files out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def test_config(tmp_path):
    return make_test_config(
        keys_dir=str(tmp_path / "keys"),
        drop_wallets_path=str(tmp_path / "drop_wallets.json"),
    )


@pytest.fixture
def keys_dir(tmp_path):
    d = tmp_path / "keys"
    d.mkdir()
    return d


@pytest.fixture
def mock_ledger():
    return MockLedger(decimals={BASE_MINT: 6, QUOTE_MINT: 9})


@pytest.fixture
def mock_proofs():
    return MockProofSource()
