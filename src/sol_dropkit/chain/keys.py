"""Keypair loading from a directory of solana-keygen files."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from solders.keypair import Keypair

log = logging.getLogger(__name__)


class KeyFileError(ValueError):
    """A key file could not be read or does not hold a 64-byte secret key."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path


def load_keypair(path: str | Path) -> Keypair:
    """Load a keypair from a JSON array of 64 secret-key bytes.

    A JSON string holding the base-58 encoded secret is accepted too.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise KeyFileError(path, str(exc)) from exc

    if isinstance(payload, str):
        try:
            return Keypair.from_base58_string(payload.strip())
        except ValueError as exc:
            raise KeyFileError(path, f"invalid base58 secret: {exc}") from exc

    if not isinstance(payload, list):
        raise KeyFileError(path, "expected a JSON array of secret-key bytes")
    try:
        raw = bytes(int(x) for x in payload)
    except (TypeError, ValueError) as exc:
        raise KeyFileError(path, f"invalid secret-key bytes: {exc}") from exc
    if len(raw) != 64:
        raise KeyFileError(path, f"secret key must be 64 bytes, got {len(raw)}")
    try:
        return Keypair.from_bytes(raw)
    except ValueError as exc:
        raise KeyFileError(path, f"invalid keypair: {exc}") from exc


def load_keypairs(keys_dir: str | Path, pattern: str = "*.json") -> list[Keypair]:
    """Load every key file in ``keys_dir`` matching ``pattern``, sorted by file name.

    Files resolving to an already loaded public key are skipped.
    """
    root = Path(keys_dir).expanduser()
    if not root.is_dir():
        raise FileNotFoundError(f"keys directory not found: {root}")

    keypairs: list[Keypair] = []
    seen: set[str] = set()
    for path in sorted(root.glob(pattern)):
        kp = load_keypair(path)
        pubkey = str(kp.pubkey())
        if pubkey in seen:
            log.debug("Skipping duplicate key %s (%s)", pubkey, path.name)
            continue
        seen.add(pubkey)
        keypairs.append(kp)

    log.info("Loaded %d keypairs from %s", len(keypairs), root)
    return keypairs
