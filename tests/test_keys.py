"""Key directory loading."""

from __future__ import annotations

import json

import pytest
from solders.keypair import Keypair

from sol_dropkit.chain.keys import KeyFileError, load_keypair, load_keypairs

from tests.factories import write_key_file


def test_load_json_byte_array(keys_dir):
    kp = write_key_file(keys_dir, "a.json")

    assert load_keypair(keys_dir / "a.json").pubkey() == kp.pubkey()


def test_load_base58_string(keys_dir):
    kp = Keypair()
    (keys_dir / "b58.json").write_text(json.dumps(str(kp)), encoding="utf-8")

    assert load_keypair(keys_dir / "b58.json").pubkey() == kp.pubkey()


@pytest.mark.parametrize("content", [
    "not json at all",
    json.dumps({"secret": [1, 2, 3]}),
    json.dumps([1, 2, 3]),
    json.dumps(["x"] * 64),
])
def test_bad_key_file_raises(keys_dir, content):
    path = keys_dir / "bad.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(KeyFileError) as exc_info:
        load_keypair(path)
    assert exc_info.value.path == path


def test_mismatched_public_key_half_raises(keys_dir):
    """Secret half of one key with the public half of another → KeyFileError."""
    a, b = Keypair(), Keypair()
    path = keys_dir / "mixed.json"
    path.write_text(json.dumps(list(bytes(a)[:32] + bytes(b.pubkey()))), encoding="utf-8")

    with pytest.raises(KeyFileError) as exc_info:
        load_keypair(path)
    assert exc_info.value.path == path
    assert "mixed.json" in str(exc_info.value)


def test_load_keypairs_sorted_and_deduplicated(keys_dir):
    second = write_key_file(keys_dir, "02.json")
    first = write_key_file(keys_dir, "01.json")
    write_key_file(keys_dir, "03.json", kp=first)
    (keys_dir / "notes.txt").write_text("ignored", encoding="utf-8")

    keypairs = load_keypairs(keys_dir)

    assert [kp.pubkey() for kp in keypairs] == [first.pubkey(), second.pubkey()]


def test_load_keypairs_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_keypairs(tmp_path / "nope")


def test_load_keypairs_propagates_bad_file(keys_dir):
    write_key_file(keys_dir, "good.json")
    (keys_dir / "zz.json").write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(KeyFileError):
        load_keypairs(keys_dir)
