import hashlib

import pytest

from goodluck.commit_reveal import (
    build_commitment,
    build_commitment_hex,
    matches,
    normalize_commitment,
    verify_reveal,
)
from goodluck.errors import BadReveal
from goodluck.utils.bytes import from_hex, is_hex, to_hex
from goodluck.utils.hash import dsha3_256, hash_packed, pack

SALT = bytes(range(32))


def test_pack_uses_fixed_width_words_for_ints():
    assert pack(1) == (1).to_bytes(32, "big")
    assert pack(b"\xab", "x", True) == b"\xab" + b"x" + b"\x01"
    with pytest.raises(ValueError):
        pack(-1)
    with pytest.raises(TypeError):
        pack(1.5)


def test_commitment_is_sha3_of_number_word_and_salt():
    expected = hashlib.sha3_256((42).to_bytes(32, "big") + SALT).digest()
    assert build_commitment(42, SALT) == expected
    assert hash_packed(42, SALT) == expected
    assert build_commitment_hex(42, SALT) == "0x" + expected.hex()


def test_commitment_inputs_are_validated():
    with pytest.raises(ValueError):
        build_commitment(1, b"short")
    with pytest.raises(ValueError):
        build_commitment(-1, SALT)
    with pytest.raises(TypeError):
        build_commitment("1", SALT)  # type: ignore[arg-type]


def test_verify_reveal_accepts_exact_preimage_only():
    c = build_commitment(7, SALT)
    assert verify_reveal(c, 7, SALT) is True
    assert matches(c, 7, SALT)
    assert not matches(c, 8, SALT)

    with pytest.raises(BadReveal) as ei:
        verify_reveal(c, 8, SALT, round_id=3)
    err = ei.value
    assert err.code == "BAD_REVEAL"
    assert err.data["round_id"] == 3
    assert err.data["expected"] == to_hex(c)


def test_normalize_commitment_accepts_hex_or_bytes():
    c = build_commitment(1, SALT)
    assert normalize_commitment(to_hex(c)) == c
    assert normalize_commitment(c.hex()) == c
    assert normalize_commitment(bytearray(c)) == c
    with pytest.raises(ValueError):
        normalize_commitment(b"\x00" * 31)


def test_domain_separation_changes_digest():
    a = dsha3_256(b"goodluck.test.a", 1, b"x")
    b = dsha3_256(b"goodluck.test.b", 1, b"x")
    assert a != b
    # self-delimiting: moving a byte between parts changes the digest
    assert dsha3_256(b"d", b"ab", b"c") != dsha3_256(b"d", b"a", b"bc")
    with pytest.raises(ValueError):
        dsha3_256(b"", 1)


def test_hex_helpers():
    assert is_hex("0x00ff")
    assert not is_hex("0x0")
    assert not is_hex("zz")
    assert from_hex("0xDEAD") == b"\xde\xad"
    with pytest.raises(ValueError):
        from_hex("0xabc")
