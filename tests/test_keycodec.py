"""Tests for hex key parsing."""

import pytest

from notevault.adapters.keycodec import VaultKey, generate_key_hex, parse_key
from notevault.core.errors import ErrorKind, InvalidKeyFormat


def test_parse_valid_key():
    """Test that 64 hex characters decode to 32 bytes."""
    key = parse_key("41" * 32)
    assert len(key) == 32
    assert bytes(key.material) == b"A" * 32


def test_parse_accepts_uppercase():
    key = parse_key("AB" * 32)
    assert bytes(key.material) == b"\xab" * 32


@pytest.mark.parametrize(
    "bad",
    [
        "4" * 63,          # odd length
        "zz" * 32,         # non-hex
        "41" * 31 + " 4",  # whitespace
        "41" * 16,         # too short
        "41" * 33,         # too long
        "",
    ],
)
def test_parse_rejects_malformed(bad):
    """Test that malformed keys raise InvalidKeyFormat."""
    with pytest.raises(InvalidKeyFormat) as exc_info:
        parse_key(bad)
    assert exc_info.value.kind is ErrorKind.INVALID_KEY_FORMAT
    assert exc_info.value.reason


def test_wipe_zeroes_material():
    """Test that wiping clears the buffer and blocks further use."""
    key = parse_key("41" * 32)
    buf = key.material
    key.wipe()

    assert bytes(buf) == b"\x00" * 32
    assert key.wiped
    with pytest.raises(InvalidKeyFormat):
        key.material


def test_context_manager_wipes():
    with parse_key("41" * 32) as key:
        assert not key.wiped
    assert key.wiped


def test_repr_hides_material():
    key = VaultKey(b"secretsecretsecretsecretsecret!!")
    assert "secret" not in repr(key)


def test_generate_key_hex_is_parseable():
    """Test that generated keys round-trip through the parser and differ."""
    a = generate_key_hex()
    b = generate_key_hex()
    assert len(a) == 64
    assert a != b
    assert len(parse_key(a)) == 32
