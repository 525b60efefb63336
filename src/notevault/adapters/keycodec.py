"""Hex key parsing and in-memory key handling."""

import re
import secrets

from ..core.errors import InvalidKeyFormat

KEY_BYTES = 32

_HEX = re.compile(r"[0-9a-fA-F]*")


class VaultKey:
    """
    Raw AES-256 key material held in a mutable buffer.

    ``wipe()`` overwrites the buffer with zeros; the object is a context
    manager that wipes on exit. The key never appears in ``repr``.
    """

    def __init__(self, raw: bytes | bytearray):
        if len(raw) != KEY_BYTES:
            raise InvalidKeyFormat(f"expected {KEY_BYTES} bytes, got {len(raw)}")
        self._buf: bytearray | None = bytearray(raw)

    @property
    def material(self) -> bytearray:
        if self._buf is None:
            raise InvalidKeyFormat("key has been wiped")
        return self._buf

    @property
    def wiped(self) -> bool:
        return self._buf is None

    def wipe(self) -> None:
        if self._buf is None:
            return
        for i in range(len(self._buf)):
            self._buf[i] = 0
        self._buf = None

    def __len__(self) -> int:
        return 0 if self._buf is None else len(self._buf)

    def __repr__(self) -> str:
        return "VaultKey(<wiped>)" if self._buf is None else "VaultKey(<32 bytes>)"

    def __enter__(self) -> "VaultKey":
        return self

    def __exit__(self, *exc: object) -> None:
        self.wipe()


def parse_key(hex_string: str) -> VaultKey:
    """
    Decode a 64-character hex string into a ``VaultKey``.

    Raises InvalidKeyFormat on odd length, non-hex characters (whitespace
    included) or a decoded length other than 32 bytes.
    """
    if not isinstance(hex_string, str):
        raise InvalidKeyFormat("key must be a hex string")
    if len(hex_string) % 2:
        raise InvalidKeyFormat("odd number of hex digits")
    if not _HEX.fullmatch(hex_string):
        raise InvalidKeyFormat("non-hex characters")
    if len(hex_string) != KEY_BYTES * 2:
        raise InvalidKeyFormat(
            f"expected {KEY_BYTES} bytes, got {len(hex_string) // 2}"
        )
    buf = bytearray.fromhex(hex_string)
    key = VaultKey(buf)
    for i in range(len(buf)):
        buf[i] = 0
    return key


def generate_key_hex() -> str:
    """Generate a random key as 64 hex characters."""
    return secrets.token_hex(KEY_BYTES)
