"""AES-256-CBC vault cipher.

Vault layout: ``IV (16 bytes) || AES-256-CBC(PKCS7(plaintext))``. No header,
no version tag and no authentication tag.
"""

import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..core.errors import DecryptionError
from ..core.ports import BlobCipher
from .keycodec import VaultKey

IV_SIZE = 16
BLOCK_SIZE = 16


class AesCbcCipher(BlobCipher):
    def generate_iv(self) -> bytes:
        """Fresh random IV; call once per ``encrypt``."""
        return os.urandom(IV_SIZE)

    def encrypt(self, plaintext: bytes, key: VaultKey, iv: bytes) -> bytes:
        if len(iv) != IV_SIZE:
            raise ValueError(f"IV must be {IV_SIZE} bytes, got {len(iv)}")

        padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
        padded = padder.update(plaintext) + padder.finalize()

        encryptor = Cipher(algorithms.AES(key.material), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return bytes(iv) + ciphertext

    def decrypt(self, vault_bytes: bytes, key: VaultKey) -> bytes:
        if len(vault_bytes) < IV_SIZE:
            raise DecryptionError("input shorter than IV")
        iv, ciphertext = vault_bytes[:IV_SIZE], vault_bytes[IV_SIZE:]
        if not ciphertext:
            raise DecryptionError("no ciphertext after IV")
        if len(ciphertext) % BLOCK_SIZE:
            raise DecryptionError("ciphertext is not block aligned")

        decryptor = Cipher(algorithms.AES(key.material), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
        try:
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError:
            # wrong key or corrupted ciphertext
            raise DecryptionError("bad padding") from None
