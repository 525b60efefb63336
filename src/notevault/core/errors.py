"""Error taxonomy for vault operations.

Every failure a vault operation can report is a ``VaultError`` carrying an
``ErrorKind``. Callers branch on ``err.kind`` (or on the subclass) and read
the structured fields instead of parsing messages.
"""

from enum import Enum
from pathlib import Path


class ErrorKind(Enum):
    INVALID_KEY_FORMAT = "invalid_key_format"
    DECRYPTION = "decryption"
    IO = "io"
    NOT_FOUND = "not_found"
    SCHEMA = "schema"
    VAULT_EXISTS = "vault_exists"
    CLOSED = "closed"


class VaultError(Exception):
    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidKeyFormat(VaultError):
    kind = ErrorKind.INVALID_KEY_FORMAT

    def __init__(self, reason: str):
        super().__init__(f"Invalid key: {reason}")
        self.reason = reason


class DecryptionError(VaultError):
    kind = ErrorKind.DECRYPTION

    def __init__(self, reason: str):
        super().__init__(f"Decryption failed: {reason}")
        self.reason = reason


class VaultIOError(VaultError):
    kind = ErrorKind.IO

    def __init__(self, path: Path, cause: OSError):
        super().__init__(f"I/O error on {path}: {cause.strerror or cause}")
        self.path = path
        self.cause = cause


class NoteNotFound(VaultError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, note_id: int):
        super().__init__(f"Note {note_id} not found")
        self.note_id = note_id


class SchemaError(VaultError):
    kind = ErrorKind.SCHEMA

    def __init__(self, cause: Exception):
        super().__init__(f"Database error: {cause}")
        self.cause = cause


class VaultExists(VaultError):
    kind = ErrorKind.VAULT_EXISTS

    def __init__(self, path: Path):
        super().__init__(f"Vault already exists: {path}")
        self.path = path


class VaultClosed(VaultError):
    kind = ErrorKind.CLOSED

    def __init__(self) -> None:
        super().__init__("Session is closed")
