"""Vault session: decrypt, run one note operation, re-encrypt, clean up."""

import os
import tempfile
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TypeVar

from ..adapters.aes_cbc import AesCbcCipher
from ..adapters.keycodec import VaultKey, parse_key
from ..adapters.sqlite_store import SQLITE_MAGIC, SQLiteNoteStore
from .errors import DecryptionError, VaultClosed, VaultExists, VaultIOError
from .model import Note, NoteId, NoteSummary
from .ports import BlobCipher, NoteStore

T = TypeVar("T")

StoreFactory = Callable[[Path], NoteStore]


class VaultSession:
    """
    Explicit session context for one vault file and one key.

    No decrypted material is held between calls: every operation performs
    its own decrypt -> operate -> (encrypt) -> delete cycle through
    ``_snapshot``. ``close()`` wipes the key.
    """

    def __init__(
        self,
        path: Path,
        key: VaultKey,
        cipher: BlobCipher | None = None,
        store_factory: StoreFactory = SQLiteNoteStore,
        temp_dir: Path | None = None,
    ):
        self.path = Path(path)
        self._key: VaultKey | None = key
        self.cipher = cipher or AesCbcCipher()
        self.store_factory = store_factory
        self.temp_dir = temp_dir

    # Lifecycle

    @property
    def closed(self) -> bool:
        return self._key is None

    def close(self) -> None:
        if self._key is not None:
            self._key.wipe()
            self._key = None

    def __enter__(self) -> "VaultSession":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _require_key(self) -> VaultKey:
        if self._key is None:
            raise VaultClosed()
        return self._key

    # Snapshot cycle

    def _new_temp_file(self, plaintext: bytes = b"") -> Path:
        """Write plaintext to a private (0600) temp file."""
        try:
            if self.temp_dir is not None:
                self.temp_dir.mkdir(parents=True, exist_ok=True)
            fd, name = tempfile.mkstemp(
                prefix="notevault-", suffix=".sqlite", dir=self.temp_dir
            )
        except OSError as e:
            raise VaultIOError(Path(self.temp_dir or tempfile.gettempdir()), e) from e
        tmp = Path(name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(plaintext)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise VaultIOError(tmp, e) from e
        return tmp

    def _read_vault(self) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise VaultIOError(self.path, e) from e

    def _write_vault(self, snapshot: Path) -> None:
        """Encrypt ``snapshot`` with a fresh IV and atomically replace the vault."""
        key = self._require_key()
        try:
            plaintext = snapshot.read_bytes()
        except OSError as e:
            raise VaultIOError(snapshot, e) from e
        blob = self.cipher.encrypt(plaintext, key, self.cipher.generate_iv())

        directory = self.path.absolute().parent
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
            )
        except OSError as e:
            raise VaultIOError(directory, e) from e
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(blob)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise VaultIOError(self.path, e) from e

    @contextmanager
    def _snapshot(self, mutate: bool) -> Iterator[NoteStore]:
        """
        Decrypted working copy of the vault for exactly one store operation.

        Decryption happens in memory, so a wrong key never leaves a file
        behind. The temp file is removed on every exit path.
        """
        key = self._require_key()
        plaintext = self.cipher.decrypt(self._read_vault(), key)
        if not plaintext.startswith(SQLITE_MAGIC):
            # padding matched by coincidence; still the wrong key
            raise DecryptionError("decrypted data is not a note database")

        tmp = self._new_temp_file(plaintext)
        try:
            yield self.store_factory(tmp)
            if mutate:
                self._write_vault(tmp)
        finally:
            tmp.unlink(missing_ok=True)

    def _run(self, op: Callable[[NoteStore], T], mutate: bool = False) -> T:
        with self._snapshot(mutate=mutate) as store:
            return op(store)

    # Collaborator contract

    def create(self, overwrite: bool = False) -> None:
        """Initialize an empty vault at ``path``."""
        self._require_key()
        if self.path.exists() and not overwrite:
            raise VaultExists(self.path)
        tmp = self._new_temp_file()
        try:
            self.store_factory(tmp).init_schema()
            self._write_vault(tmp)
        finally:
            tmp.unlink(missing_ok=True)

    def open(self) -> list[NoteSummary]:
        """Decrypt the vault and list visible notes."""
        return self._run(lambda s: s.list_visible())

    def read_note(self, note_id: NoteId) -> Note:
        return self._run(lambda s: s.fetch(note_id))

    def save_note(self, note_id: NoteId, title: str, content: str) -> None:
        self._run(lambda s: s.update(note_id, title, content), mutate=True)

    def add_note(self, title: str, content: str) -> NoteId:
        return self._run(lambda s: s.insert(title, content), mutate=True)

    def delete_note(self, note_id: NoteId) -> None:
        self._run(lambda s: s.soft_delete(note_id), mutate=True)

    def search(self, query: str) -> list[NoteSummary]:
        return self._run(lambda s: s.search(query))

    def export_notes(self) -> list[Note]:
        return self._run(lambda s: s.visible_notes())

    def import_notes(self, notes: Iterable[tuple[str, str]]) -> list[NoteId]:
        pending = list(notes)
        if not pending:
            return []
        return self._run(lambda s: s.insert_many(pending), mutate=True)


def open_session(path: Path, key_hex: str, **kwargs) -> VaultSession:
    """Parse ``key_hex`` and return a session for the vault at ``path``."""
    return VaultSession(Path(path), parse_key(key_hex), **kwargs)
