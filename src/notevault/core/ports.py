from typing import Protocol, Iterable, Any
from .model import NoteId, Note, NoteSummary


class BlobCipher(Protocol):
    """
    Symmetric encryption of one opaque blob. Owns the on-disk framing.
    """

    def generate_iv(self) -> bytes:
        pass

    def encrypt(self, plaintext: bytes, key: Any, iv: bytes) -> bytes:
        pass

    def decrypt(self, vault_bytes: bytes, key: Any) -> bytes:
        pass


class NoteStore(Protocol):
    """
    CRUD over a decrypted snapshot. Hidden rows are invisible to readers.
    """

    def init_schema(self) -> None:
        pass

    def insert(self, title: str, content: str) -> NoteId:
        pass

    def insert_many(self, notes: Iterable[tuple[str, str]]) -> list[NoteId]:
        pass

    def list_visible(self) -> list[NoteSummary]:
        pass

    def visible_notes(self) -> list[Note]:
        pass

    def search(self, query: str) -> list[NoteSummary]:
        pass

    def fetch(self, id: NoteId) -> Note:
        pass

    def update(self, id: NoteId, title: str, content: str) -> None:
        pass

    def soft_delete(self, id: NoteId) -> None:
        pass


class NoteCodec(Protocol):
    """
    Plaintext file representation of a note, used for export/import.
    """

    def decode_file(self, text: str, fallback_title: str) -> tuple[str, str]:
        pass

    def encode_file(self, note: Note) -> str:
        pass


class ExportAdapter(Protocol):
    def export_all(self, notes: Iterable[Note], out_dir: str) -> int:
        pass
