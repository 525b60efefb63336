"""SQLite note store operating on a decrypted vault snapshot."""

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ..core.errors import NoteNotFound, SchemaError
from ..core.model import Note, NoteId, NoteSummary
from ..core.ports import NoteStore

SQLITE_MAGIC = b"SQLite format 3\x00"


@dataclass
class SQLiteNoteStore(NoteStore):
    """
    Notes table inside a plaintext SQLite file.

    The file is a short-lived working copy; the encrypted vault is the
    source of truth. Each method opens and closes its own connection so the
    file is fully flushed before it is re-encrypted.
    """

    db_path: Path

    def _conn(self) -> sqlite3.Connection:
        """Get a connection to the snapshot."""
        try:
            conn = sqlite3.connect(str(self.db_path))
            # no -journal/-wal side files next to the plaintext snapshot
            conn.execute("PRAGMA journal_mode=MEMORY")
            conn.execute("PRAGMA temp_store=MEMORY")
        except sqlite3.Error as e:
            raise SchemaError(e) from e
        return conn

    def init_schema(self) -> None:
        """Create the notes table if it doesn't exist."""
        conn = self._conn()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS notes (
                    id INTEGER PRIMARY KEY,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    hidden BOOLEAN NOT NULL DEFAULT 0
                )
            """)
            conn.commit()
        except sqlite3.Error as e:
            raise SchemaError(e) from e
        finally:
            conn.close()

    def insert(self, title: str, content: str) -> NoteId:
        return self.insert_many([(title, content)])[0]

    def insert_many(self, notes: Iterable[tuple[str, str]]) -> list[NoteId]:
        """Insert all notes in one transaction and return their ids."""
        conn = self._conn()
        try:
            ids = []
            for title, content in notes:
                cur = conn.execute(
                    "INSERT INTO notes (title, content, hidden) VALUES (?, ?, 0)",
                    (title, content),
                )
                ids.append(cur.lastrowid)
            conn.commit()
            return ids
        except sqlite3.Error as e:
            conn.rollback()
            raise SchemaError(e) from e
        finally:
            conn.close()

    def list_visible(self) -> list[NoteSummary]:
        conn = self._conn()
        try:
            rows = conn.execute(
                "SELECT id, title FROM notes WHERE hidden = 0 ORDER BY id"
            ).fetchall()
        except sqlite3.Error as e:
            raise SchemaError(e) from e
        finally:
            conn.close()
        return [NoteSummary(id=row[0], title=row[1]) for row in rows]

    def visible_notes(self) -> list[Note]:
        conn = self._conn()
        try:
            rows = conn.execute(
                "SELECT id, title, content FROM notes WHERE hidden = 0 ORDER BY id"
            ).fetchall()
        except sqlite3.Error as e:
            raise SchemaError(e) from e
        finally:
            conn.close()
        return [Note(id=r[0], title=r[1], content=r[2]) for r in rows]

    def search(self, query: str) -> list[NoteSummary]:
        """Case-insensitive substring match on title or content (Unicode casefold)."""
        needle = query.casefold()
        conn = self._conn()
        try:
            conn.create_function("casefold", 1, str.casefold, deterministic=True)
            rows = conn.execute(
                """
                SELECT id, title FROM notes
                WHERE hidden = 0
                  AND (instr(casefold(title), ?) > 0 OR instr(casefold(content), ?) > 0)
                ORDER BY id
                """,
                (needle, needle),
            ).fetchall()
        except sqlite3.Error as e:
            raise SchemaError(e) from e
        finally:
            conn.close()
        return [NoteSummary(id=row[0], title=row[1]) for row in rows]

    def fetch(self, id: NoteId) -> Note:
        """Get a visible note; hidden rows read as not found."""
        conn = self._conn()
        try:
            row = conn.execute(
                "SELECT title, content FROM notes WHERE id = ? AND hidden = 0",
                (id,),
            ).fetchone()
        except sqlite3.Error as e:
            raise SchemaError(e) from e
        finally:
            conn.close()
        if row is None:
            raise NoteNotFound(id)
        return Note(id=id, title=row[0], content=row[1])

    def update(self, id: NoteId, title: str, content: str) -> None:
        conn = self._conn()
        try:
            cur = conn.execute(
                "UPDATE notes SET title = ?, content = ? WHERE id = ? AND hidden = 0",
                (title, content, id),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise SchemaError(e) from e
        finally:
            conn.close()
        if cur.rowcount == 0:
            raise NoteNotFound(id)

    def soft_delete(self, id: NoteId) -> None:
        """
        Mark a note hidden. Content stays in the table.

        Deleting an already hidden note is a no-op; only an id that was
        never inserted raises NoteNotFound.
        """
        conn = self._conn()
        try:
            cur = conn.execute("UPDATE notes SET hidden = 1 WHERE id = ?", (id,))
            conn.commit()
        except sqlite3.Error as e:
            raise SchemaError(e) from e
        finally:
            conn.close()
        if cur.rowcount == 0:
            raise NoteNotFound(id)
