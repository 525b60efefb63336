from pathlib import Path
from typing import Iterable

from ..adapters.yaml_codec import MarkdownNoteCodec, YamlFrontmatter
from ..core.errors import VaultIOError
from ..core.model import Note
from ..core.ports import ExportAdapter, NoteCodec


class MarkdownAdapter(ExportAdapter):
    """
    Plaintext Markdown directory, one ``<id>.md`` per visible note.

    Exported files are NOT encrypted.
    """

    def __init__(self, codec: NoteCodec | None = None):
        self.codec = codec or MarkdownNoteCodec(YamlFrontmatter())

    def export_all(self, notes: Iterable[Note], out_dir: str | Path) -> int:
        out = Path(out_dir)
        count = 0
        try:
            out.mkdir(parents=True, exist_ok=True)
            for note in notes:
                (out / f"{note.id}.md").write_text(
                    self.codec.encode_file(note), encoding="utf-8"
                )
                count += 1
        except OSError as e:
            raise VaultIOError(out, e) from e
        return count

    def read_dir(self, src_dir: str | Path) -> list[tuple[str, str]]:
        """Read ``*.md`` files as ``(title, content)`` pairs, sorted by filename."""
        src = Path(src_dir)
        pairs = []
        try:
            for p in sorted(src.glob("*.md")):
                text = p.read_text(encoding="utf-8")
                pairs.append(self.codec.decode_file(text, fallback_title=p.stem))
        except OSError as e:
            raise VaultIOError(src, e) from e
        return pairs
