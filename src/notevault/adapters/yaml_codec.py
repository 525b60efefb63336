import re, io
import yaml
from typing import Any
from ..core.ports import NoteCodec
from ..core.model import Note

_FM = re.compile(r"^---[ \t]*\n(.*?)\n---[ \t]*(?:\n|$)", re.DOTALL)


class YamlFrontmatter:
    def decode(self, text: str) -> tuple[dict[str, Any], str]:
        m = _FM.match(text)
        if not m:
            return {}, text
        try:
            fm = yaml.safe_load(io.StringIO(m.group(1))) or {}
        except yaml.YAMLError:
            return {}, text
        if not isinstance(fm, dict):
            return {}, text
        body = text[m.end() :]
        return (fm, body)

    def encode(self, meta: dict[str, Any]) -> str:
        if not meta:
            return ""
        buf = io.StringIO()
        yaml.safe_dump(meta, buf, sort_keys=False, allow_unicode=True)
        return f"---\n{buf.getvalue()}---\n"


class MarkdownNoteCodec(NoteCodec):
    """
    ``<frontmatter>`` with ``id`` and ``title``, then the note content verbatim.
    """

    def __init__(self, fm: YamlFrontmatter):
        self.fm = fm

    def decode_file(self, text: str, fallback_title: str) -> tuple[str, str]:
        meta, body = self.fm.decode(text)
        title = meta.get("title")
        if not isinstance(title, str):
            title = fallback_title
        return title, body

    def encode_file(self, note: Note) -> str:
        # ids are informational only; import always assigns fresh ones
        return self.fm.encode({"id": note.id, "title": note.title}) + note.content
