from __future__ import annotations
from dataclasses import dataclass

NoteId = int


@dataclass(frozen=True)
class NoteSummary:
    id: NoteId
    title: str


@dataclass(frozen=True)
class Note:
    id: NoteId
    title: str
    content: str
    hidden: bool = False  # soft-delete flag; hidden rows never leave the store
