"""Undo history built on deep clones and in-place state restore.

Snapshots are deep field-based clones. Undo copies a snapshot's state back into
the live object, so references other code holds to the live document stay valid.
"""

from __future__ import annotations

from graphclone import CompiledCloner


class Document:
    def __init__(self, title: str = "") -> None:
        self.title = title
        self.paragraphs: list[str] = []
        self.links: dict[str, Document] = {}


class History:
    def __init__(self, document: Document) -> None:
        self._document = document
        self._cloner = CompiledCloner()
        self._snapshots: list[Document] = []

    def checkpoint(self) -> None:
        self._snapshots.append(self._cloner.deep_field_clone(self._document))

    def undo(self) -> None:
        snapshot = self._snapshots.pop()
        self._cloner.deep_copy_state(snapshot, self._document)


def main() -> None:
    document = Document("Notes")
    document.links["self"] = document
    history = History(document)

    history.checkpoint()
    document.paragraphs.append("First draft")
    history.checkpoint()
    document.paragraphs.append("Second draft")
    print(f"Before undo: {document.paragraphs}")

    history.undo()
    print(f"After one undo: {document.paragraphs}")
    history.undo()
    print(f"After two undos: {document.paragraphs}")
    assert document.links["self"] is document


if __name__ == "__main__":
    main()
