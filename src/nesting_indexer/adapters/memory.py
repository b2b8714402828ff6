"""In-memory storage ports, owned by whoever constructs them."""

from __future__ import annotations

from typing import TYPE_CHECKING

from nesting_indexer.documents import PreservationDocument
from nesting_indexer.exceptions import NotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from nesting_indexer.documents import IndexDocument


class InMemoryPreservationStore:
    """Dict-backed preservation store."""

    def __init__(self, documents: Iterable[PreservationDocument] = ()) -> None:
        self._store: dict[str, PreservationDocument] = {}
        for document in documents:
            self._store[document.id] = document

    def add(self, id: str, parent_ids: Iterable[str] = ()) -> PreservationDocument:
        """Record *id* with the given declared parents, replacing any prior entry."""
        document = PreservationDocument(id=id, parent_ids=frozenset(parent_ids))
        self._store[id] = document
        return document

    def find_preservation_document(self, id: str) -> PreservationDocument:
        try:
            return self._store[id]
        except KeyError:
            raise NotFoundError(id, "preservation") from None

    def ids(self) -> list[str]:
        """Return all known ids in insertion order."""
        return list(self._store)

    def __len__(self) -> int:
        return len(self._store)


class InMemoryIndexStore:
    """Dict-backed index store.

    Child lookup scans every document; fine for tests and small graphs.
    """

    def __init__(self) -> None:
        self._store: dict[str, IndexDocument] = {}

    def find_index_document(self, id: str) -> IndexDocument:
        try:
            return self._store[id]
        except KeyError:
            raise NotFoundError(id, "index") from None

    def write_index_document(self, document: IndexDocument) -> None:
        self._store[document.id] = document

    def find_children(self, id: str) -> list[IndexDocument]:
        return [doc for doc in self._store.values() if id in doc.parent_ids]

    def clear_all(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
