"""Capability interfaces the reindexer depends on."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from nesting_indexer.exceptions import AdapterConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from nesting_indexer.documents import IndexDocument, PreservationDocument

PRESERVATION_METHODS: tuple[str, ...] = ("find_preservation_document",)
INDEX_METHODS: tuple[str, ...] = (
    "find_index_document",
    "write_index_document",
    "find_children",
    "clear_all",
)


class PreservationPort(Protocol):
    """Read-only access to declared parent relationships."""

    def find_preservation_document(self, id: str) -> PreservationDocument:
        """Return the document for *id*; raise ``NotFoundError`` if unknown."""
        ...


class IndexPort(Protocol):
    """Read/write access to derived index documents."""

    def find_index_document(self, id: str) -> IndexDocument:
        """Return the document for *id*; raise ``NotFoundError`` if absent."""
        ...

    def write_index_document(self, document: IndexDocument) -> None:
        """Upsert *document*, keyed by its id."""
        ...

    def find_children(self, id: str) -> Sequence[IndexDocument]:
        """Return every indexed document whose ``parent_ids`` contains *id*."""
        ...

    def clear_all(self) -> None:
        """Drop all index state."""
        ...


def validate_adapter(adapter: Any, methods: tuple[str, ...]) -> None:
    """Raise :class:`AdapterConfigurationError` if *adapter* lacks any of *methods*."""
    missing = [name for name in methods if not callable(getattr(adapter, name, None))]
    if missing:
        raise AdapterConfigurationError(adapter, methods)
