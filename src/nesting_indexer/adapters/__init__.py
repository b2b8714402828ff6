"""Storage ports — preservation (read-only) and index (read/write) adapters."""

from nesting_indexer.adapters.base import (
    INDEX_METHODS,
    PRESERVATION_METHODS,
    IndexPort,
    PreservationPort,
    validate_adapter,
)
from nesting_indexer.adapters.memory import InMemoryIndexStore, InMemoryPreservationStore
from nesting_indexer.adapters.sqlite import SqliteIndexStore

__all__ = [
    "INDEX_METHODS",
    "PRESERVATION_METHODS",
    "InMemoryIndexStore",
    "InMemoryPreservationStore",
    "IndexPort",
    "PreservationPort",
    "SqliteIndexStore",
    "validate_adapter",
]
