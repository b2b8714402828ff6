"""Cycle-bounded breadth-first reindexer.

A pass starts from one id and walks outward to every indexed descendant,
rebuilding each visited document from its preservation parents.  FIFO
order guarantees a parent is rewritten before its children are rebuilt.

There is no visited set: every work item carries a hop budget that
shrinks by one per generation, and an item dequeued with no hops left
aborts the pass with :class:`CycleDetectionError`.  A legitimately deep
graph beyond the ceiling is therefore rejected just like a cycle.
"""

from __future__ import annotations

import enum
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from nesting_indexer.adapters.base import INDEX_METHODS, PRESERVATION_METHODS, validate_adapter
from nesting_indexer.closure import build_index_document
from nesting_indexer.exceptions import (
    CycleDetectionError,
    NestingIndexerError,
    ReindexingError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from nesting_indexer.adapters.base import IndexPort, PreservationPort

logger = logging.getLogger(__name__)

# Assumes a rather deep graph.
DEFAULT_HOP_CEILING = 15


class ReindexMode(enum.Enum):
    """How the work queue is seeded."""

    FULL = "full"
    DESCENDANTS_ONLY = "descendants_only"


@dataclass(frozen=True)
class WorkItem:
    """A queued id with its remaining hop budget.

    ``trail`` is the chain of ids from the seed down to this item; only
    strict mode reads it.
    """

    id: str
    remaining_hops: int
    trail: tuple[str, ...] = ()


@dataclass
class ReindexResult:
    """Summary of a completed pass."""

    start_id: str
    mode: ReindexMode
    processed: list[str] = field(default_factory=list)

    @property
    def processed_count(self) -> int:
        return len(self.processed)

    def to_dict(self) -> dict[str, object]:
        return {
            "start_id": self.start_id,
            "mode": self.mode.value,
            "processed": list(self.processed),
        }


class Reindexer:
    """Runs reindexing passes against an injected pair of storage ports.

    Parameters
    ----------
    preservation:
        Read-only source of declared parents.
    index:
        Read/write store of derived index documents.
    hop_ceiling:
        Hop budget given to each seeded work item.  Must exceed the deepest
        legitimate nesting.
    strict:
        Also fail as soon as an id is rediscovered along its own trail,
        instead of waiting for the hop budget to run out.  Nodes reachable
        through several parents are not affected.
    """

    def __init__(
        self,
        preservation: PreservationPort,
        index: IndexPort,
        *,
        hop_ceiling: int = DEFAULT_HOP_CEILING,
        strict: bool = False,
    ) -> None:
        validate_adapter(preservation, PRESERVATION_METHODS)
        validate_adapter(index, INDEX_METHODS)
        self.preservation = preservation
        self.index = index
        self.hop_ceiling = hop_ceiling
        self.strict = strict

    def reindex(
        self,
        start_id: str,
        mode: ReindexMode | str = ReindexMode.FULL,
    ) -> ReindexResult:
        """Run one pass from *start_id*.

        ``FULL`` rebuilds *start_id* and then its descendants.
        ``DESCENDANTS_ONLY`` leaves *start_id* untouched and seeds the queue
        with its current children, each at the full hop ceiling.

        Any failure aborts the pass; documents written before it stay.
        """
        mode = ReindexMode(mode)
        result = ReindexResult(start_id=start_id, mode=mode)
        queue: deque[WorkItem] = deque()

        logger.info(
            "Reindex pass from %s (mode=%s, hop_ceiling=%d, strict=%s)",
            start_id,
            mode.value,
            self.hop_ceiling,
            self.strict,
        )

        try:
            if mode is ReindexMode.FULL:
                queue.append(WorkItem(start_id, self.hop_ceiling, (start_id,)))
            else:
                self._enqueue_children(
                    queue, start_id, self.hop_ceiling, (start_id,), start_id
                )

            while queue:
                item = queue.popleft()
                self._process(item, start_id)
                result.processed.append(item.id)
                self._enqueue_children(
                    queue, item.id, item.remaining_hops - 1, item.trail, start_id
                )
        except NestingIndexerError as exc:
            logger.warning(
                "Reindex pass from %s failed after %d document(s): %s",
                start_id,
                result.processed_count,
                exc,
            )
            raise

        logger.info(
            "Reindex pass from %s completed: %d document(s) written",
            start_id,
            result.processed_count,
        )
        return result

    def reindex_all(self, ids: Iterable[str]) -> list[str]:
        """Clear the index and rebuild a document for every id in *ids*.

        Each id's preservation parents are indexed first, depth-first, each
        step down spending one hop.  Every id is written once.  Failures are
        wrapped in :class:`ReindexingError` naming the top-level id.

        Returns the ids in the order they were written.
        """
        self.index.clear_all()
        processed: set[str] = set()
        order: list[str] = []

        def _visit(doc_id: str, hops: int) -> None:
            if doc_id in processed:
                return
            if hops <= 0:
                raise CycleDetectionError(doc_id)
            document = self.preservation.find_preservation_document(doc_id)
            for parent_id in sorted(document.parent_ids):
                _visit(parent_id, hops - 1)
            self.index.write_index_document(
                build_index_document(document, self.index.find_index_document)
            )
            processed.add(doc_id)
            order.append(doc_id)

        for doc_id in ids:
            try:
                _visit(doc_id, self.hop_ceiling)
            except NestingIndexerError as exc:
                logger.warning("Full rebuild failed at %s: %s", doc_id, exc)
                raise ReindexingError(doc_id, exc) from exc
            except RecursionError as exc:
                # Hop ceiling above the interpreter's recursion limit.
                cycle = CycleDetectionError(doc_id)
                logger.warning("Full rebuild failed at %s: %s", doc_id, cycle)
                raise ReindexingError(doc_id, cycle) from exc

        logger.info("Full rebuild completed: %d document(s) written", len(order))
        return order

    def _process(self, item: WorkItem, start_id: str) -> None:
        if item.remaining_hops <= 0:
            raise CycleDetectionError(start_id)
        preservation_document = self.preservation.find_preservation_document(item.id)
        document = build_index_document(preservation_document, self.index.find_index_document)
        self.index.write_index_document(document)
        logger.debug("Indexed %s (remaining_hops=%d)", item.id, item.remaining_hops)

    def _enqueue_children(
        self,
        queue: deque[WorkItem],
        parent_id: str,
        remaining_hops: int,
        trail: tuple[str, ...],
        start_id: str,
    ) -> None:
        # Children come from membership recorded in the index, not from preservation.
        for child in self.index.find_children(parent_id):
            if self.strict and child.id in trail:
                raise CycleDetectionError(start_id)
            queue.append(WorkItem(child.id, remaining_hops, (*trail, child.id)))


def reindex(
    start_id: str,
    *,
    preservation: PreservationPort,
    index: IndexPort,
    hop_ceiling: int = DEFAULT_HOP_CEILING,
    mode: ReindexMode | str = ReindexMode.FULL,
    strict: bool = False,
) -> ReindexResult:
    """Run a single pass; see :meth:`Reindexer.reindex`."""
    reindexer = Reindexer(preservation, index, hop_ceiling=hop_ceiling, strict=strict)
    return reindexer.reindex(start_id, mode)


def reindex_all(
    ids: Iterable[str],
    *,
    preservation: PreservationPort,
    index: IndexPort,
    hop_ceiling: int = DEFAULT_HOP_CEILING,
) -> list[str]:
    """Rebuild the whole index; see :meth:`Reindexer.reindex_all`."""
    reindexer = Reindexer(preservation, index, hop_ceiling=hop_ceiling)
    return reindexer.reindex_all(ids)
