"""Closure builder: parent ids, pathnames and ancestors for one document."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from nesting_indexer.documents import IndexDocument
from nesting_indexer.exceptions import MissingParentIndexError, NotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable

    from nesting_indexer.documents import PreservationDocument

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"


def ancestor_prefixes(pathname: str) -> list[str]:
    """Return the cumulative ``/`` prefixes of *pathname*, itself included.

    ``"A/B/C"`` yields ``["A", "A/B", "A/B/C"]``.
    """
    slugs = pathname.split(PATH_SEPARATOR)
    prefixes = [PATH_SEPARATOR.join(slugs[: i + 1]) for i in range(len(slugs))]
    return [prefix for prefix in prefixes if prefix]


def build_index_document(
    preservation_document: PreservationDocument,
    find_parent: Callable[[str], IndexDocument],
) -> IndexDocument:
    """Compute the index document for *preservation_document*.

    Parameters
    ----------
    preservation_document:
        The object being indexed and its declared parents.
    find_parent:
        Resolves a parent id to that parent's current index document.  It
        must already reflect the running pass and raise
        :class:`NotFoundError` when the parent is not indexed.

    Raises
    ------
    MissingParentIndexError
        If a declared parent has no index document.
    """
    doc_id = preservation_document.id
    parent_ids: set[str] = set()
    pathnames: set[str] = set()
    ancestors: set[str] = set()

    for parent_id in sorted(preservation_document.parent_ids):
        try:
            parent = find_parent(parent_id)
        except NotFoundError as exc:
            raise MissingParentIndexError(doc_id, parent_id) from exc

        parent_ids.add(parent_id)
        for pathname in parent.pathnames:
            pathnames.add(f"{pathname}{PATH_SEPARATOR}{doc_id}")
            ancestors.update(ancestor_prefixes(pathname))
        ancestors.update(parent.ancestors)

    # An orphan still gets a path to itself.
    if not parent_ids:
        pathnames.add(doc_id)

    logger.debug(
        "Built %s: %d parent(s), %d pathname(s), %d ancestor(s)",
        doc_id,
        len(parent_ids),
        len(pathnames),
        len(ancestors),
    )
    return IndexDocument(
        id=doc_id,
        parent_ids=frozenset(parent_ids),
        pathnames=frozenset(pathnames),
        ancestors=frozenset(ancestors),
    )
