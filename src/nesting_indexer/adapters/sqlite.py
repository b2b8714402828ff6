"""SQLite-backed index store."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from nesting_indexer.documents import IndexDocument
from nesting_indexer.exceptions import NotFoundError

if TYPE_CHECKING:
    import sqlite3
    from collections.abc import Iterable


class SqliteIndexStore:
    """Index port over the ``index_documents`` / ``index_parents`` tables.

    Every write commits, so it is visible to later reads in the same pass.
    The schema must already exist (see :func:`nesting_indexer.db.create_schema`).
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def find_index_document(self, id: str) -> IndexDocument:
        row = self._conn.execute(
            "SELECT id, pathnames, ancestors FROM index_documents WHERE id = ?",
            (id,),
        ).fetchone()
        if row is None:
            raise NotFoundError(id, "index")
        return self._row_to_document(row)

    def write_index_document(self, document: IndexDocument) -> None:
        data = document.to_dict()
        self._conn.execute(
            "INSERT INTO index_documents (id, pathnames, ancestors) VALUES (?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET "
            "pathnames = excluded.pathnames, ancestors = excluded.ancestors",
            (
                document.id,
                json.dumps(data["pathnames"], ensure_ascii=False),
                json.dumps(data["ancestors"], ensure_ascii=False),
            ),
        )
        self._conn.execute("DELETE FROM index_parents WHERE child_id = ?", (document.id,))
        self._conn.executemany(
            "INSERT INTO index_parents (child_id, parent_id) VALUES (?, ?)",
            [(document.id, parent_id) for parent_id in data["parent_ids"]],
        )
        self._conn.commit()

    def find_children(self, id: str) -> list[IndexDocument]:
        rows = self._conn.execute(
            "SELECT d.id, d.pathnames, d.ancestors FROM index_documents d "
            "JOIN index_parents p ON p.child_id = d.id "
            "WHERE p.parent_id = ? ORDER BY d.id",
            (id,),
        ).fetchall()
        # One query for every child's parent edges.
        parent_rows = self._conn.execute(
            "SELECT child_id, parent_id FROM index_parents WHERE child_id IN "
            "(SELECT child_id FROM index_parents WHERE parent_id = ?)",
            (id,),
        ).fetchall()
        parents: dict[str, set[str]] = {}
        for parent_row in parent_rows:
            parents.setdefault(parent_row["child_id"], set()).add(parent_row["parent_id"])
        return [self._row_to_document(row, parents.get(row["id"], ())) for row in rows]

    def clear_all(self) -> None:
        self._conn.execute("DELETE FROM index_parents")
        self._conn.execute("DELETE FROM index_documents")
        self._conn.commit()

    def count(self) -> int:
        """Return the number of indexed documents."""
        return int(self._conn.execute("SELECT count(*) FROM index_documents").fetchone()[0])

    def _parent_ids(self, id: str) -> list[str]:
        rows = self._conn.execute(
            "SELECT parent_id FROM index_parents WHERE child_id = ?",
            (id,),
        ).fetchall()
        return [row["parent_id"] for row in rows]

    def _row_to_document(
        self, row: sqlite3.Row, parent_ids: Iterable[str] | None = None
    ) -> IndexDocument:
        if parent_ids is None:
            parent_ids = self._parent_ids(row["id"])
        return IndexDocument.from_dict(
            {
                "id": row["id"],
                "parent_ids": parent_ids,
                "pathnames": json.loads(row["pathnames"]),
                "ancestors": json.loads(row["ancestors"]),
            }
        )
