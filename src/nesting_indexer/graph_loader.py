"""YAML preservation graph parser.

Reads ``.nesting_indexer/_graph/*.yml`` files and builds an in-memory
preservation store.  Each file lists objects and the ids they are a
member of::

    objects:
      - id: collection-1
      - id: work-7
        member_of: [collection-1]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

from nesting_indexer.adapters.memory import InMemoryPreservationStore
from nesting_indexer.documents import PreservationDocument

if TYPE_CHECKING:
    from pathlib import Path


@dataclass
class GraphLoadResult:
    """Parsed preservation documents plus diagnostics."""

    documents: list[PreservationDocument] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_store(self) -> InMemoryPreservationStore:
        return InMemoryPreservationStore(self.documents)


def parse_graph_file(path: Path) -> list[dict[str, Any]]:
    """Parse a single YAML graph file into raw object entries."""
    text = path.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    if data is None:
        return []
    if not isinstance(data, dict):
        msg = f"{path.name}: expected a mapping with an 'objects' list"
        raise ValueError(msg)
    objects: list[dict[str, Any]] = data.get("objects") or []
    return objects


def load_graph(graph_dir: Path) -> GraphLoadResult:
    """Load all ``*.yml`` files from *graph_dir*.

    Two-pass approach:
    1. Parse all files and collect documents (duplicates and entries
       without an id are skipped with an error).
    2. Warn about ``member_of`` references to ids no file declares.  They
       are kept so a reindex reports them instead of hiding them.
    """
    result = GraphLoadResult()
    if not graph_dir.is_dir():
        result.errors.append(f"Graph directory not found: {graph_dir}")
        return result

    # --- Pass 1: collect documents ---
    seen_ids: set[str] = set()
    for yml_path in sorted(graph_dir.glob("*.yml")):
        try:
            entries = parse_graph_file(yml_path)
        except (yaml.YAMLError, ValueError) as exc:
            result.errors.append(f"Failed to parse {yml_path.name}: {exc}")
            continue

        for entry in entries:
            raw_id = entry.get("id") if isinstance(entry, dict) else None
            if raw_id is None or raw_id == "":
                result.errors.append(f"{yml_path.name}: object missing id, skipped")
                continue
            doc_id = str(raw_id)
            if doc_id in seen_ids:
                result.errors.append(f"Duplicate id '{doc_id}', skipped")
                continue

            member_of = entry.get("member_of") or []
            if isinstance(member_of, str):
                member_of = [member_of]
            elif not isinstance(member_of, list):
                result.errors.append(
                    f"{yml_path.name}: '{doc_id}' member_of must be a list, skipped"
                )
                continue
            seen_ids.add(doc_id)
            result.documents.append(
                PreservationDocument(
                    id=doc_id,
                    parent_ids=frozenset(str(parent) for parent in member_of),
                )
            )

    # --- Pass 2: dangling references ---
    for document in result.documents:
        for parent_id in sorted(document.parent_ids):
            if parent_id not in seen_ids:
                result.warnings.append(
                    f"'{document.id}' is member of unknown id '{parent_id}'"
                )

    return result
