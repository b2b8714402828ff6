"""Preservation and index documents exchanged with the storage ports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rich.console import Console


@dataclass(frozen=True)
class PreservationDocument:
    """Source-of-truth record: an object and its declared parents."""

    id: str
    parent_ids: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class IndexDocument:
    """Derived record written by a reindexing pass.

    ``pathnames`` holds one slash-delimited path per distinct chain from a
    root down to ``id``; ``ancestors`` holds every strict prefix of those
    paths, flattened.
    """

    id: str
    parent_ids: frozenset[str] = field(default_factory=frozenset)
    pathnames: frozenset[str] = field(default_factory=frozenset)
    ancestors: frozenset[str] = field(default_factory=frozenset)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with sorted lists."""
        return {
            "id": self.id,
            "parent_ids": sorted(self.parent_ids),
            "pathnames": sorted(self.pathnames),
            "ancestors": sorted(self.ancestors),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IndexDocument:
        return cls(
            id=str(data["id"]),
            parent_ids=frozenset(data.get("parent_ids") or ()),
            pathnames=frozenset(data.get("pathnames") or ()),
            ancestors=frozenset(data.get("ancestors") or ()),
        )


def render_index_document(document: IndexDocument, console: Console) -> None:
    """Render an index document using Rich panels and trees.

    Parameters
    ----------
    document:
        The document to display.
    console:
        Rich Console instance for output.
    """
    from rich.panel import Panel
    from rich.tree import Tree

    parents = ", ".join(sorted(document.parent_ids)) or "[dim](orphan)[/]"
    console.print(
        Panel(
            f"[bold]{document.id}[/]\nParents: {parents}",
            title="Index Document",
            border_style="blue",
        )
    )

    path_tree = Tree("[bold cyan]Pathnames[/]")
    for pathname in sorted(document.pathnames):
        path_tree.add(pathname)
    console.print(path_tree)

    console.print()

    if document.ancestors:
        ancestor_tree = Tree("[bold green]Ancestors[/]")
        for ancestor in sorted(document.ancestors):
            ancestor_tree.add(ancestor)
        console.print(ancestor_tree)
    else:
        console.print("[dim]No ancestors.[/]")
