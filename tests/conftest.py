"""Shared test fixtures for Nesting Indexer."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from nesting_indexer.adapters.memory import InMemoryIndexStore, InMemoryPreservationStore

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def preservation() -> InMemoryPreservationStore:
    return InMemoryPreservationStore()


@pytest.fixture()
def index() -> InMemoryIndexStore:
    return InMemoryIndexStore()


@pytest.fixture()
def tmp_project(tmp_path: Path) -> Path:
    """Create a minimal project structure for testing."""
    graph_dir = tmp_path / ".nesting_indexer" / "_graph"
    graph_dir.mkdir(parents=True)
    return tmp_path
