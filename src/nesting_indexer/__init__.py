"""Nesting Indexer: derived index of parent/child membership with materialized paths."""

__version__ = "0.4.0"
