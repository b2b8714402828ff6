"""Tests for nesting_indexer.exceptions — error taxonomy."""

from __future__ import annotations

import pytest

from nesting_indexer.exceptions import (
    AdapterConfigurationError,
    CycleDetectionError,
    MissingParentIndexError,
    NestingIndexerError,
    NotFoundError,
    ReindexingError,
)


@pytest.mark.parametrize(
    "exc",
    [
        NotFoundError("A", "index"),
        MissingParentIndexError("B", "A"),
        CycleDetectionError("A"),
        ReindexingError("A", ValueError("boom")),
        AdapterConfigurationError(object(), ("find_children",)),
    ],
)
def test_common_base(exc: NestingIndexerError) -> None:
    assert isinstance(exc, NestingIndexerError)
    assert isinstance(exc, RuntimeError)


def test_cycle_message() -> None:
    exc = CycleDetectionError("pid-9")
    assert exc.id == "pid-9"
    assert str(exc) == "Possible graph cycle discovered related to id=pid-9."


def test_reindexing_error_keeps_original() -> None:
    original = CycleDetectionError("A")
    exc = ReindexingError("B", original)
    assert exc.id == "B"
    assert exc.original_exception is original
    assert str(exc) == f"Error id=B - {original}"


def test_not_found_is_lookup_error() -> None:
    with pytest.raises(LookupError):
        raise NotFoundError("A", "preservation")
