"""Error taxonomy for reindexing passes."""

from __future__ import annotations

from typing import Any


class NestingIndexerError(RuntimeError):
    """Base class for every error raised by the indexer."""


class NotFoundError(NestingIndexerError, LookupError):
    """A referenced id has no record in the queried store."""

    def __init__(self, id: str, store: str) -> None:
        self.id = id
        self.store = store
        super().__init__(f'"{id}" not found in {store} store.')


class MissingParentIndexError(NestingIndexerError):
    """A parent's index document was needed before it was written."""

    def __init__(self, id: str, parent_id: str) -> None:
        self.id = id
        self.parent_id = parent_id
        super().__init__(
            f'Cannot index "{id}": parent "{parent_id}" has no index document.'
        )


class CycleDetectionError(NestingIndexerError):
    """A work item exhausted its hop budget (cyclic or too-deep graph)."""

    def __init__(self, id: str) -> None:
        self.id = id
        super().__init__(f"Possible graph cycle discovered related to id={id}.")


class ReindexingError(NestingIndexerError):
    """Wraps any failure with the id that was being processed."""

    def __init__(self, id: str, original_exception: BaseException) -> None:
        self.id = id
        self.original_exception = original_exception
        super().__init__(f"Error id={id} - {original_exception}")


class AdapterConfigurationError(NestingIndexerError):
    """An injected storage port does not implement the expected methods."""

    def __init__(self, adapter: Any, expected_methods: tuple[str, ...]) -> None:
        self.adapter = adapter
        self.expected_methods = expected_methods
        super().__init__(
            f"Expected {adapter!r} to implement {list(expected_methods)!r} methods"
        )
