"""Errors raised by the task index."""

from __future__ import annotations


class TaskIndexError(Exception):
    """Base class for task index failures."""

    pass


class IndexUnavailableError(TaskIndexError):
    """The index has not been built and cannot be used yet."""

    def __init__(self, message: str = "task index unavailable") -> None:
        super().__init__(message)


class IndexClosedError(TaskIndexError):
    """The index service has been shut down."""

    def __init__(self, message: str = "task index service closed") -> None:
        super().__init__(message)


class CapacityExceededError(TaskIndexError):
    """Indexing would exceed the task or tracked-note ceiling.

    Attributes:
        kind: "tasks" or "notes".
        count: The size the index would have reached.
        limit: The configured ceiling.
    """

    def __init__(self, kind: str, count: int, limit: int) -> None:
        self.kind = kind
        self.count = count
        self.limit = limit
        if kind == "notes":
            message = f"task index tracked notes {count} exceeds maximum of {limit}"
        else:
            message = f"task index size {count} exceeds maximum of {limit}"
        super().__init__(message)
