"""Error taxonomy shared by the client, transforms and query executor."""

from typing import Any


class TableError(Exception):
    """Base class for every error raised while producing table rows."""


class TransientError(TableError):
    """Network or API failure while listing, getting or hydrating."""


class NotFoundError(TableError):
    """The requested resource does not exist."""


class FormatError(TableError, ValueError):
    """A derived value could not be computed from malformed input."""

    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.value = value


class QueryCancelled(TableError):
    """The query execution was cancelled before it completed."""
