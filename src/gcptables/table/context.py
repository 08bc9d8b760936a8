"""Query-scoped context handed to listers, getters and hydrators."""

import threading
from dataclasses import dataclass, field

from ..errors import QueryCancelled

ALL_LOCATIONS = "-"


@dataclass(frozen=True)
class QueryContext:
    """
    Scope and cancellation signal for one query execution.

    Built once before the query starts and never mutated afterwards; only the
    cancellation event changes state.

    Attributes:
        project: Project whose resources are visible to the query.
        location: Location filter; "-" requests all locations.
        cancel_event: Set when the query is cancelled.
    """

    project: str
    location: str = ALL_LOCATIONS
    cancel_event: threading.Event = field(default_factory=threading.Event, compare=False, repr=False)

    @property
    def parent(self) -> str:
        return f"projects/{self.project}/locations/{self.location}"

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancel_event.is_set():
            raise QueryCancelled(f"Query for project {self.project} was cancelled")
