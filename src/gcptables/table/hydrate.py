"""Hydrators and per-row hydrate memoization."""

import threading
from concurrent.futures import Executor, Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Callable, Dict

from .context import QueryContext

# How often a blocked column re-checks the cancellation signal, in seconds.
WAIT_POLL_SECONDS = 0.1

HydrateFn = Callable[[QueryContext, Any, Any], Any]


@dataclass(frozen=True)
class Hydrator:
    """
    Supplementary per-row fetch, run only when a requested column needs it.

    ``fn(context, client, item)`` receives the row's base record and returns
    the hydrated value.
    """

    name: str
    fn: HydrateFn

    def __call__(self, context: QueryContext, client: Any, item: Any) -> Any:
        context.raise_if_cancelled()
        return self.fn(context, client, item)


def hydrator(fn: HydrateFn) -> Hydrator:
    """Decorator turning a hydrate function into a named Hydrator."""
    return Hydrator(name=fn.__name__, fn=fn)


class RowContext:
    """
    Evaluation state for one row: its base record and hydrate results.

    Each hydrator runs at most once per row. Its Future (result or exception)
    is shared by every column bound to it.
    """

    def __init__(self, item: Any, context: QueryContext, client: Any, executor: Executor):
        self.item = item
        self.context = context
        self.client = client
        self._executor = executor
        self._futures: Dict[Hydrator, Future] = {}
        self._lock = threading.Lock()

    def start(self, hydrator: Hydrator) -> Future:
        with self._lock:
            future = self._futures.get(hydrator)
            if future is None:
                future = self._executor.submit(hydrator, self.context, self.client, self.item)
                self._futures[hydrator] = future
            return future

    def result(self, hydrator: Hydrator) -> Any:
        """Block until the hydrator finishes for this row, observing cancellation."""
        future = self.start(hydrator)
        while True:
            self.context.raise_if_cancelled()
            try:
                return future.result(timeout=WAIT_POLL_SECONDS)
            except FutureTimeoutError:
                if future.done():
                    raise

    def cancel_pending(self) -> None:
        with self._lock:
            for future in self._futures.values():
                future.cancel()
