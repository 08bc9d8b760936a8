"""Query execution: base rows from List or Get, then hydrate and transform per row."""

from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Deque, Dict, Iterator, List, Optional, Sequence

from ..errors import FormatError, NotFoundError, TransientError
from ..utils.logging import get_logger
from .context import QueryContext
from .hydrate import Hydrator, RowContext
from .schema import Column, TableDescriptor
from .transforms import TransformInput

logger = get_logger(__name__)

Row = Dict[str, Any]

ROW_ERRORS = (TransientError, NotFoundError, FormatError)
ON_ROW_ERROR_CHOICES = ("raise", "skip")


class QueryExecutor:
    """
    Produces rows for one table query.

    Rows are built concurrently on a worker pool and emitted in the order the
    lister (or getter) produced their records. Hydrators run on a separate
    pool so a row waiting on its hydrators never starves the row pool.
    """

    def __init__(self, client: Any, *, max_workers: int = 8, on_row_error: str = "raise"):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if on_row_error not in ON_ROW_ERROR_CHOICES:
            raise ValueError(f"on_row_error must be one of {ON_ROW_ERROR_CHOICES}, got {on_row_error!r}")
        self.client = client
        self.max_workers = max_workers
        self.on_row_error = on_row_error

    def execute(
        self,
        table: TableDescriptor,
        context: QueryContext,
        columns: Optional[Sequence[str]] = None,
        key: Optional[str] = None,
    ) -> Iterator[Row]:
        """
        Run a query and stream its rows.

        Args:
            table: Table to query
            context: Query context (scope and cancellation)
            columns: Requested column names; None requests every column
            key: Key column value; when given, Get is used instead of List

        Raises:
            NotFoundError: If key is given and no such resource exists
            TransientError: If listing fails, or a row fails with on_row_error="raise"
            FormatError: If a listed record fails to decode, or a row fails a
                transform with on_row_error="raise"
            QueryCancelled: If the context is cancelled
        """
        requested = table.resolve_columns(columns)
        hydrators = table.hydrators_for(requested)
        logger.debug(
            f"Query {table.name}: columns={[c.name for c in requested]} "
            f"hydrators={[h.name for h in hydrators]} key={key!r}"
        )
        items = self._iter_items(table, context, key)
        return self._stream(items, requested, hydrators, context)

    def _iter_items(self, table: TableDescriptor, context: QueryContext, key: Optional[str]) -> Iterator[Any]:
        if key is None:
            yield from table.list_config.fn(context, self.client)
            return
        if table.get_config is None:
            raise ValueError(f"Table {table.name} does not support lookup by key")
        yield table.get_config.fn(context, self.client, key)

    def _stream(
        self,
        items: Iterator[Any],
        requested: Sequence[Column],
        hydrators: List[Hydrator],
        context: QueryContext,
    ) -> Iterator[Row]:
        window = self.max_workers * 2
        row_pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="gcptables-row")
        hydrate_pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="gcptables-hydrate")
        pending: Deque[Future] = deque()
        listing_error: Optional[Exception] = None
        try:
            while True:
                try:
                    item = next(items)
                except StopIteration:
                    break
                except ROW_ERRORS as e:
                    # Rows from pages fetched before the failure are still valid.
                    listing_error = e
                    break
                context.raise_if_cancelled()
                pending.append(row_pool.submit(self._build_row, item, requested, hydrators, context, hydrate_pool))
                while len(pending) >= window:
                    row = self._collect(pending.popleft(), context)
                    if row is not None:
                        yield row

            while pending:
                row = self._collect(pending.popleft(), context)
                if row is not None:
                    yield row
            if listing_error is not None:
                raise listing_error
        except KeyboardInterrupt:
            # Abort in-flight rows before the pools are joined below.
            context.cancel()
            raise
        finally:
            for future in pending:
                future.cancel()
            row_pool.shutdown(wait=True, cancel_futures=True)
            hydrate_pool.shutdown(wait=True, cancel_futures=True)

    def _collect(self, future: Future, context: QueryContext) -> Optional[Row]:
        try:
            row = future.result()
        except ROW_ERRORS as e:
            if self.on_row_error == "skip":
                logger.warning(f"Skipping row: {e}")
                return None
            raise
        context.raise_if_cancelled()
        return row

    def _build_row(
        self,
        item: Any,
        requested: Sequence[Column],
        hydrators: List[Hydrator],
        context: QueryContext,
        hydrate_pool: ThreadPoolExecutor,
    ) -> Row:
        context.raise_if_cancelled()
        row_ctx = RowContext(item, context, self.client, hydrate_pool)
        try:
            for hydrator in hydrators:
                row_ctx.start(hydrator)
            row: Row = {}
            for column in requested:
                row[column.name] = self._resolve(column, row_ctx)
            return row
        except BaseException:
            row_ctx.cancel_pending()
            raise

    def _resolve(self, column: Column, row_ctx: RowContext) -> Any:
        hydrate_item = row_ctx.result(column.hydrate) if column.hydrate is not None else None
        value = column.transform(
            TransformInput(
                item=row_ctx.item,
                hydrate_item=hydrate_item,
                column=column.name,
                context=row_ctx.context,
            )
        )
        if value is None and column.default is not None:
            value = column.default
        return column.type.coerce(value)
