"""Generic table machinery: schema descriptors, hydrators, transforms, query execution."""

from .context import ALL_LOCATIONS, QueryContext
from .hydrate import Hydrator, RowContext, hydrator
from .query import QueryExecutor
from .schema import Column, ColumnType, GetConfig, ListConfig, TableDescriptor
from .transforms import (
    Transform,
    TransformInput,
    as_list,
    from_constant,
    from_context,
    from_field,
    from_hydrate,
    from_value,
    split_segment,
    with_prefix,
)

__all__ = [
    "ALL_LOCATIONS",
    "QueryContext",
    "Hydrator",
    "RowContext",
    "hydrator",
    "QueryExecutor",
    "Column",
    "ColumnType",
    "GetConfig",
    "ListConfig",
    "TableDescriptor",
    "Transform",
    "TransformInput",
    "as_list",
    "from_constant",
    "from_context",
    "from_field",
    "from_hydrate",
    "from_value",
    "split_segment",
    "with_prefix",
]
