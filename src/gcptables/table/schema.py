"""
Frozen table descriptors: columns, key column, and List/Get entry points.

Notes:
    - Column names are lower_snake and unique within a table.
    - Every column binds a Transform, a Hydrator, a static default, or a
      combination. A hydrated column without a transform returns the hydrate
      result verbatim.
    - Descriptors are built once at import time and are read-only afterwards.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from ..errors import FormatError
from ..utils.time import parse_rfc3339
from .context import QueryContext
from .hydrate import Hydrator
from .transforms import Transform, from_constant, from_value

ListFn = Callable[[QueryContext, Any], Iterable[Any]]
GetFn = Callable[[QueryContext, Any, str], Any]


def _to_json(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, dict):
        return {key: _to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(item) for item in value]
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class ColumnType(str, Enum):
    STRING = "string"
    INT = "int"
    DOUBLE = "double"
    BOOL = "bool"
    JSON = "json"
    TIMESTAMP = "timestamp"

    def coerce(self, value: Any) -> Any:
        """
        Convert a resolved value to this column type. None passes through.

        Raises:
            FormatError: If the value cannot be represented as this type.
        """
        if value is None:
            return None
        try:
            if self is ColumnType.STRING:
                return value if isinstance(value, str) else str(value)
            if self is ColumnType.INT:
                if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
                    raise ValueError("not an integer")
                return int(value)
            if self is ColumnType.DOUBLE:
                if isinstance(value, bool):
                    raise ValueError("not a number")
                return float(value)
            if self is ColumnType.BOOL:
                if isinstance(value, bool):
                    return value
                if isinstance(value, str) and value.lower() in ("true", "false"):
                    return value.lower() == "true"
                raise ValueError("not a boolean")
            if self is ColumnType.TIMESTAMP:
                if isinstance(value, datetime):
                    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
                return parse_rfc3339(str(value))
            return _to_json(value)
        except (TypeError, ValueError) as e:
            raise FormatError(f"Cannot convert {value!r} to {self.value}: {e}", value=value) from e


@dataclass(frozen=True)
class Column:
    name: str
    type: ColumnType
    description: str = ""
    hydrate: Optional[Hydrator] = None
    transform: Optional[Transform] = None
    default: Any = None
    nullable: bool = True

    def __post_init__(self):
        if self.transform is None:
            if self.hydrate is not None:
                object.__setattr__(self, "transform", from_value())
            elif self.default is not None:
                object.__setattr__(self, "transform", from_constant(self.default))
            else:
                raise ValueError(f"Column {self.name!r} needs a transform, a hydrate or a default")


@dataclass(frozen=True)
class ListConfig:
    """Entry point streaming every resource in scope: ``fn(context, client)``."""

    fn: ListFn


@dataclass(frozen=True)
class GetConfig:
    """Entry point fetching one resource by key: ``fn(context, client, key)``."""

    key_column: str
    fn: GetFn


@dataclass(frozen=True)
class TableDescriptor:
    name: str
    description: str
    columns: Tuple[Column, ...]
    list_config: ListConfig
    get_config: Optional[GetConfig] = None
    _by_name: Dict[str, Column] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        by_name: Dict[str, Column] = {}
        for column in self.columns:
            if column.name in by_name:
                raise ValueError(f"Duplicate column {column.name!r} in table {self.name}")
            by_name[column.name] = column
        if self.get_config is not None and self.get_config.key_column not in by_name:
            raise ValueError(f"Key column {self.get_config.key_column!r} is not a column of {self.name}")
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "_by_name", by_name)

    @property
    def key_column(self) -> Optional[str]:
        return self.get_config.key_column if self.get_config else None

    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def column(self, name: str) -> Column:
        try:
            return self._by_name[name]
        except KeyError:
            raise ValueError(f"Unknown column {name!r} for table {self.name}") from None

    def resolve_columns(self, names: Optional[Sequence[str]] = None) -> Tuple[Column, ...]:
        """Requested columns in request order (all columns when names is None)."""
        if names is None:
            return self.columns
        seen = set()
        resolved = []
        for name in names:
            if name in seen:
                continue
            seen.add(name)
            resolved.append(self.column(name))
        return tuple(resolved)

    def hydrators_for(self, columns: Iterable[Column]) -> List[Hydrator]:
        """Minimal set of hydrators needed to resolve the given columns."""
        hydrators: Dict[Hydrator, None] = {}
        for column in columns:
            if column.hydrate is not None:
                hydrators.setdefault(column.hydrate, None)
        return list(hydrators)

    def describe(self) -> List[Dict[str, Any]]:
        """Table contract handed to the query engine."""
        return [
            {
                "name": column.name,
                "type": column.type.value,
                "nullable": column.nullable,
                "description": column.description,
            }
            for column in self.columns
        ]
