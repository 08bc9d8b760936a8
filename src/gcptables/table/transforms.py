"""
Pure column transforms.

A Transform is an ordered chain of steps. Each step receives a TransformInput
whose ``value`` is the previous step's output (None for the first step) and
returns the next value. Steps hold no state between rows or columns.

Examples:
    >>> location = from_field(lambda f: f.name).then(split_segment("/", 6, 3))
    >>> akas = from_field(lambda f: f.name).then(with_prefix("gcp://x/")).then(as_list())
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, Tuple

from ..errors import FormatError
from .context import QueryContext


@dataclass(frozen=True)
class TransformInput:
    """
    Per-column, per-row view presented to a transform step.

    Attributes:
        item: The row's base resource record.
        hydrate_item: Result of the column's hydrator, if it has one.
        value: Output of the previous step in the chain.
        column: Name of the column being resolved.
        context: The query context.
    """

    item: Any
    hydrate_item: Any = None
    value: Any = None
    column: str = ""
    context: Optional[QueryContext] = None


TransformStep = Callable[[TransformInput], Any]


class Transform:
    """Immutable chain of transform steps."""

    def __init__(self, *steps: TransformStep):
        if not steps:
            raise ValueError("Transform needs at least one step")
        self.steps: Tuple[TransformStep, ...] = steps

    def then(self, step: TransformStep) -> "Transform":
        return Transform(*self.steps, step)

    def __call__(self, data: TransformInput) -> Any:
        value = data.value
        for step in self.steps:
            value = step(replace(data, value=value))
        return value

    def __repr__(self) -> str:
        names = ", ".join(getattr(step, "__name__", repr(step)) for step in self.steps)
        return f"Transform({names})"


# Sources


def from_field(accessor: Callable[[Any], Any]) -> Transform:
    """Project a value out of the base resource record."""

    def _from_field(data: TransformInput) -> Any:
        return accessor(data.item)

    return Transform(_from_field)


def from_value() -> Transform:
    """Return the column's hydrate result verbatim."""

    def _from_value(data: TransformInput) -> Any:
        return data.hydrate_item

    return Transform(_from_value)


def from_hydrate(accessor: Callable[[Any], Any]) -> Transform:
    """Project a value out of the column's hydrate result."""

    def _from_hydrate(data: TransformInput) -> Any:
        return accessor(data.hydrate_item)

    return Transform(_from_hydrate)


def from_constant(value: Any) -> Transform:
    def _from_constant(_data: TransformInput) -> Any:
        return value

    return Transform(_from_constant)


def from_context(accessor: Callable[[QueryContext], Any]) -> Transform:
    """Inject a value fixed for the whole query, e.g. the active project."""

    def _from_context(data: TransformInput) -> Any:
        if data.context is None:
            raise ValueError(f"Column {data.column!r} needs a query context")
        return accessor(data.context)

    return Transform(_from_context)


# Steps


def with_prefix(prefix: str) -> TransformStep:
    """Prepend a fixed prefix; a missing value counts as an empty string."""

    def _with_prefix(data: TransformInput) -> str:
        value = data.value
        return prefix + ("" if value is None else str(value))

    return _with_prefix


def split_segment(separator: str, expected_parts: int, index: int) -> TransformStep:
    """
    Split the value on separator and return one positional segment.

    Raises:
        FormatError: If the split does not yield exactly expected_parts segments.
    """
    if not 0 <= index < expected_parts:
        raise ValueError(f"Segment index {index} out of range for {expected_parts} parts")

    def _split_segment(data: TransformInput) -> str:
        raw = "" if data.value is None else str(data.value)
        parts = raw.split(separator)
        if len(parts) != expected_parts:
            raise FormatError(
                f"Column {data.column or '?'}: expected {expected_parts} '{separator}'-separated "
                f"segments, got {len(parts)} - unexpected name format: {raw}",
                value=raw,
            )
        return parts[index]

    return _split_segment


def as_list() -> TransformStep:
    def _as_list(data: TransformInput) -> list:
        return [data.value]

    return _as_list
