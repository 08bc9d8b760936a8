"""
Registry of the tables this package serves.

Notes:
    - Table names are lower_snake and prefixed with the provider ("gcp_").
    - Descriptors are frozen; see gcptables.table.schema.
"""

from typing import Dict, List

from ..table import TableDescriptor
from .cloudfunctions_function import CLOUDFUNCTIONS_FUNCTION_DESC

__all__ = [
    "CLOUDFUNCTIONS_FUNCTION_DESC",
    "get_table",
    "list_tables",
]


_TABLES: Dict[str, TableDescriptor] = {
    CLOUDFUNCTIONS_FUNCTION_DESC.name: CLOUDFUNCTIONS_FUNCTION_DESC,
}


def get_table(name: str) -> TableDescriptor:
    """
    Look up a table descriptor by name.

    Raises:
        KeyError: If no table is registered under that name
    """
    try:
        return _TABLES[name]
    except KeyError:
        raise KeyError(f"Unknown table: {name}. Known tables: {', '.join(sorted(_TABLES))}") from None


def list_tables() -> List[TableDescriptor]:
    return list(_TABLES.values())
