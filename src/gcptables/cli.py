"""CLI entrypoint for gcptables."""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

from gcptables.config.loader import load_config, require_project, resolve_settings
from gcptables.errors import TableError
from gcptables.retrieval.client import CloudFunctionsClient
from gcptables.table import QueryContext, QueryExecutor
from gcptables.tables import get_table, list_tables
from gcptables.utils.logging import configure_logging, get_logger
from gcptables.utils.time import to_utc_z

logger = get_logger(__name__)

EXIT_INTERRUPTED = 130


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return to_utc_z(value)
    return str(value)


def _parse_columns(raw: Optional[str]) -> Optional[List[str]]:
    if not raw:
        return None
    return [name.strip() for name in raw.split(",") if name.strip()]


def cmd_tables(args: argparse.Namespace) -> int:
    """List registered tables."""
    for table in list_tables():
        print(f"{table.name:<40} {table.description}")
    return 0


def cmd_describe(args: argparse.Namespace) -> int:
    """Print the column contract of a table."""
    table = get_table(args.table)
    key_column = table.key_column
    print(f"{'Column':<32} {'Type':<10} {'Null':<6} Description")
    print("-" * 100)
    for column in table.describe():
        name = column["name"] + (" *" if column["name"] == key_column else "")
        nullable = "yes" if column["nullable"] else "no"
        print(f"{name:<32} {column['type']:<10} {nullable:<6} {column['description']}")
    if key_column:
        print("\n* key column")
    return 0


def cmd_query(args: argparse.Namespace) -> int:
    """Run a query against a table and print rows as JSON."""
    config = load_config(Path(args.config) if args.config else None)
    settings = resolve_settings(
        config,
        project=args.project,
        on_row_error=args.on_row_error,
        max_workers=args.max_workers,
        page_size=args.page_size,
    )
    configure_logging(args.log_level or settings.log_level)

    table = get_table(args.table)
    context = QueryContext(project=require_project(settings))
    client = CloudFunctionsClient(settings)
    executor = QueryExecutor(
        client,
        max_workers=settings.max_workers,
        on_row_error=settings.on_row_error,
    )

    rows = executor.execute(table, context, columns=_parse_columns(args.columns), key=args.key)
    count = 0
    try:
        if args.format == "json":
            collected = list(rows)
            count = len(collected)
            print(json.dumps(collected, indent=2, default=_json_default))
        else:
            for row in rows:
                count += 1
                print(json.dumps(row, default=_json_default), flush=True)
    except KeyboardInterrupt:
        context.cancel()
        rows.close()
        logger.warning(f"Query on {table.name} cancelled after {count} rows")
        return EXIT_INTERRUPTED
    except TableError as e:
        logger.error(f"Query on {table.name} failed after {count} rows: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.info(f"Query on {table.name} returned {count} rows")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Query Google Cloud resources as tables")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    tables_parser = subparsers.add_parser("tables", help="List available tables")
    tables_parser.set_defaults(func=cmd_tables)

    describe_parser = subparsers.add_parser("describe", help="Show the columns of a table")
    describe_parser.add_argument("table", help="Table name")
    describe_parser.set_defaults(func=cmd_describe)

    query_parser = subparsers.add_parser("query", help="Query rows from a table")
    query_parser.add_argument("table", help="Table name")
    query_parser.add_argument(
        "--columns",
        type=str,
        default=None,
        help="Comma-separated columns to return (default: all)",
    )
    query_parser.add_argument(
        "--key",
        type=str,
        default=None,
        help="Key column value; fetches a single resource instead of listing",
    )
    query_parser.add_argument("--project", type=str, default=None, help="Project to query")
    query_parser.add_argument("--config", type=str, default=None, help="Path to config YAML")
    query_parser.add_argument(
        "--on-row-error",
        type=str,
        choices=["raise", "skip"],
        default=None,
        help="Stop on the first failing row or skip it (default: from config, else raise)",
    )
    query_parser.add_argument("--max-workers", type=int, default=None, help="Concurrent row workers")
    query_parser.add_argument("--page-size", type=int, default=None, help="List page size")
    query_parser.add_argument(
        "--format",
        type=str,
        choices=["jsonl", "json"],
        default="jsonl",
        help="Output format: jsonl or json (default: jsonl)",
    )
    query_parser.add_argument("--log-level", type=str, default=None, help="Logging level")
    query_parser.set_defaults(func=cmd_query)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except (KeyError, ValueError, FileNotFoundError) as e:
        logger.error(f"Error running command '{args.command}': {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
