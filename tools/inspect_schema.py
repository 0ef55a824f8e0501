#!/usr/bin/env python3
# ============================================================================
# CLI SCHEMA INSPECTION TOOL
# ============================================================================
# STATUS: Tool - Build and print a schema graph
# PURPOSE: Inspect a database's table dependency order and entity counts
# CREATED: 19 OCT 2026
# ============================================================================
"""
Build a schema graph for a database and print it.

Usage:
    # Tables of "public" in dependency order, plus entity counts
    pgschema-inspect --schema public

    # Several schemas, JSON output
    pgschema-inspect --schema public --schema billing --json

    # Leave columns of some types out
    pgschema-inspect --denylist-type pg_ndistinct --denylist-type anyarray

Connection settings come from PGSCHEMA_DB_URL or the PGSCHEMA_DB_* variables
(see core.config.IntrospectionSettings).

Exit codes:
    0  success
    1  connection or catalog query failure
    2  configuration error
"""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

import psycopg

from __version__ import __version__
from core.config import CatalogCapabilities, IntrospectionSettings
from core.errors import BuildError, CatalogQueryError, MissingAttributeError
from core.logging import configure_logging, get_logger, ComponentType
from introspection import SchemaGraph, SchemaGraphBuilder
from repositories.database import connect

logger = get_logger("tools.inspect_schema", ComponentType.CLI)

EXIT_OK = 0
EXIT_QUERY_ERROR = 1
EXIT_CONFIG_ERROR = 2


# ============================================================================
# RENDERING
# ============================================================================

def render_json(graph: SchemaGraph) -> Dict[str, Any]:
    """JSON-serializable view of a graph."""
    tables = []
    for table in graph.tables():
        tables.append({
            "name": table.qualified_name,
            "type": table.table_type,
            "columns": [
                {
                    "name": column.column_name,
                    "type": column.data_type,
                    "nullable": column.is_nullable,
                }
                for column in graph.columns(table)
            ],
            "foreign_keys": [
                {
                    "name": fk.constraint_name,
                    "columns": [c.column_name for c in fk.host_columns],
                    "references": fk.referenced_table.qualified_name,
                    "referenced_columns": [c.column_name for c in fk.referenced_columns],
                    "on_delete_cascade": fk.on_delete_cascade,
                }
                for fk in graph.foreign_keys(table)
            ],
            "check_constraints": [c.constraint_name for c in graph.check_constraints(table)],
            "unique_indexes": [i.name for i in graph.unique_indexes(table)],
            "triggers": [t.name for t in graph.triggers(table)],
            "policies": [p.name for p in graph.policies(table)],
        })

    return {
        "catalog": graph.catalog,
        "summary": graph.summary(),
        "table_dag": [table.qualified_name for table in graph.table_dag()],
        "tables": tables,
    }


def render_text(graph: SchemaGraph) -> str:
    """Human-readable view of a graph."""
    lines: List[str] = [f"Catalog: {graph.catalog}", ""]

    lines.append("Table dependency order:")
    for position, table in enumerate(graph.table_dag(), start=1):
        lines.append(f"  {position:3d}. {table.qualified_name}")
        for fk in graph.foreign_keys(table):
            host = ", ".join(c.column_name for c in fk.host_columns)
            referenced = ", ".join(c.column_name for c in fk.referenced_columns)
            lines.append(
                f"         ({host}) -> {fk.referenced_table.qualified_name}({referenced})"
            )

    lines.append("")
    lines.append("Entities:")
    for kind, count in graph.summary().items():
        lines.append(f"  {kind:<18} {count}")
    return "\n".join(lines)


# ============================================================================
# ENTRY POINT
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pgschema-inspect",
        description="Build a schema graph of a PostgreSQL database and print it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --schema public
  %(prog)s --schema public --schema billing --json
  %(prog)s --catalog shop --denylist-type pg_ndistinct
        """,
    )
    parser.add_argument(
        "--catalog", "-c",
        help="Catalog (database) name (default: PGSCHEMA_CATALOG or the database name)",
    )
    parser.add_argument(
        "--schema", "-s",
        action="append",
        dest="schemas",
        help="Schema to include; repeatable (default: PGSCHEMA_SCHEMAS or public)",
    )
    parser.add_argument(
        "--denylist-type", "-d",
        action="append",
        dest="denylist_types",
        default=[],
        help="Column type to leave out; repeatable",
    )
    parser.add_argument(
        "--server-version",
        help="Assume this server version instead of detecting it, e.g. 15.4",
    )
    parser.add_argument(
        "--json", "-j",
        action="store_true",
        help="Print JSON instead of text",
    )
    parser.add_argument(
        "--log-level",
        help="Log level (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def configure_builder(
    args: argparse.Namespace,
    settings: IntrospectionSettings,
) -> SchemaGraphBuilder:
    """
    Apply settings and arguments to a new builder.

    Raises:
        DuplicateDenylistedTypeError: If a type is denylisted twice
        ValueError: If the server version does not parse
    """
    builder = SchemaGraphBuilder()
    builder.with_catalog(args.catalog or settings.effective_catalog)
    builder.add_schemas(args.schemas or settings.schemas)
    builder.add_denylisted_types(list(settings.denylist_types) + list(args.denylist_types))

    version = args.server_version or settings.server_version
    if version:
        builder.with_capabilities(CatalogCapabilities.from_version_string(version))
    return builder


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = IntrospectionSettings.from_env()
    configure_logging(args.log_level or settings.log_level, json_output=settings.log_json)

    try:
        builder = configure_builder(args, settings)
    except (BuildError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    try:
        with connect(settings.get_connection_string()) as conn:
            graph = builder.with_connection(conn).build()
    except MissingAttributeError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except (CatalogQueryError, psycopg.Error) as e:
        logger.error(f"Build failed: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_QUERY_ERROR

    if args.json:
        print(json.dumps(render_json(graph), indent=2, default=str))
    else:
        print(render_text(graph))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
