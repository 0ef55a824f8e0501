# ============================================================================
# INTROSPECTION MODULE
# ============================================================================
# STATUS: Core - Schema graph build pipeline
# PURPOSE: Load, resolve and order catalog entities into a SchemaGraph
# CREATED: 19 OCT 2026
# ============================================================================
"""
Introspection Module

Usage:
    from introspection import SchemaGraphBuilder

    graph = (
        SchemaGraphBuilder()
        .with_connection(conn)
        .with_catalog("shop")
        .add_schema("public")
        .build()
    )
    for table in graph.table_dag():
        print(table.qualified_name)
"""

from .builder import SchemaGraphBuilder
from .expressions import ExpressionParser, column_identifiers, function_names
from .functions import FunctionLoader, TypeCache
from .graph import SchemaGraph
from .loader import EntityLoader
from .ordering import DependencyGraph, TopologicalSorter
from .resolver import ReferenceResolver, resolve_roles

__all__ = [
    "SchemaGraphBuilder",
    "SchemaGraph",
    "EntityLoader",
    "ReferenceResolver",
    "resolve_roles",
    "FunctionLoader",
    "TypeCache",
    "ExpressionParser",
    "column_identifiers",
    "function_names",
    "DependencyGraph",
    "TopologicalSorter",
]
