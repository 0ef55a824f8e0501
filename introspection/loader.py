# ============================================================================
# ENTITY LOADER
# ============================================================================
# STATUS: Core - Ordered build pipeline
# PURPOSE: Run the catalog loads in dependency order and assemble the graph
# CREATED: 19 OCT 2026
# ============================================================================
"""
Entity Loader

Runs one build. The order is fixed because later steps use earlier
results:

1. functions (filtered, typed)
2. roles (raw rows, membership unresolved)
3. schemas, then tables of every schema, sorted by (schema, name)
4. per table: columns, check constraints, foreign keys, unique indexes,
   triggers, policies
5. table and column grants
6. role membership
7. table dependency order

Single-threaded and synchronous. Any CatalogQueryError aborts the build;
nothing built so far escapes.
"""

from typing import List, Optional, Sequence

from core.config import CatalogCapabilities
from core.logging import get_logger, log_checkpoint, log_context, ComponentType
from core.models import (
    CheckConstraint,
    Column,
    ForeignKey,
    Policy,
    Table,
    Trigger,
    UniqueIndex,
)
from introspection.expressions import ExpressionParser
from introspection.functions import FunctionLoader
from introspection.graph import SchemaGraph
from introspection.ordering import DependencyGraph, TopologicalSorter
from introspection.resolver import (
    ReferenceResolver,
    resolve_column_grants,
    resolve_roles,
    resolve_table_grants,
)
from repositories.base import CatalogSource, distinct

logger = get_logger(__name__, ComponentType.LOADER)


class EntityLoader:
    """Loads every entity of one catalog into a SchemaGraph."""

    def __init__(
        self,
        source: CatalogSource,
        catalog: str,
        schemas: Sequence[str],
        denylisted_types: Sequence[str] = (),
        parser: Optional[ExpressionParser] = None,
        capabilities: Optional[CatalogCapabilities] = None,
    ):
        self.source = source
        self.catalog = catalog
        self.schemas = list(schemas)
        self.denylisted_types = list(denylisted_types)
        self.parser = parser or ExpressionParser()
        self.capabilities = capabilities or getattr(source, "capabilities", None)

    def load(self) -> SchemaGraph:
        """
        Run the build.

        Raises:
            CatalogQueryError: If any catalog query fails
            ExpressionParseError: If a check clause does not parse
            CatalogConsistencyError: On an undecodable match option or policy command
        """
        with log_context(catalog=self.catalog, operation="build"):
            functions = FunctionLoader(self.source).load()
            log_checkpoint("functions_loaded", {"count": len(functions)})

            role_rows = self.source.load_roles()
            schemas = self.source.load_schemas(self.catalog, self.schemas)
            tables = self._load_tables()
            log_checkpoint("tables_loaded", {"count": len(tables)})

            resolver = ReferenceResolver(
                self.source, self.parser, functions, self.denylisted_types
            )
            resolver.register_tables(tables)

            columns: List[Column] = []
            checks: List[CheckConstraint] = []
            foreign_keys: List[ForeignKey] = []
            indexes: List[UniqueIndex] = []
            triggers: List[Trigger] = []
            policies: List[Policy] = []

            for table in tables:
                with log_context(schema=table.table_schema, table=table.qualified_name):
                    columns.extend(resolver.columns_for(table))
                    checks.extend(resolver.resolve_check_constraints(table))
                    foreign_keys.extend(resolver.resolve_foreign_keys(table))
                    indexes.extend(resolver.resolve_unique_indexes(table))
                    triggers.extend(resolver.resolve_triggers(table))
                    policies.extend(resolver.resolve_policies(table))

            schema_names = distinct(self.schemas)
            table_grants = resolve_table_grants(
                self.source.load_table_grants(self.catalog, schema_names), resolver.tables
            )
            column_grants = resolve_column_grants(
                self.source.load_column_grants(self.catalog, schema_names),
                {(c.table_id, c.column_name): c for c in columns},
            )

            roles = resolve_roles(role_rows)
            dag_order = self._order_tables(tables, foreign_keys)

            graph = SchemaGraph(
                catalog=self.catalog,
                schemas=schemas,
                tables=tables,
                columns=columns,
                foreign_keys=foreign_keys,
                check_constraints=checks,
                unique_indexes=indexes,
                triggers=triggers,
                policies=policies,
                functions=functions,
                roles=roles,
                table_grants=table_grants,
                column_grants=column_grants,
                dag_order=dag_order,
                capabilities=self.capabilities,
            )
            log_checkpoint("graph_built", graph.summary())
            return graph

    def _load_tables(self) -> List[Table]:
        tables: List[Table] = []
        for schema in distinct(self.schemas):
            with log_context(schema=schema):
                loaded = self.source.load_tables(self.catalog, schema)
                logger.debug(f"Loaded {len(loaded)} tables")
                tables.extend(loaded)
        tables.sort(key=lambda t: t.id.sort_key)
        return tables

    def _order_tables(self, tables: Sequence[Table], foreign_keys: Sequence[ForeignKey]):
        graph = DependencyGraph.from_edges(
            (t.id for t in tables),
            ((fk.referenced_table_id, fk.host_table_id) for fk in foreign_keys),
        )
        sorter = TopologicalSorter()
        cyclic = sorter.find_cycle_members(graph)
        if cyclic:
            logger.info(
                f"Foreign-key cycle among {len(cyclic)} tables; ordering by (schema, name)",
                extra={"tables": [str(t) for t in cyclic]},
            )
        return sorter.sort(graph)


__all__ = ["EntityLoader"]
