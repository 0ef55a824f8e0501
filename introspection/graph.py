# ============================================================================
# SCHEMA GRAPH
# ============================================================================
# STATUS: Core - Build result
# PURPOSE: Read-only, cross-referenced model of a catalog's schema
# CREATED: 19 OCT 2026
# ============================================================================
"""
Schema Graph

The finished result of a build. Every entity kind offers:

- lookup by identity (dict-backed)
- iteration in build order
- per-table filtering

Tables iterate in (schema, name) order; table_dag() iterates them so that
every table comes before the tables whose foreign keys reference it.

The graph does no I/O and has no mutating methods. Entities are frozen
pydantic models, so a graph can be shared between threads as is.
"""

from collections import defaultdict
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from core.config import CatalogCapabilities
from core.models import (
    CheckConstraint,
    Column,
    ColumnGrant,
    ColumnId,
    ForeignKey,
    Function,
    Policy,
    Role,
    Schema,
    Table,
    TableGrant,
    TableId,
    Trigger,
    UniqueIndex,
)


def _by_table(entities: Iterable, key=lambda e: e.table_id) -> Mapping[TableId, Tuple]:
    grouped: Dict[TableId, List] = defaultdict(list)
    for entity in entities:
        grouped[key(entity)].append(entity)
    return MappingProxyType({k: tuple(v) for k, v in grouped.items()})


class SchemaGraph:
    """Immutable schema graph of one catalog."""

    def __init__(
        self,
        catalog: str,
        schemas: Sequence[Schema],
        tables: Sequence[Table],
        columns: Sequence[Column],
        foreign_keys: Sequence[ForeignKey],
        check_constraints: Sequence[CheckConstraint],
        unique_indexes: Sequence[UniqueIndex],
        triggers: Sequence[Trigger],
        policies: Sequence[Policy],
        functions: Sequence[Function],
        roles: Sequence[Role],
        table_grants: Sequence[TableGrant] = (),
        column_grants: Sequence[ColumnGrant] = (),
        dag_order: Sequence[TableId] = (),
        capabilities: Optional[CatalogCapabilities] = None,
    ):
        self.catalog = catalog
        self.capabilities = capabilities

        self._schemas = tuple(schemas)
        self._tables = tuple(tables)
        self._columns = tuple(columns)
        self._foreign_keys = tuple(foreign_keys)
        self._check_constraints = tuple(check_constraints)
        self._unique_indexes = tuple(unique_indexes)
        self._triggers = tuple(triggers)
        self._policies = tuple(policies)
        self._functions = tuple(functions)
        self._roles = tuple(roles)
        self._table_grants = tuple(table_grants)
        self._column_grants = tuple(column_grants)
        self._dag_order = tuple(dag_order)

        # Identity maps
        self._table_index = MappingProxyType({t.id: t for t in self._tables})
        self._column_index = MappingProxyType({c.id: c for c in self._columns})
        self._function_index = MappingProxyType({f.oid: f for f in self._functions})
        self._role_index = MappingProxyType({r.oid: r for r in self._roles})
        self._role_name_index = MappingProxyType({r.name: r for r in self._roles})
        # Constraint names are unique per table, not per schema
        self._foreign_key_index = MappingProxyType({
            (fk.host_table_id, fk.constraint_name): fk for fk in self._foreign_keys
        })

        # Per-table views
        self._columns_by_table = _by_table(self._columns)
        self._foreign_keys_by_host = _by_table(self._foreign_keys, key=lambda fk: fk.host_table_id)
        self._foreign_keys_by_referenced = _by_table(
            self._foreign_keys, key=lambda fk: fk.referenced_table_id
        )
        self._foreign_keys_by_name = _by_table(
            self._foreign_keys, key=lambda fk: (fk.constraint_schema, fk.constraint_name)
        )
        self._checks_by_table = _by_table(self._check_constraints)
        self._indexes_by_table = _by_table(self._unique_indexes)
        self._triggers_by_table = _by_table(self._triggers)
        self._policies_by_table = _by_table(self._policies)
        self._table_grants_by_table = _by_table(self._table_grants)
        self._column_grants_by_column = _by_table(self._column_grants, key=lambda g: g.column_id)

        policies_by_role: Dict[int, List[Policy]] = defaultdict(list)
        for policy in self._policies:
            for oid in dict.fromkeys(policy.role_oids):
                policies_by_role[oid].append(policy)
        self._policies_by_role = MappingProxyType({k: tuple(v) for k, v in policies_by_role.items()})

    # ------------------------------------------------------------------
    # Schemas and tables
    # ------------------------------------------------------------------

    def schemas(self) -> Tuple[Schema, ...]:
        return self._schemas

    def tables(self) -> Tuple[Table, ...]:
        """All tables in (schema, name) order."""
        return self._tables

    def table(self, table_id: TableId) -> Optional[Table]:
        return self._table_index.get(table_id)

    def table_by_name(self, schema: str, name: str) -> Optional[Table]:
        return self._table_index.get(TableId(self.catalog, schema, name))

    def table_dag(self) -> Tuple[Table, ...]:
        """Tables with every referenced table before its referencing tables."""
        return tuple(self._table_index[table_id] for table_id in self._dag_order)

    def columns(self, table: Optional[Table] = None) -> Tuple[Column, ...]:
        if table is None:
            return self._columns
        return self._columns_by_table.get(table.id, ())

    def column(self, column_id: ColumnId) -> Optional[Column]:
        return self._column_index.get(column_id)

    # ------------------------------------------------------------------
    # Constraints and indexes
    # ------------------------------------------------------------------

    def foreign_keys(self, table: Optional[Table] = None) -> Tuple[ForeignKey, ...]:
        """Foreign keys, optionally only those held by `table`."""
        if table is None:
            return self._foreign_keys
        return self._foreign_keys_by_host.get(table.id, ())

    def foreign_key(self, table: Table, name: str) -> Optional[ForeignKey]:
        """The foreign key `name` held by `table`."""
        return self._foreign_key_index.get((table.id, name))

    def foreign_keys_named(self, schema: str, name: str) -> Tuple[ForeignKey, ...]:
        """Every foreign key called `name` in `schema`, in build order."""
        return self._foreign_keys_by_name.get((schema, name), ())

    def referencing_foreign_keys(self, table: Table) -> Tuple[ForeignKey, ...]:
        """Foreign keys that point at `table`."""
        return self._foreign_keys_by_referenced.get(table.id, ())

    def check_constraints(self, table: Optional[Table] = None) -> Tuple[CheckConstraint, ...]:
        if table is None:
            return self._check_constraints
        return self._checks_by_table.get(table.id, ())

    def unique_indexes(self, table: Optional[Table] = None) -> Tuple[UniqueIndex, ...]:
        if table is None:
            return self._unique_indexes
        return self._indexes_by_table.get(table.id, ())

    def primary_key(self, table: Table) -> Optional[UniqueIndex]:
        for index in self.unique_indexes(table):
            if index.is_primary:
                return index
        return None

    # ------------------------------------------------------------------
    # Functions and triggers
    # ------------------------------------------------------------------

    def functions(self) -> Tuple[Function, ...]:
        """Functions in (name, OID) order."""
        return self._functions

    def function(self, oid: int) -> Optional[Function]:
        return self._function_index.get(oid)

    def functions_named(self, name: str) -> Tuple[Function, ...]:
        return tuple(f for f in self._functions if f.name == name)

    def triggers(self, table: Optional[Table] = None) -> Tuple[Trigger, ...]:
        if table is None:
            return self._triggers
        return self._triggers_by_table.get(table.id, ())

    def trigger_function(self, trigger: Trigger) -> Optional[Function]:
        """The function a trigger calls, if it is in the function set."""
        if trigger.function_oid is None:
            return None
        return self._function_index.get(trigger.function_oid)

    # ------------------------------------------------------------------
    # Policies and roles
    # ------------------------------------------------------------------

    def policies(self, table: Optional[Table] = None) -> Tuple[Policy, ...]:
        if table is None:
            return self._policies
        return self._policies_by_table.get(table.id, ())

    def roles(self) -> Tuple[Role, ...]:
        return self._roles

    def role(self, oid: int) -> Optional[Role]:
        return self._role_index.get(oid)

    def role_by_name(self, name: str) -> Optional[Role]:
        return self._role_name_index.get(name)

    def member_of(self, role: Role) -> Tuple[Role, ...]:
        """Roles `role` has been granted directly."""
        return tuple(self._role_index[oid] for oid in role.member_of_oids if oid in self._role_index)

    def role_policies(self, role: Role) -> Tuple[Policy, ...]:
        """Policies that name `role` explicitly."""
        return self._policies_by_role.get(role.oid, ())

    # ------------------------------------------------------------------
    # Grants
    # ------------------------------------------------------------------

    def table_grants(self, table: Optional[Table] = None) -> Tuple[TableGrant, ...]:
        if table is None:
            return self._table_grants
        return self._table_grants_by_table.get(table.id, ())

    def column_grants(self, column: Optional[Column] = None) -> Tuple[ColumnGrant, ...]:
        if column is None:
            return self._column_grants
        return self._column_grants_by_column.get(column.id, ())

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def summary(self) -> Dict[str, int]:
        """Entity counts by kind."""
        return {
            "schemas": len(self._schemas),
            "tables": len(self._tables),
            "columns": len(self._columns),
            "foreign_keys": len(self._foreign_keys),
            "check_constraints": len(self._check_constraints),
            "unique_indexes": len(self._unique_indexes),
            "triggers": len(self._triggers),
            "policies": len(self._policies),
            "functions": len(self._functions),
            "roles": len(self._roles),
            "table_grants": len(self._table_grants),
            "column_grants": len(self._column_grants),
        }

    def __repr__(self) -> str:
        return f"SchemaGraph(catalog={self.catalog!r}, tables={len(self._tables)})"


__all__ = ["SchemaGraph"]
