# ============================================================================
# REFERENCE RESOLVER
# ============================================================================
# STATUS: Core - Cross-entity wiring
# PURPOSE: Turn flat catalog rows into linked graph entities
# CREATED: 19 OCT 2026
# ============================================================================
"""
Reference Resolver

Catalog rows arrive flat: a foreign-key row names its unique constraint, a
trigger row names its table, a policy row lists role OIDs. The resolver
reconstructs those links by matching natural keys and OIDs against what
the build has already loaded.

Links that cannot be resolved degrade to absent (logged, never raised).
The exceptions are the two places where bad input means the catalog does
not look the way the model expects:

- check-constraint clauses must parse (ExpressionParseError propagates)
- match options and policy commands must decode (CatalogConsistencyError)

Role membership and grants are resolved after every table is loaded; both
are plain functions of already-registered entities.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from core.contracts import (
    MatchKind,
    PolicyCommand,
    PrivilegeAction,
    TriggerEvent,
    TriggerOrientation,
    TriggerTiming,
)
from core.logging import get_logger, ComponentType
from core.models import (
    PUBLIC_ROLE_OID,
    CheckConstraint,
    Column,
    ColumnGrant,
    ColumnGrantRow,
    ForeignKey,
    ForeignKeyRow,
    Function,
    Policy,
    PolicyRole,
    Role,
    RoleRow,
    Table,
    TableGrant,
    TableGrantRow,
    TableId,
    Trigger,
    TriggerRow,
    UniqueIndex,
)
from introspection.expressions import ExpressionParser, column_identifiers, function_names
from repositories.base import CatalogSource

logger = get_logger(__name__, ComponentType.RESOLVER)

PUBLIC_ROLE_NAME = "public"


class ReferenceResolver:
    """
    Resolves per-table sub-entities against the build's registries.

    Args:
        source: Catalog row source
        parser: Expression parser for clause text
        functions: The build's function set, in (name, OID) order
        denylisted_types: Column udt_names to leave out of the graph
    """

    def __init__(
        self,
        source: CatalogSource,
        parser: ExpressionParser,
        functions: Sequence[Function],
        denylisted_types: Iterable[str] = (),
    ):
        self.source = source
        self.parser = parser
        self.functions = tuple(functions)
        self.denylisted_types: Set[str] = set(denylisted_types)

        # Tables known to the build, and column lists loaded so far
        self.tables: Dict[TableId, Table] = {}
        self._columns: Dict[TableId, Tuple[Column, ...]] = {}

    # ------------------------------------------------------------------
    # Registries
    # ------------------------------------------------------------------

    def register_tables(self, tables: Iterable[Table]) -> None:
        for table in tables:
            self.tables[table.id] = table

    def columns_for(self, table: Table) -> Tuple[Column, ...]:
        """Columns of a table minus denylisted types, loaded once per build."""
        if table.id not in self._columns:
            columns = self.source.load_columns(table)
            kept = tuple(c for c in columns if c.udt_name not in self.denylisted_types)
            if len(kept) != len(columns):
                logger.debug(
                    f"Omitted {len(columns) - len(kept)} denylisted-type columns of {table.id}"
                )
            self._columns[table.id] = kept
        return self._columns[table.id]

    def function_for(self, name: str, oid: Optional[int] = None) -> Optional[Function]:
        """
        One function of the build called `name`.

        An exact OID match wins; otherwise the first overload in
        (name, OID) order.
        """
        first = None
        for function in self.functions:
            if function.name != name:
                continue
            if oid is not None and function.oid == oid:
                return function
            if first is None:
                first = function
        return first

    def link_functions(self, dependencies: Iterable[Tuple[str, Optional[int]]]) -> Tuple[Function, ...]:
        """One function per (name, oid) dependency, each linked at most once."""
        linked: List[Function] = []
        seen: Set[int] = set()
        for name, oid in dependencies:
            function = self.function_for(name, oid)
            if function is not None and function.oid not in seen:
                seen.add(function.oid)
                linked.append(function)
        return tuple(linked)

    # ------------------------------------------------------------------
    # Foreign keys
    # ------------------------------------------------------------------

    def resolve_foreign_keys(self, table: Table) -> List[ForeignKey]:
        """
        Group key-column rows per constraint and pair columns by position.

        The i-th host column references the i-th referenced column, where
        the referenced side is ordered by position_in_unique_constraint.
        """
        groups: Dict[Tuple[str, str, str], List[ForeignKeyRow]] = {}
        for row in self.source.load_foreign_keys(table):
            groups.setdefault(row.constraint_key, []).append(row)

        foreign_keys = []
        for rows in groups.values():
            rows = sorted(rows, key=lambda r: r.key_column.ordinal_position)
            foreign_key = self._resolve_foreign_key(table, rows)
            if foreign_key is not None:
                foreign_keys.append(foreign_key)
        return foreign_keys

    def _resolve_foreign_key(
        self, table: Table, rows: List[ForeignKeyRow]
    ) -> Optional[ForeignKey]:
        constraint = rows[0].referential_constraint
        name = constraint.constraint_name

        host_by_name = {c.column_name: c for c in self.columns_for(table)}
        host_columns = []
        for row in rows:
            column = host_by_name.get(row.key_column.column_name)
            if column is None:
                logger.warning(f"Foreign key {name}: host column {row.key_column.column_name} not loaded; skipped")
                return None
            host_columns.append(column)

        if not constraint.unique_constraint_name:
            logger.warning(f"Foreign key {name}: no referenced unique constraint recorded; skipped")
            return None

        unique_rows = self.source.load_unique_constraint_columns(
            constraint.unique_constraint_catalog or constraint.constraint_catalog,
            constraint.unique_constraint_schema or constraint.constraint_schema,
            constraint.unique_constraint_name,
        )
        if not unique_rows:
            logger.warning(
                f"Foreign key {name}: unique constraint "
                f"{constraint.unique_constraint_name} has no visible columns; skipped"
            )
            return None

        referenced_table = self._table(unique_rows[0].table_id)
        if referenced_table is None:
            logger.warning(f"Foreign key {name}: referenced table {unique_rows[0].table_id} not found; skipped")
            return None

        unique_by_position = {r.ordinal_position: r.column_name for r in unique_rows}
        referenced_by_name = {c.column_name: c for c in self.columns_for(referenced_table)}
        referenced_columns = []
        for i, row in enumerate(rows, start=1):
            position = row.key_column.position_in_unique_constraint or i
            column = referenced_by_name.get(unique_by_position.get(position))
            if column is None:
                logger.warning(f"Foreign key {name}: referenced column at position {position} not loaded; skipped")
                return None
            referenced_columns.append(column)

        return ForeignKey(
            constraint_catalog=constraint.constraint_catalog,
            constraint_schema=constraint.constraint_schema,
            constraint_name=name,
            host_table=table,
            host_columns=tuple(host_columns),
            referenced_table=referenced_table,
            referenced_columns=tuple(referenced_columns),
            match_option=constraint.match_option,
            match_kind=MatchKind.from_match_option(constraint.match_option, name),
            update_rule=constraint.update_rule,
            delete_rule=constraint.delete_rule,
        )

    def _table(self, table_id: TableId) -> Optional[Table]:
        """A registered table, or a snapshot loaded from the catalog."""
        table = self.tables.get(table_id)
        if table is None:
            table = self.source.load_table(*table_id)
        return table

    # ------------------------------------------------------------------
    # Check constraints and indexes
    # ------------------------------------------------------------------

    def resolve_check_constraints(self, table: Table) -> List[CheckConstraint]:
        """
        Parse each check clause and link its columns and functions.

        Raises:
            ExpressionParseError: If a clause does not parse
        """
        columns = self.columns_for(table)
        checks = []
        for row in self.source.load_check_constraints(table):
            expression = self.parser.parse(row.check_clause)
            identifiers = set(column_identifiers(expression))
            dependencies = self.source.load_check_constraint_functions(row)

            checks.append(CheckConstraint(
                constraint_catalog=row.constraint_catalog,
                constraint_schema=row.constraint_schema,
                constraint_name=row.constraint_name,
                check_clause=row.check_clause,
                table_id=table.id,
                expression=expression,
                columns=tuple(c for c in columns if c.column_name in identifiers),
                functions=self.link_functions((f.proname, f.oid) for f in dependencies),
            ))
        return checks

    def resolve_unique_indexes(self, table: Table) -> List[UniqueIndex]:
        indexes = []
        for row in self.source.load_unique_indexes(table):
            if not row.is_unique:
                continue
            indexes.append(UniqueIndex(
                oid=row.indexrelid,
                name=row.index_name,
                table_id=table.id,
                is_primary=row.is_primary,
                definition=row.definition,
                index_expression=row.index_expression,
                expression=self.parser.try_parse(f"({row.index_expression})"),
                column_names=row.column_names,
                nulls_not_distinct=row.nulls_not_distinct,
            ))
        return indexes

    # ------------------------------------------------------------------
    # Triggers and policies
    # ------------------------------------------------------------------

    def resolve_triggers(self, table: Table) -> List[Trigger]:
        """
        Merge per-event rows into one Trigger each and attach the function
        OID from the pg_trigger row with the same name.
        """
        groups: Dict[str, List[TriggerRow]] = {}
        for row in self.source.load_triggers(table):
            groups.setdefault(row.trigger_name, []).append(row)
        if not groups:
            return []

        function_oids = {row.tgname: row.tgfoid for row in self.source.load_pg_triggers(table)}

        triggers = []
        for name, rows in groups.items():
            events = []
            for row in rows:
                event = TriggerEvent.parse(row.event_manipulation)
                if event is not None and event not in events:
                    events.append(event)
            first = rows[0]
            if name not in function_oids:
                logger.debug(f"Trigger {name} on {table.id}: no pg_trigger row")
            triggers.append(Trigger(
                name=name,
                table_id=table.id,
                events=tuple(events),
                timing=TriggerTiming.parse(first.action_timing),
                orientation=TriggerOrientation.parse(first.action_orientation),
                function_oid=function_oids.get(name),
                action_statement=first.action_statement,
                action_condition=first.action_condition,
            ))
        return triggers

    def resolve_policies(self, table: Table) -> List[Policy]:
        """
        Decode each policy; unparseable clauses leave their expression
        unset while the policy keeps its table and roles.
        """
        rows = self.source.load_policies(table)
        if not rows:
            return []

        role_oids = sorted({oid for row in rows for oid in row.polroles if oid != PUBLIC_ROLE_OID})
        role_names = {auth.oid: auth.rolname for auth in self.source.load_authids(role_oids)}

        policies = []
        for row in rows:
            roles = []
            for oid in row.polroles:
                if oid == PUBLIC_ROLE_OID:
                    roles.append(PolicyRole(oid=oid, name=PUBLIC_ROLE_NAME))
                elif oid in role_names:
                    roles.append(PolicyRole(oid=oid, name=role_names[oid]))
                else:
                    logger.debug(f"Policy {row.polname}: role {oid} not found")

            using_expression = self.parser.try_parse(row.using_clause)
            check_expression = self.parser.try_parse(row.check_clause)

            policies.append(Policy(
                oid=row.oid,
                name=row.polname,
                table_id=table.id,
                command=PolicyCommand.from_polcmd(row.polcmd, row.polname),
                permissive=row.polpermissive,
                roles=tuple(roles),
                using_clause=row.using_clause,
                check_clause=row.check_clause,
                using_expression=using_expression,
                check_expression=check_expression,
                using_functions=self.link_functions((n, None) for n in function_names(using_expression)),
                check_functions=self.link_functions((n, None) for n in function_names(check_expression)),
            ))
        return policies


# ============================================================================
# ROLE MEMBERSHIP
# ============================================================================

def resolve_roles(rows: Sequence[RoleRow]) -> List[Role]:
    """
    Two-pass membership resolution.

    Pass 1 registers every role OID; pass 2 keeps only granted-role OIDs
    that name a registered role. Membership stays direct.
    """
    registered = {row.oid for row in rows}

    roles = []
    for row in rows:
        member_of = tuple(oid for oid in row.member_of_oids if oid in registered)
        if len(member_of) != len(row.member_of_oids):
            logger.debug(f"Role {row.rolname}: dropped unresolved memberships")
        roles.append(Role.from_row(row, member_of))
    return roles


# ============================================================================
# GRANTS
# ============================================================================

def resolve_table_grants(
    rows: Iterable[TableGrantRow],
    tables: Dict[TableId, Table],
) -> List[TableGrant]:
    """Table grants whose table is part of the build."""
    grants = []
    for row in rows:
        if not (row.table_catalog and row.table_schema and row.table_name):
            continue
        table_id = TableId(row.table_catalog, row.table_schema, row.table_name)
        if table_id not in tables:
            continue
        grants.append(TableGrant(
            table_id=table_id,
            privilege=PrivilegeAction.from_privilege_type(row.privilege_type),
            privilege_type=row.privilege_type or "",
            grantee=row.grantee,
            grantor=row.grantor,
            is_grantable=row.is_grantable or "NO",
        ))
    return grants


def resolve_column_grants(
    rows: Iterable[ColumnGrantRow],
    columns: Dict[Tuple[TableId, str], Column],
) -> List[ColumnGrant]:
    """Column grants whose column is part of the build."""
    grants = []
    for row in rows:
        if not (row.table_catalog and row.table_schema and row.table_name and row.column_name):
            continue
        table_id = TableId(row.table_catalog, row.table_schema, row.table_name)
        column = columns.get((table_id, row.column_name))
        if column is None:
            continue
        grants.append(ColumnGrant(
            column_id=column.id,
            privilege=PrivilegeAction.from_privilege_type(row.privilege_type),
            privilege_type=row.privilege_type or "",
            grantee=row.grantee,
            grantor=row.grantor,
            is_grantable=row.is_grantable or "NO",
        ))
    return grants


__all__ = [
    "PUBLIC_ROLE_NAME",
    "ReferenceResolver",
    "resolve_roles",
    "resolve_table_grants",
    "resolve_column_grants",
]
