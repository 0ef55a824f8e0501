# ============================================================================
# CATALOG REPOSITORY
# ============================================================================
# STATUS: Repository - PostgreSQL catalog queries
# PURPOSE: Read information_schema / pg_catalog rows over a psycopg session
# CREATED: 19 OCT 2026
# ============================================================================
"""
Catalog Repository

PostgreSQL implementation of CatalogSource. Uses psycopg3 sync with
dict_row cursors; every row is validated into a core.models row model.

The connection is borrowed: the repository never commits, rolls back or
closes it. All queries are read-only.

Columns that only exist on newer servers are selected through
CatalogCapabilities and come back as NULL on older ones, so row shapes
never depend on the server version.

Usage:
    with psycopg.connect(conninfo) as conn:
        source = CatalogRepository(conn)
        tables = source.load_tables("shop", "public")
"""

from typing import Any, Dict, List, Optional, Sequence

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from core.config import MINIMUM_SERVER_VERSION_NUM, CatalogCapabilities
from core.models import (
    AuthIdRow,
    CheckConstraintRow,
    Column,
    ColumnGrantRow,
    ForeignKeyRow,
    FunctionRow,
    IndexRow,
    KeyColumnUsageRow,
    PgTriggerRow,
    PgType,
    PolicyRow,
    ReferentialConstraintRow,
    RoleRow,
    Schema,
    Table,
    TableGrantRow,
    TriggerRow,
)
from .base import CatalogSource, distinct

# Resolves a (schema, name) pair to the relation OID; NULL if it does not exist
_RELATION_OID = sql.SQL("to_regclass(format('%%I.%%I', %(schema)s, %(name)s))")

_FUNCTION_COLUMNS = """
    p.oid,
    p.proname,
    pn.nspname AS function_schema,
    {prokind} AS prokind,
    p.proisstrict,
    p.proretset,
    p.prorettype,
    p.proargtypes::oid[] AS proargtypes,
    l.lanname AS language
"""

_FUNCTION_JOINS = """
    JOIN pg_catalog.pg_namespace pn ON pn.oid = p.pronamespace
    LEFT JOIN pg_catalog.pg_language l ON l.oid = p.prolang
"""


class CatalogRepository(CatalogSource):
    """CatalogSource backed by a live PostgreSQL session."""

    def __init__(
        self,
        connection: psycopg.Connection,
        capabilities: Optional[CatalogCapabilities] = None,
    ):
        super().__init__()
        self.connection = connection
        self.capabilities = capabilities or self._detect_capabilities()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fetch_all(self, query, params: Any = None) -> List[Dict[str, Any]]:
        with self.connection.cursor(row_factory=dict_row) as cur:
            cur.execute(query, params)
            return cur.fetchall()

    def _fetch_one(self, query, params: Any = None) -> Optional[Dict[str, Any]]:
        with self.connection.cursor(row_factory=dict_row) as cur:
            cur.execute(query, params)
            return cur.fetchone()

    def _detect_capabilities(self) -> CatalogCapabilities:
        with self._error_context("detect server version"):
            row = self._fetch_one("SHOW server_version_num")
            capabilities = CatalogCapabilities(server_version_num=int(row["server_version_num"]))

        if capabilities.server_version_num < MINIMUM_SERVER_VERSION_NUM:
            self.logger.warning(
                f"Server version {capabilities.server_version_num} is older than "
                f"{MINIMUM_SERVER_VERSION_NUM}; catalog queries may fail"
            )
        self.logger.debug(f"Detected server version {capabilities.server_version_num}")
        return capabilities

    def _optional(self, supported: bool, expression: str, cast: str) -> sql.Composable:
        """Select `expression` when the server has it, a typed NULL otherwise."""
        if supported:
            return sql.SQL(expression)
        return sql.SQL(f"NULL::{cast}")

    def _function_query(self, joins: str, where: str) -> sql.Composed:
        if self.capabilities.has_prokind:
            prokind = sql.SQL("p.prokind")
        else:
            prokind = sql.SQL(
                "CASE WHEN p.proisagg THEN 'a' WHEN p.proiswindow THEN 'w' ELSE 'f' END"
            )
        return sql.SQL(
            "SELECT " + _FUNCTION_COLUMNS
            + " FROM pg_catalog.pg_proc p " + joins + _FUNCTION_JOINS
            + where + " ORDER BY p.proname, p.oid"
        ).format(prokind=prokind)

    # ------------------------------------------------------------------
    # Catalog-wide
    # ------------------------------------------------------------------

    def load_functions(self) -> List[FunctionRow]:
        with self._error_context("load functions"):
            rows = self._fetch_all(self._function_query("", ""))
            return [FunctionRow.model_validate(row) for row in rows]

    def load_type(self, oid: int) -> PgType:
        query = sql.SQL("""
            SELECT t.oid, t.typname, n.nspname AS type_schema, t.typtype,
                   t.typcategory, t.typelem, {typsubscript} AS typsubscript
            FROM pg_catalog.pg_type t
            JOIN pg_catalog.pg_namespace n ON n.oid = t.typnamespace
            WHERE t.oid = %(oid)s
        """).format(
            typsubscript=self._optional(
                self.capabilities.has_type_subscript, "t.typsubscript::oid", "oid"
            ),
        )
        with self._error_context("load type", str(oid)):
            row = self._fetch_one(query, {"oid": oid})
            if row is None:
                raise LookupError(f"no pg_type row with oid {oid}")
            return PgType.model_validate(row)

    def load_roles(self) -> List[RoleRow]:
        query = """
            SELECT r.oid, r.rolname, r.rolsuper, r.rolinherit, r.rolcreaterole,
                   r.rolcreatedb, r.rolcanlogin, r.rolreplication, r.rolbypassrls,
                   r.rolconnlimit,
                   ARRAY(
                       SELECT m.roleid FROM pg_catalog.pg_auth_members m
                       WHERE m.member = r.oid ORDER BY m.roleid
                   ) AS member_of_oids
            FROM pg_catalog.pg_roles r
            ORDER BY r.oid
        """
        with self._error_context("load roles"):
            return [RoleRow.model_validate(row) for row in self._fetch_all(query)]

    def load_authids(self, oids: Sequence[int]) -> List[AuthIdRow]:
        if not oids:
            return []
        # pg_roles exposes the pg_authid OIDs and names without superuser access
        query = """
            SELECT r.oid, r.rolname
            FROM pg_catalog.pg_roles r
            WHERE r.oid = ANY(%(oids)s::oid[])
            ORDER BY r.oid
        """
        with self._error_context("load authids", ",".join(str(oid) for oid in oids)):
            rows = self._fetch_all(query, {"oids": list(oids)})
            return [AuthIdRow.model_validate(row) for row in rows]

    # ------------------------------------------------------------------
    # Schemas and tables
    # ------------------------------------------------------------------

    def load_schemas(self, catalog: str, schemas: Sequence[str]) -> List[Schema]:
        query = """
            SELECT catalog_name, schema_name, schema_owner
            FROM information_schema.schemata
            WHERE catalog_name = %(catalog)s AND schema_name = ANY(%(schemas)s)
            ORDER BY schema_name
        """
        with self._error_context("load schemas", catalog):
            rows = self._fetch_all(query, {"catalog": catalog, "schemas": distinct(schemas)})
            return [Schema.model_validate(row) for row in rows]

    _TABLE_QUERY = """
        SELECT t.table_catalog, t.table_schema, t.table_name, t.table_type,
               t.is_insertable_into,
               c.oid,
               COALESCE(c.relrowsecurity, false) AS row_security,
               COALESCE(c.relforcerowsecurity, false) AS force_row_security,
               obj_description(c.oid, 'pg_class') AS description
        FROM information_schema.tables t
        LEFT JOIN pg_catalog.pg_class c
               ON c.oid = to_regclass(format('%%I.%%I', t.table_schema, t.table_name))
        WHERE t.table_catalog = %(catalog)s AND t.table_schema = %(schema)s
    """

    def load_tables(self, catalog: str, schema: str) -> List[Table]:
        query = self._TABLE_QUERY + " ORDER BY t.table_name"
        with self._error_context("load tables", f"{catalog}.{schema}"):
            rows = self._fetch_all(query, {"catalog": catalog, "schema": schema})
            return [Table.model_validate(row) for row in rows]

    def load_table(self, catalog: str, schema: str, name: str) -> Optional[Table]:
        query = self._TABLE_QUERY + " AND t.table_name = %(name)s"
        with self._error_context("load table", f"{schema}.{name}"):
            row = self._fetch_one(query, {"catalog": catalog, "schema": schema, "name": name})
            return Table.model_validate(row) if row else None

    def load_columns(self, table: Table) -> List[Column]:
        query = """
            SELECT c.table_catalog, c.table_schema, c.table_name, c.column_name,
                   c.ordinal_position, c.data_type, c.udt_name, c.is_nullable,
                   c.column_default, c.character_maximum_length, c.is_identity,
                   c.is_generated,
                   col_description(
                       to_regclass(format('%%I.%%I', c.table_schema, c.table_name)),
                       c.ordinal_position::int
                   ) AS description
            FROM information_schema.columns c
            WHERE c.table_catalog = %(catalog)s
              AND c.table_schema = %(schema)s
              AND c.table_name = %(name)s
            ORDER BY c.ordinal_position
        """
        with self._error_context("load columns", table.qualified_name):
            rows = self._fetch_all(query, _table_params(table))
            return [Column.model_validate(row) for row in rows]

    # ------------------------------------------------------------------
    # Constraints and indexes
    # ------------------------------------------------------------------

    def load_check_constraints(self, table: Table) -> List[CheckConstraintRow]:
        query = """
            SELECT cc.constraint_catalog, cc.constraint_schema, cc.constraint_name,
                   cc.check_clause
            FROM information_schema.check_constraints cc
            JOIN information_schema.table_constraints tc
              ON tc.constraint_catalog = cc.constraint_catalog
             AND tc.constraint_schema = cc.constraint_schema
             AND tc.constraint_name = cc.constraint_name
            WHERE tc.table_catalog = %(catalog)s
              AND tc.table_schema = %(schema)s
              AND tc.table_name = %(name)s
              AND tc.constraint_type = 'CHECK'
            ORDER BY cc.constraint_name
        """
        with self._error_context("load check constraints", table.qualified_name):
            rows = self._fetch_all(query, _table_params(table))
            return [CheckConstraintRow.model_validate(row) for row in rows]

    def load_check_constraint_functions(self, check: CheckConstraintRow) -> List[FunctionRow]:
        joins = """
            JOIN pg_catalog.pg_depend d
              ON d.refobjid = p.oid
             AND d.refclassid = 'pg_catalog.pg_proc'::regclass
             AND d.classid = 'pg_catalog.pg_constraint'::regclass
            JOIN pg_catalog.pg_constraint con ON con.oid = d.objid
            JOIN pg_catalog.pg_namespace cn ON cn.oid = con.connamespace
        """
        where = " WHERE cn.nspname = %(schema)s AND con.conname = %(name)s AND con.contype = 'c'"
        query = self._function_query(joins, where)
        with self._error_context("load check constraint functions", str(check)):
            rows = self._fetch_all(
                query, {"schema": check.constraint_schema, "name": check.constraint_name}
            )
            return [FunctionRow.model_validate(row) for row in rows]

    def load_foreign_keys(self, table: Table) -> List[ForeignKeyRow]:
        # Constraint names are unique per table only, so the referential
        # side is read from the table's own pg_constraint rows.
        query = """
            SELECT kcu.constraint_catalog, kcu.constraint_schema, kcu.constraint_name,
                   kcu.table_catalog, kcu.table_schema, kcu.table_name,
                   kcu.column_name, kcu.ordinal_position,
                   kcu.position_in_unique_constraint,
                   kcu.constraint_catalog AS unique_constraint_catalog,
                   un.nspname::text AS unique_constraint_schema,
                   uc.conname::text AS unique_constraint_name,
                   CASE c.confmatchtype
                       WHEN 'f' THEN 'FULL' WHEN 'p' THEN 'PARTIAL' ELSE 'NONE'
                   END AS match_option,
                   CASE c.confupdtype
                       WHEN 'c' THEN 'CASCADE' WHEN 'n' THEN 'SET NULL'
                       WHEN 'd' THEN 'SET DEFAULT' WHEN 'r' THEN 'RESTRICT'
                       ELSE 'NO ACTION'
                   END AS update_rule,
                   CASE c.confdeltype
                       WHEN 'c' THEN 'CASCADE' WHEN 'n' THEN 'SET NULL'
                       WHEN 'd' THEN 'SET DEFAULT' WHEN 'r' THEN 'RESTRICT'
                       ELSE 'NO ACTION'
                   END AS delete_rule
            FROM information_schema.key_column_usage kcu
            JOIN pg_catalog.pg_namespace hn ON hn.nspname = kcu.table_schema
            JOIN pg_catalog.pg_class hc
              ON hc.relnamespace = hn.oid AND hc.relname = kcu.table_name
            JOIN pg_catalog.pg_constraint c
              ON c.conrelid = hc.oid
             AND c.conname = kcu.constraint_name
             AND c.contype = 'f'
            LEFT JOIN pg_catalog.pg_constraint uc
              ON uc.conrelid = c.confrelid
             AND uc.conindid = c.conindid
             AND uc.contype IN ('p', 'u')
            LEFT JOIN pg_catalog.pg_namespace un ON un.oid = uc.connamespace
            WHERE kcu.table_catalog = %(catalog)s
              AND kcu.table_schema = %(schema)s
              AND kcu.table_name = %(name)s
            ORDER BY kcu.constraint_name, kcu.ordinal_position
        """
        with self._error_context("load foreign keys", table.qualified_name):
            rows = self._fetch_all(query, _table_params(table))
            return [
                ForeignKeyRow(
                    key_column=KeyColumnUsageRow.model_validate(row),
                    referential_constraint=ReferentialConstraintRow.model_validate(row),
                )
                for row in rows
            ]

    def load_unique_constraint_columns(
        self, catalog: str, schema: str, name: str
    ) -> List[KeyColumnUsageRow]:
        query = """
            SELECT constraint_catalog, constraint_schema, constraint_name,
                   table_catalog, table_schema, table_name, column_name,
                   ordinal_position, position_in_unique_constraint
            FROM information_schema.key_column_usage
            WHERE constraint_catalog = %(catalog)s
              AND constraint_schema = %(schema)s
              AND constraint_name = %(name)s
            ORDER BY ordinal_position
        """
        with self._error_context("load unique constraint columns", f"{schema}.{name}"):
            rows = self._fetch_all(query, {"catalog": catalog, "schema": schema, "name": name})
            return [KeyColumnUsageRow.model_validate(row) for row in rows]

    def load_unique_indexes(self, table: Table) -> List[IndexRow]:
        query = sql.SQL("""
            SELECT i.indexrelid, i.indrelid, ic.relname AS index_name,
                   n.nspname AS index_schema, i.indisunique AS is_unique,
                   i.indisprimary AS is_primary,
                   pg_get_indexdef(i.indexrelid) AS definition,
                   (
                       SELECT string_agg(pg_get_indexdef(i.indexrelid, k, true), ', ' ORDER BY k)
                       FROM generate_series(1, i.indnatts) AS k
                   ) AS index_expression,
                   ARRAY(
                       SELECT a.attname::text
                       FROM unnest(i.indkey) WITH ORDINALITY AS u(attnum, ord)
                       JOIN pg_catalog.pg_attribute a
                         ON a.attrelid = i.indrelid AND a.attnum = u.attnum
                       ORDER BY u.ord
                   ) AS column_names,
                   {nulls_not_distinct} AS nulls_not_distinct
            FROM pg_catalog.pg_index i
            JOIN pg_catalog.pg_class ic ON ic.oid = i.indexrelid
            JOIN pg_catalog.pg_namespace n ON n.oid = ic.relnamespace
            WHERE i.indrelid = {relation} AND i.indisunique
            ORDER BY ic.relname
        """).format(
            nulls_not_distinct=self._optional(
                self.capabilities.has_nulls_not_distinct, "i.indnullsnotdistinct", "boolean"
            ),
            relation=_RELATION_OID,
        )
        with self._error_context("load unique indexes", table.qualified_name):
            rows = self._fetch_all(query, _table_params(table))
            return [IndexRow.model_validate(row) for row in rows]

    # ------------------------------------------------------------------
    # Triggers and policies
    # ------------------------------------------------------------------

    def load_triggers(self, table: Table) -> List[TriggerRow]:
        query = """
            SELECT trigger_catalog, trigger_schema, trigger_name, event_manipulation,
                   event_object_catalog, event_object_schema, event_object_table,
                   action_order, action_condition, action_statement,
                   action_orientation, action_timing
            FROM information_schema.triggers
            WHERE event_object_catalog = %(catalog)s
              AND event_object_schema = %(schema)s
              AND event_object_table = %(name)s
            ORDER BY trigger_name, event_manipulation
        """
        with self._error_context("load triggers", table.qualified_name):
            rows = self._fetch_all(query, _table_params(table))
            return [TriggerRow.model_validate(row) for row in rows]

    def load_pg_triggers(self, table: Table) -> List[PgTriggerRow]:
        query = sql.SQL("""
            SELECT t.oid, t.tgrelid, t.tgname, t.tgfoid, t.tgenabled
            FROM pg_catalog.pg_trigger t
            WHERE t.tgrelid = {relation} AND NOT t.tgisinternal
            ORDER BY t.tgname
        """).format(relation=_RELATION_OID)
        with self._error_context("load pg triggers", table.qualified_name):
            rows = self._fetch_all(query, _table_params(table))
            return [PgTriggerRow.model_validate(row) for row in rows]

    def load_policies(self, table: Table) -> List[PolicyRow]:
        query = sql.SQL("""
            SELECT p.oid, p.polname, p.polrelid, p.polcmd,
                   {permissive} AS polpermissive,
                   p.polroles::oid[] AS polroles,
                   pg_get_expr(p.polqual, p.polrelid) AS using_clause,
                   pg_get_expr(p.polwithcheck, p.polrelid) AS check_clause
            FROM pg_catalog.pg_policy p
            WHERE p.polrelid = {relation}
            ORDER BY p.polname
        """).format(
            permissive=self._optional(
                self.capabilities.has_permissive_policies, "p.polpermissive", "boolean"
            ),
            relation=_RELATION_OID,
        )
        with self._error_context("load policies", table.qualified_name):
            rows = self._fetch_all(query, _table_params(table))
            return [PolicyRow.model_validate(row) for row in rows]

    # ------------------------------------------------------------------
    # Grants
    # ------------------------------------------------------------------

    def load_table_grants(self, catalog: str, schemas: Sequence[str]) -> List[TableGrantRow]:
        query = """
            SELECT grantor, grantee, table_catalog, table_schema, table_name,
                   privilege_type, is_grantable, with_hierarchy
            FROM information_schema.role_table_grants
            WHERE table_catalog = %(catalog)s AND table_schema = ANY(%(schemas)s)
            ORDER BY table_schema, table_name, grantee, privilege_type
        """
        with self._error_context("load table grants", catalog):
            rows = self._fetch_all(query, {"catalog": catalog, "schemas": distinct(schemas)})
            return [TableGrantRow.model_validate(row) for row in rows]

    def load_column_grants(self, catalog: str, schemas: Sequence[str]) -> List[ColumnGrantRow]:
        query = """
            SELECT grantor, grantee, table_catalog, table_schema, table_name,
                   column_name, privilege_type, is_grantable
            FROM information_schema.role_column_grants
            WHERE table_catalog = %(catalog)s AND table_schema = ANY(%(schemas)s)
            ORDER BY table_schema, table_name, column_name, grantee, privilege_type
        """
        with self._error_context("load column grants", catalog):
            rows = self._fetch_all(query, {"catalog": catalog, "schemas": distinct(schemas)})
            return [ColumnGrantRow.model_validate(row) for row in rows]


def _table_params(table: Table) -> Dict[str, str]:
    return {
        "catalog": table.table_catalog,
        "schema": table.table_schema,
        "name": table.table_name,
    }


__all__ = ["CatalogRepository"]
