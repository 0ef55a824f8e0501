# ============================================================================
# CONSTRAINT & INDEX MODELS
# ============================================================================
# STATUS: Core model - Foreign keys, check constraints, unique indexes
# PURPOSE: Raw constraint rows and their resolved graph entities
# CREATED: 19 OCT 2026
# EXPORTS: ReferentialConstraintRow, KeyColumnUsageRow, ForeignKeyRow,
#          ForeignKey, CheckConstraintRow, CheckConstraint, IndexRow,
#          UniqueIndex
# DEPENDENCIES: pydantic, sqlglot
# ============================================================================
"""
Constraint and Index Models

Rows (*Row) are what the catalog returns; entities are what the graph
holds after the resolver has wired them to tables, columns and functions.

A ForeignKey carries value snapshots of both tables and both column lists.
Host and referenced columns are paired by position: host_columns[i]
references referenced_columns[i].
"""

from typing import ClassVar, FrozenSet, Optional, Tuple

from pydantic import Field
from sqlglot import exp

from core.contracts import MatchKind
from core.models.base import CatalogModel, TableId
from core.models.function import Function
from core.models.table import Column, Table


# ============================================================================
# FOREIGN KEYS
# ============================================================================

class ReferentialConstraintRow(CatalogModel):
    """
    Maps to: information_schema.referential_constraints
    """
    constraint_catalog: str
    constraint_schema: str
    constraint_name: str
    unique_constraint_catalog: Optional[str] = None
    unique_constraint_schema: Optional[str] = None
    unique_constraint_name: Optional[str] = None
    match_option: str = "NONE"
    update_rule: str = "NO ACTION"
    delete_rule: str = "NO ACTION"


class KeyColumnUsageRow(CatalogModel):
    """
    One column of a key constraint.

    Maps to: information_schema.key_column_usage
    """
    constraint_catalog: str
    constraint_schema: str
    constraint_name: str
    table_catalog: str
    table_schema: str
    table_name: str
    column_name: str
    ordinal_position: int
    position_in_unique_constraint: Optional[int] = None

    @property
    def table_id(self) -> TableId:
        return TableId(self.table_catalog, self.table_schema, self.table_name)


class ForeignKeyRow(CatalogModel):
    """A foreign-key column together with its referential constraint."""
    key_column: KeyColumnUsageRow
    referential_constraint: ReferentialConstraintRow

    @property
    def constraint_key(self) -> Tuple[str, str, str]:
        kc = self.key_column
        return (kc.constraint_catalog, kc.constraint_schema, kc.constraint_name)


class ForeignKey(CatalogModel):
    """A resolved foreign key."""
    constraint_catalog: str
    constraint_schema: str
    constraint_name: str
    host_table: Table
    host_columns: Tuple[Column, ...]
    referenced_table: Table
    referenced_columns: Tuple[Column, ...]
    match_option: str
    match_kind: MatchKind
    update_rule: str
    delete_rule: str

    @property
    def host_table_id(self) -> TableId:
        return self.host_table.id

    @property
    def referenced_table_id(self) -> TableId:
        return self.referenced_table.id

    @property
    def on_delete_cascade(self) -> bool:
        return self.delete_rule.upper() == "CASCADE"

    @property
    def on_update_cascade(self) -> bool:
        return self.update_rule.upper() == "CASCADE"

    @property
    def is_self_referencing(self) -> bool:
        return self.host_table.id == self.referenced_table.id

    def column_pairs(self) -> Tuple[Tuple[Column, Column], ...]:
        """(host column, referenced column) pairs in key order."""
        return tuple(zip(self.host_columns, self.referenced_columns))


# ============================================================================
# CHECK CONSTRAINTS
# ============================================================================

class CheckConstraintRow(CatalogModel):
    """
    Maps to: information_schema.check_constraints
    """
    constraint_catalog: str
    constraint_schema: str
    constraint_name: str
    check_clause: str

    def __str__(self) -> str:
        return f"{self.constraint_catalog}.{self.constraint_schema}.{self.constraint_name}"


class CheckConstraint(CatalogModel):
    """A check constraint with its parsed expression and references."""

    POSTGIS_CONSTRAINTS: ClassVar[FrozenSet[str]] = frozenset({"spatial_ref_sys_srid_check"})

    constraint_catalog: str
    constraint_schema: str
    constraint_name: str
    check_clause: str
    table_id: TableId
    expression: exp.Expression
    columns: Tuple[Column, ...] = Field(default_factory=tuple)
    functions: Tuple[Function, ...] = Field(default_factory=tuple)

    @property
    def is_postgis_constraint(self) -> bool:
        return self.constraint_name in self.POSTGIS_CONSTRAINTS


# ============================================================================
# UNIQUE INDEXES
# ============================================================================

class IndexRow(CatalogModel):
    """
    Maps to: pg_catalog.pg_index joined with pg_class for names.

    `index_expression` is the key list as text, e.g. "lower(email), tenant_id".
    """
    indexrelid: int
    indrelid: int
    index_name: str
    index_schema: str
    is_unique: bool = True
    is_primary: bool = False
    definition: Optional[str] = None
    index_expression: str
    column_names: Tuple[str, ...] = Field(default_factory=tuple)
    nulls_not_distinct: Optional[bool] = None


class UniqueIndex(CatalogModel):
    """A unique (or primary key) index with its parsed key expression."""
    oid: int
    name: str
    table_id: TableId
    is_primary: bool
    definition: Optional[str] = None
    index_expression: str
    expression: Optional[exp.Expression] = None
    column_names: Tuple[str, ...] = Field(default_factory=tuple)
    nulls_not_distinct: Optional[bool] = None


__all__ = [
    "ReferentialConstraintRow",
    "KeyColumnUsageRow",
    "ForeignKeyRow",
    "ForeignKey",
    "CheckConstraintRow",
    "CheckConstraint",
    "IndexRow",
    "UniqueIndex",
]
