# ============================================================================
# SCHEMA, TABLE & COLUMN MODELS
# ============================================================================
# STATUS: Core model - Relation structure
# PURPOSE: Schemas, tables and columns as loaded from information_schema
# CREATED: 19 OCT 2026
# EXPORTS: Schema, Table, Column
# DEPENDENCIES: pydantic
# ============================================================================
"""
Schema, Table and Column Models

Field names follow information_schema so catalog rows validate directly
into these models. Tables own their columns; everything else refers to a
table through its TableId.
"""

from typing import Optional

from pydantic import Field, field_validator

from core.models.base import CatalogModel, ColumnId, TableId, yes_no


class Schema(CatalogModel):
    """
    A namespace in the catalog.

    Maps to: information_schema.schemata
    """
    catalog_name: str
    schema_name: str
    schema_owner: Optional[str] = None


class Table(CatalogModel):
    """
    A table or view.

    Maps to: information_schema.tables joined with pg_class for the OID and
    row-level-security flags.
    """
    table_catalog: str
    table_schema: str
    table_name: str
    table_type: str = Field(default="BASE TABLE")
    is_insertable_into: bool = True

    # pg_class
    oid: Optional[int] = None
    row_security: bool = False
    force_row_security: bool = False
    description: Optional[str] = None

    @field_validator("is_insertable_into", mode="before")
    @classmethod
    def coerce_yes_no(cls, value):
        return yes_no(value)

    @property
    def id(self) -> TableId:
        return TableId(self.table_catalog, self.table_schema, self.table_name)

    @property
    def qualified_name(self) -> str:
        return f"{self.table_schema}.{self.table_name}"

    @property
    def is_view(self) -> bool:
        return self.table_type == "VIEW"


class Column(CatalogModel):
    """
    A table column.

    Maps to: information_schema.columns
    Key: (table, ordinal_position, column_name)
    """
    table_catalog: str
    table_schema: str
    table_name: str
    column_name: str
    ordinal_position: int = Field(..., ge=1)
    data_type: str
    udt_name: Optional[str] = None
    is_nullable: bool = True
    column_default: Optional[str] = None
    character_maximum_length: Optional[int] = None
    is_identity: bool = False
    is_generated: Optional[str] = None
    description: Optional[str] = None

    @field_validator("is_nullable", "is_identity", mode="before")
    @classmethod
    def coerce_yes_no(cls, value):
        return yes_no(value)

    @property
    def table_id(self) -> TableId:
        return TableId(self.table_catalog, self.table_schema, self.table_name)

    @property
    def id(self) -> ColumnId:
        return ColumnId(self.table_id, self.ordinal_position, self.column_name)

    @property
    def is_generated_column(self) -> bool:
        return bool(self.is_generated) and self.is_generated.upper() != "NEVER"


__all__ = ["Schema", "Table", "Column"]
