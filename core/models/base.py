# ============================================================================
# CATALOG MODEL BASE
# ============================================================================
# STATUS: Core model - Shared base and identity keys
# PURPOSE: Frozen pydantic base plus TableId / ColumnId natural keys
# CREATED: 19 OCT 2026
# EXPORTS: CatalogModel, TableId, ColumnId, yes_no
# DEPENDENCIES: pydantic
# ============================================================================
"""
Catalog Model Base

All catalog rows and graph entities are frozen pydantic models: once a row
is validated it is never modified, so a finished graph can be shared
between threads without locking.

Entities refer to each other by natural key (TableId, ColumnId) or by OID,
never by owning pointer. The graph resolves those keys.
"""

from typing import Any, NamedTuple, Tuple

from pydantic import BaseModel


def yes_no(value: Any) -> Any:
    """
    Coerce information_schema 'YES'/'NO' strings to bool.

    Other values pass through for normal pydantic validation.
    """
    if isinstance(value, str) and value.upper() in ("YES", "NO"):
        return value.upper() == "YES"
    return value


class TableId(NamedTuple):
    """Natural key of a table: (catalog, schema, name)."""
    catalog: str
    schema: str
    name: str

    @property
    def sort_key(self) -> Tuple[str, str]:
        """Global table order is by (schema, name)."""
        return (self.schema, self.name)

    def __str__(self) -> str:
        return f"{self.schema}.{self.name}"


class ColumnId(NamedTuple):
    """Natural key of a column: (table, ordinal position, name)."""
    table_id: TableId
    ordinal_position: int
    name: str

    def __str__(self) -> str:
        return f"{self.table_id}.{self.name}"


class CatalogModel(BaseModel):
    """
    Base for catalog rows and graph entities.

    Frozen; arbitrary types are allowed so parsed expression trees can be
    stored alongside the raw clause text.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


__all__ = ["CatalogModel", "TableId", "ColumnId", "yes_no"]
