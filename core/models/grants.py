# ============================================================================
# PRIVILEGE GRANT MODELS
# ============================================================================
# STATUS: Core model - Table and column grants
# PURPOSE: role_table_grants / role_column_grants rows and entities
# CREATED: 19 OCT 2026
# EXPORTS: TableGrantRow, TableGrant, ColumnGrantRow, ColumnGrant
# DEPENDENCIES: pydantic
# ============================================================================
"""
Grant Models
"""

from typing import Optional

from pydantic import field_validator

from core.contracts import PrivilegeAction
from core.models.base import CatalogModel, ColumnId, TableId, yes_no


class TableGrantRow(CatalogModel):
    """
    Maps to: information_schema.role_table_grants
    """
    grantor: Optional[str] = None
    grantee: Optional[str] = None
    table_catalog: Optional[str] = None
    table_schema: Optional[str] = None
    table_name: Optional[str] = None
    privilege_type: Optional[str] = None
    is_grantable: Optional[str] = None
    with_hierarchy: Optional[str] = None


class ColumnGrantRow(CatalogModel):
    """
    Maps to: information_schema.role_column_grants
    """
    grantor: Optional[str] = None
    grantee: Optional[str] = None
    table_catalog: Optional[str] = None
    table_schema: Optional[str] = None
    table_name: Optional[str] = None
    column_name: Optional[str] = None
    privilege_type: Optional[str] = None
    is_grantable: Optional[str] = None


class TableGrant(CatalogModel):
    """A privilege on a table granted to a role."""
    table_id: TableId
    privilege: PrivilegeAction
    privilege_type: str
    grantee: Optional[str] = None
    grantor: Optional[str] = None
    is_grantable: bool = False

    @field_validator("is_grantable", mode="before")
    @classmethod
    def coerce_yes_no(cls, value):
        return yes_no(value)

    @property
    def is_all_privileges(self) -> bool:
        return self.privilege_type.upper() in ("ALL", "ALL PRIVILEGES")


class ColumnGrant(CatalogModel):
    """A privilege on a single column granted to a role."""
    column_id: ColumnId
    privilege: PrivilegeAction
    privilege_type: str
    grantee: Optional[str] = None
    grantor: Optional[str] = None
    is_grantable: bool = False

    @field_validator("is_grantable", mode="before")
    @classmethod
    def coerce_yes_no(cls, value):
        return yes_no(value)

    @property
    def table_id(self) -> TableId:
        return self.column_id.table_id


__all__ = ["TableGrantRow", "TableGrant", "ColumnGrantRow", "ColumnGrant"]
