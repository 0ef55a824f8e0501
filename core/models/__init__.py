# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for catalog rows and graph entities
# CREATED: 19 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Frozen pydantic models for everything the schema graph holds.

Naming:
    - *Row models mirror a catalog query result
    - Unsuffixed models are resolved graph entities
"""

from core.models.base import CatalogModel, TableId, ColumnId
from core.models.table import Schema, Table, Column
from core.models.function import PgType, FunctionRow, Function
from core.models.constraints import (
    ReferentialConstraintRow,
    KeyColumnUsageRow,
    ForeignKeyRow,
    ForeignKey,
    CheckConstraintRow,
    CheckConstraint,
    IndexRow,
    UniqueIndex,
)
from core.models.trigger import TriggerRow, PgTriggerRow, Trigger
from core.models.policy import PUBLIC_ROLE_OID, PolicyRow, PolicyRole, Policy
from core.models.role import RoleRow, AuthIdRow, Role
from core.models.grants import TableGrantRow, TableGrant, ColumnGrantRow, ColumnGrant

__all__ = [
    # Base
    "CatalogModel",
    "TableId",
    "ColumnId",
    # Relations
    "Schema",
    "Table",
    "Column",
    # Functions
    "PgType",
    "FunctionRow",
    "Function",
    # Constraints
    "ReferentialConstraintRow",
    "KeyColumnUsageRow",
    "ForeignKeyRow",
    "ForeignKey",
    "CheckConstraintRow",
    "CheckConstraint",
    "IndexRow",
    "UniqueIndex",
    # Triggers
    "TriggerRow",
    "PgTriggerRow",
    "Trigger",
    # Policies
    "PUBLIC_ROLE_OID",
    "PolicyRow",
    "PolicyRole",
    "Policy",
    # Roles
    "RoleRow",
    "AuthIdRow",
    "Role",
    # Grants
    "TableGrantRow",
    "TableGrant",
    "ColumnGrantRow",
    "ColumnGrant",
]
