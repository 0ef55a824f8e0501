# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export contracts, errors, models and configuration
# CREATED: 19 OCT 2026
# ============================================================================

from core.contracts import (
    MatchKind,
    TriggerEvent,
    TriggerTiming,
    TriggerOrientation,
    PolicyCommand,
    PrivilegeAction,
    FunctionKind,
)
from core.errors import (
    BuildError,
    MissingAttributeError,
    DuplicateDenylistedTypeError,
    CatalogQueryError,
    ExpressionParseError,
    CatalogConsistencyError,
)
from core.models import (
    TableId,
    ColumnId,
    Schema,
    Table,
    Column,
    Function,
    PgType,
    ForeignKey,
    CheckConstraint,
    UniqueIndex,
    Trigger,
    Policy,
    PolicyRole,
    Role,
    TableGrant,
    ColumnGrant,
)
from core.config import CatalogCapabilities, IntrospectionSettings

__all__ = [
    # Enums
    "MatchKind",
    "TriggerEvent",
    "TriggerTiming",
    "TriggerOrientation",
    "PolicyCommand",
    "PrivilegeAction",
    "FunctionKind",
    # Errors
    "BuildError",
    "MissingAttributeError",
    "DuplicateDenylistedTypeError",
    "CatalogQueryError",
    "ExpressionParseError",
    "CatalogConsistencyError",
    # Models
    "TableId",
    "ColumnId",
    "Schema",
    "Table",
    "Column",
    "Function",
    "PgType",
    "ForeignKey",
    "CheckConstraint",
    "UniqueIndex",
    "Trigger",
    "Policy",
    "PolicyRole",
    "Role",
    "TableGrant",
    "ColumnGrant",
    # Config
    "CatalogCapabilities",
    "IntrospectionSettings",
]
