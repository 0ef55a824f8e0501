# ============================================================================
# FUNCTION & TYPE MODELS
# ============================================================================
# STATUS: Core model - Callable routines and their types
# PURPOSE: pg_proc / pg_type rows and resolved Function entities
# CREATED: 19 OCT 2026
# EXPORTS: PgType, FunctionRow, Function
# DEPENDENCIES: pydantic
# ============================================================================
"""
Function and Type Models

A FunctionRow carries type OIDs only; the function loader resolves them
into PgType records. A return-type OID of 0 means "no return type".
"""

from typing import Optional, Tuple

from pydantic import Field

from core.contracts import FunctionKind
from core.models.base import CatalogModel


class PgType(CatalogModel):
    """
    Maps to: pg_catalog.pg_type (subset)

    `typsubscript` exists from PostgreSQL 14 and is None on older servers.
    """
    oid: int
    typname: str
    type_schema: Optional[str] = None
    typtype: str = "b"
    typcategory: Optional[str] = None
    typelem: int = 0
    typsubscript: Optional[int] = None

    @property
    def name(self) -> str:
        return self.typname

    @property
    def is_array(self) -> bool:
        return self.typcategory == "A"


class FunctionRow(CatalogModel):
    """
    Maps to: pg_catalog.pg_proc (subset)
    """
    oid: int
    proname: str
    function_schema: Optional[str] = None
    prokind: str = FunctionKind.FUNCTION.value
    proisstrict: bool = False
    proretset: bool = False
    prorettype: int = 0
    proargtypes: Tuple[int, ...] = Field(default_factory=tuple)
    language: Optional[str] = None

    @property
    def is_introspectable(self) -> bool:
        """Plain, strict, single-row, non-void functions are kept."""
        return (
            self.prokind == FunctionKind.FUNCTION.value
            and self.proisstrict
            and not self.proretset
            and self.prorettype != 0
        )


class Function(CatalogModel):
    """A function with resolved argument and return types."""
    oid: int
    name: str
    function_schema: Optional[str] = None
    kind: FunctionKind = FunctionKind.FUNCTION
    is_strict: bool = True
    returns_set: bool = False
    language: Optional[str] = None
    argument_types: Tuple[PgType, ...] = Field(default_factory=tuple)
    return_type: Optional[PgType] = None

    @property
    def signature(self) -> str:
        args = ", ".join(t.typname for t in self.argument_types)
        return f"{self.name}({args})"


__all__ = ["PgType", "FunctionRow", "Function"]
