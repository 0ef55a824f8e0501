# ============================================================================
# FUNCTION LOADER
# ============================================================================
# STATUS: Core - Function and type catalog loading
# PURPOSE: Filter pg_proc rows and resolve their argument / return types
# CREATED: 19 OCT 2026
# ============================================================================
"""
Function Loader

Keeps plain functions that are strict, return a single row and return a
value; everything else (procedures, aggregates, window functions,
set-returning or void functions) is dropped. Survivors are ordered by
(name, OID) and their type OIDs are resolved through the catalog source.

A failed type lookup fails the load; there is no partially typed Function.
"""

from typing import Dict, List, Optional

from core.logging import get_logger, ComponentType
from core.models import Function, FunctionRow, PgType
from core.contracts import FunctionKind
from repositories.base import CatalogSource

logger = get_logger(__name__, ComponentType.LOADER)

VOID_TYPE_OID = 0


class TypeCache:
    """Per-build memo of type-by-OID lookups."""

    def __init__(self, source: CatalogSource):
        self.source = source
        self._types: Dict[int, PgType] = {}

    def get(self, oid: int) -> PgType:
        if oid not in self._types:
            self._types[oid] = self.source.load_type(oid)
        return self._types[oid]

    def __len__(self) -> int:
        return len(self._types)


class FunctionLoader:
    """Loads the function set of a build."""

    def __init__(self, source: CatalogSource, types: Optional[TypeCache] = None):
        self.source = source
        self.types = types or TypeCache(source)

    def load(self) -> List[Function]:
        """
        Load, filter, sort and type-resolve functions.

        Raises:
            CatalogQueryError: If loading functions or any type fails
        """
        rows = self.source.load_functions()
        kept = sorted(
            (row for row in rows if row.is_introspectable),
            key=lambda row: (row.proname, row.oid),
        )
        logger.debug(f"Kept {len(kept)} of {len(rows)} functions")
        return [self.resolve(row) for row in kept]

    def resolve(self, row: FunctionRow) -> Function:
        """Build a Function from its row, resolving every type OID."""
        argument_types = tuple(self.types.get(oid) for oid in row.proargtypes)
        return_type = None
        if row.prorettype != VOID_TYPE_OID:
            return_type = self.types.get(row.prorettype)

        return Function(
            oid=row.oid,
            name=row.proname,
            function_schema=row.function_schema,
            kind=FunctionKind(row.prokind),
            is_strict=row.proisstrict,
            returns_set=row.proretset,
            language=row.language,
            argument_types=argument_types,
            return_type=return_type,
        )


__all__ = ["VOID_TYPE_OID", "TypeCache", "FunctionLoader"]
