# ============================================================================
# CATALOG SOURCE - ABSTRACT ROW SOURCE
# ============================================================================
# STATUS: Repository - Contract for catalog row access
# PURPOSE: One read method per catalog object kind, uniform error wrapping
# CREATED: 19 OCT 2026
# ============================================================================
"""
Catalog Source

Abstract base for everything that can feed the entity loader with catalog
rows. The loader only talks to this interface, so a PostgreSQL session
(CatalogRepository) and an in-memory fixture are interchangeable.

Every method returns validated row models from core.models; none of them
resolve cross-references. That is the resolver's job.

Errors:
    Implementations wrap each operation in _error_context(), which turns
    any failure into CatalogQueryError with the original exception chained.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterable, List, Optional, Sequence

from core.errors import CatalogQueryError
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
    RoleRow,
    Schema,
    Table,
    TableGrantRow,
    TriggerRow,
)


class CatalogSource(ABC):
    """
    Abstract catalog row source.

    Provides:
    - Error context manager for consistent error handling
    - The read contract used by the entity loader

    Subclasses implement storage-specific queries.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def _error_context(self, operation: str, entity_id: Optional[str] = None):
        """
        Context manager for consistent error handling.

        Args:
            operation: Human-readable description of the operation
            entity_id: Optional entity identifier for context

        Example:
            with self._error_context("load columns", "public.orders"):
                rows = cur.fetchall()
        """
        try:
            yield
        except CatalogQueryError:
            # Already has context, just re-raise
            raise
        except Exception as e:
            error_msg = f"{operation} failed"
            if entity_id:
                error_msg += f" for {entity_id}"
            error_msg += f": {e}"
            self.logger.error(error_msg)
            raise CatalogQueryError(error_msg, operation=operation, entity_id=entity_id) from e

    # ------------------------------------------------------------------
    # Catalog-wide
    # ------------------------------------------------------------------

    @abstractmethod
    def load_functions(self) -> List[FunctionRow]:
        """All function rows, ordered by (proname, oid). Unfiltered."""

    @abstractmethod
    def load_type(self, oid: int) -> PgType:
        """
        A single type by OID.

        Raises:
            CatalogQueryError: If the lookup fails or the OID is unknown
        """

    @abstractmethod
    def load_roles(self) -> List[RoleRow]:
        """All roles with their granted-role OIDs, ordered by OID."""

    @abstractmethod
    def load_authids(self, oids: Sequence[int]) -> List[AuthIdRow]:
        """Authorization identifiers for the given OIDs."""

    # ------------------------------------------------------------------
    # Schemas and tables
    # ------------------------------------------------------------------

    @abstractmethod
    def load_schemas(self, catalog: str, schemas: Sequence[str]) -> List[Schema]:
        """Schemas of the catalog whose names are in `schemas`."""

    @abstractmethod
    def load_tables(self, catalog: str, schema: str) -> List[Table]:
        """Tables of one schema, ordered by name."""

    @abstractmethod
    def load_table(self, catalog: str, schema: str, name: str) -> Optional[Table]:
        """A single table, or None if it does not exist."""

    @abstractmethod
    def load_columns(self, table: Table) -> List[Column]:
        """Columns of a table, ordered by ordinal position."""

    # ------------------------------------------------------------------
    # Constraints and indexes
    # ------------------------------------------------------------------

    @abstractmethod
    def load_check_constraints(self, table: Table) -> List[CheckConstraintRow]:
        """Check constraints of a table, ordered by name."""

    @abstractmethod
    def load_check_constraint_functions(self, check: CheckConstraintRow) -> List[FunctionRow]:
        """Functions the underlying pg_constraint row depends on."""

    @abstractmethod
    def load_foreign_keys(self, table: Table) -> List[ForeignKeyRow]:
        """
        Foreign-key columns of a table with their referential constraints,
        ordered by (constraint, ordinal position).
        """

    @abstractmethod
    def load_unique_constraint_columns(
        self, catalog: str, schema: str, name: str
    ) -> List[KeyColumnUsageRow]:
        """Columns of a unique or primary-key constraint, by ordinal position."""

    @abstractmethod
    def load_unique_indexes(self, table: Table) -> List[IndexRow]:
        """Unique indexes (primary keys included) of a table, ordered by name."""

    # ------------------------------------------------------------------
    # Triggers and policies
    # ------------------------------------------------------------------

    @abstractmethod
    def load_triggers(self, table: Table) -> List[TriggerRow]:
        """information_schema.triggers rows (one per trigger and event)."""

    @abstractmethod
    def load_pg_triggers(self, table: Table) -> List[PgTriggerRow]:
        """Non-internal pg_trigger rows of a table."""

    @abstractmethod
    def load_policies(self, table: Table) -> List[PolicyRow]:
        """Row-level-security policies of a table, ordered by name."""

    # ------------------------------------------------------------------
    # Grants
    # ------------------------------------------------------------------

    @abstractmethod
    def load_table_grants(self, catalog: str, schemas: Sequence[str]) -> List[TableGrantRow]:
        """Table privilege grants within the given schemas."""

    @abstractmethod
    def load_column_grants(self, catalog: str, schemas: Sequence[str]) -> List[ColumnGrantRow]:
        """Column privilege grants within the given schemas."""


def distinct(values: Iterable[str]) -> List[str]:
    """Order-preserving de-duplication."""
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


__all__ = ["CatalogSource", "distinct"]
