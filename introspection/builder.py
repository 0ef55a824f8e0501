# ============================================================================
# SCHEMA GRAPH BUILDER
# ============================================================================
# STATUS: Core - Build configuration entry point
# PURPOSE: Fluent configuration and validation for a graph build
# CREATED: 19 OCT 2026
# ============================================================================
"""
Schema Graph Builder

Usage:
    graph = (
        SchemaGraphBuilder()
        .with_connection(conn)
        .with_catalog("shop")
        .add_schemas(["public", "billing"])
        .add_denylisted_type("pg_ndistinct")
        .build()
    )

build() checks connection, catalog and schemas, in that order, before
touching the database, and raises MissingAttributeError naming the first
one missing. The connection is borrowed for the duration of build() only.
"""

from typing import Iterable, List, Optional, Tuple

import psycopg

from core.config import CatalogCapabilities
from core.errors import DuplicateDenylistedTypeError, MissingAttributeError
from core.logging import get_logger, ComponentType
from introspection.expressions import ExpressionParser
from introspection.graph import SchemaGraph
from introspection.loader import EntityLoader
from repositories.base import CatalogSource
from repositories.catalog_repo import CatalogRepository

logger = get_logger(__name__, ComponentType.LOADER)


class SchemaGraphBuilder:
    """Collects build configuration; every setter returns the builder."""

    def __init__(self):
        self._connection: Optional[psycopg.Connection] = None
        self._source: Optional[CatalogSource] = None
        self._catalog: Optional[str] = None
        self._schemas: List[str] = []
        self._denylisted_types: List[str] = []
        self._capabilities: Optional[CatalogCapabilities] = None
        self._parser: Optional[ExpressionParser] = None

    # ------------------------------------------------------------------
    # Required
    # ------------------------------------------------------------------

    def with_connection(self, connection: psycopg.Connection) -> "SchemaGraphBuilder":
        self._connection = connection
        return self

    def with_source(self, source: CatalogSource) -> "SchemaGraphBuilder":
        """Use a prepared row source instead of a connection."""
        self._source = source
        return self

    def with_catalog(self, catalog: str) -> "SchemaGraphBuilder":
        self._catalog = catalog
        return self

    def add_schema(self, schema: str) -> "SchemaGraphBuilder":
        """Append a schema. Repeated names are kept."""
        self._schemas.append(schema)
        return self

    def add_schemas(self, schemas: Iterable[str]) -> "SchemaGraphBuilder":
        """Append schemas not already present."""
        for schema in schemas:
            if schema not in self._schemas:
                self._schemas.append(schema)
        return self

    # ------------------------------------------------------------------
    # Optional
    # ------------------------------------------------------------------

    def add_denylisted_type(self, type_name: str) -> "SchemaGraphBuilder":
        """
        Leave columns of this type out of the graph.

        Raises:
            DuplicateDenylistedTypeError: If the type is already denylisted
        """
        if type_name in self._denylisted_types:
            raise DuplicateDenylistedTypeError(type_name)
        self._denylisted_types.append(type_name)
        return self

    def add_denylisted_types(self, type_names: Iterable[str]) -> "SchemaGraphBuilder":
        for type_name in type_names:
            self.add_denylisted_type(type_name)
        return self

    def with_capabilities(self, capabilities: CatalogCapabilities) -> "SchemaGraphBuilder":
        """Skip server version detection."""
        self._capabilities = capabilities
        return self

    def with_parser(self, parser: ExpressionParser) -> "SchemaGraphBuilder":
        self._parser = parser
        return self

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> Optional[str]:
        return self._catalog

    @property
    def schemas(self) -> Tuple[str, ...]:
        return tuple(self._schemas)

    @property
    def denylisted_types(self) -> Tuple[str, ...]:
        return tuple(self._denylisted_types)

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """
        Raises:
            MissingAttributeError: For the first missing required attribute
        """
        if self._connection is None and self._source is None:
            raise MissingAttributeError("connection")
        if not self._catalog:
            raise MissingAttributeError("catalog")
        if not self._schemas:
            raise MissingAttributeError("schemas")

    def build(self) -> SchemaGraph:
        """
        Build the schema graph.

        Raises:
            MissingAttributeError: Before any I/O, if configuration is incomplete
            CatalogQueryError: If a catalog query fails
        """
        self.validate()

        source = self._source
        if source is None:
            source = CatalogRepository(self._connection, self._capabilities)

        logger.info(f"Building schema graph for {self._catalog}: schemas={self._schemas}")
        return EntityLoader(
            source=source,
            catalog=self._catalog,
            schemas=self._schemas,
            denylisted_types=self._denylisted_types,
            parser=self._parser,
            capabilities=self._capabilities,
        ).load()


__all__ = ["SchemaGraphBuilder"]
