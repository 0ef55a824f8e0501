# ============================================================================
# REPOSITORIES MODULE
# ============================================================================
# STATUS: Core - Catalog access layer
# PURPOSE: Read-only catalog row sources for the schema graph build
# CREATED: 19 OCT 2026
# ============================================================================
"""
Repositories Module

Provides catalog row access for the entity loader.
Uses psycopg3 sync with a borrowed connection.

Usage:
    from repositories import CatalogRepository, connect

    with connect() as conn:
        source = CatalogRepository(conn)
        roles = source.load_roles()
"""

from .base import CatalogSource
from .catalog_repo import CatalogRepository
from .database import connect, get_connection_string

__all__ = [
    "CatalogSource",
    "CatalogRepository",
    "connect",
    "get_connection_string",
]
