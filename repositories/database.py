# ============================================================================
# DATABASE CONNECTION
# ============================================================================
# STATUS: Core - Sync PostgreSQL connection management
# PURPOSE: Open a read session for a schema graph build
# CREATED: 19 OCT 2026
# ============================================================================
"""
Database Connection

Opens a single psycopg3 connection for a build. The graph builder borrows a
session and never closes it; this module is the owning side, used by the
command-line tool.

Usage:
    from repositories.database import connect

    with connect() as conn:
        graph = SchemaGraphBuilder().with_connection(conn)...build()
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import psycopg

from core.config import IntrospectionSettings

logger = logging.getLogger(__name__)


def get_connection_string(settings: Optional[IntrospectionSettings] = None) -> str:
    """
    Get database connection string.

    Args:
        settings: Settings to read from (defaults to environment)

    Returns:
        PostgreSQL connection string
    """
    settings = settings or IntrospectionSettings.from_env()
    return settings.get_connection_string()


def mask_conninfo(conninfo: str) -> str:
    """Strip credentials from a connection string for logging."""
    if "@" in conninfo:
        # URL format
        return conninfo.split("@")[-1]
    if "password=" in conninfo:
        # Key-value format
        parts = [
            "password=***" if part.startswith("password=") else part
            for part in conninfo.split()
        ]
        return " ".join(parts)
    return conninfo


@contextmanager
def connect(connection_string: Optional[str] = None) -> Iterator[psycopg.Connection]:
    """
    Context manager for a read-only introspection session.

    Args:
        connection_string: Override connection string (defaults to env)

    Yields:
        psycopg connection

    The transaction is rolled back on exit; introspection never writes.
    """
    conninfo = connection_string or get_connection_string()
    logger.info(f"Connecting to PostgreSQL: {mask_conninfo(conninfo)}")

    conn = psycopg.connect(conninfo)
    try:
        conn.read_only = True
        yield conn
    finally:
        conn.rollback()
        conn.close()
        logger.debug("PostgreSQL connection closed")


__all__ = ["get_connection_string", "mask_conninfo", "connect"]
