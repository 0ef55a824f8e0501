# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Capability tags and introspection settings
# PURPOSE: Server-version gating of optional catalog columns, env settings
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Two pieces of configuration:

- CatalogCapabilities: which optional catalog columns the target server
  has. Loaders select NULL for unsupported columns so every entity keeps
  the same shape whatever the server version.
- IntrospectionSettings: connection and build settings read from the
  environment, used by the command-line tool.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

# Oldest server the catalog queries are written against
MINIMUM_SERVER_VERSION_NUM = 90600


@dataclass(frozen=True)
class CatalogCapabilities:
    """
    Feature flags derived from the server version number.

    server_version_num uses PostgreSQL's encoding: 160002 for 16.2,
    90624 for 9.6.24.
    """
    server_version_num: int = 160000

    @property
    def major_version(self) -> int:
        if self.server_version_num >= 100000:
            return self.server_version_num // 10000
        return self.server_version_num // 100

    @property
    def has_prokind(self) -> bool:
        """pg_proc.prokind (PostgreSQL 11+); older servers use proisagg/proiswindow."""
        return self.server_version_num >= 110000

    @property
    def has_permissive_policies(self) -> bool:
        """pg_policy.polpermissive (PostgreSQL 10+)."""
        return self.server_version_num >= 100000

    @property
    def has_type_subscript(self) -> bool:
        """pg_type.typsubscript (PostgreSQL 14+)."""
        return self.server_version_num >= 140000

    @property
    def has_nulls_not_distinct(self) -> bool:
        """pg_index.indnullsnotdistinct (PostgreSQL 15+)."""
        return self.server_version_num >= 150000

    @classmethod
    def from_version_string(cls, version: str) -> "CatalogCapabilities":
        """
        Parse a server version such as "16.2", "15" or "9.6.24".

        Raises:
            ValueError: If the string does not start with a version number
        """
        match = re.match(r"\s*(\d+)(?:\.(\d+))?(?:\.(\d+))?", version or "")
        if not match:
            raise ValueError(f"Unrecognized server version: {version!r}")
        major = int(match.group(1))
        minor = int(match.group(2) or 0)
        if major >= 10:
            return cls(server_version_num=major * 10000 + minor)
        patch = int(match.group(3) or 0)
        return cls(server_version_num=major * 10000 + minor * 100 + patch)


@dataclass(frozen=True)
class IntrospectionSettings:
    """
    Settings for a schema graph build.

    Environment variables:
        PGSCHEMA_DB_URL                  full connection string (wins)
        PGSCHEMA_DB_HOST / _PORT / _NAME / _USER / _PASSWORD / _SSLMODE
        PGSCHEMA_CATALOG                 catalog (database) name
        PGSCHEMA_SCHEMAS                 comma-separated schema list
        PGSCHEMA_DENYLIST_TYPES          comma-separated type names
        PGSCHEMA_SERVER_VERSION          skip version detection, e.g. "15.4"
        LOG_LEVEL / LOG_FORMAT           logging (LOG_FORMAT=json)
    """
    database_url: Optional[str] = None
    host: str = "localhost"
    port: str = "5432"
    dbname: str = "postgres"
    user: str = "postgres"
    password: str = ""
    sslmode: str = "prefer"

    catalog: Optional[str] = None
    schemas: Tuple[str, ...] = ("public",)
    denylist_types: Tuple[str, ...] = field(default_factory=tuple)
    server_version: Optional[str] = None

    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls) -> "IntrospectionSettings":
        """Create from environment variables."""
        return cls(
            database_url=os.environ.get("PGSCHEMA_DB_URL"),
            host=os.environ.get("PGSCHEMA_DB_HOST", "localhost"),
            port=os.environ.get("PGSCHEMA_DB_PORT", "5432"),
            dbname=os.environ.get("PGSCHEMA_DB_NAME", "postgres"),
            user=os.environ.get("PGSCHEMA_DB_USER", "postgres"),
            password=os.environ.get("PGSCHEMA_DB_PASSWORD", ""),
            sslmode=os.environ.get("PGSCHEMA_DB_SSLMODE", "prefer"),
            catalog=os.environ.get("PGSCHEMA_CATALOG"),
            schemas=_split_list(os.environ.get("PGSCHEMA_SCHEMAS", "public")),
            denylist_types=_split_list(os.environ.get("PGSCHEMA_DENYLIST_TYPES", "")),
            server_version=os.environ.get("PGSCHEMA_SERVER_VERSION"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            log_json=os.environ.get("LOG_FORMAT", "").lower() == "json",
        )

    @property
    def effective_catalog(self) -> str:
        """The catalog to introspect; defaults to the database name."""
        return self.catalog or self.dbname

    @property
    def capabilities(self) -> Optional[CatalogCapabilities]:
        """Capabilities from the configured server version, if any."""
        if not self.server_version:
            return None
        return CatalogCapabilities.from_version_string(self.server_version)

    def get_connection_string(self) -> str:
        """
        Get database connection string.

        Priority:
        1. PGSCHEMA_DB_URL
        2. Individual PGSCHEMA_DB_* components
        """
        if self.database_url:
            return self.database_url
        return (
            f"host={self.host} "
            f"port={self.port} "
            f"dbname={self.dbname} "
            f"user={self.user} "
            f"password={self.password} "
            f"sslmode={self.sslmode}"
        )


def _split_list(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "MINIMUM_SERVER_VERSION_NUM",
    "CatalogCapabilities",
    "IntrospectionSettings",
]
