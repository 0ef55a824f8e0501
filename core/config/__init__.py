# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Provides capability tags and environment settings for schema introspection.
"""

from core.config.defaults import (
    MINIMUM_SERVER_VERSION_NUM,
    CatalogCapabilities,
    IntrospectionSettings,
)

__all__ = [
    "MINIMUM_SERVER_VERSION_NUM",
    "CatalogCapabilities",
    "IntrospectionSettings",
]
