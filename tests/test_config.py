# ============================================================================
# CONFIGURATION TESTS
# ============================================================================
# STATUS: Tests - Capabilities, settings and connection strings
# PURPOSE: Verify version gating and environment handling
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Tests

Run with:
    pytest tests/test_config.py -v
"""

import pytest

from core.config import CatalogCapabilities, IntrospectionSettings
from repositories.database import get_connection_string, mask_conninfo

ENV_VARS = [
    "PGSCHEMA_DB_URL", "PGSCHEMA_DB_HOST", "PGSCHEMA_DB_PORT", "PGSCHEMA_DB_NAME",
    "PGSCHEMA_DB_USER", "PGSCHEMA_DB_PASSWORD", "PGSCHEMA_DB_SSLMODE",
    "PGSCHEMA_CATALOG", "PGSCHEMA_SCHEMAS", "PGSCHEMA_DENYLIST_TYPES",
    "PGSCHEMA_SERVER_VERSION", "LOG_LEVEL", "LOG_FORMAT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ============================================================================
# CAPABILITIES
# ============================================================================

class TestCatalogCapabilities:

    @pytest.mark.parametrize("version,expected", [
        ("16.2", 160002),
        ("15", 150000),
        ("9.6.24", 90624),
        ("14.10 (Debian 14.10-1.pgdg120+1)", 140010),
    ])
    def test_from_version_string(self, version, expected):
        assert CatalogCapabilities.from_version_string(version).server_version_num == expected

    def test_bad_version_string(self):
        with pytest.raises(ValueError):
            CatalogCapabilities.from_version_string("latest")

    def test_gates(self):
        old = CatalogCapabilities(server_version_num=90624)
        assert old.major_version == 9
        assert not old.has_prokind
        assert not old.has_permissive_policies
        assert not old.has_type_subscript
        assert not old.has_nulls_not_distinct

        v14 = CatalogCapabilities(server_version_num=140005)
        assert v14.major_version == 14
        assert v14.has_prokind and v14.has_permissive_policies and v14.has_type_subscript
        assert not v14.has_nulls_not_distinct

        assert CatalogCapabilities().has_nulls_not_distinct


# ============================================================================
# SETTINGS
# ============================================================================

class TestIntrospectionSettings:

    def test_defaults(self, clean_env):
        settings = IntrospectionSettings.from_env()
        assert settings.schemas == ("public",)
        assert settings.denylist_types == ()
        assert settings.effective_catalog == "postgres"
        assert settings.capabilities is None
        assert settings.log_json is False

    def test_from_env(self, clean_env):
        clean_env.setenv("PGSCHEMA_DB_NAME", "shop")
        clean_env.setenv("PGSCHEMA_SCHEMAS", "public, billing ,")
        clean_env.setenv("PGSCHEMA_DENYLIST_TYPES", "anyarray,pg_ndistinct")
        clean_env.setenv("PGSCHEMA_SERVER_VERSION", "15.4")
        clean_env.setenv("LOG_FORMAT", "JSON")

        settings = IntrospectionSettings.from_env()

        assert settings.effective_catalog == "shop"
        assert settings.schemas == ("public", "billing")
        assert settings.denylist_types == ("anyarray", "pg_ndistinct")
        assert settings.capabilities.server_version_num == 150004
        assert settings.log_json is True

    def test_catalog_overrides_database_name(self, clean_env):
        clean_env.setenv("PGSCHEMA_DB_NAME", "shop")
        clean_env.setenv("PGSCHEMA_CATALOG", "shop_replica")
        assert IntrospectionSettings.from_env().effective_catalog == "shop_replica"

    def test_connection_string_from_components(self, clean_env):
        clean_env.setenv("PGSCHEMA_DB_HOST", "db.internal")
        clean_env.setenv("PGSCHEMA_DB_PASSWORD", "s3cret")
        conninfo = get_connection_string()
        assert "host=db.internal" in conninfo
        assert "password=s3cret" in conninfo
        assert "sslmode=prefer" in conninfo

    def test_url_wins(self, clean_env):
        clean_env.setenv("PGSCHEMA_DB_URL", "postgresql://u:p@h:5432/shop")
        clean_env.setenv("PGSCHEMA_DB_HOST", "ignored")
        assert get_connection_string() == "postgresql://u:p@h:5432/shop"


class TestMaskConninfo:

    def test_url(self):
        assert mask_conninfo("postgresql://u:p@h:5432/shop") == "h:5432/shop"

    def test_key_value(self):
        masked = mask_conninfo("host=h password=s3cret sslmode=require")
        assert "s3cret" not in masked
        assert masked == "host=h password=*** sslmode=require"
