# ============================================================================
# SCHEMA GRAPH BUILDER TESTS
# ============================================================================
# STATUS: Tests - Builder configuration and end-to-end builds
# PURPOSE: Verify validation order, denylist handling, load order and
#          failure propagation
# CREATED: 19 OCT 2026
# ============================================================================
"""
Schema Graph Builder Tests

Covers:
1. Validation: connection, catalog, schemas (first missing wins, no I/O)
2. Denylist: duplicates rejected, denylisted columns omitted
3. Load order and determinism
4. Query failures surface as CatalogQueryError with the cause chained

Run with:
    pytest tests/test_builder.py -v
"""

from unittest.mock import MagicMock, patch

import pytest

from catalog_fixtures import CATALOG, build_shop_source
from core.config import CatalogCapabilities
from core.errors import (
    BuildError,
    CatalogQueryError,
    DuplicateDenylistedTypeError,
    MissingAttributeError,
)
from introspection import SchemaGraphBuilder


# ============================================================================
# VALIDATION
# ============================================================================

class TestValidation:

    @pytest.mark.parametrize("configure,missing", [
        (lambda b: b, "connection"),
        (lambda b: b.with_catalog(CATALOG).add_schema("public"), "connection"),
        (lambda b: b.with_source(build_shop_source()).add_schema("public"), "catalog"),
        (lambda b: b.with_source(build_shop_source()).with_catalog(CATALOG), "schemas"),
    ])
    def test_first_missing_attribute(self, configure, missing):
        builder = configure(SchemaGraphBuilder())

        with pytest.raises(MissingAttributeError) as exc_info:
            builder.build()

        assert exc_info.value.attribute == missing
        assert isinstance(exc_info.value, BuildError)

    def test_validation_happens_before_io(self):
        source = build_shop_source()

        with pytest.raises(MissingAttributeError):
            SchemaGraphBuilder().with_source(source).with_catalog(CATALOG).build()

        assert source.calls == []

    def test_connection_without_catalog_never_queries(self):
        connection = MagicMock()

        with pytest.raises(MissingAttributeError):
            SchemaGraphBuilder().with_connection(connection).add_schema("public").build()

        connection.cursor.assert_not_called()
        connection.execute.assert_not_called()


# ============================================================================
# CONFIGURATION
# ============================================================================

class TestConfiguration:

    def test_duplicate_denylisted_type(self):
        builder = SchemaGraphBuilder().add_denylisted_type("pg_ndistinct")

        with pytest.raises(DuplicateDenylistedTypeError) as exc_info:
            builder.add_denylisted_type("pg_ndistinct")

        assert exc_info.value.type_name == "pg_ndistinct"
        assert builder.denylisted_types == ("pg_ndistinct",)

    def test_add_schema_keeps_repeats(self):
        builder = SchemaGraphBuilder().add_schema("public").add_schema("public")
        assert builder.schemas == ("public", "public")

    def test_add_schemas_skips_present(self):
        builder = SchemaGraphBuilder().add_schema("public").add_schemas(["billing", "public", "billing"])
        assert builder.schemas == ("public", "billing")

    def test_connection_builds_catalog_repository(self, shop_source):
        connection = MagicMock()
        capabilities = CatalogCapabilities(server_version_num=150000)

        with patch("introspection.builder.CatalogRepository", return_value=shop_source) as repo:
            graph = (
                SchemaGraphBuilder()
                .with_connection(connection)
                .with_catalog(CATALOG)
                .add_schema("public")
                .with_capabilities(capabilities)
                .build()
            )

        repo.assert_called_once_with(connection, capabilities)
        assert graph.capabilities is capabilities


# ============================================================================
# BUILDS
# ============================================================================

class TestBuild:

    def test_denylisted_columns_omitted(self, shop_graph):
        customers = shop_graph.table_by_name("public", "customers")
        assert [c.column_name for c in shop_graph.columns(customers)] == ["id", "email", "tenant"]

    def test_without_denylist_columns_kept(self, shop_source):
        graph = (
            SchemaGraphBuilder().with_source(shop_source).with_catalog(CATALOG).add_schema("public").build()
        )
        customers = graph.table_by_name("public", "customers")
        assert "stats" in [c.column_name for c in graph.columns(customers)]

    def test_repeated_schema_loads_tables_once(self, shop_source):
        graph = (
            SchemaGraphBuilder()
            .with_source(shop_source)
            .with_catalog(CATALOG)
            .add_schema("public")
            .add_schema("public")
            .build()
        )
        assert len(graph.tables()) == 4
        assert shop_source.calls.count("load_tables") == 1

    def test_load_order(self, shop_builder, shop_source):
        shop_builder.build()
        calls = shop_source.calls

        assert calls.index("load_functions") < calls.index("load_roles")
        assert calls.index("load_roles") < calls.index("load_schemas")
        assert calls.index("load_schemas") < calls.index("load_tables")
        assert calls.index("load_tables") < calls.index("load_columns")
        assert calls.index("load_policies") < calls.index("load_table_grants")
        assert calls[-1] == "load_column_grants"

    def test_deterministic(self, shop_builder):
        first = shop_builder.build()
        second = shop_builder.build()

        assert [t.id for t in first.tables()] == [t.id for t in second.tables()]
        assert [t.id for t in first.table_dag()] == [t.id for t in second.table_dag()]
        assert first.summary() == second.summary()
        assert [f.oid for f in first.functions()] == [f.oid for f in second.functions()]

    @pytest.mark.parametrize("operation", [
        "load_functions", "load_type", "load_roles", "load_tables",
        "load_columns", "load_foreign_keys", "load_policies", "load_column_grants",
    ])
    def test_query_failure(self, shop_builder, shop_source, operation):
        shop_source.fail_on = operation

        with pytest.raises(CatalogQueryError) as exc_info:
            shop_builder.build()

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "connection lost" in str(exc_info.value)
