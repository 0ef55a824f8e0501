# ============================================================================
# SHARED TEST FIXTURES
# ============================================================================
# STATUS: Tests - pytest fixtures
# PURPOSE: Shop catalog source and built graph for the test modules
# CREATED: 19 OCT 2026
# ============================================================================

import pytest

from catalog_fixtures import CATALOG, build_shop_source
from introspection import SchemaGraphBuilder


@pytest.fixture
def shop_source():
    """Fresh in-memory shop catalog."""
    return build_shop_source()


@pytest.fixture
def shop_builder(shop_source):
    """Builder configured for the shop catalog, pg_ndistinct denylisted."""
    return (
        SchemaGraphBuilder()
        .with_source(shop_source)
        .with_catalog(CATALOG)
        .add_schema("public")
        .add_denylisted_type("pg_ndistinct")
    )


@pytest.fixture
def shop_graph(shop_builder):
    """Built shop graph."""
    return shop_builder.build()
