# ============================================================================
# INSPECT SCHEMA CLI TESTS
# ============================================================================
# STATUS: Tests - Command-line entry point
# PURPOSE: Verify rendering, argument handling and exit codes
# CREATED: 19 OCT 2026
# ============================================================================
"""
Inspect Schema CLI Tests

Run with:
    pytest tests/test_inspect_schema.py -v
"""

import json
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import psycopg
import pytest

from catalog_fixtures import build_shop_source
from core.config import IntrospectionSettings
from tools import inspect_schema
from tools.inspect_schema import (
    EXIT_CONFIG_ERROR,
    EXIT_OK,
    EXIT_QUERY_ERROR,
    build_parser,
    configure_builder,
    main,
    render_json,
    render_text,
)


@pytest.fixture(autouse=True)
def quiet_cli(monkeypatch):
    for name in ("PGSCHEMA_DB_URL", "PGSCHEMA_CATALOG", "PGSCHEMA_SCHEMAS",
                 "PGSCHEMA_DENYLIST_TYPES", "PGSCHEMA_SERVER_VERSION", "LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(inspect_schema, "configure_logging", lambda *args, **kwargs: None)


@pytest.fixture
def fake_connect(monkeypatch):
    connection = MagicMock()
    opened = []

    @contextmanager
    def _connect(conninfo=None):
        opened.append(conninfo)
        yield connection

    monkeypatch.setattr(inspect_schema, "connect", _connect)
    return opened


# ============================================================================
# RENDERING
# ============================================================================

class TestRendering:

    def test_render_text(self, shop_graph):
        text = render_text(shop_graph)

        assert text.startswith("Catalog: shop")
        assert "    1. public.accounts" in text
        assert "(customer_id) -> public.customers(id)" in text
        assert "(acct_no, acct_region) -> public.accounts(account_no, region)" in text
        assert text.index("public.customers") < text.index("4. public.orders")

    def test_render_json(self, shop_graph):
        data = render_json(shop_graph)

        assert data["catalog"] == "shop"
        assert data["table_dag"] == [
            "public.accounts", "public.customers", "public.invoices", "public.orders",
        ]
        orders = next(t for t in data["tables"] if t["name"] == "public.orders")
        assert orders["foreign_keys"][0]["on_delete_cascade"] is True
        assert orders["triggers"] == ["orders_audit", "orders_odd"]
        json.dumps(data)


# ============================================================================
# ARGUMENTS
# ============================================================================

class TestConfigureBuilder:

    def test_arguments_override_settings(self):
        settings = IntrospectionSettings(dbname="shop", schemas=("public",), denylist_types=("anyarray",))
        args = build_parser().parse_args(["-c", "reporting", "-s", "billing", "-d", "pg_ndistinct"])

        builder = configure_builder(args, settings)

        assert builder.catalog == "reporting"
        assert builder.schemas == ("billing",)
        assert builder.denylisted_types == ("anyarray", "pg_ndistinct")

    def test_settings_used_by_default(self):
        builder = configure_builder(build_parser().parse_args([]), IntrospectionSettings(dbname="shop"))

        assert builder.catalog == "shop"
        assert builder.schemas == ("public",)


# ============================================================================
# EXIT CODES
# ============================================================================

class TestMain:

    def test_duplicate_denylisted_type(self, fake_connect, capsys):
        assert main(["-d", "pg_ndistinct", "-d", "pg_ndistinct"]) == EXIT_CONFIG_ERROR
        assert "Duplicate denylisted type" in capsys.readouterr().err
        assert fake_connect == []

    def test_bad_server_version(self, fake_connect):
        assert main(["--server-version", "latest"]) == EXIT_CONFIG_ERROR
        assert fake_connect == []

    def test_connection_failure(self, monkeypatch, capsys):
        @contextmanager
        def failing_connect(conninfo=None):
            raise psycopg.OperationalError("could not connect to server")
            yield

        monkeypatch.setattr(inspect_schema, "connect", failing_connect)

        assert main([]) == EXIT_QUERY_ERROR
        assert "could not connect" in capsys.readouterr().err

    def test_success(self, fake_connect, capsys):
        with patch("introspection.builder.CatalogRepository", return_value=build_shop_source()):
            code = main(["-c", "shop", "-s", "public", "--server-version", "16", "--json"])

        assert code == EXIT_OK
        assert len(fake_connect) == 1
        output = json.loads(capsys.readouterr().out)
        assert output["summary"]["tables"] == 4

    def test_query_failure(self, fake_connect, capsys):
        source = build_shop_source()
        source.fail_on = "load_roles"

        with patch("introspection.builder.CatalogRepository", return_value=source):
            code = main(["-c", "shop"])

        assert code == EXIT_QUERY_ERROR
        assert "load roles failed" in capsys.readouterr().err
