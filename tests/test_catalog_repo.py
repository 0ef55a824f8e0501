# ============================================================================
# CATALOG REPOSITORY TESTS
# ============================================================================
# STATUS: Tests - PostgreSQL catalog queries against a mocked session
# PURPOSE: Verify version detection, capability gating, row mapping and
#          error wrapping without a live database
# CREATED: 19 OCT 2026
# ============================================================================
"""
Catalog Repository Tests

Run with:
    pytest tests/test_catalog_repo.py -v
"""

from unittest.mock import MagicMock

import psycopg
import pytest

from core.config import CatalogCapabilities
from core.errors import CatalogQueryError
from core.models import CheckConstraintRow, Table
from repositories.catalog_repo import CatalogRepository


def mock_connection(fetchall=None, fetchone=None):
    """Connection whose cursor context manager yields one shared cursor."""
    cursor = MagicMock()
    cursor.fetchall.return_value = fetchall or []
    cursor.fetchone.return_value = fetchone
    connection = MagicMock()
    connection.cursor.return_value.__enter__.return_value = cursor
    return connection, cursor


def executed_query(cursor):
    return repr(cursor.execute.call_args[0][0])


ORDERS = Table(table_catalog="shop", table_schema="public", table_name="orders", oid=16400)

V16 = CatalogCapabilities(server_version_num=160002)
V96 = CatalogCapabilities(server_version_num=90624)


# ============================================================================
# VERSION DETECTION
# ============================================================================

class TestCapabilities:

    def test_detects_server_version(self):
        connection, cursor = mock_connection(fetchone={"server_version_num": "150004"})

        repo = CatalogRepository(connection)

        assert repo.capabilities.server_version_num == 150004
        cursor.execute.assert_called_once_with("SHOW server_version_num", None)

    def test_given_capabilities_skip_detection(self):
        connection, cursor = mock_connection()

        repo = CatalogRepository(connection, V16)

        assert repo.capabilities is V16
        cursor.execute.assert_not_called()

    def test_detection_failure(self):
        connection, cursor = mock_connection()
        cursor.execute.side_effect = psycopg.OperationalError("server closed the connection")

        with pytest.raises(CatalogQueryError) as exc_info:
            CatalogRepository(connection)

        assert exc_info.value.operation == "detect server version"
        assert isinstance(exc_info.value.__cause__, psycopg.OperationalError)

    @pytest.mark.parametrize("capabilities,expect_null", [(V16, False), (V96, True)])
    def test_policy_permissive_gated(self, capabilities, expect_null):
        connection, cursor = mock_connection()

        CatalogRepository(connection, capabilities).load_policies(ORDERS)

        query = executed_query(cursor)
        assert ("NULL::boolean" in query) is expect_null
        assert ("p.polpermissive" in query) is not expect_null

    @pytest.mark.parametrize("capabilities,expect_null", [(V16, False), (V96, True)])
    def test_nulls_not_distinct_gated(self, capabilities, expect_null):
        connection, cursor = mock_connection()

        CatalogRepository(connection, capabilities).load_unique_indexes(ORDERS)

        assert ("i.indnullsnotdistinct" in executed_query(cursor)) is not expect_null

    def test_prokind_fallback(self):
        connection, cursor = mock_connection()

        CatalogRepository(connection, V96).load_functions()

        query = executed_query(cursor)
        assert "p.proisagg" in query
        assert "p.prokind" not in query


# ============================================================================
# ROW MAPPING
# ============================================================================

class TestRowMapping:

    def test_tables(self):
        connection, cursor = mock_connection(fetchall=[{
            "table_catalog": "shop", "table_schema": "public", "table_name": "orders",
            "table_type": "BASE TABLE", "is_insertable_into": "YES", "oid": 16400,
            "row_security": True, "force_row_security": False, "description": None,
        }])

        (table,) = CatalogRepository(connection, V16).load_tables("shop", "public")

        assert table.id == ORDERS.id
        assert table.row_security is True
        assert cursor.execute.call_args[0][1] == {"catalog": "shop", "schema": "public"}

    def test_foreign_key_row_is_split(self):
        connection, _ = mock_connection(fetchall=[{
            "constraint_catalog": "shop", "constraint_schema": "public",
            "constraint_name": "orders_customer_id_fkey",
            "table_catalog": "shop", "table_schema": "public", "table_name": "orders",
            "column_name": "customer_id", "ordinal_position": 1,
            "position_in_unique_constraint": 1,
            "unique_constraint_catalog": "shop", "unique_constraint_schema": "public",
            "unique_constraint_name": "customers_pkey", "match_option": "NONE",
            "update_rule": "NO ACTION", "delete_rule": "CASCADE",
        }])

        (row,) = CatalogRepository(connection, V16).load_foreign_keys(ORDERS)

        assert row.key_column.column_name == "customer_id"
        assert row.key_column.table_id == ORDERS.id
        assert row.referential_constraint.unique_constraint_name == "customers_pkey"
        assert row.constraint_key == ("shop", "public", "orders_customer_id_fkey")

    def test_foreign_keys_joined_through_host_table_constraints(self):
        connection, cursor = mock_connection()

        CatalogRepository(connection, V16).load_foreign_keys(ORDERS)

        query = executed_query(cursor)
        assert "c.conrelid = hc.oid" in query
        assert "uc.conrelid = c.confrelid" in query
        assert "referential_constraints" not in query

    def test_roles_keep_membership_array(self):
        connection, _ = mock_connection(fetchall=[
            {"oid": 10, "rolname": "app_user", "rolsuper": False, "rolinherit": True,
             "rolcreaterole": False, "rolcreatedb": False, "rolcanlogin": True,
             "rolreplication": False, "rolbypassrls": False, "rolconnlimit": -1,
             "member_of_oids": [20, 30]},
        ])

        (role,) = CatalogRepository(connection, V16).load_roles()

        assert role.member_of_oids == (20, 30)

    def test_check_constraint_functions_by_constraint(self):
        connection, cursor = mock_connection()
        check = CheckConstraintRow(
            constraint_catalog="shop", constraint_schema="public",
            constraint_name="customers_email_check", check_clause="is_valid_email(email)",
        )

        assert CatalogRepository(connection, V16).load_check_constraint_functions(check) == []
        assert cursor.execute.call_args[0][1] == {
            "schema": "public", "name": "customers_email_check",
        }

    def test_authids_skip_query_for_no_oids(self):
        connection, cursor = mock_connection()

        assert CatalogRepository(connection, V16).load_authids([]) == []
        cursor.execute.assert_not_called()


# ============================================================================
# ERRORS
# ============================================================================

class TestErrors:

    def test_unknown_type(self):
        connection, _ = mock_connection(fetchone=None)

        with pytest.raises(CatalogQueryError) as exc_info:
            CatalogRepository(connection, V16).load_type(4242)

        assert exc_info.value.entity_id == "4242"
        assert isinstance(exc_info.value.__cause__, LookupError)

    def test_driver_error_is_wrapped(self):
        connection, cursor = mock_connection()
        cursor.execute.side_effect = psycopg.errors.InsufficientPrivilege("permission denied")

        with pytest.raises(CatalogQueryError) as exc_info:
            CatalogRepository(connection, V16).load_columns(ORDERS)

        assert exc_info.value.operation == "load columns"
        assert exc_info.value.entity_id == "public.orders"
        assert isinstance(exc_info.value.__cause__, psycopg.Error)

    def test_connection_is_never_closed(self):
        connection, _ = mock_connection()

        CatalogRepository(connection, V16).load_triggers(ORDERS)

        connection.close.assert_not_called()
        connection.commit.assert_not_called()
        connection.rollback.assert_not_called()
