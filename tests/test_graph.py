# ============================================================================
# SCHEMA GRAPH TESTS
# ============================================================================
# STATUS: Tests - Built graph lookups
# PURPOSE: Verify identity lookups, per-table views and cross-references
# CREATED: 19 OCT 2026
# ============================================================================
"""
Schema Graph Tests

Run with:
    pytest tests/test_graph.py -v
"""

from catalog_fixtures import APP_BASE, APP_ROOT, APP_USER, CATALOG, REPORTING, build_shop_source
from core.contracts import PrivilegeAction
from core.models import ColumnId, TableId
from introspection import SchemaGraphBuilder


class TestTables:

    def test_schema_name_order(self, shop_graph):
        assert [t.table_name for t in shop_graph.tables()] == [
            "accounts", "customers", "invoices", "orders",
        ]
        assert [s.schema_name for s in shop_graph.schemas()] == ["public"]

    def test_dag(self, shop_graph):
        order = [t.table_name for t in shop_graph.table_dag()]

        assert order == ["accounts", "customers", "invoices", "orders"]
        for fk in shop_graph.foreign_keys():
            assert order.index(fk.referenced_table.table_name) < order.index(fk.host_table.table_name)

    def test_lookups(self, shop_graph):
        orders = shop_graph.table(TableId("shop", "public", "orders"))

        assert orders is shop_graph.table_by_name("public", "orders")
        assert shop_graph.table_by_name("public", "missing") is None
        assert [c.column_name for c in shop_graph.columns(orders)] == ["id", "customer_id", "tenant"]

        column = shop_graph.column(ColumnId(orders.id, 2, "customer_id"))
        assert column.table_id == orders.id


class TestConstraints:

    def test_foreign_keys(self, shop_graph):
        customers = shop_graph.table_by_name("public", "customers")
        orders = shop_graph.table_by_name("public", "orders")

        (fk,) = shop_graph.foreign_keys(orders)
        assert fk is shop_graph.foreign_key(orders, "orders_customer_id_fkey")
        assert shop_graph.referencing_foreign_keys(customers) == (fk,)
        assert shop_graph.foreign_keys(customers) == ()
        assert shop_graph.foreign_key(customers, "orders_customer_id_fkey") is None

    def test_same_constraint_name_on_two_tables(self):
        source = build_shop_source()
        orders = next(t for t in source.tables if t.table_name == "orders")
        invoices = next(t for t in source.tables if t.table_name == "invoices")
        source.foreign_keys[orders.id].clear()
        source.add_foreign_key(orders, "fk_customer", ["customer_id"], "customers_pkey")
        source.add_foreign_key(invoices, "fk_customer", ["id"], "customers_pkey")

        graph = SchemaGraphBuilder().with_source(source).with_catalog(CATALOG).add_schema("public").build()

        assert graph.foreign_key(orders, "fk_customer").host_table_id == orders.id
        assert graph.foreign_key(invoices, "fk_customer").host_table_id == invoices.id
        assert {fk.host_table.table_name for fk in graph.foreign_keys_named("public", "fk_customer")} == {
            "invoices", "orders",
        }
        assert len(graph.foreign_keys()) == 3

    def test_checks_and_indexes(self, shop_graph):
        customers = shop_graph.table_by_name("public", "customers")

        assert len(shop_graph.check_constraints(customers)) == 2
        assert shop_graph.primary_key(customers).name == "customers_pkey"
        assert shop_graph.primary_key(shop_graph.table_by_name("public", "orders")) is None


class TestFunctionsAndTriggers:

    def test_functions(self, shop_graph):
        assert [f.name for f in shop_graph.functions()] == ["current_tenant", "is_valid_email"]
        assert shop_graph.function(1001).name == "is_valid_email"
        assert shop_graph.function(1002) is None
        assert len(shop_graph.functions_named("is_valid_email")) == 1

    def test_trigger_function_outside_function_set(self, shop_graph):
        orders = shop_graph.table_by_name("public", "orders")
        audit = next(t for t in shop_graph.triggers(orders) if t.name == "orders_audit")

        assert audit.function_oid == 1003
        assert shop_graph.trigger_function(audit) is None


class TestRolesAndPolicies:

    def test_member_of_is_direct(self, shop_graph):
        app_user = shop_graph.role(APP_USER)

        assert [r.oid for r in shop_graph.member_of(app_user)] == [APP_BASE]
        assert [r.oid for r in shop_graph.member_of(shop_graph.role(APP_BASE))] == [APP_ROOT]
        assert shop_graph.member_of(shop_graph.role(REPORTING)) == ()

    def test_role_policies(self, shop_graph):
        app_user = shop_graph.role_by_name("app_user")
        reporting = shop_graph.role_by_name("reporting")

        assert [p.name for p in shop_graph.role_policies(app_user)] == ["orders_tenant_isolation"]
        assert [p.name for p in shop_graph.role_policies(reporting)] == ["orders_broken"]
        assert shop_graph.role_policies(shop_graph.role(APP_ROOT)) == ()

    def test_role_policies_are_indexed(self, shop_graph):
        app_user = shop_graph.role_by_name("app_user")

        assert shop_graph.role_policies(app_user) is shop_graph.role_policies(app_user)


class TestGrants:

    def test_table_grants(self, shop_graph):
        orders = shop_graph.table_by_name("public", "orders")

        (grant,) = shop_graph.table_grants(orders)
        assert grant.privilege is PrivilegeAction.USAGE
        assert len(shop_graph.table_grants()) == 2

    def test_column_grants(self, shop_graph):
        customers = shop_graph.table_by_name("public", "customers")
        email = next(c for c in shop_graph.columns(customers) if c.column_name == "email")

        (grant,) = shop_graph.column_grants(email)
        assert grant.privilege is PrivilegeAction.UPDATE


class TestSummary:

    def test_counts(self, shop_graph):
        assert shop_graph.summary() == {
            "schemas": 1,
            "tables": 4,
            "columns": 12,
            "foreign_keys": 2,
            "check_constraints": 2,
            "unique_indexes": 2,
            "triggers": 2,
            "policies": 2,
            "functions": 2,
            "roles": 4,
            "table_grants": 2,
            "column_grants": 1,
        }

    def test_repr(self, shop_graph):
        assert repr(shop_graph) == "SchemaGraph(catalog='shop', tables=4)"
