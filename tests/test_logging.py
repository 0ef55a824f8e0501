# ============================================================================
# STRUCTURED LOGGING TESTS
# ============================================================================
# STATUS: Tests - Log context and formatters
# PURPOSE: Verify context nesting and JSON / human output
# CREATED: 19 OCT 2026
# ============================================================================
"""
Structured Logging Tests

Run with:
    pytest tests/test_logging.py -v
"""

import json
import logging

from core.logging import (
    ComponentType,
    HumanFormatter,
    StructuredFormatter,
    get_current_context,
    get_logger,
    log_checkpoint,
    log_context,
)


def make_record(message="Loading columns", extra=None):
    record = logging.LogRecord(
        name="introspection.loader", level=logging.INFO, pathname=__file__,
        lineno=10, msg=message, args=(), exc_info=None,
    )
    if extra is not None:
        record.extra = extra
    return record


class TestLogContext:

    def test_nesting_merges_and_restores(self):
        assert get_current_context().catalog is None

        with log_context(catalog="shop"):
            with log_context(table="public.orders", extra={"step": 4}):
                context = get_current_context()
                assert context.catalog == "shop"
                assert context.table == "public.orders"
                assert context.to_dict() == {
                    "catalog": "shop", "table": "public.orders", "step": 4,
                }
            assert get_current_context().table is None

        assert get_current_context().catalog is None

    def test_child_overrides_field(self):
        with log_context(catalog="shop", operation="build"):
            with log_context(operation="load columns") as child:
                assert child.to_dict() == {"catalog": "shop", "operation": "load columns"}
            assert get_current_context().operation == "build"


class TestFormatters:

    def test_structured_formatter(self):
        with log_context(catalog="shop", schema="public"):
            output = StructuredFormatter().format(make_record(extra={"count": 3}))

        data = json.loads(output)
        assert data["level"] == "INFO"
        assert data["message"] == "Loading columns"
        assert data["context"] == {"catalog": "shop", "schema": "public"}
        assert data["data"] == {"count": 3}
        assert data["timestamp"].endswith("Z")

    def test_human_formatter_prefers_table_over_schema(self):
        with log_context(catalog="shop", schema="public", table="public.orders"):
            output = HumanFormatter().format(make_record())

        assert "[catalog=shop, table=public.orders]" in output
        assert "schema=" not in output
        assert output.endswith("introspection.loader [catalog=shop, table=public.orders]: Loading columns")


class TestContextLogger:

    def test_adds_context_and_component(self, caplog):
        logger = get_logger("introspection.resolver", ComponentType.RESOLVER)

        with caplog.at_level(logging.INFO, logger="introspection.resolver"):
            with log_context(catalog="shop"):
                logger.info("Resolved", extra={"foreign_keys": 2})

        record = caplog.records[-1]
        assert record.extra == {"foreign_keys": 2, "catalog": "shop", "component": "resolver"}

    def test_checkpoint(self, caplog):
        with caplog.at_level(logging.INFO, logger="checkpoint"):
            with log_context(catalog="shop"):
                log_checkpoint("graph_built", {"tables": 4})

        record = caplog.records[-1]
        assert record.getMessage() == "CHECKPOINT: graph_built"
        assert record.extra["checkpoint"] == "graph_built"
        assert record.extra["catalog"] == "shop"
        assert record.extra["data"] == {"tables": 4}
