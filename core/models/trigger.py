# ============================================================================
# TRIGGER MODELS
# ============================================================================
# STATUS: Core model - Table triggers
# PURPOSE: information_schema / pg_trigger rows and resolved Trigger entity
# CREATED: 19 OCT 2026
# EXPORTS: TriggerRow, PgTriggerRow, Trigger
# DEPENDENCIES: pydantic
# ============================================================================
"""
Trigger Models

information_schema.triggers has the readable attributes but not the OID of
the function the trigger calls; pg_trigger has the OID. The resolver joins
them by (table, trigger name).
"""

import re
from typing import Optional, Tuple

from pydantic import Field

from core.contracts import TriggerEvent, TriggerOrientation, TriggerTiming
from core.models.base import CatalogModel, TableId

_EXECUTE_PATTERN = re.compile(r"EXECUTE\s+(?:FUNCTION|PROCEDURE)\s+([^(]+)\(", re.IGNORECASE)


class TriggerRow(CatalogModel):
    """
    One (trigger, event) row.

    Maps to: information_schema.triggers
    """
    trigger_catalog: Optional[str] = None
    trigger_schema: Optional[str] = None
    trigger_name: str
    event_manipulation: Optional[str] = None
    event_object_catalog: str
    event_object_schema: str
    event_object_table: str
    action_order: Optional[int] = None
    action_condition: Optional[str] = None
    action_statement: Optional[str] = None
    action_orientation: Optional[str] = None
    action_timing: Optional[str] = None

    @property
    def table_id(self) -> TableId:
        return TableId(self.event_object_catalog, self.event_object_schema, self.event_object_table)


class PgTriggerRow(CatalogModel):
    """
    Maps to: pg_catalog.pg_trigger (subset)
    """
    oid: int
    tgrelid: int
    tgname: str
    tgfoid: int
    tgenabled: Optional[str] = None


class Trigger(CatalogModel):
    """A trigger with events and attributes decoded."""
    name: str
    table_id: TableId
    events: Tuple[TriggerEvent, ...] = Field(default_factory=tuple)
    timing: Optional[TriggerTiming] = None
    orientation: Optional[TriggerOrientation] = None
    function_oid: Optional[int] = None
    action_statement: Optional[str] = None
    action_condition: Optional[str] = None

    def function_name(self) -> Optional[str]:
        """
        Name of the called function, parsed from the action statement.

        "EXECUTE FUNCTION audit.log_change()" gives "log_change".
        """
        if not self.action_statement:
            return None
        match = _EXECUTE_PATTERN.search(self.action_statement)
        if not match:
            return None
        return match.group(1).strip().rsplit(".", 1)[-1]


__all__ = ["TriggerRow", "PgTriggerRow", "Trigger"]
