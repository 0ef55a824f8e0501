# ============================================================================
# CATALOG CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Enums decoded from raw catalog strings
# PURPOSE: Typed values for match kinds, trigger and policy attributes
# CREATED: 19 OCT 2026
# EXPORTS: MatchKind, TriggerEvent, TriggerTiming, TriggerOrientation,
#          PolicyCommand, PrivilegeAction, FunctionKind
# DEPENDENCIES: enum
# ============================================================================
"""
Catalog contracts.

The catalog stores most attributes as free-form strings or single-letter
codes. These enums are the typed form the graph exposes. Decoding follows
two policies:

- Lenient (trigger event/timing/orientation): unknown strings yield None.
- Strict (match option, policy command): unknown strings mean the catalog
  does not look the way the model expects, and raise
  CatalogConsistencyError.
"""

import logging
from enum import Enum
from typing import Optional

from core.errors import CatalogConsistencyError

logger = logging.getLogger(__name__)


# ============================================================================
# REFERENTIAL CONSTRAINTS
# ============================================================================

class MatchKind(str, Enum):
    """MATCH option of a foreign key."""
    FULL = "FULL"
    PARTIAL = "PARTIAL"
    SIMPLE = "SIMPLE"

    @classmethod
    def from_match_option(cls, match_option: str, constraint: str = None) -> "MatchKind":
        """
        Decode information_schema.referential_constraints.match_option.

        "NONE" is how PostgreSQL reports the default MATCH SIMPLE.

        Raises:
            CatalogConsistencyError: For any other value
        """
        normalized = (match_option or "").upper()
        if normalized == "FULL":
            return cls.FULL
        if normalized == "PARTIAL":
            return cls.PARTIAL
        if normalized in ("SIMPLE", "NONE"):
            return cls.SIMPLE

        context = {"match_option": match_option, "constraint": constraint}
        logger.critical(f"Unexpected match option {match_option!r} on constraint {constraint}: {context}")
        raise CatalogConsistencyError(f"Unexpected match option: {match_option}", context=context)


# ============================================================================
# TRIGGERS
# ============================================================================

class TriggerEvent(str, Enum):
    """Event that fires a trigger."""
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    TRUNCATE = "TRUNCATE"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["TriggerEvent"]:
        """Decode event_manipulation; unknown values give None."""
        try:
            return cls(raw)
        except ValueError:
            return None


class TriggerTiming(str, Enum):
    """When a trigger fires relative to its event."""
    BEFORE = "BEFORE"
    AFTER = "AFTER"
    INSTEAD_OF = "INSTEAD OF"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["TriggerTiming"]:
        """Decode action_timing; unknown values give None."""
        try:
            return cls(raw)
        except ValueError:
            return None


class TriggerOrientation(str, Enum):
    """FOR EACH ROW or FOR EACH STATEMENT."""
    ROW = "ROW"
    STATEMENT = "STATEMENT"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["TriggerOrientation"]:
        """Decode action_orientation; unknown values give None."""
        try:
            return cls(raw)
        except ValueError:
            return None


# ============================================================================
# POLICIES & PRIVILEGES
# ============================================================================

class PolicyCommand(str, Enum):
    """
    Command a row-level-security policy applies to.

    Values are the pg_policy.polcmd codes.
    """
    SELECT = "r"
    INSERT = "a"
    UPDATE = "w"
    DELETE = "d"
    ALL = "*"

    @classmethod
    def from_polcmd(cls, polcmd: str, policy: str = None) -> "PolicyCommand":
        """
        Decode pg_policy.polcmd.

        Raises:
            CatalogConsistencyError: For an unknown command code
        """
        try:
            return cls(polcmd)
        except ValueError:
            context = {"polcmd": polcmd, "policy": policy}
            logger.critical(f"Unknown policy command {polcmd!r}: {context}")
            raise CatalogConsistencyError(f"Unknown policy command: {polcmd}", context=context) from None


class PrivilegeAction(str, Enum):
    """Privilege named by a table or column grant."""
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    TRUNCATE = "TRUNCATE"
    REFERENCES = "REFERENCES"
    TRIGGER = "TRIGGER"
    USAGE = "USAGE"

    @classmethod
    def from_privilege_type(cls, privilege_type: str) -> "PrivilegeAction":
        """Decode privilege_type; anything unrecognized is treated as USAGE."""
        try:
            return cls((privilege_type or "").upper())
        except ValueError:
            return cls.USAGE


# ============================================================================
# FUNCTIONS
# ============================================================================

class FunctionKind(str, Enum):
    """pg_proc.prokind codes."""
    FUNCTION = "f"
    PROCEDURE = "p"
    AGGREGATE = "a"
    WINDOW = "w"


__all__ = [
    "MatchKind",
    "TriggerEvent",
    "TriggerTiming",
    "TriggerOrientation",
    "PolicyCommand",
    "PrivilegeAction",
    "FunctionKind",
]
