# ============================================================================
# INTROSPECTION ERRORS
# ============================================================================
# STATUS: Core - Error taxonomy for graph builds
# PURPOSE: Typed configuration, query, parse and consistency failures
# CREATED: 19 OCT 2026
# ============================================================================
"""
Introspection Errors

A build either returns a finished SchemaGraph or raises one of the
BuildError subclasses below:

- MissingAttributeError: builder attribute absent (raised before any I/O)
- DuplicateDenylistedTypeError: same type added to the denylist twice
- CatalogQueryError: a catalog query failed; the driver error is __cause__

Two further errors propagate out of a build but are not BuildErrors:

- ExpressionParseError: stored SQL text could not be parsed
- CatalogConsistencyError: the catalog returned a value the model does not
  know how to represent (e.g. an unknown MATCH option)
"""

from typing import Any, Dict, Optional


class BuildError(Exception):
    """Base exception for schema graph build failures."""
    pass


class MissingAttributeError(BuildError):
    """Raised when a required builder attribute was never set."""

    def __init__(self, attribute: str):
        self.attribute = attribute
        super().__init__(f"Missing required builder attribute: {attribute}")


class DuplicateDenylistedTypeError(BuildError):
    """Raised when a type name is added to the denylist twice."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"Duplicate denylisted type: {type_name}")


class CatalogQueryError(BuildError):
    """Raised when a catalog query fails. The original error is chained."""

    def __init__(self, message: str, operation: str = None, entity_id: str = None):
        self.operation = operation
        self.entity_id = entity_id
        super().__init__(message)


class ExpressionParseError(Exception):
    """Raised when an SQL expression fragment cannot be parsed."""

    def __init__(self, expression: str, dialect: str, reason: str = ""):
        self.expression = expression
        self.dialect = dialect
        self.reason = reason
        message = f"Could not parse {dialect} expression {expression!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class CatalogConsistencyError(RuntimeError):
    """
    Raised when catalog content contradicts the model's assumptions.

    Not a BuildError: retrying with different configuration cannot help,
    the model itself has to change.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.context = context or {}
        super().__init__(message)


__all__ = [
    "BuildError",
    "MissingAttributeError",
    "DuplicateDenylistedTypeError",
    "CatalogQueryError",
    "ExpressionParseError",
    "CatalogConsistencyError",
]
