# ============================================================================
# EXPRESSION PARSER
# ============================================================================
# STATUS: Core - SQL expression parsing
# PURPOSE: Turn stored clause text into sqlglot expression trees
# CREATED: 19 OCT 2026
# ============================================================================
"""
Expression Parser

Check constraints, policies and index keys are stored by the catalog as
SQL text. ExpressionParser parses such fragments with sqlglot and extracts
the names the resolver needs.

    parser = ExpressionParser()
    tree = parser.parse("(price > (0)::numeric)")
    column_identifiers(tree)   # ["price"]

parse() raises ExpressionParseError; try_parse() logs and returns None.
Callers choose which one matches their tolerance for bad text.
"""

import logging
from typing import List, Optional

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from core.errors import ExpressionParseError

logger = logging.getLogger(__name__)

DEFAULT_DIALECT = "postgres"

# Function nodes that are syntax rather than calls
_NOT_CALLS = (exp.Cast, exp.TryCast)


class ExpressionParser:
    """Parses SQL expression fragments in one dialect."""

    def __init__(self, dialect: str = DEFAULT_DIALECT):
        self.dialect = dialect

    def parse(self, text: Optional[str]) -> exp.Expression:
        """
        Parse an expression fragment.

        Raises:
            ExpressionParseError: If the text is empty or not valid SQL
        """
        if text is None or not text.strip():
            raise ExpressionParseError(text or "", self.dialect, "empty expression")
        try:
            expression = sqlglot.parse_one(text, read=self.dialect)
        except SqlglotError as e:
            raise ExpressionParseError(text, self.dialect, str(e)) from e
        if expression is None:
            raise ExpressionParseError(text, self.dialect, "no expression parsed")
        return expression

    def try_parse(self, text: Optional[str]) -> Optional[exp.Expression]:
        """Parse an expression fragment, returning None on failure."""
        if text is None:
            return None
        try:
            return self.parse(text)
        except ExpressionParseError as e:
            logger.warning(f"{e}; expression left unset")
            return None


def column_identifiers(expression: Optional[exp.Expression]) -> List[str]:
    """Column names referenced in an expression, first occurrence order."""
    if expression is None:
        return []
    names: List[str] = []
    for column in expression.find_all(exp.Column):
        name = column.name
        if name and name not in names:
            names.append(name)
    return names


def function_names(expression: Optional[exp.Expression]) -> List[str]:
    """
    Names of functions called in an expression, first occurrence order.

    User-defined calls keep their spelling; built-ins sqlglot recognizes
    come back lower-cased. Schema qualification is dropped.
    """
    if expression is None:
        return []
    names: List[str] = []
    for func in expression.find_all(exp.Func):
        if isinstance(func, _NOT_CALLS):
            continue
        if isinstance(func, exp.Anonymous):
            name = func.name
        else:
            name = func.sql_name().lower()
        if name and name not in names:
            names.append(name)
    return names


__all__ = [
    "DEFAULT_DIALECT",
    "ExpressionParser",
    "column_identifiers",
    "function_names",
]
