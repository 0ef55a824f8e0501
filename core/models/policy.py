# ============================================================================
# ROW-LEVEL-SECURITY POLICY MODELS
# ============================================================================
# STATUS: Core model - RLS policies
# PURPOSE: pg_policy rows and resolved Policy entities
# CREATED: 19 OCT 2026
# EXPORTS: PolicyRow, PolicyRole, Policy
# DEPENDENCIES: pydantic, sqlglot
# ============================================================================
"""
Policy Models

USING and WITH CHECK clauses are kept as text and, where they parse, as
expression trees. An unparseable clause leaves its expression as None; the
policy itself is still part of the graph.
"""

from typing import Optional, Tuple

from pydantic import Field
from sqlglot import exp

from core.contracts import PolicyCommand
from core.models.base import CatalogModel, TableId
from core.models.function import Function

PUBLIC_ROLE_OID = 0


class PolicyRow(CatalogModel):
    """
    Maps to: pg_catalog.pg_policy, with pg_get_expr() applied to polqual
    and polwithcheck.

    `polpermissive` exists from PostgreSQL 10.
    """
    oid: int
    polname: str
    polrelid: int
    polcmd: str
    polpermissive: Optional[bool] = None
    polroles: Tuple[int, ...] = Field(default_factory=tuple)
    using_clause: Optional[str] = None
    check_clause: Optional[str] = None


class PolicyRole(CatalogModel):
    """A role a policy applies to. OID 0 is the PUBLIC pseudo-role."""
    oid: int
    name: str

    @property
    def is_public(self) -> bool:
        return self.oid == PUBLIC_ROLE_OID


class Policy(CatalogModel):
    """A row-level-security policy attached to a table."""
    oid: int
    name: str
    table_id: TableId
    command: PolicyCommand
    permissive: Optional[bool] = None
    roles: Tuple[PolicyRole, ...] = Field(default_factory=tuple)
    using_clause: Optional[str] = None
    check_clause: Optional[str] = None
    using_expression: Optional[exp.Expression] = None
    check_expression: Optional[exp.Expression] = None
    using_functions: Tuple[Function, ...] = Field(default_factory=tuple)
    check_functions: Tuple[Function, ...] = Field(default_factory=tuple)

    @property
    def role_oids(self) -> Tuple[int, ...]:
        return tuple(role.oid for role in self.roles)


__all__ = ["PUBLIC_ROLE_OID", "PolicyRow", "PolicyRole", "Policy"]
