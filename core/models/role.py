# ============================================================================
# ROLE MODELS
# ============================================================================
# STATUS: Core model - Roles and membership
# PURPOSE: pg_roles / pg_authid rows and resolved Role entities
# CREATED: 19 OCT 2026
# EXPORTS: RoleRow, AuthIdRow, Role
# DEPENDENCIES: pydantic
# ============================================================================
"""
Role Models

RoleRow.member_of_oids is the raw list from pg_auth_members. Role keeps only
the OIDs that resolved to a role loaded in the same build; membership is
direct, never flattened.
"""

from typing import Optional, Tuple

from pydantic import Field

from core.models.base import CatalogModel


class RoleRow(CatalogModel):
    """
    Maps to: pg_catalog.pg_roles plus an array of granted role OIDs from
    pg_auth_members.
    """
    oid: int
    rolname: str
    rolsuper: bool = False
    rolinherit: bool = True
    rolcreaterole: bool = False
    rolcreatedb: bool = False
    rolcanlogin: bool = False
    rolreplication: bool = False
    rolbypassrls: bool = False
    rolconnlimit: Optional[int] = None
    member_of_oids: Tuple[int, ...] = Field(default_factory=tuple)


class AuthIdRow(CatalogModel):
    """
    Maps to: pg_catalog.pg_authid (oid, rolname)
    """
    oid: int
    rolname: str


class Role(CatalogModel):
    """A database role."""
    oid: int
    name: str
    is_superuser: bool = False
    inherits: bool = True
    can_create_role: bool = False
    can_create_db: bool = False
    can_login: bool = False
    is_replication: bool = False
    can_bypass_rls: bool = False
    connection_limit: Optional[int] = None
    member_of_oids: Tuple[int, ...] = Field(default_factory=tuple)

    @classmethod
    def from_row(cls, row: RoleRow, member_of_oids: Tuple[int, ...]) -> "Role":
        connection_limit = row.rolconnlimit
        if connection_limit is not None and connection_limit < 0:
            connection_limit = None
        return cls(
            oid=row.oid,
            name=row.rolname,
            is_superuser=row.rolsuper,
            inherits=row.rolinherit,
            can_create_role=row.rolcreaterole,
            can_create_db=row.rolcreatedb,
            can_login=row.rolcanlogin,
            is_replication=row.rolreplication,
            can_bypass_rls=row.rolbypassrls,
            connection_limit=connection_limit,
            member_of_oids=member_of_oids,
        )


__all__ = ["RoleRow", "AuthIdRow", "Role"]
