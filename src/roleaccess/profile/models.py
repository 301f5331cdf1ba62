"""Data models for a role access profile.

These are Pydantic models built once per report run and discarded after
rendering.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from .constants import GLOBAL_PACKAGE


class PackageRef(BaseModel):
    """Package a role or table belongs to. ``sys_id=None`` is the global package."""

    model_config = {"frozen": True}

    name: str = GLOBAL_PACKAGE
    sys_id: Optional[str] = None

    @property
    def is_global(self) -> bool:
        return self.sys_id is None


GLOBAL = PackageRef()


class AccessRule(BaseModel):
    """One ACL attached to a role.

    Raw ``table``/``operation``/``type`` values are the grouping and sort
    keys; the ``*_display`` variants are what reports show.
    """

    model_config = {"frozen": True}

    table: str = ""
    table_display: str = ""
    operation: str = ""
    operation_display: str = ""
    type: str = ""
    type_display: str = ""
    description: Optional[str] = None
    table_package: PackageRef = Field(default_factory=PackageRef)


class Role(BaseModel):
    """A role in the closure, with the ACLs attached directly to it."""

    model_config = {"frozen": True}

    name: str
    sys_id: str
    description: Optional[str] = None
    is_direct: bool = False
    package: PackageRef = Field(default_factory=PackageRef)
    rules: list[AccessRule] = Field(default_factory=list)


class Application(BaseModel):
    """A table referenced by at least one rule in the closure.

    ``roles`` holds each owning role name once, in first-seen order.
    """

    name: str
    display_name: str
    roles: list[str] = Field(default_factory=list)

    def add_role(self, role_name: str) -> None:
        if role_name not in self.roles:
            self.roles.append(role_name)


class RoleProfile(BaseModel):
    """Aggregate result of crawling one role.

    Either ``error`` is set (root role not found) or ``role`` is set and
    ``all_roles`` starts with it.
    """

    role: Optional[Role] = None
    all_roles: list[Role] = Field(default_factory=list)
    applications: list[Application] = Field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def not_found(cls, role_name: str) -> "RoleProfile":
        return cls(error=f"Role not found: {role_name}")

    @property
    def direct_roles(self) -> list[Role]:
        return [r for r in self.all_roles if r.is_direct]

    @property
    def inherited_roles(self) -> list[Role]:
        return [r for r in self.all_roles if not r.is_direct]

    @property
    def rule_count(self) -> int:
        return sum(len(r.rules) for r in self.all_roles)


__all__ = [
    "AccessRule",
    "Application",
    "GLOBAL",
    "PackageRef",
    "Role",
    "RoleProfile",
]
