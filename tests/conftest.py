"""Shared fixtures: an in-memory instance with helpers to seed roles and ACLs."""

from __future__ import annotations

import hashlib
from typing import Optional

import pytest

from roleaccess import InMemoryStore


def sid(label: str) -> str:
    """Deterministic 32-character sys_id for a label."""
    return hashlib.md5(label.encode("utf-8")).hexdigest()


class Instance:
    """Seeds an InMemoryStore with roles, containment, packages and ACLs."""

    def __init__(self) -> None:
        self.store = InMemoryStore(current_user="admin")
        self.store.add("sys_user", sys_id=sid("user:admin"), user_name="admin")

    def package(self, name: str) -> str:
        package_id = sid(f"package:{name}")
        if self.store.get("sys_package", package_id) is None:
            self.store.add("sys_package", sys_id=package_id, name=name)
        return package_id

    def role(self, name: str, description: Optional[str] = None, package: Optional[str] = None) -> str:
        role_id = sid(f"role:{name}")
        self.store.add(
            "sys_user_role",
            sys_id=role_id,
            name=name,
            description=description or "",
            sys_package=self.package(package) if package else "",
        )
        return role_id

    def contains(self, parent: str, child: str) -> None:
        self.store.add("sys_user_role_contains", role=sid(f"role:{parent}"), contains=sid(f"role:{child}"))

    def table(self, name: str, package: Optional[str] = None) -> None:
        self.store.add("sys_db_object", name=name, sys_package=self.package(package) if package else "")

    def acl(
        self,
        role: str,
        table: str,
        operation: str = "read",
        acl_type: str = "record",
        description: str = "",
    ) -> str:
        acl_id = sid(f"acl:{role}:{table}:{operation}:{acl_type}")
        if self.store.get("sys_security_acl", acl_id) is None:
            self.store.add(
                "sys_security_acl",
                sys_id=acl_id,
                name=table,
                operation=operation,
                type=acl_type,
                description=description,
            )
        self.store.add("sys_security_acl_role", sys_user_role=sid(f"role:{role}"), sys_security_acl=acl_id)
        return acl_id

    def script(self, table: str, name: str, register_metadata: bool = True) -> str:
        """A named record (e.g. a business rule) that an ACL field can point at."""
        record_id = sid(f"{table}:{name}")
        self.store.add(table, sys_id=record_id, name=name)
        if register_metadata:
            self.store.add("sys_metadata", sys_id=record_id, sys_class_name=table)
        return record_id


@pytest.fixture
def instance() -> Instance:
    return Instance()


@pytest.fixture
def chain(instance: Instance) -> Instance:
    """A contains B, B contains C; each role has one ACL."""
    instance.role("A", description="Top role")
    instance.role("B", package="HR Core")
    instance.role("C")
    instance.contains("A", "B")
    instance.contains("B", "C")
    instance.table("incident")
    instance.table("sn_hr_core_case", package="HR Core")
    instance.acl("A", "incident", "read")
    instance.acl("B", "sn_hr_core_case", "write")
    instance.acl("C", "incident", "write")
    return instance
