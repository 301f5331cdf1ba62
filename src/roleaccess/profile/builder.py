"""Role access profile assembly.

Walks the containment closure of a role and gathers, for every role in it,
its package and the ACLs attached to it, then indexes the tables those ACLs
govern.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..store import Record, RecordStore
from .constants import GLOBAL_PACKAGE, Tables, is_sys_id
from .hierarchy import HierarchyWalker
from .models import GLOBAL, AccessRule, Application, PackageRef, Role, RoleProfile
from .resolver import IdentifierResolver, ResolvedRecord

logger = logging.getLogger(__name__)


def unknown_operation_label(operation: str, table: Optional[str]) -> str:
    """Fallback label for an operation id nothing resolves."""
    return f"Unknown Operation: {operation[:8]}... (on table: {table or 'unknown'})"


class _BuildCache:
    """Lookups memoised for the duration of a single build."""

    def __init__(self) -> None:
        self.packages: dict[str, PackageRef] = {}
        self.table_packages: dict[str, PackageRef] = {}
        self.resolved: dict[str, Optional[ResolvedRecord]] = {}
        self.operations: dict[str, str] = {}


class ProfileBuilder:
    """Builds a :class:`RoleProfile` for a role name.

    Every call to :meth:`build` starts from an empty cache, so the result
    depends only on the role name and the current store contents.

    Example::

        builder = ProfileBuilder(store)
        profile = builder.build("itil")
        if profile.error:
            ...
    """

    def __init__(
        self,
        store: RecordStore,
        resolver: Optional[IdentifierResolver] = None,
        walker: Optional[HierarchyWalker] = None,
    ) -> None:
        self.store = store
        self.resolver = resolver or IdentifierResolver(store)
        self.walker = walker or HierarchyWalker(store)

    def build(self, role_name: str) -> RoleProfile:
        matches = self.store.query(Tables.ROLE, {"name": role_name})
        if not matches or not matches[0].sys_id:
            logger.info("Role %s not found", role_name)
            return RoleProfile.not_found(role_name)

        root_id = matches[0].sys_id
        closure = [root_id]
        for role_id in self.walker.expand(root_id, set()):
            if role_id not in closure:
                closure.append(role_id)
        logger.info("Role %s: %d roles in closure", role_name, len(closure))

        cache = _BuildCache()
        all_roles: list[Role] = []
        for role_id in closure:
            record = self.store.get(Tables.ROLE, role_id)
            if record is None:
                logger.warning("Contained role %s no longer exists, skipping", role_id)
                continue
            all_roles.append(
                Role(
                    name=record.get_field("name") or role_id,
                    sys_id=role_id,
                    description=record.get_field("description"),
                    is_direct=role_id == root_id,
                    package=self._package(record.get_field("sys_package"), cache),
                    rules=self._rules_for(role_id, cache),
                )
            )

        root = next((r for r in all_roles if r.is_direct), None)
        if root is None:
            return RoleProfile.not_found(role_name)

        profile = RoleProfile(
            role=root,
            all_roles=all_roles,
            applications=index_applications(all_roles),
        )
        logger.info(
            "Profile for %s: %d roles, %d ACLs, %d tables",
            role_name,
            len(profile.all_roles),
            profile.rule_count,
            len(profile.applications),
        )
        return profile

    # ── Packages ────────────────────────────────────────

    def _package(self, package_id: Optional[str], cache: _BuildCache) -> PackageRef:
        """Package record for an id; Global when unset or unresolvable."""
        if not package_id:
            return GLOBAL
        if package_id not in cache.packages:
            record = self.store.get(Tables.PACKAGE, package_id)
            name = record.get_field("name") if record is not None else None
            if name:
                cache.packages[package_id] = PackageRef(name=name, sys_id=package_id)
            else:
                logger.debug("Package %s unresolved, using %s", package_id, GLOBAL_PACKAGE)
                cache.packages[package_id] = GLOBAL
        return cache.packages[package_id]

    def _table_package(self, table: Optional[str], cache: _BuildCache) -> PackageRef:
        """Package of the table an ACL targets (field ACLs use their table)."""
        if not table:
            return GLOBAL
        base = table.split(".")[0]
        if base not in cache.table_packages:
            objects = self.store.query(Tables.DB_OBJECT, {"name": base})
            package_id = objects[0].get_field("sys_package") if objects else None
            cache.table_packages[base] = self._package(package_id, cache)
        return cache.table_packages[base]

    # ── ACLs ────────────────────────────────────────────

    def _rules_for(self, role_id: str, cache: _BuildCache) -> list[AccessRule]:
        links = self.store.query(Tables.ACL_ROLE, {"sys_user_role": role_id})
        acl_ids = [acl for acl in (link.get_field("sys_security_acl") for link in links) if acl]
        if not acl_ids:
            return []
        return [self._rule(acl, cache) for acl in self.store.query(Tables.ACL, {"sys_id": acl_ids})]

    def _rule(self, acl: Record, cache: _BuildCache) -> AccessRule:
        table = acl.get_field("name") or ""
        operation = acl.get_field("operation") or ""
        acl_type = acl.get_field("type") or ""

        table_display = table
        if is_sys_id(table) and "." not in table:
            resolved = self._resolve(table, cache)
            if resolved is not None:
                table_display = resolved.display_name

        type_display = acl_type
        if is_sys_id(acl_type):
            resolved = self._resolve(acl_type, cache)
            if resolved is not None:
                type_display = resolved.display_name

        return AccessRule(
            table=table,
            table_display=table_display,
            operation=operation,
            operation_display=self._operation_display(operation, table, cache),
            type=acl_type,
            type_display=type_display,
            description=acl.get_field("description"),
            table_package=self._table_package(table, cache),
        )

    def _operation_display(self, operation: str, table: str, cache: _BuildCache) -> str:
        """Label for an operation, computed once per operation value per build.

        Renderers label an operation group with its first rule's display, so
        every rule sharing an operation must carry the same label.
        """
        if not is_sys_id(operation):
            return operation
        if operation not in cache.operations:
            resolved = self._resolve(operation, cache)
            cache.operations[operation] = (
                resolved.display_name if resolved is not None else unknown_operation_label(operation, table)
            )
        return cache.operations[operation]

    def _resolve(self, sys_id: str, cache: _BuildCache) -> Optional[ResolvedRecord]:
        if sys_id not in cache.resolved:
            cache.resolved[sys_id] = self.resolver.resolve(sys_id)
        return cache.resolved[sys_id]


def index_applications(roles: list[Role]) -> list[Application]:
    """One entry per distinct raw table across all rules, with the roles using it."""
    applications: dict[str, Application] = {}
    for role in roles:
        for rule in role.rules:
            app = applications.get(rule.table)
            if app is None:
                app = Application(name=rule.table, display_name=rule.table_display or rule.table)
                applications[rule.table] = app
            app.add_role(role.name)
    return list(applications.values())


__all__ = ["ProfileBuilder", "index_applications", "unknown_operation_label"]
