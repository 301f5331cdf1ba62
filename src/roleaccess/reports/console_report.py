"""Plain-text report for terminal output."""

from __future__ import annotations

from ..profile.constants import GLOBAL_PACKAGE
from ..profile.models import RoleProfile
from .grouping import (
    app_label,
    applications_by_package,
    group_rules_by_operation,
    role_kind,
    sorted_roles,
    summary_stats,
)


def _package_suffix(name: str) -> str:
    return f" (Package: {name})" if name != GLOBAL_PACKAGE else ""


def render_console(profile: RoleProfile) -> str:
    """Render ``profile`` as console text (``\\n``-separated lines)."""
    if profile.error:
        return f"ERROR: {profile.error}"

    root = profile.role
    lines = [
        "▶ ROLE INFORMATION",
        f"  Name: {root.name}",
        f"  Description: {root.description or 'No description'}",
        f"  Sys ID: {root.sys_id}",
        "",
    ]

    roles = sorted_roles(profile)
    lines.append(f"▶ ROLE HIERARCHY ({len(profile.all_roles)} roles total)")
    for role in roles:
        lines.append(f"  [{role_kind(role)}] {role.name}{_package_suffix(role.package.name)}")
        if role.description:
            lines.append(f"    Description: {role.description}")
    lines.append("")

    lines.append("▶ ACCESS CONTROL LISTS (ACLs) BY ROLE")
    for role in roles:
        if not role.rules:
            continue
        lines.append(
            f"  [{role_kind(role)}] {role.name}{_package_suffix(role.package.name)} ({len(role.rules)} ACLs):"
        )
        for group in group_rules_by_operation(role):
            lines.append(f"    {group.label} ({len(group.rules)}):")
            for rule in group.rules:
                pkg = rule.table_package.name
                pkg_info = f" [{pkg}]" if pkg != GLOBAL_PACKAGE else ""
                lines.append(f"      • {rule.table_display or rule.table}{pkg_info} ({rule.type_display or rule.type})")
        lines.append("")

    lines.append(f"▶ TABLES/APPLICATIONS ACCESSED ({len(profile.applications)} total)")
    if not profile.applications:
        lines.append("  No tables/applications found with ACL access.")
    for package, apps in applications_by_package(profile):
        lines.append(f"  Package: {package} ({len(apps)} tables)")
        for app in apps:
            lines.append(f"    • {app_label(app)} (via roles: {', '.join(app.roles)})")
        lines.append("")

    stats = summary_stats(profile)
    lines.extend(
        [
            "▶ SUMMARY STATISTICS",
            f"  Total roles in hierarchy: {stats.total_roles}",
            f"  Direct roles: {stats.direct_roles}",
            f"  Inherited roles: {stats.inherited_roles}",
            f"  Total ACLs: {stats.total_rules}",
            f"  Tables/Applications accessed: {stats.tables}",
            "  Package distribution:",
        ]
    )
    for package, count in stats.package_counts:
        lines.append(f"    • {package}: {count} roles")

    lines.extend(["", "=== END OF ROLE ACCESS PROFILE REPORT ==="])
    return "\n".join(lines)


__all__ = ["render_console"]
