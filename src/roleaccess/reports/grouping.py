"""Ordering and grouping rules shared by every report format.

All renderers present the same views:

- roles sorted by (package name, role name)
- each role's rules grouped by raw operation, each group sorted by
  (table package name, table)
- tables grouped by package, packages and tables sorted by name
- summary counts plus a per-package role breakdown
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..profile.constants import GLOBAL_PACKAGE
from ..profile.models import AccessRule, Application, Role, RoleProfile

logger = logging.getLogger(__name__)

GENERATED_FORMAT = "%Y-%m-%d %H:%M:%S"


def collate(value: Optional[str]) -> tuple[str, str]:
    """Case-insensitive sort key; on a case-only tie lowercase sorts first."""
    value = value or ""
    return (value.casefold(), value.swapcase())


def format_generated(generated_at: datetime) -> str:
    return generated_at.strftime(GENERATED_FORMAT)


def role_kind(role: Role) -> str:
    return "DIRECT" if role.is_direct else "INHERITED"


def sorted_roles(profile: RoleProfile) -> list[Role]:
    return sorted(profile.all_roles, key=lambda r: (collate(r.package.name), collate(r.name)))


def rule_sort_key(rule: AccessRule) -> tuple[tuple[str, str], tuple[str, str]]:
    return (collate(rule.table_package.name), collate(rule.table))


def sorted_rules(role: Role) -> list[AccessRule]:
    return sorted(role.rules, key=rule_sort_key)


@dataclass
class OperationGroup:
    """Rules of one role sharing a raw operation value."""

    operation: str
    label: str
    rules: list[AccessRule] = field(default_factory=list)


def group_rules_by_operation(role: Role) -> list[OperationGroup]:
    """Group a role's rules by raw operation, in first-seen operation order.

    The group label is the first sorted rule's ``operation_display``,
    falling back to the upper-cased raw operation.
    """
    grouped: dict[str, list[AccessRule]] = {}
    for rule in role.rules:
        grouped.setdefault(rule.operation, []).append(rule)

    groups = []
    for operation, rules in grouped.items():
        rules.sort(key=rule_sort_key)
        label = rules[0].operation_display or operation.upper()
        groups.append(OperationGroup(operation=operation, label=label, rules=rules))
    return groups


def application_package(profile: RoleProfile, app: Application) -> str:
    """Package a table is listed under.

    Scans rules in closure order; the last non-Global table package seen for
    the table wins. A warning is logged when the table appears under more
    than one non-Global package.
    """
    package = GLOBAL_PACKAGE
    seen: set[str] = set()
    for role in profile.all_roles:
        for rule in role.rules:
            if rule.table == app.name and rule.table_package.name != GLOBAL_PACKAGE:
                package = rule.table_package.name
                seen.add(package)
    if len(seen) > 1:
        logger.warning(
            "Table %s appears under packages %s; listing it under %s",
            app.name,
            ", ".join(sorted(seen, key=collate)),
            package,
        )
    return package


def app_label(app: Application) -> str:
    return app.display_name or app.name


def applications_by_package(profile: RoleProfile) -> list[tuple[str, list[Application]]]:
    """Tables grouped by package; packages and tables sorted by name."""
    by_package: dict[str, list[Application]] = {}
    for app in profile.applications:
        by_package.setdefault(application_package(profile, app), []).append(app)
    return [
        (package, sorted(apps, key=lambda a: collate(app_label(a))))
        for package, apps in sorted(by_package.items(), key=lambda item: collate(item[0]))
    ]


@dataclass
class SummaryStats:
    """Headline numbers for the summary section."""

    total_roles: int
    direct_roles: int
    inherited_roles: int
    total_rules: int
    tables: int
    package_counts: list[tuple[str, int]]


def summary_stats(profile: RoleProfile) -> SummaryStats:
    counts: dict[str, int] = {}
    for role in profile.all_roles:
        counts[role.package.name] = counts.get(role.package.name, 0) + 1
    return SummaryStats(
        total_roles=len(profile.all_roles),
        direct_roles=len(profile.direct_roles),
        inherited_roles=len(profile.inherited_roles),
        total_rules=profile.rule_count,
        tables=len(profile.applications),
        package_counts=sorted(counts.items(), key=lambda item: collate(item[0])),
    )


__all__ = [
    "OperationGroup",
    "SummaryStats",
    "app_label",
    "application_package",
    "applications_by_package",
    "collate",
    "format_generated",
    "group_rules_by_operation",
    "role_kind",
    "rule_sort_key",
    "sorted_roles",
    "sorted_rules",
    "summary_stats",
]
