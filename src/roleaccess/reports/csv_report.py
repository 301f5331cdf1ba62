"""CSV report: role hierarchy section followed by ACL details.

Every field is double-quoted, embedded quotes are doubled, lines end in
``\\n``.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Optional

from ..profile.models import RoleProfile
from .grouping import format_generated, role_kind, sorted_roles, sorted_rules

HIERARCHY_SECTION = "Role Hierarchy"
ACL_SECTION = "ACL Details"

HIERARCHY_HEADER = ("Type", "Role Name", "Description", "Package")
ACL_HEADER = (
    "Role Type",
    "Role Name",
    "Role Package",
    "Table/Field",
    "Table Display",
    "Operation",
    "Operation Display",
    "ACL Type",
    "Type Display",
    "Table Package",
)


def _writer(buffer: io.StringIO):
    return csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")


def render_csv(profile: RoleProfile, generated_at: Optional[datetime] = None) -> str:
    """Render ``profile`` as CSV text."""
    buffer = io.StringIO()
    writer = _writer(buffer)

    if profile.error:
        writer.writerow(["Error", profile.error])
        return buffer.getvalue()

    generated_at = generated_at or datetime.now()
    writer.writerow([f"Role Access Report - {profile.role.name}"])
    writer.writerow(["Generated", format_generated(generated_at)])
    buffer.write("\n")

    roles = sorted_roles(profile)
    writer.writerow([HIERARCHY_SECTION])
    writer.writerow(HIERARCHY_HEADER)
    for role in roles:
        writer.writerow([role_kind(role), role.name, role.description or "", role.package.name])

    buffer.write("\n")
    writer.writerow([ACL_SECTION])
    writer.writerow(ACL_HEADER)
    for role in roles:
        for rule in sorted_rules(role):
            writer.writerow(
                [
                    role_kind(role),
                    role.name,
                    role.package.name,
                    rule.table,
                    rule.table_display or rule.table,
                    rule.operation,
                    rule.operation_display or rule.operation,
                    rule.type,
                    rule.type_display or rule.type,
                    rule.table_package.name,
                ]
            )

    return buffer.getvalue()


def read_hierarchy_section(text: str) -> list[tuple[str, str, str, str]]:
    """Parse the role hierarchy rows back out of a rendered CSV report."""
    rows = list(csv.reader(io.StringIO(text)))
    try:
        start = rows.index([HIERARCHY_SECTION]) + 2
    except ValueError:
        return []
    section = []
    for row in rows[start:]:
        if not row:
            break
        section.append(tuple(row[:4]))
    return section


__all__ = [
    "ACL_HEADER",
    "ACL_SECTION",
    "HIERARCHY_HEADER",
    "HIERARCHY_SECTION",
    "read_hierarchy_section",
    "render_csv",
]
