"""Standalone HTML report with an embedded stylesheet.

Values are interpolated as-is: the source is the instance's own metadata
tables, not end-user input.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..profile.constants import GLOBAL_PACKAGE
from ..profile.models import RoleProfile
from .grouping import (
    app_label,
    applications_by_package,
    format_generated,
    group_rules_by_operation,
    role_kind,
    sorted_roles,
    summary_stats,
)

STYLESHEET = """\
body { font-family: Arial, sans-serif; margin: 20px; }
h1 { color: #2c5aa0; border-bottom: 2px solid #2c5aa0; }
h2 { color: #4a4a4a; margin-top: 30px; }
h3 { color: #666; }
table { border-collapse: collapse; width: 100%; margin: 10px 0; }
th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
th { background-color: #f2f2f2; font-weight: bold; }
.direct { background-color: #e8f5e8; }
.inherited { background-color: #fff3cd; }
.summary { background-color: #f8f9fa; padding: 15px; border-radius: 5px; }
.package { font-style: italic; color: #666; }
"""


def render_html(profile: RoleProfile, generated_at: Optional[datetime] = None) -> str:
    """Render ``profile`` as a full HTML page."""
    if profile.error:
        return f"<html><body><h1>Error</h1><p>{profile.error}</p></body></html>"

    generated_at = generated_at or datetime.now()
    root = profile.role
    out = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="UTF-8">',
        f"<title>ServiceNow Role Access Report - {root.name}</title>",
        "<style>",
        STYLESHEET.rstrip("\n"),
        "</style>",
        "</head>",
        "<body>",
        "<h1>ServiceNow Role Access Profile Report</h1>",
        f"<p><strong>Role:</strong> {root.name}</p>",
        f"<p><strong>Generated:</strong> {format_generated(generated_at)}</p>",
        f"<p><strong>Description:</strong> {root.description or 'No description'}</p>",
        f"<p><strong>Sys ID:</strong> {root.sys_id}</p>",
    ]

    roles = sorted_roles(profile)
    out.append(f"<h2>Role Hierarchy ({len(profile.all_roles)} roles total)</h2>")
    out.append("<table>")
    out.append("<tr><th>Type</th><th>Role Name</th><th>Description</th><th>Package</th></tr>")
    for role in roles:
        out.extend(
            [
                f'<tr class="{"direct" if role.is_direct else "inherited"}">',
                f"<td>{role_kind(role)}</td>",
                f"<td>{role.name}</td>",
                f"<td>{role.description or ''}</td>",
                f'<td class="package">{role.package.name}</td>',
                "</tr>",
            ]
        )
    out.append("</table>")

    out.append("<h2>Access Control Lists (ACLs) by Role</h2>")
    for role in roles:
        if not role.rules:
            continue
        pkg = role.package.name
        pkg_info = f" (Package: {pkg})" if pkg != GLOBAL_PACKAGE else ""
        out.append(f"<h3>{role_kind(role)} - {role.name}{pkg_info} ({len(role.rules)} ACLs)</h3>")
        out.append("<table>")
        out.append("<tr><th>Operation</th><th>Table/Field</th><th>Type</th><th>Package</th></tr>")
        for group in group_rules_by_operation(role):
            for index, rule in enumerate(group.rules):
                out.append("<tr>")
                if index == 0:
                    out.append(f'<td rowspan="{len(group.rules)}">{group.label}</td>')
                out.append(f"<td>{rule.table_display or rule.table}</td>")
                out.append(f"<td>{rule.type_display or rule.type}</td>")
                out.append(f'<td class="package">{rule.table_package.name}</td>')
                out.append("</tr>")
        out.append("</table>")

    out.append(f"<h2>Tables/Applications Accessed ({len(profile.applications)} total)</h2>")
    if profile.applications:
        out.append("<table>")
        out.append("<tr><th>Package</th><th>Table/Application</th><th>Accessed via Roles</th></tr>")
        for package, apps in applications_by_package(profile):
            for index, app in enumerate(apps):
                out.append("<tr>")
                if index == 0:
                    out.append(f'<td rowspan="{len(apps)}" class="package">{package}</td>')
                out.append(f"<td>{app_label(app)}</td>")
                out.append(f"<td>{', '.join(app.roles)}</td>")
                out.append("</tr>")
        out.append("</table>")

    stats = summary_stats(profile)
    out.extend(
        [
            "<h2>Summary Statistics</h2>",
            '<div class="summary">',
            f"<p><strong>Total roles in hierarchy:</strong> {stats.total_roles}</p>",
            f"<p><strong>Direct roles:</strong> {stats.direct_roles}</p>",
            f"<p><strong>Inherited roles:</strong> {stats.inherited_roles}</p>",
            f"<p><strong>Total ACLs:</strong> {stats.total_rules}</p>",
            f"<p><strong>Tables/Applications accessed:</strong> {stats.tables}</p>",
            "<p><strong>Package distribution:</strong></p>",
            "<ul>",
        ]
    )
    for package, count in stats.package_counts:
        out.append(f"<li>{package}: {count} roles</li>")
    out.extend(["</ul>", "</div>", "</body>", "</html>"])
    return "\n".join(out)


__all__ = ["STYLESHEET", "render_html"]
