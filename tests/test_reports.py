"""Tests for the console, HTML and CSV report renderers."""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime

import pytest
from conftest import sid

from roleaccess import (
    AccessRule,
    OutputFormat,
    PackageRef,
    RenderError,
    Role,
    RoleProfile,
    render_console,
    render_csv,
    render_html,
    render_report,
)
from roleaccess.profile import index_applications
from roleaccess.reports import read_hierarchy_section
from roleaccess.reports.grouping import (
    applications_by_package,
    collate,
    group_rules_by_operation,
    sorted_roles,
    summary_stats,
)

GENERATED = datetime(2024, 5, 1, 12, 30, 0)

HR = PackageRef(name="HR Core", sys_id=sid("package:HR Core"))
ITSM = PackageRef(name="ITSM", sys_id=sid("package:ITSM"))


def _rule(table: str, operation: str, package: PackageRef = PackageRef(), display: str | None = None) -> AccessRule:
    return AccessRule(
        table=table,
        table_display=table,
        operation=operation,
        operation_display=operation if display is None else display,
        type="record",
        type_display="record",
        table_package=package,
    )


@pytest.fixture
def profile() -> RoleProfile:
    root = Role(
        name="root_role",
        sys_id=sid("role:root_role"),
        description="Top",
        is_direct=True,
        rules=[
            _rule("incident", "read", ITSM),
            _rule("problem", "write"),
            _rule("alpha", "read"),
        ],
    )
    beta = Role(
        name="beta",
        sys_id=sid("role:beta"),
        package=HR,
        rules=[
            _rule("sn_hr_case", "read", HR),
            _rule("incident", "delete", HR, display=""),
        ],
    )
    zeta = Role(
        name="Zeta",
        sys_id=sid("role:Zeta"),
        description='Says "hi", twice',
        rules=[_rule("incident", "create")],
    )
    roles = [root, beta, zeta]
    return RoleProfile(role=root, all_roles=roles, applications=index_applications(roles))


@pytest.fixture
def missing() -> RoleProfile:
    return RoleProfile.not_found("adt_user")


class TestGrouping:
    """Tests for the shared ordering rules."""

    def test_collate_is_case_insensitive(self) -> None:
        assert sorted(["Zeta", "root_role", "alpha"], key=collate) == ["alpha", "root_role", "Zeta"]

    def test_collate_puts_lowercase_first_on_case_tie(self) -> None:
        assert sorted(["A", "a", "B", "b"], key=collate) == ["a", "A", "b", "B"]

    def test_roles_sorted_by_package_then_name(self, profile: RoleProfile) -> None:
        assert [r.name for r in sorted_roles(profile)] == ["root_role", "Zeta", "beta"]

    def test_rules_grouped_by_operation(self, profile: RoleProfile) -> None:
        groups = group_rules_by_operation(profile.role)

        assert [g.operation for g in groups] == ["read", "write"]
        assert [r.table for r in groups[0].rules] == ["alpha", "incident"]
        assert groups[0].label == "read"

    def test_group_label_falls_back_to_upper_operation(self, profile: RoleProfile) -> None:
        beta = profile.all_roles[1]
        labels = {g.operation: g.label for g in group_rules_by_operation(beta)}
        assert labels["delete"] == "DELETE"

    def test_last_non_global_package_wins(self, profile: RoleProfile, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            grouped = dict(applications_by_package(profile))

        assert [a.name for a in grouped["HR Core"]] == ["incident", "sn_hr_case"]
        assert [a.name for a in grouped["Global"]] == ["alpha", "problem"]
        assert "ITSM" not in grouped
        assert any("incident" in rec.getMessage() for rec in caplog.records)

    def test_packages_sorted(self, profile: RoleProfile) -> None:
        assert [pkg for pkg, _ in applications_by_package(profile)] == ["Global", "HR Core"]

    def test_summary(self, profile: RoleProfile) -> None:
        stats = summary_stats(profile)
        assert stats.total_roles == 3
        assert stats.direct_roles == 1
        assert stats.inherited_roles == 2
        assert stats.total_rules == 6
        assert stats.tables == 4
        assert stats.package_counts == [("Global", 2), ("HR Core", 1)]


class TestRoleNotFoundReports:
    """Every renderer emits only the error for an unknown role."""

    def test_console(self, missing: RoleProfile) -> None:
        text = render_console(missing)
        assert text == "ERROR: Role not found: adt_user"

    def test_html(self, missing: RoleProfile) -> None:
        html = render_html(missing, GENERATED)
        assert "Role not found: adt_user" in html
        assert "Role Hierarchy" not in html
        assert html == "<html><body><h1>Error</h1><p>Role not found: adt_user</p></body></html>"

    def test_csv(self, missing: RoleProfile) -> None:
        text = render_csv(missing, GENERATED)
        assert text == '"Error","Role not found: adt_user"\n'
        assert "Role not found: adt_user" in text


class TestConsoleReport:
    """Tests for render_console."""

    def test_sections_in_order(self, profile: RoleProfile) -> None:
        text = render_console(profile)
        headers = [
            "▶ ROLE INFORMATION",
            "▶ ROLE HIERARCHY (3 roles total)",
            "▶ ACCESS CONTROL LISTS (ACLs) BY ROLE",
            "▶ TABLES/APPLICATIONS ACCESSED (4 total)",
            "▶ SUMMARY STATISTICS",
            "=== END OF ROLE ACCESS PROFILE REPORT ===",
        ]
        positions = [text.index(h) for h in headers]
        assert positions == sorted(positions)

    def test_hierarchy_lines(self, profile: RoleProfile) -> None:
        lines = render_console(profile).splitlines()
        start = lines.index("▶ ROLE HIERARCHY (3 roles total)")
        assert lines[start + 1 : start + 6] == [
            "  [DIRECT] root_role",
            "    Description: Top",
            "  [INHERITED] Zeta",
            '    Description: Says "hi", twice',
            "  [INHERITED] beta (Package: HR Core)",
        ]

    def test_acl_block(self, profile: RoleProfile) -> None:
        text = render_console(profile)
        expected = "\n".join(
            [
                "  [DIRECT] root_role (3 ACLs):",
                "    read (2):",
                "      • alpha (record)",
                "      • incident [ITSM] (record)",
                "    write (1):",
                "      • problem (record)",
            ]
        )
        assert expected in text

    def test_tables_block(self, profile: RoleProfile) -> None:
        text = render_console(profile)
        assert "  Package: HR Core (2 tables)" in text
        assert "    • incident (via roles: root_role, beta, Zeta)" in text

    def test_summary_block(self, profile: RoleProfile) -> None:
        text = render_console(profile)
        assert "  Total ACLs: 6" in text
        assert "    • Global: 2 roles" in text
        assert "    • HR Core: 1 roles" in text

    def test_no_tables(self) -> None:
        root = Role(name="empty", sys_id=sid("role:empty"), is_direct=True)
        text = render_console(RoleProfile(role=root, all_roles=[root]))
        assert "  No tables/applications found with ACL access." in text
        assert "  Description: No description" in text


class TestHtmlReport:
    """Tests for render_html."""

    def test_full_page(self, profile: RoleProfile) -> None:
        html = render_html(profile, GENERATED)
        assert html.startswith("<!DOCTYPE html>")
        assert html.endswith("</html>")
        assert "<style>" in html and ".inherited { background-color: #fff3cd; }" in html
        assert "<title>ServiceNow Role Access Report - root_role</title>" in html
        assert "<p><strong>Generated:</strong> 2024-05-01 12:30:00</p>" in html

    def test_role_rows(self, profile: RoleProfile) -> None:
        html = render_html(profile, GENERATED)
        assert '<tr class="direct">\n<td>DIRECT</td>\n<td>root_role</td>' in html
        assert html.index("<td>Zeta</td>") < html.index("<td>beta</td>")

    def test_operation_rowspan(self, profile: RoleProfile) -> None:
        html = render_html(profile, GENERATED)
        assert "<h3>DIRECT - root_role (3 ACLs)</h3>" in html
        assert "<h3>INHERITED - beta (Package: HR Core) (2 ACLs)</h3>" in html
        assert '<td rowspan="2">read</td>' in html
        assert '<td rowspan="1">DELETE</td>' in html

    def test_tables_and_summary(self, profile: RoleProfile) -> None:
        html = render_html(profile, GENERATED)
        assert '<td rowspan="2" class="package">HR Core</td>' in html
        assert "<td>root_role, beta, Zeta</td>" in html
        assert "<p><strong>Total ACLs:</strong> 6</p>" in html
        assert "<li>HR Core: 1 roles</li>" in html


class TestCsvReport:
    """Tests for render_csv."""

    def test_every_field_quoted(self, profile: RoleProfile) -> None:
        text = render_csv(profile, GENERATED)
        assert "\r" not in text
        for line in text.split("\n"):
            if line:
                assert line.startswith('"') and line.endswith('"'), line

    def test_embedded_quotes_doubled(self, profile: RoleProfile) -> None:
        text = render_csv(profile, GENERATED)
        assert '"INHERITED","Zeta","Says ""hi"", twice","Global"' in text

    def test_hierarchy_round_trip(self, profile: RoleProfile) -> None:
        """Parsing the hierarchy section recovers (type, name, description, package)."""
        parsed = read_hierarchy_section(render_csv(profile, GENERATED))

        expected = [
            ("DIRECT" if r.is_direct else "INHERITED", r.name, r.description or "", r.package.name)
            for r in sorted_roles(profile)
        ]
        assert parsed == expected
        assert parsed[1][2] == 'Says "hi", twice'

    def test_acl_details(self, profile: RoleProfile) -> None:
        rows = list(csv.reader(io.StringIO(render_csv(profile, GENERATED))))
        start = rows.index(["ACL Details"]) + 1
        assert rows[start][0] == "Role Type"
        details = rows[start + 1 :]
        assert len(details) == 6
        assert [row[3] for row in details[:3]] == ["alpha", "problem", "incident"]
        assert details[-1][1] == "beta"

    def test_header_lines(self, profile: RoleProfile) -> None:
        lines = render_csv(profile, GENERATED).split("\n")
        assert lines[0] == '"Role Access Report - root_role"'
        assert lines[1] == '"Generated","2024-05-01 12:30:00"'
        assert lines[2] == ""


class TestRenderReport:
    """Tests for format dispatch."""

    def test_dispatch(self, profile: RoleProfile) -> None:
        assert render_report(profile, "console") == render_console(profile)
        assert render_report(profile, OutputFormat.CSV, GENERATED) == render_csv(profile, GENERATED)
        assert render_report(profile, "html", GENERATED) == render_html(profile, GENERATED)

    def test_all_is_not_a_single_format(self, profile: RoleProfile) -> None:
        with pytest.raises(RenderError):
            render_report(profile, OutputFormat.ALL)

    def test_unknown_format(self, profile: RoleProfile) -> None:
        with pytest.raises(RenderError, match="Unknown output format"):
            render_report(profile, "pdf")
