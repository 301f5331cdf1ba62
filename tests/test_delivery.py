"""Tests for report delivery and full report runs."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pytest
from conftest import Instance

from roleaccess import (
    DeliveryError,
    DeliveryResult,
    InMemoryStore,
    OutputFormat,
    Record,
    ReportConfig,
    StoreAccessError,
    deliver_report,
    report_file_name,
    run_report,
)

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


class RejectingSink(InMemoryStore):
    """Sink that refuses attachments whose name ends with ``suffix``."""

    def __init__(self, suffix: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.suffix = suffix

    def attach(self, owner: Record, file_name: str, content_type: str, content: str) -> Optional[str]:
        if file_name.endswith(self.suffix):
            return None
        return super().attach(owner, file_name, content_type, content)


class TestReportFileName:
    def test_format(self) -> None:
        assert report_file_name("itil", "csv", NOW) == "role_access_report_itil_1704067200000.csv"

    def test_path_separators_replaced(self) -> None:
        assert report_file_name("sn_hr/agent", "html", NOW) == "role_access_report_sn_hr_agent_1704067200000.html"
        assert report_file_name("a\\b", "csv", NOW) == "role_access_report_a_b_1704067200000.csv"


class TestDeliverReport:
    """Tests for deliver_report."""

    def test_attaches_to_current_user(self, instance: Instance) -> None:
        result = deliver_report(instance.store, instance.store, "<html></html>", "r.html", "text/html")

        assert result.owner == "admin"
        assert result.file_name == "r.html"
        [attachment] = instance.store.attachments
        assert attachment.sys_id == result.attachment_id
        assert attachment.content_type == "text/html"
        assert result.link is None
        assert result.download_link is None

    def test_missing_user(self) -> None:
        store = InMemoryStore(current_user="ghost")
        with pytest.raises(DeliveryError, match="Could not find current user for file attachment"):
            deliver_report(store, store, "x", "r.csv", "text/csv")
        assert store.attachments == []

    def test_attach_returns_no_id(self, instance: Instance) -> None:
        sink = RejectingSink(".csv")
        with pytest.raises(DeliveryError, match="Failed to create file attachment"):
            deliver_report(instance.store, sink, "x", "r.csv", "text/csv")

    def test_store_failure_wrapped(self, instance: Instance) -> None:
        instance.store.denied_tables = {"sys_user"}
        with pytest.raises(DeliveryError) as exc_info:
            deliver_report(instance.store, instance.store, "x", "r.csv", "text/csv")
        assert exc_info.value.message.startswith("Error creating file:")
        assert exc_info.value.details["cause"] == "STORE_ACCESS_DENIED"

    def test_download_link(self) -> None:
        result = DeliveryResult(
            file_name="r.csv",
            attachment_id="att1",
            owner="admin",
            link="https://acme.service-now.com/sys_attachment.do?sys_id=att1",
        )
        assert result.download_link == (
            "https://acme.service-now.com/sys_attachment.do?sys_id=att1&sysparm_referring_url=tear_off"
        )


class TestRunReport:
    """Tests for run_report."""

    def test_all_formats(self, chain: Instance) -> None:
        config = ReportConfig(role_name="A", output_format="all")

        run = run_report(config, chain.store, chain.store, now=NOW)

        assert run.ok
        assert [o.output_format for o in run.outcomes] == [OutputFormat.CONSOLE, OutputFormat.HTML, OutputFormat.CSV]
        assert "[DIRECT] A" in run.console_text
        names = [a.file_name for a in chain.store.attachments]
        assert names == [
            "role_access_report_A_1704067200000.html",
            "role_access_report_A_1704067200000.csv",
        ]
        assert chain.store.attachments[1].content_type == "text/csv"

    def test_profile_built_once(self, chain: Instance) -> None:
        run_report(ReportConfig(role_name="A", output_format="all"), chain.store, chain.store, now=NOW)
        role_lookups = [q for q in chain.store.queries if q == ("sys_user_role", {"name": "A"})]
        assert len(role_lookups) == 1

    def test_console_only_delivers_nothing(self, chain: Instance) -> None:
        run = run_report(ReportConfig(role_name="A", output_format="console"), chain.store, chain.store, now=NOW)
        assert run.console_text is not None
        assert chain.store.attachments == []

    def test_role_not_found(self, instance: Instance) -> None:
        run = run_report(ReportConfig(output_format="all"), instance.store, instance.store, now=NOW)

        assert run.profile.error == "Role not found: adt_user"
        assert run.console_text == "ERROR: Role not found: adt_user"
        for attachment in instance.store.attachments:
            assert "Role not found: adt_user" in attachment.content
        assert run.ok

    def test_failed_delivery_does_not_stop_other_formats(self, chain: Instance) -> None:
        sink = RejectingSink(".html", current_user="admin")

        run = run_report(ReportConfig(role_name="A", output_format="all"), chain.store, sink, now=NOW)

        assert not run.ok
        html, csv = run.outcomes[1], run.outcomes[2]
        assert html.error == "Failed to create file attachment"
        assert csv.ok and csv.delivery is not None
        assert [a.file_name for a in sink.attachments] == ["role_access_report_A_1704067200000.csv"]

    def test_role_with_slash_stays_in_output_dir(self, instance: Instance, tmp_path: Path) -> None:
        out = tmp_path / "out"
        instance.store.attachment_dir = out

        config = ReportConfig(role_name="sn_hr/agent", output_format="all")

        run = run_report(config, instance.store, instance.store, now=NOW)

        assert run.ok
        assert sorted(p.name for p in out.iterdir()) == [
            "role_access_report_sn_hr_agent_1704067200000.csv",
            "role_access_report_sn_hr_agent_1704067200000.html",
        ]

    def test_unwritable_output_dir_fails_each_format(self, chain: Instance, tmp_path: Path) -> None:
        """A disk error is reported per format; the run still returns every outcome."""
        blocker = tmp_path / "out"
        blocker.write_text("not a directory", encoding="utf-8")
        chain.store.attachment_dir = blocker

        run = run_report(ReportConfig(role_name="A", output_format="all"), chain.store, chain.store, now=NOW)

        assert not run.ok
        assert len(run.outcomes) == 3
        assert run.outcomes[0].ok
        for outcome in run.outcomes[1:]:
            assert outcome.error.startswith("Error creating file: Cannot write role_access_report_A_")
        assert chain.store.attachments == []

    def test_store_error_propagates(self, chain: Instance) -> None:
        chain.store.denied_tables = {"sys_user_role"}
        with pytest.raises(StoreAccessError):
            run_report(ReportConfig(role_name="A"), chain.store, chain.store, now=NOW)

    def test_run_id(self, chain: Instance) -> None:
        run = run_report(ReportConfig(role_name="A", output_format="console"), chain.store, chain.store, now=NOW)
        assert len(run.run_id) == 12
        assert run.generated_at == NOW
