"""Command-line entry point.

    roleaccess itil --format all --instance-url https://acme.service-now.com
    roleaccess itil --format csv --snapshot roles.json --output-dir reports/
"""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import click
from pydantic import ValidationError

from .config import OutputFormat, ReportConfig, load_report_config_from_env
from .exceptions import ConfigurationError, RoleAccessError, exit_code_for
from .logging import setup_logging
from .runner import ReportRun, run_report
from .store import InMemoryStore, TableApiStore

FORMAT_CHOICES = [f.value for f in OutputFormat]


def _merge_config(base: ReportConfig, overrides: dict[str, Any], instance: dict[str, Any]) -> ReportConfig:
    data = base.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    data["instance"].update({k: v for k, v in instance.items() if v is not None})
    try:
        return ReportConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _echo_banner(config: ReportConfig, now: datetime) -> None:
    click.echo("=== ServiceNow Role Access Profile Report ===")
    click.echo(f"Role: {config.role_name}")
    click.echo(f"Output Format: {config.output_format.value}")
    click.echo(f"Generated: {now.strftime('%Y-%m-%d %H:%M:%S')}")
    click.echo("==============================================\n")


def _echo_run(run: ReportRun) -> None:
    if run.console_text is not None:
        click.echo(run.console_text)
    for outcome in run.outcomes:
        if outcome.error:
            click.echo(f"ERROR: {outcome.error}", err=True)
        elif outcome.delivery is not None:
            result = outcome.delivery
            click.echo("✓ File created successfully!")
            click.echo(f"  File Name: {result.file_name}")
            click.echo(f"  Attachment ID: {result.attachment_id}")
            click.echo(f"  Attached to user: {result.owner}")
            if result.link:
                click.echo(f"  Direct link: {result.link}")
                click.echo(f"  Download link: {result.download_link}")
    click.echo("\n=== SCRIPT EXECUTION COMPLETED ===")


@click.command(help="Crawl a role's hierarchy and ACLs and produce an access report.")
@click.argument("role_name", required=False)
@click.option("--format", "output_format", type=click.Choice(FORMAT_CHOICES), default=None,
              help="Report output (default: ROLEACCESS_FORMAT or html).")
@click.option("--snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None,
              help="Read records from a JSON snapshot instead of a live instance.")
@click.option("--output-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="With --snapshot, also write report files to this directory.")
@click.option("--instance-url", default=None, help="Instance base URL (default: SN_INSTANCE_URL).")
@click.option("--username", default=None, help="Instance user (default: SN_USERNAME).")
@click.option("--password", default=None, help="Instance password (default: SN_PASSWORD).")
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR or CRITICAL.")
@click.option("--log-json", is_flag=True, default=False, help="Emit JSON log lines.")
def main(
    role_name: Optional[str],
    output_format: Optional[str],
    snapshot: Optional[Path],
    output_dir: Optional[Path],
    instance_url: Optional[str],
    username: Optional[str],
    password: Optional[str],
    log_level: Optional[str],
    log_json: Optional[bool],
) -> None:
    try:
        config = _merge_config(
            load_report_config_from_env(),
            {
                "role_name": role_name,
                "output_format": output_format,
                "log_level": log_level,
                "log_json": True if log_json else None,
            },
            {"url": instance_url, "username": username, "password": password},
        )
    except (ConfigurationError, ValueError) as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(exit_code_for(ConfigurationError()))

    setup_logging(config)
    now = datetime.now()
    _echo_banner(config, now)

    try:
        if snapshot is not None:
            store = InMemoryStore.from_snapshot(snapshot, attachment_dir=output_dir)
            run = run_report(config, store, store, now=now)
        else:
            with TableApiStore(config.instance) as api:
                run = run_report(config, api, api, now=now)
    except RoleAccessError as e:
        click.echo(f"ERROR: [{e.code}] {e.message}", err=True)
        sys.exit(exit_code_for(e))

    _echo_run(run)
    if not run.ok:
        sys.exit(1)


__all__ = ["main"]
