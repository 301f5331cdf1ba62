"""One-shot report run: build the profile once, render and deliver each format."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .config import OutputFormat, ReportConfig
from .delivery import CONTENT_TYPES, DeliveryResult, deliver_report, report_file_name
from .exceptions import DeliveryError
from .logging import get_report_logger
from .profile import ProfileBuilder, RoleProfile
from .reports import render_report
from .store import AttachmentSink, RecordStore


@dataclass
class FormatOutcome:
    """Result of producing one output format."""

    output_format: OutputFormat
    delivery: Optional[DeliveryResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ReportRun:
    """Everything a run produced."""

    run_id: str
    profile: RoleProfile
    generated_at: datetime
    console_text: Optional[str] = None
    outcomes: list[FormatOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(outcome.ok for outcome in self.outcomes)


def run_report(
    config: ReportConfig,
    store: RecordStore,
    sink: AttachmentSink,
    now: Optional[datetime] = None,
) -> ReportRun:
    """Build the profile for ``config.role_name`` and produce every requested format.

    A failed delivery is recorded on its format's outcome; the remaining
    formats are still produced. Store errors while building propagate.
    """
    now = now or datetime.now()
    run_id = uuid.uuid4().hex[:12]
    logger = get_report_logger(__name__, run_id=run_id, role_name=config.role_name)

    logger.info("Building role access profile (format=%s)", config.output_format.value)
    profile = ProfileBuilder(store).build(config.role_name)
    if profile.error:
        logger.warning(profile.error)

    run = ReportRun(run_id=run_id, profile=profile, generated_at=now)
    for fmt in config.output_format.expand():
        content = render_report(profile, fmt, now)
        if fmt is OutputFormat.CONSOLE:
            run.console_text = content
            run.outcomes.append(FormatOutcome(output_format=fmt))
            continue

        file_name = report_file_name(config.role_name, fmt.value, now)
        try:
            result = deliver_report(store, sink, content, file_name, CONTENT_TYPES[fmt])
        except DeliveryError as e:
            logger.error("Delivery of %s failed: %s", file_name, e.message)
            run.outcomes.append(FormatOutcome(output_format=fmt, error=e.message))
        else:
            run.outcomes.append(FormatOutcome(output_format=fmt, delivery=result))

    return run


__all__ = ["FormatOutcome", "ReportRun", "run_report"]
