"""Report renderers: console text, HTML page and CSV.

All three are pure functions of a RoleProfile and share the ordering
rules in :mod:`.grouping`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..config import OutputFormat
from ..exceptions import RenderError
from ..profile.models import RoleProfile
from .console_report import render_console
from .csv_report import read_hierarchy_section, render_csv
from .html_report import render_html


def render_report(
    profile: RoleProfile,
    output_format: OutputFormat | str,
    generated_at: Optional[datetime] = None,
) -> str:
    """Render ``profile`` in one concrete format (console, html or csv)."""
    try:
        fmt = OutputFormat(output_format)
    except ValueError:
        raise RenderError(f"Unknown output format: {output_format}", output_format=str(output_format))

    if fmt is OutputFormat.CONSOLE:
        return render_console(profile)
    if fmt is OutputFormat.HTML:
        return render_html(profile, generated_at)
    if fmt is OutputFormat.CSV:
        return render_csv(profile, generated_at)
    raise RenderError(f"{fmt.value} is not a single report format", output_format=fmt.value)


__all__ = [
    "read_hierarchy_section",
    "render_console",
    "render_csv",
    "render_html",
    "render_report",
]
