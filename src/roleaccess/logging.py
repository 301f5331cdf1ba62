"""Logging for report runs.

Every run logs through the root logger configured by :func:`setup_logging`.
Records carry the run's ``run_id`` and ``role_name`` when they are emitted
through :func:`get_report_logger`, and instance credentials never reach the
output: messages and extra fields pass through :func:`redact_secrets`.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any, Optional

from .config import LogLevel, ReportConfig

# 32-character sys_ids are record identifiers, not credentials: not matched.
SECRET_PATTERNS = [
    r'(?i)(?:password|passwd|pwd|secret|token|api[_-]?key|auth[_-]?token)\s*[:=]\s*["\']?([^"\'\s]+)',
    r'(?i)(?:bearer|basic)\s+([a-zA-Z0-9+/=]+)',
    r'(?i)(?:x-api-key|x-auth-token|x-access-token|x-usertoken)\s*[:=]\s*["\']?([^"\'\s]+)',
    r'(?i)https?://[^/\s:@]+:[^/\s@]+@',
]

_SECRET_RES = [re.compile(pattern) for pattern in SECRET_PATTERNS]

_CONTEXT_FIELDS = ("run_id", "role_name")

# Attributes every LogRecord has; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
    *_CONTEXT_FIELDS,
}


def safe_preview(value: Any, limit: int = 240) -> str:
    """Single-line text of at most ``limit`` characters for a log field.

    Mappings (records included) and sequences are rendered as JSON.
    """
    if value is None:
        return ""
    if isinstance(value, Mapping):
        value = dict(value)
    if isinstance(value, (dict, list, tuple)):
        text = json.dumps(value, default=str, ensure_ascii=False)
    else:
        text = str(value)
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 1] + "…"


def redact_secrets(text: str, replacement: str = "[REDACTED]") -> str:
    """Replace passwords, tokens and basic-auth credentials in ``text``."""
    if not isinstance(text, str):
        return text
    for pattern in _SECRET_RES:
        text = pattern.sub(replacement, text)
    return text


def safe_log_value(value: Any, limit: int = 240, redact: bool = True) -> str:
    text = safe_preview(value, limit=limit)
    return redact_secrets(text) if redact else text


class ReportFormatter(logging.Formatter):
    """One line per record, as JSON or as plain text.

    Plain text looks like::

        [2024-05-01 12:30:00,123] INFO roleaccess.runner run_id=3f2a9c role_name=itil : Building ...
    """

    def __init__(self, json_format: bool = False, redact_secrets: bool = True, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.json_format = json_format
        self.redact = redact_secrets

    def _fields(self, record: logging.LogRecord) -> dict[str, Any]:
        message = record.getMessage()
        fields: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_secrets(message) if self.redact else message,
        }
        for key in _CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value:
                fields[key] = str(value)
        fields.update(
            (key, safe_log_value(value, redact=self.redact))
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        )
        if record.exc_info:
            fields["exception"] = self.formatException(record.exc_info)
        return fields

    def format(self, record: logging.LogRecord) -> str:
        fields = self._fields(record)
        if self.json_format:
            return json.dumps(fields, default=str, ensure_ascii=False)

        context = "".join(f" {key}={fields[key]}" for key in _CONTEXT_FIELDS if key in fields)
        line = f"[{fields['timestamp']}] {fields['level']} {fields['logger']}{context} : {fields['message']}"
        if "exception" in fields:
            line = f"{line}\n{fields['exception']}"
        return line


class ReportLoggerAdapter(logging.LoggerAdapter):
    """Adds the run's ``run_id`` and ``role_name`` to every record.

    Either can be overridden per call: ``logger.info("...", role_name="admin")``.
    """

    def __init__(self, logger: logging.Logger, run_id: Optional[str] = None, role_name: Optional[str] = None):
        super().__init__(logger, {"run_id": run_id, "role_name": role_name})

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        context = {key: kwargs.pop(key, self.extra.get(key)) for key in _CONTEXT_FIELDS}
        extra = dict(kwargs.get("extra") or {})
        extra.update((key, value) for key, value in context.items() if value)
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(
    config: Optional[ReportConfig] = None,
    json_format: Optional[bool] = None,
    redact_secrets: bool = True,
) -> None:
    """Send all logging to stderr through a single :class:`ReportFormatter`.

    Args:
        config: Run configuration; loaded from the environment when omitted.
        json_format: Overrides ``config.log_json``.
        redact_secrets: Scrub credentials from messages and extra fields.
    """
    if config is None:
        from .config import load_report_config_from_env
        config = load_report_config_from_env()

    level = getattr(logging, LogLevel(config.log_level).value)
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(
        ReportFormatter(
            json_format=config.log_json if json_format is None else json_format,
            redact_secrets=redact_secrets,
        )
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def get_report_logger(
    name: str,
    run_id: Optional[str] = None,
    role_name: Optional[str] = None,
) -> ReportLoggerAdapter:
    """``logging.getLogger(name)`` wrapped with the run's context."""
    return ReportLoggerAdapter(logging.getLogger(name), run_id=run_id, role_name=role_name)


__all__ = [
    "ReportFormatter",
    "ReportLoggerAdapter",
    "get_report_logger",
    "redact_secrets",
    "safe_log_value",
    "safe_preview",
    "setup_logging",
]
