"""Configuration contract for role access report runs.

This module provides Pydantic-validated configuration models for a single
report run: which role to crawl, which output formats to produce, how to
log, and how to reach the ServiceNow instance.

RULE: the environment is read in exactly one place,
:func:`load_report_config_from_env`. Everything else receives a
:class:`ReportConfig` instance.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class OutputFormat(str, Enum):
    """Requested report output.

    ``ALL`` is a shorthand that expands to every concrete format.
    """

    CONSOLE = "console"
    HTML = "html"
    CSV = "csv"
    ALL = "all"

    def expand(self) -> tuple["OutputFormat", ...]:
        """Return the concrete formats this selection stands for."""
        if self is OutputFormat.ALL:
            return (OutputFormat.CONSOLE, OutputFormat.HTML, OutputFormat.CSV)
        return (self,)


class InstanceConfig(BaseModel):
    """Connection settings for the ServiceNow REST Table API.

    Environment variables:
        SN_INSTANCE_URL  - base URL, e.g. https://acme.service-now.com
        SN_USERNAME      - basic auth user (also the attachment owner)
        SN_PASSWORD      - basic auth password
        SN_TIMEOUT       - request timeout in seconds
        SN_PAGE_SIZE     - records fetched per Table API page
    """

    model_config = {"extra": "ignore"}

    url: Optional[str] = Field(
        default=None,
        description="Instance base URL (e.g. https://acme.service-now.com)",
    )
    username: str = Field(default="", description="Basic auth user name")
    password: str = Field(default="", description="Basic auth password")
    timeout_seconds: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    page_size: int = Field(default=1000, gt=0, description="Table API page size (sysparm_limit)")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate instance URL format."""
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("Instance URL must start with http:// or https://")
        return v.rstrip("/")


class ReportConfig(BaseModel):
    """Settings for one role access report run."""

    role_name: str = Field(
        default="adt_user",
        description="Name of the role to crawl",
    )
    output_format: OutputFormat = Field(
        default=OutputFormat.HTML,
        description="console, html, csv or all",
    )

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    instance: InstanceConfig = Field(
        default_factory=InstanceConfig,
        description="ServiceNow connection settings",
    )

    @field_validator("role_name")
    @classmethod
    def validate_role_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Role name must not be empty")
        return v

    @field_validator("output_format", mode="before")
    @classmethod
    def validate_output_format(cls, v: str | OutputFormat) -> OutputFormat:
        """Convert string to OutputFormat enum."""
        if isinstance(v, OutputFormat):
            return v
        if isinstance(v, str):
            try:
                return OutputFormat(v.strip().lower())
            except ValueError:
                raise ValueError(f"Invalid output format: {v}. Must be one of {[e.value for e in OutputFormat]}")
        raise ValueError(f"Output format must be string or OutputFormat enum, got {type(v)}")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "extra": "forbid",  # Prevent accidental extra fields
    }


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


def load_report_config_from_env() -> ReportConfig:
    """Load report configuration from environment variables.

    This is the ONLY place where os.getenv is allowed.

    Environment variables:
    - ROLEACCESS_ROLE: Role name to crawl (default: adt_user)
    - ROLEACCESS_FORMAT: console, html, csv or all (default: html)
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SN_INSTANCE_URL, SN_USERNAME, SN_PASSWORD, SN_TIMEOUT, SN_PAGE_SIZE

    Returns:
        ReportConfig instance with values from environment or defaults.
    """
    import os

    instance = InstanceConfig(
        url=os.getenv("SN_INSTANCE_URL") or None,
        username=os.getenv("SN_USERNAME", ""),
        password=os.getenv("SN_PASSWORD", ""),
        timeout_seconds=float(os.getenv("SN_TIMEOUT", "30")),
        page_size=int(os.getenv("SN_PAGE_SIZE", "1000")),
    )

    return ReportConfig(
        role_name=os.getenv("ROLEACCESS_ROLE", "adt_user"),
        output_format=os.getenv("ROLEACCESS_FORMAT", "html"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=_env_flag(os.getenv("LOG_JSON", "false")),
        instance=instance,
    )


__all__ = [
    "InstanceConfig",
    "LogLevel",
    "OutputFormat",
    "ReportConfig",
    "load_report_config_from_env",
]
