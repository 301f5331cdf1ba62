from .config import InstanceConfig, LogLevel, OutputFormat, ReportConfig, load_report_config_from_env
from .delivery import CONTENT_TYPES, DeliveryResult, deliver_report, report_file_name
from .exceptions import (
    ConfigurationError,
    DeliveryError,
    RenderError,
    RoleAccessError,
    StoreAccessError,
    StoreConnectionError,
    StoreError,
)
from .logging import (
    ReportFormatter,
    ReportLoggerAdapter,
    get_report_logger,
    redact_secrets,
    safe_log_value,
    safe_preview,
    setup_logging,
)
from .profile import (
    AccessRule,
    Application,
    HierarchyWalker,
    IdentifierResolver,
    PackageRef,
    ProfileBuilder,
    ResolvedRecord,
    Role,
    RoleProfile,
    Tables,
    table_label,
)
from .reports import render_console, render_csv, render_html, render_report
from .runner import FormatOutcome, ReportRun, run_report
from .store import AttachmentSink, InMemoryStore, Record, RecordStore, TableApiStore

__all__ = [
    'InstanceConfig',
    'LogLevel',
    'OutputFormat',
    'ReportConfig',
    'load_report_config_from_env',
    'CONTENT_TYPES',
    'DeliveryResult',
    'deliver_report',
    'report_file_name',
    'ConfigurationError',
    'DeliveryError',
    'RenderError',
    'RoleAccessError',
    'StoreAccessError',
    'StoreConnectionError',
    'StoreError',
    'ReportFormatter',
    'ReportLoggerAdapter',
    'get_report_logger',
    'redact_secrets',
    'safe_log_value',
    'safe_preview',
    'setup_logging',
    'AccessRule',
    'Application',
    'HierarchyWalker',
    'IdentifierResolver',
    'PackageRef',
    'ProfileBuilder',
    'ResolvedRecord',
    'Role',
    'RoleProfile',
    'Tables',
    'table_label',
    'render_console',
    'render_csv',
    'render_html',
    'render_report',
    'FormatOutcome',
    'ReportRun',
    'run_report',
    'AttachmentSink',
    'InMemoryStore',
    'Record',
    'RecordStore',
    'TableApiStore',
]
