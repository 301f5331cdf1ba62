"""Table names and lookup data for role access profiling.

Provides:
- ``Tables``: platform table names the profiler reads.
- ``TABLE_LABELS``: table name → human label.
- ``NAME_FIELDS``: preference-ordered candidate name fields.
- ``PROBE_TABLES``: tables probed directly when the metadata index misses.
- ``table_label()``: label lookup with a derived fallback.
"""

from __future__ import annotations

import re


class Tables:
    """Platform tables read by the profiler."""

    ROLE = "sys_user_role"
    ROLE_CONTAINS = "sys_user_role_contains"
    ACL = "sys_security_acl"
    ACL_ROLE = "sys_security_acl_role"
    PACKAGE = "sys_package"
    DB_OBJECT = "sys_db_object"
    METADATA = "sys_metadata"
    USER = "sys_user"


GLOBAL_PACKAGE = "Global"

# Length of an opaque record identifier (sys_id).
SYS_ID_LENGTH = 32

TABLE_LABELS: dict[str, str] = {
    "sys_ui_action": "UI Action",
    "sys_script": "Business Rule",
    "sys_script_client": "Client Script",
    "sys_script_include": "Script Include",
    "sysauto_script": "Scheduled Job",
    "sys_processor": "Processor",
    "sys_web_service": "Web Service",
    "sys_data_source": "Import Set",
    "wf_workflow": "Workflow",
    "sys_ui_page": "UI Page",
    "sys_ui_macro": "UI Macro",
    "sys_ui_script": "UI Script",
    "sys_transform_map": "Transform Map",
    "sys_report": "Report",
    "sys_ws_operation": "Web Service Operation",
    "sys_rest_service": "REST Service",
    "sys_soap_service": "SOAP Service",
    "sys_ui_form": "Form",
    "sys_ui_list": "List",
    "sys_ui_view": "View",
    "sys_dictionary": "Dictionary Entry",
    "sys_choice": "Choice",
    "sys_ui_policy": "UI Policy",
    "sys_data_policy2": "Data Policy",
    "sys_script_fix": "Fix Script",
    "sys_email": "Email",
    "sysevent_email_action": "Email Notification",
    "sys_trigger": "Trigger",
    "sys_flow": "Flow",
    "sys_hub_flow": "Hub Flow",
    "sys_app_module": "Application Module",
    "sys_user_role": "Role",
    "sys_user": "User",
    "sys_user_group": "Group",
}

NAME_FIELDS: tuple[str, ...] = (
    "name",
    "title",
    "short_description",
    "description",
    "label",
    "action_name",
    "column_label",
    "display_name",
    "sys_name",
    "number",
    "user_name",
    "first_name",
)

PROBE_TABLES: tuple[str, ...] = (
    "sys_ui_action",
    "sys_script",
    "sys_script_client",
    "sys_script_include",
    "sys_ui_page",
    "sys_ui_macro",
    "sys_report",
    "sys_user_role",
    "sys_app_module",
    "sys_processor",
    "sys_web_service",
)

PROBE_NAME_FIELDS: tuple[str, ...] = ("name", "title", "action_name")

UNNAMED_RECORD = "Unnamed Record"

_WORD_START = re.compile(r"\b\w")


def table_label(table_name: str) -> str:
    """Human label for a table.

    Known tables use :data:`TABLE_LABELS`. Anything else drops a leading
    ``sys_``, turns underscores into spaces and capitalises each word::

        >>> table_label("sys_script")
        'Business Rule'
        >>> table_label("sys_hr_case_type")
        'Hr Case Type'
    """
    if table_name in TABLE_LABELS:
        return TABLE_LABELS[table_name]
    label = re.sub(r"^sys_", "", table_name).replace("_", " ")
    return _WORD_START.sub(lambda m: m.group(0).upper(), label)


def is_sys_id(value: str | None) -> bool:
    """True when ``value`` has the shape of an opaque record identifier."""
    return bool(value) and len(value) == SYS_ID_LENGTH


__all__ = [
    "GLOBAL_PACKAGE",
    "NAME_FIELDS",
    "PROBE_NAME_FIELDS",
    "PROBE_TABLES",
    "SYS_ID_LENGTH",
    "TABLE_LABELS",
    "Tables",
    "UNNAMED_RECORD",
    "is_sys_id",
    "table_label",
]
