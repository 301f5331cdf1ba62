"""Role access profiling.

Defines:
- Data models: PackageRef, AccessRule, Role, Application, RoleProfile
- IdentifierResolver: sys_id → human-readable label
- HierarchyWalker: role containment closure
- ProfileBuilder: assembles the full profile for a role name
"""

from .builder import ProfileBuilder, index_applications, unknown_operation_label
from .constants import (
    GLOBAL_PACKAGE,
    NAME_FIELDS,
    PROBE_TABLES,
    TABLE_LABELS,
    Tables,
    is_sys_id,
    table_label,
)
from .hierarchy import HierarchyWalker
from .models import GLOBAL, AccessRule, Application, PackageRef, Role, RoleProfile
from .resolver import IdentifierResolver, ResolvedRecord

__all__ = [
    "GLOBAL",
    "GLOBAL_PACKAGE",
    "NAME_FIELDS",
    "PROBE_TABLES",
    "TABLE_LABELS",
    "AccessRule",
    "Application",
    "HierarchyWalker",
    "IdentifierResolver",
    "PackageRef",
    "ProfileBuilder",
    "ResolvedRecord",
    "Role",
    "RoleProfile",
    "Tables",
    "index_applications",
    "is_sys_id",
    "table_label",
    "unknown_operation_label",
]
