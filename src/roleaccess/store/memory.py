"""In-memory record store.

Backs tests and offline runs from a JSON snapshot of the relevant tables::

    {
        "current_user": "admin",
        "tables": {
            "sys_user_role": [{"sys_id": "...", "name": "itil"}],
            "sys_user_role_contains": [{"role": "...", "contains": "..."}]
        }
    }
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..exceptions import StoreAccessError, StoreError
from .base import AttachmentSink, Record, RecordStore, is_in_filter

logger = logging.getLogger(__name__)


@dataclass
class StoredAttachment:
    """An attachment written through :class:`InMemoryStore`."""

    sys_id: str
    owner_sys_id: Optional[str]
    file_name: str
    content_type: str
    content: str


class InMemoryStore(RecordStore, AttachmentSink):
    """Dict-of-tables store implementing both store contracts.

    Args:
        tables: Mapping of table name to an iterable of record dicts.
        current_user: User name reported by :meth:`current_user_name`.
        denied_tables: Tables that raise StoreAccessError on access.
        attachment_dir: When set, attachments are also written there.
    """

    def __init__(
        self,
        tables: Mapping[str, Iterable[Mapping[str, Any]]] | None = None,
        *,
        current_user: str = "admin",
        denied_tables: Iterable[str] = (),
        attachment_dir: Path | None = None,
    ) -> None:
        self._tables: dict[str, list[dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self._current_user = current_user
        self.denied_tables = set(denied_tables)
        self.attachment_dir = attachment_dir
        self.attachments: list[StoredAttachment] = []
        self.queries: list[tuple[str, dict[str, Any]]] = []

    @classmethod
    def from_snapshot(cls, path: Path, *, attachment_dir: Path | None = None) -> "InMemoryStore":
        """Load a store from a JSON snapshot file."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StoreError(f"Cannot load snapshot {path}: {e}", path=str(path))
        if not isinstance(data, dict) or not isinstance(data.get("tables", {}), dict):
            raise StoreError(f"Snapshot {path} must be an object with a 'tables' mapping", path=str(path))
        return cls(
            data.get("tables", {}),
            current_user=data.get("current_user", "admin"),
            attachment_dir=attachment_dir,
        )

    def add(self, table: str, **fields: Any) -> dict[str, Any]:
        """Insert a record, generating a sys_id when none is given."""
        fields.setdefault("sys_id", uuid.uuid4().hex)
        self._tables.setdefault(table, []).append(fields)
        return fields

    # ── RecordStore ─────────────────────────────────────

    def _rows(self, table: str) -> list[dict[str, Any]]:
        if table in self.denied_tables:
            raise StoreAccessError(f"Access denied to table {table}", table=table)
        return self._tables.get(table, [])

    def query(self, table: str, filters: Mapping[str, Any] | None = None) -> list[Record]:
        filters = dict(filters or {})
        self.queries.append((table, filters))
        rows = self._rows(table)
        return [Record(row) for row in rows if _matches(row, filters)]

    def get(self, table: str, sys_id: str) -> Optional[Record]:
        for row in self._rows(table):
            if row.get("sys_id") == sys_id:
                return Record(row)
        return None

    # ── AttachmentSink ──────────────────────────────────

    def current_user_name(self) -> str:
        return self._current_user

    def attach(self, owner: Record, file_name: str, content_type: str, content: str) -> Optional[str]:
        attachment = StoredAttachment(
            sys_id=uuid.uuid4().hex,
            owner_sys_id=owner.sys_id,
            file_name=file_name,
            content_type=content_type,
            content=content,
        )
        if self.attachment_dir is not None:
            path = self.attachment_dir / file_name
            try:
                self.attachment_dir.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8", newline="\n")
            except OSError as e:
                raise StoreError(f"Cannot write {file_name}: {e}", path=str(path))
            logger.info("Wrote %s to %s", file_name, self.attachment_dir)
        self.attachments.append(attachment)
        return attachment.sys_id


def _matches(row: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    for field, expected in filters.items():
        actual = row.get(field)
        if isinstance(actual, Mapping):
            actual = actual.get("value")
        if is_in_filter(expected):
            if actual not in expected:
                return False
        elif actual != expected:
            return False
    return True


__all__ = ["InMemoryStore", "StoredAttachment"]
