"""Identifier resolution: opaque sys_id → human-readable label."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..exceptions import StoreError
from ..store import Record, RecordStore
from .constants import (
    NAME_FIELDS,
    PROBE_NAME_FIELDS,
    PROBE_TABLES,
    UNNAMED_RECORD,
    Tables,
    is_sys_id,
    table_label,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedRecord:
    """Owning table and label of a resolved identifier."""

    table: str
    name: str
    display_name: str


def _first_field(record: Record, fields: tuple[str, ...]) -> Optional[str]:
    for field in fields:
        value = record.get_field(field)
        if value and value.strip():
            return value
    return None


class IdentifierResolver:
    """Resolves sys_ids by asking the metadata index, then probing known tables.

    Lookup order:
    1. ``sys_metadata`` tells which table owns the id; the owning record's
       first non-empty :data:`NAME_FIELDS` entry is the name.
    2. Otherwise each of :data:`PROBE_TABLES` is tried directly. Tables the
       caller may not read are skipped.

    Read-only; holds no state between calls.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def resolve(self, sys_id: str) -> Optional[ResolvedRecord]:
        """Resolve ``sys_id``, or return None when nothing owns it."""
        if not is_sys_id(sys_id):
            return None

        resolved = self._from_metadata(sys_id)
        if resolved is None:
            resolved = self._from_probe(sys_id)
        if resolved is None:
            logger.debug("Could not resolve sys_id %s", sys_id)
        return resolved

    def _from_metadata(self, sys_id: str) -> Optional[ResolvedRecord]:
        try:
            entries = self.store.query(Tables.METADATA, {"sys_id": sys_id})
            if not entries:
                return None
            table = entries[0].get_field("sys_class_name")
            if not table:
                return None
            record = self.store.get(table, sys_id)
        except StoreError as e:
            logger.warning("Metadata lookup for %s failed: %s", sys_id, e.message)
            return None
        if record is None:
            return None

        name = _first_field(record, NAME_FIELDS) or UNNAMED_RECORD
        return ResolvedRecord(table=table, name=name, display_name=f"{table_label(table)}: {name}")

    def _from_probe(self, sys_id: str) -> Optional[ResolvedRecord]:
        for table in PROBE_TABLES:
            try:
                record = self.store.get(table, sys_id)
            except StoreError as e:
                logger.debug("Skipping %s while probing %s: %s", table, sys_id, e.message)
                continue
            if record is not None:
                name = _first_field(record, PROBE_NAME_FIELDS) or "Unknown"
                return ResolvedRecord(table=table, name=name, display_name=f"{table_label(table)}: {name}")
        return None


__all__ = ["IdentifierResolver", "ResolvedRecord"]
