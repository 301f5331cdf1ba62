"""Record store and attachment sink contracts.

The report core only ever talks to these two interfaces. Concrete adapters
live next to this module: :mod:`.memory` for snapshots and tests,
:mod:`.table_api` for a live ServiceNow instance.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Iterator, Optional


class Record(Mapping):
    """Read-only view of one store record.

    Reference fields may arrive either as plain sys_id strings or as
    ``{"value": ..., "link": ...}`` objects; :meth:`get_field` unwraps both.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping[str, Any] | None = None) -> None:
        self._fields = dict(fields or {})

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def get_field(self, name: str) -> Optional[str]:
        """Return a field as a string, or None when missing or empty."""
        value = self._fields.get(name)
        if isinstance(value, Mapping):
            value = value.get("value")
        if value is None:
            return None
        value = str(value)
        return value if value != "" else None

    @property
    def sys_id(self) -> Optional[str]:
        return self.get_field("sys_id")

    def __repr__(self) -> str:
        return f"Record(sys_id={self.sys_id!r})"


class RecordStore(ABC):
    """Query interface over the platform's tables."""

    @abstractmethod
    def query(self, table: str, filters: Mapping[str, Any] | None = None) -> list[Record]:
        """Return records of ``table`` matching every filter.

        A scalar filter value is an equality match. A list, tuple or set
        value is an IN match against its members.

        Raises:
            StoreError: On any store failure. StoreAccessError when access
                to the table is denied.
        """

    @abstractmethod
    def get(self, table: str, sys_id: str) -> Optional[Record]:
        """Return the record with ``sys_id`` in ``table``, or None if absent."""


class AttachmentSink(ABC):
    """Destination for rendered report files."""

    @abstractmethod
    def current_user_name(self) -> str:
        """User name whose user record owns delivered attachments."""

    @abstractmethod
    def attach(self, owner: Record, file_name: str, content_type: str, content: str) -> Optional[str]:
        """Attach ``content`` to ``owner``. Returns the attachment id, or None on failure."""

    def attachment_link(self, attachment_id: str) -> Optional[str]:
        """Direct URL for an attachment, when the sink has one."""
        return None


def is_in_filter(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


__all__ = ["AttachmentSink", "Record", "RecordStore", "is_in_filter"]
