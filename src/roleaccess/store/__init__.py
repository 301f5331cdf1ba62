"""Record store contracts and adapters.

Provides:
- ``Record``, ``RecordStore``, ``AttachmentSink``: the interfaces the report core consumes.
- ``InMemoryStore``: snapshot/test adapter.
- ``TableApiStore``: ServiceNow REST Table API adapter.
"""

from .base import AttachmentSink, Record, RecordStore
from .memory import InMemoryStore, StoredAttachment
from .table_api import TableApiStore, encode_query

__all__ = [
    "AttachmentSink",
    "InMemoryStore",
    "Record",
    "RecordStore",
    "StoredAttachment",
    "TableApiStore",
    "encode_query",
]
