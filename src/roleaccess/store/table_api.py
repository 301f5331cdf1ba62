"""ServiceNow REST Table API adapter.

Implements :class:`RecordStore` and :class:`AttachmentSink` over HTTP:

- ``GET  /api/now/table/{table}?sysparm_query=...``  (paged)
- ``GET  /api/now/table/{table}/{sys_id}``
- ``POST /api/now/attachment/file``
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from ..config import InstanceConfig
from ..exceptions import ConfigurationError, StoreAccessError, StoreConnectionError, StoreError
from .base import AttachmentSink, Record, RecordStore, is_in_filter

logger = logging.getLogger(__name__)

TABLE_PATH = "/api/now/table"
ATTACHMENT_PATH = "/api/now/attachment/file"

# Largest IN list sent in one request; longer lists are split to keep URLs short.
IN_CHUNK_SIZE = 100


def encode_query(filters: Mapping[str, Any] | None) -> str:
    """Build an encoded query (``sysparm_query``) from equality/IN filters.

    Example::

        >>> encode_query({"role": "abc", "sys_id": ["x", "y"]})
        'role=abc^sys_idINx,y'
    """
    parts = []
    for field, value in (filters or {}).items():
        if is_in_filter(value):
            members = ",".join(_escape(str(v)) for v in value)
            parts.append(f"{field}IN{members}")
        else:
            parts.append(f"{field}={_escape(str(value))}")
    return "^".join(parts)


def _escape(value: str) -> str:
    return value.replace("^", "^^")


class TableApiStore(RecordStore, AttachmentSink):
    """Record store backed by a ServiceNow instance.

    Args:
        config: Instance URL, credentials, timeout and page size.
        client: Optional pre-built httpx.Client (tests inject a MockTransport).

    Usable as a context manager; the HTTP client is closed on exit.
    """

    def __init__(self, config: InstanceConfig, client: httpx.Client | None = None) -> None:
        if not config.url:
            raise ConfigurationError("Instance URL is required for the Table API store")
        self.config = config
        self._client = client or httpx.Client(
            base_url=config.url,
            auth=(config.username, config.password) if config.username else None,
            timeout=config.timeout_seconds,
            headers={"Accept": "application/json"},
        )

    def __enter__(self) -> "TableApiStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            raise StoreConnectionError(f"{method} {url} failed: {e}", url=url)

    @staticmethod
    def _raise_for_status(response: httpx.Response, table: str) -> None:
        if response.status_code in (401, 403):
            raise StoreAccessError(
                f"Access denied to table {table} (HTTP {response.status_code})",
                table=table,
                status=response.status_code,
            )
        if response.is_error:
            raise StoreError(
                f"Table API request for {table} failed (HTTP {response.status_code})",
                table=table,
                status=response.status_code,
            )

    @staticmethod
    def _result(response: httpx.Response, table: str) -> Any:
        try:
            data = response.json()
        except ValueError as e:
            raise StoreError(f"Invalid JSON from Table API for {table}: {e}", table=table)
        return data.get("result") if isinstance(data, dict) else None

    # ── RecordStore ─────────────────────────────────────

    def query(self, table: str, filters: Mapping[str, Any] | None = None) -> list[Record]:
        filters = dict(filters or {})
        for field, value in filters.items():
            if is_in_filter(value) and len(value) > IN_CHUNK_SIZE:
                members = list(value)
                records: list[Record] = []
                for start in range(0, len(members), IN_CHUNK_SIZE):
                    chunk = {**filters, field: members[start : start + IN_CHUNK_SIZE]}
                    records.extend(self.query(table, chunk))
                return records
        return self._query_pages(table, filters)

    def _query_pages(self, table: str, filters: Mapping[str, Any]) -> list[Record]:
        params: dict[str, Any] = {
            "sysparm_exclude_reference_link": "true",
            "sysparm_limit": self.config.page_size,
        }
        encoded = encode_query(filters)
        if encoded:
            params["sysparm_query"] = encoded

        records: list[Record] = []
        offset = 0
        while True:
            params["sysparm_offset"] = offset
            response = self._request("GET", f"{TABLE_PATH}/{table}", params=params)
            self._raise_for_status(response, table)
            page = self._result(response, table) or []
            records.extend(Record(row) for row in page)
            if len(page) < self.config.page_size:
                break
            offset += len(page)

        logger.debug("Queried %s (%s): %d records", table, encoded, len(records))
        return records

    def get(self, table: str, sys_id: str) -> Optional[Record]:
        response = self._request(
            "GET",
            f"{TABLE_PATH}/{table}/{sys_id}",
            params={"sysparm_exclude_reference_link": "true"},
        )
        if response.status_code == 404:
            return None
        self._raise_for_status(response, table)
        result = self._result(response, table)
        return Record(result) if result else None

    # ── AttachmentSink ──────────────────────────────────

    def current_user_name(self) -> str:
        return self.config.username

    def attach(self, owner: Record, file_name: str, content_type: str, content: str) -> Optional[str]:
        response = self._request(
            "POST",
            ATTACHMENT_PATH,
            params={
                "table_name": "sys_user",
                "table_sys_id": owner.sys_id,
                "file_name": file_name,
            },
            headers={"Content-Type": content_type},
            content=content.encode("utf-8"),
        )
        self._raise_for_status(response, "sys_attachment")
        result = self._result(response, "sys_attachment") or {}
        return Record(result).sys_id

    def attachment_link(self, attachment_id: str) -> Optional[str]:
        return f"{self.config.url}/sys_attachment.do?sys_id={attachment_id}"


__all__ = ["TableApiStore", "encode_query"]
