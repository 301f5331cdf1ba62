"""Delivery of rendered reports as attachments on the current user's record."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .config import OutputFormat
from .exceptions import DeliveryError, StoreError
from .profile.constants import Tables
from .store import AttachmentSink, RecordStore

logger = logging.getLogger(__name__)

FILE_PREFIX = "role_access_report"

_PATH_SEPARATORS = re.compile(r"[\\/]")

CONTENT_TYPES: dict[OutputFormat, str] = {
    OutputFormat.HTML: "text/html",
    OutputFormat.CSV: "text/csv",
}


def report_file_name(role_name: str, extension: str, now: datetime) -> str:
    """``role_access_report_<role>_<epoch millis>.<ext>``

    Path separators in the role name become ``_`` so the name stays a
    single path component.
    """
    millis = int(now.timestamp() * 1000)
    safe_role = _PATH_SEPARATORS.sub("_", role_name)
    return f"{FILE_PREFIX}_{safe_role}_{millis}.{extension}"


@dataclass
class DeliveryResult:
    """Where a report file ended up."""

    file_name: str
    attachment_id: str
    owner: str
    link: Optional[str] = None

    @property
    def download_link(self) -> Optional[str]:
        if self.link is None:
            return None
        return f"{self.link}&sysparm_referring_url=tear_off"


def deliver_report(
    store: RecordStore,
    sink: AttachmentSink,
    content: str,
    file_name: str,
    content_type: str,
) -> DeliveryResult:
    """Attach ``content`` to the current user's ``sys_user`` record.

    Raises:
        DeliveryError: The user record is missing, the sink returned no
            attachment id, or the store failed while delivering.
    """
    user_name = sink.current_user_name()
    try:
        users = store.query(Tables.USER, {"user_name": user_name})
        if not users:
            raise DeliveryError("Could not find current user for file attachment", user_name=user_name)
        attachment_id = sink.attach(users[0], file_name, content_type, content)
    except StoreError as e:
        raise DeliveryError(f"Error creating file: {e.message}", file_name=file_name, cause=e.code)

    if not attachment_id:
        raise DeliveryError("Failed to create file attachment", file_name=file_name)

    logger.info("Attached %s to user %s (%s)", file_name, user_name, attachment_id)
    return DeliveryResult(
        file_name=file_name,
        attachment_id=attachment_id,
        owner=user_name,
        link=sink.attachment_link(attachment_id),
    )


__all__ = [
    "CONTENT_TYPES",
    "DeliveryResult",
    "deliver_report",
    "report_file_name",
]
