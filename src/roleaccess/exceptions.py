"""Exception hierarchy for role access reporting.

All errors raised by this package inherit from RoleAccessError and carry
a stable ``code`` string. The CLI maps codes to process exit codes.

Note that an unknown root role is *not* an exception: it is reported
through ``RoleProfile.error`` so every renderer can still emit a report.

Usage:
    from roleaccess.exceptions import StoreAccessError

    try:
        store.get("sys_script", sys_id)
    except StoreAccessError:
        ...
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "RoleAccessError",
    "ConfigurationError",
    "StoreError",
    "StoreAccessError",
    "StoreConnectionError",
    "DeliveryError",
    "RenderError",
    "EXIT_CODES",
    "exit_code_for",
]


# ---- Exception Hierarchy ----------------------------------------------------


class RoleAccessError(Exception):
    """Base exception for role access reporting.

    Attributes:
        code: Stable error code string (e.g. "STORE_ERROR").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(RoleAccessError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class StoreError(RoleAccessError):
    """Record store query failure."""

    code: str = "STORE_ERROR"


class StoreAccessError(StoreError):
    """The store refused access to a table or record."""

    code: str = "STORE_ACCESS_DENIED"


class StoreConnectionError(StoreError):
    """Failed to reach the record store."""

    code: str = "STORE_CONNECTION_ERROR"


class DeliveryError(RoleAccessError):
    """A rendered report could not be attached."""

    code: str = "DELIVERY_ERROR"


class RenderError(RoleAccessError):
    """A report could not be rendered."""

    code: str = "RENDER_ERROR"


# ---- Exit codes ---------------------------------------------------------------

EXIT_CODES: dict[str, int] = {
    "DELIVERY_ERROR": 1,
    "RENDER_ERROR": 1,
    "CONFIGURATION_ERROR": 2,
    "STORE_ERROR": 3,
    "STORE_ACCESS_DENIED": 3,
    "STORE_CONNECTION_ERROR": 3,
}


def exit_code_for(error: RoleAccessError) -> int:
    """Map an error to a process exit code (1 when the code is unknown)."""
    return EXIT_CODES.get(error.code, 1)
