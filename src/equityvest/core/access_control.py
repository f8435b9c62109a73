"""
Admin authorization for privileged vesting and lottery operations.

A single configured admin address may configure vesting classes, grant
equity, claim on behalf of employees and run lottery draws. The authority is
passed explicitly to every component that needs it; there is no ambient
global admin.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum

from .exceptions import Unauthorized, ValidationError

logger = logging.getLogger(__name__)


class Role(Enum):
    """Roles recognised by the authority."""
    ADMIN = "admin"


def normalize_address(address: str) -> str:
    """Normalize an address or employee identity for comparison."""
    return address.strip().lower()


class AdminAuthority:
    """
    Binary "is this caller the configured admin" check.

    Usage:
        authority = AdminAuthority("0xadmin")
        authority.require_admin(caller, "set_class")
    """

    def __init__(self, admin: str) -> None:
        if not admin or not admin.strip():
            raise ValidationError("Admin address cannot be empty.")
        self._admin = normalize_address(admin)
        self._lock = threading.Lock()

    @property
    def admin(self) -> str:
        return self._admin

    def is_authorized_admin(self, caller: str | None) -> bool:
        if not caller:
            return False
        return normalize_address(caller) == self._admin

    def require_admin(self, caller: str | None, operation: str) -> None:
        """
        Raise ``Unauthorized`` unless ``caller`` is the admin.

        Args:
            caller: Identity invoking the operation
            operation: Operation name, recorded in the error and log
        """
        if self.is_authorized_admin(caller):
            return
        logger.warning(
            "Access denied: caller is not admin",
            extra={
                "event": "access_control.denied",
                "operation": operation,
                "caller": (caller or "")[:10],
                "role": Role.ADMIN.value,
            },
        )
        raise Unauthorized(
            f"Caller is not authorized to {operation}",
            details={"operation": operation, "caller": caller},
        )

    def transfer_admin(self, caller: str, new_admin: str) -> None:
        """Hand the admin role to ``new_admin`` (current admin only)."""
        with self._lock:
            self.require_admin(caller, "transfer_admin")
            if not new_admin or not new_admin.strip():
                raise ValidationError("New admin address cannot be empty.")
            previous = self._admin
            self._admin = normalize_address(new_admin)
        logger.info(
            "Admin role transferred",
            extra={
                "event": "access_control.admin_transferred",
                "previous": previous[:10],
                "new_admin": self._admin[:10],
            },
        )
