"""Employee designations that key vesting classes."""

from __future__ import annotations

from enum import Enum

from ..core.exceptions import InvalidDesignation


class Designation(Enum):
    """
    Closed set of employee designations.

    ``OTHERS`` is the catch-all. New kinds are added here, never registered
    at runtime.
    """

    CXO = "cxo"
    SENIOR_MANAGER = "senior_manager"
    MANAGER = "manager"
    OTHERS = "others"

    @classmethod
    def parse(cls, value: "Designation | str") -> "Designation":
        """
        Resolve a member, member name or member value.

        Raises:
            InvalidDesignation: If ``value`` names no member
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip()
            if key.upper() in cls.__members__:
                return cls[key.upper()]
            try:
                return cls(key.lower())
            except ValueError:
                pass
        raise InvalidDesignation(
            f"Unknown designation: {value!r}",
            details={"valid": [member.name for member in cls]},
        )
