# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Portal roles."""

import enum


class Role(str, enum.Enum):
    ADMIN = "Admin"
    RESIDENT = "Resident"
    # Never stored; produced when a token carries an absent or unknown role.
    UNRECOGNIZED = "Unrecognized"

    @classmethod
    def parse(cls, value) -> "Role":
        """Map a raw role string onto the closed set.  Anything unknown is UNRECOGNIZED."""
        if isinstance(value, str):
            for role in STORED_ROLES:
                if role.value == value:
                    return role
        return cls.UNRECOGNIZED

    @property
    def is_admin(self) -> bool:
        return self is Role.ADMIN


# Roles an Identity row may hold (order matters for the DB enum).
STORED_ROLES = (Role.ADMIN, Role.RESIDENT)
STORED_ROLE_VALUES = tuple(r.value for r in STORED_ROLES)

DEFAULT_ROLE = Role.RESIDENT
